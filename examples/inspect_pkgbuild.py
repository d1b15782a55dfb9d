"""
Example: Parse a PKGBUILD and write its version info file.

Usage:
    python examples/inspect_pkgbuild.py path/to/PKGBUILD
"""

import asyncio
import sys
from pathlib import Path

from pkgbuild_inspector import ManifestParser
from pkgbuild_inspector.exporters.version_env import VersionEnvExporter


async def main(manifest: Path):
    parser = ManifestParser()
    info = parser.parse(manifest)

    print(f"{info.name} {info.full_version()} ({' '.join(info.arch) or 'no arch'})")
    for dep in info.all_dependencies():
        print(f"  - {dep}")
    for field_name in info.degraded_fields():
        print(f"  ! {field_name} was recovered by fallback parsing")

    exporter = VersionEnvExporter(output_file=manifest.parent / "version.env")
    await exporter.export(info)
    await exporter.finalize()

    print(f"\n✅ Version info written to: {exporter.output_file.absolute()}")


if __name__ == "__main__":
    asyncio.run(main(Path(sys.argv[1] if len(sys.argv) > 1 else "PKGBUILD")))
