"""Export backends for parsed manifest data."""

from pkgbuild_inspector.exporters.base import Exporter
from pkgbuild_inspector.exporters.json_export import JSONExporter
from pkgbuild_inspector.exporters.version_env import VersionEnvExporter


def get_exporter(format_name: str, output: str) -> Exporter:
    """Factory function to create an exporter by format name.

    ``output`` is the env file path for ``env`` and a directory for ``json``.
    """
    from pathlib import Path

    out = Path(output)
    match format_name:
        case "env":
            return VersionEnvExporter(output_file=out)
        case "json":
            return JSONExporter(output_dir=out)
        case _:
            raise ValueError(f"Unknown export format: {format_name!r}. Use 'env' or 'json'.")


__all__ = ["Exporter", "JSONExporter", "VersionEnvExporter", "get_exporter"]
