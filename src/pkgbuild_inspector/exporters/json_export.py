"""
JSON Exporter — Writes parsed manifests as JSON documents.
"""

import json
import logging
import os
from pathlib import Path

import aiofiles

from pkgbuild_inspector.core.errors import ExportError
from pkgbuild_inspector.models.manifest import ManifestInfo

logger = logging.getLogger(__name__)


class JSONExporter:
    """
    Exports ManifestInfo records as individual JSON files.

    Output structure:
        output_dir/
        ├── firefox.json
        └── vim.json
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.count = 0

    def _target_for(self, name: str) -> Path:
        """
        Resolve the output file for ``name``.

        The name comes straight from the manifest, so anything that could
        leave ``output_dir`` (separators, ``..``, hidden or option-like
        names) is rejected.
        """
        unsafe = (
            not name
            or name.startswith((".", "-"))
            or any(sep in name for sep in ("/", "\\", os.sep, "\x00"))
        )
        filepath = self.output_dir / f"{name}.json"
        if unsafe or filepath.resolve().parent != self.output_dir.resolve():
            raise ExportError(f"refusing unsafe package name {name!r}", filepath)
        return filepath

    async def export(self, info: ManifestInfo) -> None:
        """Write ``<name>.json`` for a single record."""
        filepath = self._target_for(info.name)

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(filepath, "w") as f:
                await f.write(json.dumps(info.to_dict(), indent=2))
        except OSError as e:
            raise ExportError(f"failed to write JSON: {e}", filepath) from e

        self.count += 1
        logger.debug(f"[JSON] Exported {info.name} {info.full_version()}")

    async def finalize(self) -> None:
        """Log export summary."""
        logger.info(f"[JSON] Export complete: {self.count} manifests exported to {self.output_dir}")
