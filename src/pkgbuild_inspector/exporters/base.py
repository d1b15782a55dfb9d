"""
Exporter Protocol — Base interface for all export backends.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pkgbuild_inspector.models.manifest import ManifestInfo


@runtime_checkable
class Exporter(Protocol):
    """
    Protocol that all exporters must implement.

    Exporters receive parsed ManifestInfo records and write them out in
    their own format (version env file, JSON, ...).
    """

    async def export(self, info: ManifestInfo) -> None:
        """Export a single parsed manifest."""
        ...

    async def finalize(self) -> None:
        """Called after all records have been exported."""
        ...
