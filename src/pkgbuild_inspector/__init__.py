"""
PKGBUILD Inspector - Safe PKGBUILD metadata extraction.

Reads package name, version, release, architectures and dependencies from
Arch Linux PKGBUILD files using text matching only; no shell is ever run.
"""

__version__ = "1.0.0"


def __getattr__(name: str):
    """Lazy import for submodules."""
    if name == "ManifestParser":
        from pkgbuild_inspector.parsers.pkgbuild import ManifestParser

        return ManifestParser
    if name == "ManifestInfo":
        from pkgbuild_inspector.models.manifest import ManifestInfo

        return ManifestInfo
    if name == "parse_pkgbuild":
        from pkgbuild_inspector.parsers.pkgbuild import parse_pkgbuild

        return parse_pkgbuild
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["ManifestParser", "ManifestInfo", "parse_pkgbuild", "__version__"]
