"""
Error types for pkgbuild-inspector.

Library code raises these; only the CLI turns them into user-facing messages.
"""

from pathlib import Path


class InspectorError(Exception):
    """Base class for all pkgbuild-inspector errors."""


class ManifestReadError(InspectorError):
    """A manifest file could not be opened or read."""

    def __init__(self, operation: str, path: str | Path, reason: str):
        self.operation = operation
        self.path = Path(path)
        super().__init__(f"File system error: {operation} failed on {self.path}: {reason}")


class ManifestParseError(InspectorError):
    """
    Mandatory fields could not be determined after every extraction pass.

    Carries the partial values that were found so unusual manifest dialects
    can be diagnosed from the error alone.
    """

    def __init__(self, message: str, path: str | Path, missing: list[str], found: dict[str, str]):
        self.path = Path(path)
        self.missing = list(missing)
        self.found = dict(found)
        super().__init__(f"PKGBUILD parsing error in {self.path}: {message}")


class PatternCompileError(InspectorError):
    """A built-in matching rule failed to compile. Always a programming defect."""

    def __init__(self, pattern_name: str, reason: str):
        self.pattern_name = pattern_name
        super().__init__(f"Failed to compile pattern {pattern_name!r}: {reason}")


class ConfigError(InspectorError):
    """Invalid configuration."""


class ExportError(InspectorError):
    """An exporter could not write its output."""

    def __init__(self, message: str, path: str | Path):
        self.path = Path(path)
        super().__init__(f"Export error: {message} ({self.path})")
