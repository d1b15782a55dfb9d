"""
Configuration for pkgbuild-inspector.

Explicit arguments win over environment variables, which win over defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from pkgbuild_inspector.core.errors import ConfigError

ENV_PREFIX = "PKGBUILD_INSPECTOR_"

DEFAULT_MANIFEST = Path("PKGBUILD")
DEFAULT_VERSION_FILE = Path("version.env")
DEFAULT_OUTPUT_DIR = Path("artifacts")

_TRUTHY = {"1", "true", "yes", "on"}


def _env_path(name: str, default: Path) -> Path:
    value = os.environ.get(ENV_PREFIX + name)
    return Path(value) if value else default


@dataclass
class InspectorConfig:
    """Runtime settings shared by the CLI commands."""

    manifest_path: Path = field(default_factory=lambda: _env_path("MANIFEST", DEFAULT_MANIFEST))
    version_file: Path = field(
        default_factory=lambda: _env_path("VERSION_FILE", DEFAULT_VERSION_FILE)
    )
    output_dir: Path = field(default_factory=lambda: _env_path("OUTPUT_DIR", DEFAULT_OUTPUT_DIR))
    debug: bool = field(
        default_factory=lambda: os.environ.get(ENV_PREFIX + "DEBUG", "").lower() in _TRUTHY
    )

    def __post_init__(self):
        self.manifest_path = Path(self.manifest_path)
        self.version_file = Path(self.version_file)
        self.output_dir = Path(self.output_dir)

    @classmethod
    def create(
        cls,
        manifest_path: str | Path | None = None,
        version_file: str | Path | None = None,
        output_dir: str | Path | None = None,
        debug: bool | None = None,
    ) -> "InspectorConfig":
        """Build a config, keeping environment/default values for arguments left as None."""
        config = cls()
        if manifest_path is not None:
            config.manifest_path = Path(manifest_path)
        if version_file is not None:
            config.version_file = Path(version_file)
        if output_dir is not None:
            config.output_dir = Path(output_dir)
        if debug is not None:
            config.debug = debug
        return config

    def validate(self) -> None:
        """Raise ConfigError if the configured manifest cannot be used."""
        if not self.manifest_path.exists():
            raise ConfigError(f"PKGBUILD file not found: {self.manifest_path}")
        if not self.manifest_path.is_file():
            raise ConfigError(f"PKGBUILD path is not a file: {self.manifest_path}")
