"""
Version Env Exporter — Writes build version information as a KEY=VALUE file.

The file is meant to be sourced by CI jobs, e.g.:

    VERSION=128.0
    PKG_RELEASE=1
    FULL_VERSION=128.0-1
    PACKAGE_NAME=firefox
    TAG_VERSION=v128.0
    BUILD_JOB_ID=4242
    BUILD_DATE=2024-07-09T12:00:00+00:00
    ARCH="x86_64 aarch64"
"""

import logging
import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import aiofiles

from pkgbuild_inspector.core.errors import ExportError, ManifestReadError
from pkgbuild_inspector.models.manifest import ManifestInfo

logger = logging.getLogger(__name__)

# File key -> VersionInfo attribute, in output order
ENV_FIELDS = {
    "VERSION": "version",
    "PKG_RELEASE": "release",
    "FULL_VERSION": "full_version",
    "PACKAGE_NAME": "package_name",
    "TAG_VERSION": "tag_version",
    "BUILD_JOB_ID": "build_job_id",
    "BUILD_DATE": "build_date",
    "ARCH": "arch",
}


@dataclass
class VersionInfo:
    """Version information derived from a parsed manifest and the CI environment."""

    version: str
    release: str
    full_version: str
    package_name: str
    tag_version: str
    build_job_id: str
    build_date: str
    arch: list[str]


def build_version_info(info: ManifestInfo, environ: Mapping[str, str] | None = None) -> VersionInfo:
    """
    Combine manifest metadata with CI variables.

    ``CI_COMMIT_TAG`` falls back to the manifest version and ``CI_JOB_ID``
    to ``"local"``.
    """
    env = os.environ if environ is None else environ
    return VersionInfo(
        version=info.version,
        release=info.release,
        full_version=info.full_version(),
        package_name=info.name,
        tag_version=env.get("CI_COMMIT_TAG") or info.version,
        build_job_id=env.get("CI_JOB_ID") or "local",
        build_date=datetime.now(timezone.utc).isoformat(),
        arch=list(info.arch),
    )


def format_env(version_info: VersionInfo) -> str:
    """
    Render the env file. Values are shell-quoted, so text copied from the
    manifest (``$(...)``, backticks, ``;``) stays literal when the file is
    sourced.
    """
    lines = []
    for key, attr in ENV_FIELDS.items():
        value = getattr(version_info, attr)
        if attr == "arch":
            joined = " ".join(value)
            if all(shlex.quote(a) == a for a in value):
                value = f'"{joined}"'
            else:
                value = shlex.quote(joined)
        else:
            value = shlex.quote(value)
        lines.append(f"{key}={value}")
    return "\n".join(lines) + "\n"


def _unquote(value: str) -> str:
    try:
        return " ".join(shlex.split(value, comments=True))
    except ValueError:
        # Unbalanced quotes
        return value.strip("\"'")


def parse_env(content: str) -> VersionInfo:
    """
    Read a version env file back. Blank lines and ``#`` comments are skipped.

    Missing keys get the same placeholders a partially written file has
    always had: ``unknown`` for names and versions, release ``1``, arch
    ``any`` and the current time as build date.
    """
    values: dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = _unquote(value.strip())

    return VersionInfo(
        version=values.get("VERSION", "unknown"),
        release=values.get("PKG_RELEASE", "1"),
        full_version=values.get("FULL_VERSION", "unknown-1"),
        package_name=values.get("PACKAGE_NAME", "unknown"),
        tag_version=values.get("TAG_VERSION", "unknown"),
        build_job_id=values.get("BUILD_JOB_ID", "unknown"),
        build_date=values.get("BUILD_DATE") or datetime.now(timezone.utc).isoformat(),
        arch=values.get("ARCH", "any").split(),
    )


def load_version_file(path: str | Path) -> VersionInfo:
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestReadError("read", path, e.strerror or str(e)) from e
    return parse_env(content)


class VersionEnvExporter:
    """
    Writes the version env file for a parsed manifest.

    Each export overwrites the file; the last exported record wins.
    """

    def __init__(self, output_file: Path, environ: Mapping[str, str] | None = None):
        self.output_file = Path(output_file)
        self.environ = environ
        self.count = 0

    async def export(self, info: ManifestInfo) -> None:
        """Write the env file for ``info``."""
        content = format_env(build_version_info(info, self.environ))

        try:
            self.output_file.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.output_file, "w") as f:
                await f.write(content)
        except OSError as e:
            raise ExportError(f"failed to write version file: {e}", self.output_file) from e

        self.count += 1
        logger.debug(f"[ENV] Wrote version info for {info.name} {info.full_version()}")

    async def finalize(self) -> None:
        """Log export summary."""
        logger.info(f"[ENV] Version information written to {self.output_file}")
