"""Tests for InspectorConfig."""

from pathlib import Path

import pytest

from pkgbuild_inspector.core.config import (
    DEFAULT_MANIFEST,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_VERSION_FILE,
    InspectorConfig,
)
from pkgbuild_inspector.core.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("MANIFEST", "VERSION_FILE", "OUTPUT_DIR", "DEBUG"):
        monkeypatch.delenv(f"PKGBUILD_INSPECTOR_{name}", raising=False)


class TestInspectorConfig:
    def test_defaults(self):
        config = InspectorConfig()
        assert config.manifest_path == DEFAULT_MANIFEST
        assert config.version_file == DEFAULT_VERSION_FILE
        assert config.output_dir == DEFAULT_OUTPUT_DIR
        assert config.debug is False

    def test_environment_overrides_defaults(self, monkeypatch):
        monkeypatch.setenv("PKGBUILD_INSPECTOR_MANIFEST", "/srv/pkg/PKGBUILD")
        monkeypatch.setenv("PKGBUILD_INSPECTOR_DEBUG", "yes")
        config = InspectorConfig()
        assert config.manifest_path == Path("/srv/pkg/PKGBUILD")
        assert config.debug is True

    def test_explicit_arguments_win(self, monkeypatch):
        monkeypatch.setenv("PKGBUILD_INSPECTOR_MANIFEST", "/srv/pkg/PKGBUILD")
        config = InspectorConfig.create(manifest_path="other/PKGBUILD", debug=False)
        assert config.manifest_path == Path("other/PKGBUILD")
        assert config.debug is False

    def test_none_keeps_environment(self, monkeypatch):
        monkeypatch.setenv("PKGBUILD_INSPECTOR_VERSION_FILE", "ci/version.env")
        config = InspectorConfig.create(version_file=None)
        assert config.version_file == Path("ci/version.env")

    def test_strings_become_paths(self):
        config = InspectorConfig(manifest_path="PKGBUILD", output_dir="out")
        assert isinstance(config.manifest_path, Path)
        assert isinstance(config.output_dir, Path)

    def test_validate_missing_manifest(self, tmp_path):
        config = InspectorConfig.create(manifest_path=tmp_path / "PKGBUILD")
        with pytest.raises(ConfigError, match="not found"):
            config.validate()

    def test_validate_directory(self, tmp_path):
        config = InspectorConfig.create(manifest_path=tmp_path)
        with pytest.raises(ConfigError, match="not a file"):
            config.validate()

    def test_validate_ok(self, tmp_path):
        path = tmp_path / "PKGBUILD"
        path.write_text("pkgname=a\n")
        InspectorConfig.create(manifest_path=path).validate()
