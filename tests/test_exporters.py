"""Tests for the ManifestInfo model and exporters."""

import json
import tempfile
from pathlib import Path

import pytest

from pkgbuild_inspector.core.errors import ExportError, ManifestReadError
from pkgbuild_inspector.exporters import get_exporter
from pkgbuild_inspector.exporters.base import Exporter
from pkgbuild_inspector.exporters.json_export import JSONExporter
from pkgbuild_inspector.exporters.version_env import (
    VersionEnvExporter,
    VersionInfo,
    build_version_info,
    format_env,
    load_version_file,
)
from pkgbuild_inspector.models.manifest import ExtractionPass, ManifestInfo
from pkgbuild_inspector.parsers.pkgbuild import ManifestParser


@pytest.fixture
def sample_info():
    return ManifestInfo(
        name="firefox",
        version="128.0",
        release="1",
        arch=["x86_64", "aarch64"],
        depends=["glib2", "gtk3"],
        make_depends=["cmake"],
        check_depends=["xvfb"],
        provenance={"name": ExtractionPass.STRICT, "version": ExtractionPass.FALLBACK},
        warnings=["pkgver recovered by fallback parsing: '128.0'"],
    )


# ═══════════════════════════════════════════
# ManifestInfo Model Tests
# ═══════════════════════════════════════════


class TestManifestInfo:
    def test_full_version(self):
        assert ManifestInfo(name="a", version="1.0.0", release="1").full_version() == "1.0.0-1"

    def test_all_dependencies_order(self, sample_info):
        assert sample_info.all_dependencies() == ["glib2", "gtk3", "cmake", "xvfb"]

    def test_has_dependencies(self, sample_info):
        assert sample_info.has_dependencies() is True
        assert ManifestInfo(name="a", version="1", release="1").has_dependencies() is False

    def test_degraded_fields(self, sample_info):
        assert sample_info.degraded_fields() == ["version"]

    def test_equality_ignores_diagnostics(self, sample_info):
        plain = ManifestInfo(
            name="firefox",
            version="128.0",
            release="1",
            arch=["x86_64", "aarch64"],
            depends=["glib2", "gtk3"],
            make_depends=["cmake"],
            check_depends=["xvfb"],
        )
        assert plain == sample_info

    def test_is_frozen(self, sample_info):
        with pytest.raises(AttributeError):
            sample_info.name = "other"

    def test_list_fields_are_read_only(self, sample_info):
        with pytest.raises(TypeError):
            sample_info.depends.append("injected")
        with pytest.raises(TypeError):
            sample_info.arch[0] = "i686"
        with pytest.raises(TypeError):
            sample_info.warnings.clear()
        assert sample_info.depends == ["glib2", "gtk3"]
        assert sample_info.arch == ["x86_64", "aarch64"]

    def test_provenance_is_read_only(self, sample_info):
        with pytest.raises(TypeError):
            sample_info.provenance["release"] = ExtractionPass.STRICT
        assert "release" not in sample_info.provenance

    def test_caller_list_not_shared(self):
        depends = ["x"]
        info = ManifestInfo(name="a", version="1", release="1", depends=depends)
        depends.append("injected")
        assert info.depends == ["x"]

    def test_to_dict(self, sample_info):
        d = sample_info.to_dict()
        assert d["name"] == "firefox"
        assert d["full_version"] == "128.0-1"
        assert d["provenance"] == {"name": "strict", "version": "fallback"}

    def test_from_dict(self, sample_info):
        restored = ManifestInfo.from_dict(sample_info.to_dict())
        assert restored == sample_info
        assert restored.provenance == sample_info.provenance
        assert restored.warnings == sample_info.warnings


# ═══════════════════════════════════════════
# Version Info Tests
# ═══════════════════════════════════════════


class TestVersionInfo:
    def test_ci_variables_used(self, sample_info):
        info = build_version_info(sample_info, {"CI_COMMIT_TAG": "v128.0", "CI_JOB_ID": "4242"})
        assert info.tag_version == "v128.0"
        assert info.build_job_id == "4242"
        assert info.full_version == "128.0-1"
        assert info.package_name == "firefox"

    def test_local_defaults(self, sample_info):
        info = build_version_info(sample_info, {})
        assert info.tag_version == "128.0"
        assert info.build_job_id == "local"
        assert info.build_date

    def test_format_env(self):
        info = VersionInfo(
            version="1.0.0",
            release="1",
            full_version="1.0.0-1",
            package_name="test",
            tag_version="v1.0.0",
            build_job_id="123",
            build_date="2024-01-01T00:00:00+00:00",
            arch=["x86_64"],
        )
        assert format_env(info) == (
            "VERSION=1.0.0\n"
            "PKG_RELEASE=1\n"
            "FULL_VERSION=1.0.0-1\n"
            "PACKAGE_NAME=test\n"
            "TAG_VERSION=v1.0.0\n"
            "BUILD_JOB_ID=123\n"
            "BUILD_DATE=2024-01-01T00:00:00+00:00\n"
            'ARCH="x86_64"\n'
        )

    def test_load_skips_comments(self, tmp_path):
        path = tmp_path / "version.env"
        path.write_text('# generated\n\nVERSION=2.0\nPKG_RELEASE=3\nARCH="x86_64 aarch64"\n')
        info = load_version_file(path)
        assert info.version == "2.0"
        assert info.release == "3"
        assert info.arch == ["x86_64", "aarch64"]
        assert info.build_job_id == "unknown"

    def test_load_defaults_for_missing_keys(self, tmp_path):
        path = tmp_path / "version.env"
        path.write_text("# nothing recorded\n")
        info = load_version_file(path)
        assert info.version == "unknown"
        assert info.release == "1"
        assert info.full_version == "unknown-1"
        assert info.package_name == "unknown"
        assert info.tag_version == "unknown"
        assert info.build_job_id == "unknown"
        assert info.build_date
        assert info.arch == ["any"]

    def test_format_env_quotes_shell_syntax(self):
        info = VersionInfo(
            version="$(touch pwned)",
            release="1; rm -rf /",
            full_version="$(touch pwned)-1; rm -rf /",
            package_name="`id`",
            tag_version="v1",
            build_job_id="local",
            build_date="2024-01-01T00:00:00+00:00",
            arch=["x86_64", "$(id)"],
        )
        text = format_env(info)
        assert "VERSION='$(touch pwned)'\n" in text
        assert "PKG_RELEASE='1; rm -rf /'\n" in text
        assert "PACKAGE_NAME='`id`'\n" in text
        assert "ARCH='x86_64 $(id)'\n" in text

    def test_quoted_values_load_back_verbatim(self, tmp_path):
        info = VersionInfo(
            version="$(touch pwned)",
            release="1",
            full_version="$(touch pwned)-1",
            package_name="it's",
            tag_version="v1",
            build_job_id="local",
            build_date="2024-01-01T00:00:00+00:00",
            arch=["x86_64"],
        )
        path = tmp_path / "version.env"
        path.write_text(format_env(info))
        assert load_version_file(path) == info

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ManifestReadError):
            load_version_file(tmp_path / "nope.env")


# ═══════════════════════════════════════════
# Version Env Exporter Tests
# ═══════════════════════════════════════════


class TestVersionEnvExporter:
    @pytest.mark.asyncio
    async def test_writes_env_file(self, sample_info):
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "out" / "version.env"
            exporter = VersionEnvExporter(output_file=target, environ={"CI_JOB_ID": "7"})
            await exporter.export(sample_info)
            await exporter.finalize()

            content = target.read_text()
            assert "VERSION=128.0\n" in content
            assert "FULL_VERSION=128.0-1\n" in content
            assert "BUILD_JOB_ID=7\n" in content
            assert 'ARCH="x86_64 aarch64"' in content
            assert exporter.count == 1

    @pytest.mark.asyncio
    async def test_written_file_loads_back(self, sample_info, tmp_path):
        target = tmp_path / "version.env"
        await VersionEnvExporter(output_file=target, environ={}).export(sample_info)
        loaded = load_version_file(target)
        assert loaded.package_name == "firefox"
        assert loaded.tag_version == "128.0"

    @pytest.mark.asyncio
    async def test_unwritable_target(self, sample_info, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        exporter = VersionEnvExporter(output_file=blocker / "version.env", environ={})
        with pytest.raises(ExportError):
            await exporter.export(sample_info)

    @pytest.mark.asyncio
    async def test_command_substitution_written_quoted(self, tmp_path):
        info = ManifestParser().parse_text("pkgname=demo\npkgver=$(touch x)\npkgrel=1\n")
        target = tmp_path / "version.env"
        await VersionEnvExporter(output_file=target, environ={}).export(info)

        content = target.read_text()
        assert "VERSION='$(touch x)'\n" in content
        assert load_version_file(target).version == "$(touch x)"


# ═══════════════════════════════════════════
# JSON Exporter Tests
# ═══════════════════════════════════════════


class TestJSONExporter:
    @pytest.mark.asyncio
    async def test_exports_json_file(self, sample_info):
        with tempfile.TemporaryDirectory() as tmpdir:
            exporter = JSONExporter(output_dir=Path(tmpdir))
            await exporter.export(sample_info)
            await exporter.finalize()

            outfile = Path(tmpdir) / "firefox.json"
            assert outfile.exists()

            data = json.loads(outfile.read_text())
            assert data["name"] == "firefox"
            assert data["depends"] == ["glib2", "gtk3"]
            assert exporter.count == 1

    @pytest.mark.asyncio
    async def test_unwritable_directory(self, sample_info, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(ExportError):
            await JSONExporter(output_dir=blocker).export(sample_info)

    @pytest.mark.asyncio
    async def test_rejects_name_escaping_output_dir(self, tmp_path):
        info = ManifestParser().parse_text("pkgname=../escaped\npkgver=1\npkgrel=1\n")
        out = tmp_path / "artifacts"
        exporter = JSONExporter(output_dir=out)
        with pytest.raises(ExportError):
            await exporter.export(info)
        assert not (tmp_path / "escaped.json").exists()
        assert exporter.count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["sub/pkg", "..", ".hidden", "-rf", "a\\b"])
    async def test_rejects_unsafe_names(self, tmp_path, name):
        info = ManifestInfo(name=name, version="1", release="1")
        with pytest.raises(ExportError):
            await JSONExporter(output_dir=tmp_path).export(info)
        assert list(tmp_path.iterdir()) == []


# ═══════════════════════════════════════════
# Factory Tests
# ═══════════════════════════════════════════


class TestGetExporter:
    def test_env(self, tmp_path):
        exporter = get_exporter("env", str(tmp_path / "version.env"))
        assert isinstance(exporter, VersionEnvExporter)
        assert isinstance(exporter, Exporter)

    def test_json(self, tmp_path):
        assert isinstance(get_exporter("json", str(tmp_path)), JSONExporter)

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValueError):
            get_exporter("sqlite", str(tmp_path))
