"""Tests for environment-driven configuration."""

from pathlib import Path

import pytest

from skybuild.core.config import OrchestratorConfig, Settings
from skybuild.variant.types import Platform


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("TARGET", "ARTIFACT", "VERSION", "OS"):
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.target is None
        assert settings.artifact is None
        assert settings.version is None
        assert settings.grace_period_seconds == 10.0
        assert settings.cargo == "cargo"

    def test_reads_conventional_variables(self, monkeypatch):
        monkeypatch.setenv("TARGET", "x86_64-unknown-linux-musl")
        monkeypatch.setenv("ARTIFACT", "linux64")
        monkeypatch.setenv("VERSION", "2.0.1")
        monkeypatch.setenv("OS", "Windows_NT")

        settings = Settings()

        assert settings.target == "x86_64-unknown-linux-musl"
        assert settings.artifact == "linux64"
        assert settings.version == "2.0.1"
        assert settings.host_os == "Windows_NT"

    def test_empty_variables_are_unset(self, monkeypatch):
        monkeypatch.setenv("TARGET", "")
        monkeypatch.setenv("ARTIFACT", "  ")

        settings = Settings()

        assert settings.target is None
        assert settings.artifact is None

    def test_prefixed_tunables(self, monkeypatch):
        monkeypatch.setenv("SKYBUILD_GRACE_PERIOD_SECONDS", "3")
        monkeypatch.setenv("SKYBUILD_CARGO", "cross")

        settings = Settings()

        assert settings.grace_period_seconds == 3.0
        assert settings.cargo == "cross"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("ARTIFACT=from-dotenv\nUNRELATED=1\n")

        assert Settings().artifact == "from-dotenv"


class TestOrchestratorConfig:
    def test_from_settings_resolves_platform(self, monkeypatch):
        monkeypatch.setenv("OS", "Windows_NT")

        config = OrchestratorConfig.from_settings(Settings())

        assert config.platform is Platform.WINDOWS
        assert config.workspace_root.is_absolute()

    def test_posix_by_default(self):
        assert OrchestratorConfig.from_settings(Settings()).platform is Platform.POSIX

    def test_overrides_skip_none(self, tmp_path):
        base = OrchestratorConfig(platform=Platform.POSIX, workspace_root=tmp_path, artifact="a")

        config = base.with_overrides(artifact=None, version="1.0", workspace_root=Path("."))

        assert config.artifact == "a"
        assert config.version == "1.0"
        assert config.workspace_root == Path(".").resolve()
