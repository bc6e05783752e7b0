"""Tests for SinkConfig, .env loading and the execution timeout."""
import os

import pytest

from logctl.config import DEFAULT_EXEC_TIMEOUT, SinkConfig, env_flag, exec_timeout, load_dotenv
from logctl.errors import ValidationError
from logctl.levels import LogLevel


class TestSinkConfig:
    def test_defaults(self):
        config = SinkConfig()
        assert config.console_min_level is LogLevel.INFORMATION
        assert config.file_min_level is LogLevel.VERBOSE
        assert config.app_name is None
        assert not config.file_enabled
        assert not (config.overwrite or config.initial_write or config.as_json)

    def test_levels_parsed_from_names(self):
        config = SinkConfig(console_min_level="Warning", file_min_level="DBG")
        assert config.console_min_level is LogLevel.WARNING
        assert config.file_min_level is LogLevel.DEBUG

    def test_blank_app_name_disables_file(self):
        assert SinkConfig(app_name="   ").app_name is None

    def test_replace_returns_copy(self):
        base = SinkConfig()
        changed = base.replace(app_name="App", as_json=True)
        assert changed.file_enabled and changed.as_json
        assert base.app_name is None

    def test_from_env_defaults(self):
        assert SinkConfig.from_env({}) == SinkConfig()

    def test_from_env(self):
        config = SinkConfig.from_env({
            "LOGCTL_CONSOLE_LEVEL": "Error",
            "LOGCTL_FILE_LEVEL": "Information",
            "LOGCTL_APP_NAME": "ModuleSync",
            "LOGCTL_BACKGROUND": "yes",
            "LOGCTL_OVERWRITE": "1",
            "LOGCTL_JSON": "off",
        })
        assert config.console_min_level is LogLevel.ERROR
        assert config.file_min_level is LogLevel.INFORMATION
        assert config.app_name == "ModuleSync"
        assert config.use_background_color
        assert config.overwrite
        assert not config.as_json

    def test_from_env_bad_level(self):
        with pytest.raises(ValidationError):
            SinkConfig.from_env({"LOGCTL_CONSOLE_LEVEL": "Loud"})

    def test_from_env_bad_flag(self):
        with pytest.raises(ValidationError) as excinfo:
            SinkConfig.from_env({"LOGCTL_JSON": "maybe"})
        assert excinfo.value.parameter == "LOGCTL_JSON"


class TestEnvFlag:
    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("TRUE", True), (" on ", True),
        ("0", False), ("no", False), ("", False),
    ])
    def test_values(self, value, expected):
        assert env_flag(value, "X") is expected

    def test_missing_uses_default(self):
        assert env_flag(None, "X", default=True) is True


def unset(monkeypatch, *names):
    # setenv first so monkeypatch removes whatever load_dotenv adds
    for name in names:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class TestLoadDotenv:
    def test_loads_and_keeps_existing(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n"
            "\n"
            "LOGCTL_APP_NAME=FromFile\n"
            "LOGCTL_CONSOLE_LEVEL = Debug\n"
            "LOGCTL_EXEC_TIMEOUT=a=b\n"
            "not a pair\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("LOGCTL_APP_NAME", "FromShell")
        unset(monkeypatch, "LOGCTL_CONSOLE_LEVEL", "LOGCTL_EXEC_TIMEOUT")
        load_dotenv(env_file)
        assert os.environ["LOGCTL_APP_NAME"] == "FromShell"
        assert os.environ["LOGCTL_CONSOLE_LEVEL"] == "Debug"
        assert os.environ["LOGCTL_EXEC_TIMEOUT"] == "a=b"

    def test_missing_file_is_ignored(self, tmp_path):
        load_dotenv(tmp_path / "missing.env")

    def test_default_path_is_cwd(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("LOGCTL_JSON=1\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        unset(monkeypatch, "LOGCTL_JSON")
        load_dotenv()
        assert os.environ["LOGCTL_JSON"] == "1"


class TestExecTimeout:
    def test_default(self):
        assert exec_timeout({}) == DEFAULT_EXEC_TIMEOUT

    def test_override(self):
        assert exec_timeout({"LOGCTL_EXEC_TIMEOUT": "12.5"}) == 12.5

    @pytest.mark.parametrize("raw", ["soon", "0", "-3"])
    def test_invalid(self, raw):
        with pytest.raises(ValidationError):
            exec_timeout({"LOGCTL_EXEC_TIMEOUT": raw})
