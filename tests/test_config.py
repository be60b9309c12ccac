"""Tests for configuration loading."""

from pathlib import Path

import pytest

from patch_compliance.config import ConfigurationError, ReportSettings, load_config
from patch_compliance.config.loader import resolve_file_secrets

pytestmark = pytest.mark.usefixtures("clean_env")


def _write_yaml(tmp_path: Path, content: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(content)
    return str(path)


class TestDefaults:
    """Default values and derived properties."""

    def test_defaults(self) -> None:
        settings = ReportSettings(server="wsus01.corp.local")
        assert settings.use_ssl is True
        assert settings.scope is None
        assert settings.scope_label == "All Computers"
        assert settings.activity_window_days == 0
        assert settings.output_dir == "./reports"
        assert settings.report_prefix == "PatchCompliance"
        assert settings.webhook_url is None
        assert settings.email_configured is False
        assert settings.log_format == "json"

    def test_blank_optionals_are_unset(self) -> None:
        settings = ReportSettings(server="wsus01", scope="  ", webhook_url="")
        assert settings.scope is None
        assert settings.webhook_url is None

    def test_recipient_parsing(self) -> None:
        settings = ReportSettings(server="wsus01", email_recipients=" a@x.com, ,b@x.com ")
        assert settings.get_email_recipients() == ["a@x.com", "b@x.com"]

    def test_log_level_normalized(self) -> None:
        assert ReportSettings(server="wsus01", log_level="warn").log_level == "WARNING"


class TestLoadConfig:
    """Tests for load_config()."""

    def test_env_only(self, clean_env) -> None:
        clean_env["PATCH_REPORT_SERVER"] = "wsus01"
        clean_env["PATCH_REPORT_ACTIVITY_WINDOW_DAYS"] = "14"
        settings = load_config()
        assert settings.server == "wsus01"
        assert settings.activity_window_days == 14

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = _write_yaml(
            tmp_path,
            "server: wsus02.corp.local\nscope: Workstations\nuse_ssl: false\n",
        )
        settings = load_config(path)
        assert settings.server == "wsus02.corp.local"
        assert settings.scope == "Workstations"
        assert settings.base_url == "http://wsus02.corp.local:8530"

    def test_env_beats_yaml(self, tmp_path: Path, clean_env) -> None:
        path = _write_yaml(tmp_path, "server: from-yaml\nscope: Servers\n")
        clean_env["PATCH_REPORT_SCOPE"] = "Workstations"
        settings = load_config(path)
        assert settings.server == "from-yaml"
        assert settings.scope == "Workstations"

    def test_overrides_beat_env(self, clean_env) -> None:
        clean_env["PATCH_REPORT_SERVER"] = "from-env"
        settings = load_config(overrides={"server": "from-cli", "scope": None})
        assert settings.server == "from-cli"
        assert settings.scope is None

    def test_file_secret(self, tmp_path: Path, clean_env) -> None:
        secret = tmp_path / "token"
        secret.write_text("s3cret\n")
        clean_env["PATCH_REPORT_SERVER"] = "wsus01"
        clean_env["PATCH_REPORT_API_TOKEN_FILE"] = str(secret)
        assert load_config().api_token == "s3cret"

    def test_explicit_env_beats_file_secret(self, tmp_path: Path, clean_env) -> None:
        secret = tmp_path / "token"
        secret.write_text("from-file")
        clean_env["PATCH_REPORT_API_TOKEN"] = "from-env"
        clean_env["PATCH_REPORT_API_TOKEN_FILE"] = str(secret)
        clean_env["PATCH_REPORT_SERVER"] = "wsus01"
        assert load_config().api_token == "from-env"

    def test_missing_secret_file_is_skipped(self, clean_env) -> None:
        clean_env["PATCH_REPORT_API_TOKEN_FILE"] = "/nonexistent/token"
        assert resolve_file_secrets() == {}


class TestConfigErrors:
    """Validation and file errors become ConfigurationError."""

    def test_missing_server(self) -> None:
        with pytest.raises(ConfigurationError, match="'server' is required"):
            load_config()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(str(tmp_path / "absent.yaml"))

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, "server: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path)

    def test_negative_window(self) -> None:
        with pytest.raises(ConfigurationError, match="activity_window_days"):
            load_config(overrides={"server": "wsus01", "activity_window_days": -1})

    def test_unknown_timezone(self) -> None:
        with pytest.raises(ConfigurationError, match="timezone"):
            load_config(overrides={"server": "wsus01", "timezone": "Mars/Olympus"})

    def test_bad_log_level(self) -> None:
        with pytest.raises(ConfigurationError, match="log_level"):
            load_config(overrides={"server": "wsus01", "log_level": "LOUD"})
