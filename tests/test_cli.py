"""Tests for the command line entry point."""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import pytest

import patch_compliance.logging
import patch_compliance.pipeline
import patch_compliance.source
from patch_compliance.__main__ import (
    EXIT_AUTH_ERROR,
    EXIT_CONFIG_ERROR,
    EXIT_OUTPUT_ERROR,
    EXIT_RENDER_ERROR,
    EXIT_SCOPE_NOT_FOUND,
    EXIT_SOURCE_ERROR,
    EXIT_SUCCESS,
    main,
    parse_args,
    settings_overrides,
)
from patch_compliance.delivery import DeliveryResult, FileDeliveryError
from patch_compliance.models import FleetSummary, Report
from patch_compliance.pipeline import RunResult
from patch_compliance.reports import RenderError
from patch_compliance.source import (
    AuthenticationError,
    ScopeNotFoundError,
    SourceUnavailableError,
)

pytestmark = pytest.mark.usefixtures("clean_env")


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    """Keep structlog from binding to the captured stderr of one test."""
    monkeypatch.setattr(patch_compliance.logging, "configure_logging", lambda **kwargs: None)


def _run_result(errors: Optional[List[str]] = None) -> RunResult:
    report = Report(
        scope="All Computers",
        generated_at=datetime(2026, 10, 18, tzinfo=timezone.utc),
        summary=FleetSummary(total_machines=2, needed_updates=3),
        markdown="# Report\n",
        html="<html></html>",
    )
    delivery = DeliveryResult(
        paths=[Path("reports/PatchCompliance-20261018.md"), Path("reports/PatchCompliance-20261018.html")],
        webhook_sent=False if errors else None,
        errors=list(errors or []),
    )
    return RunResult(report=report, delivery=delivery)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_overrides_skip_unset(self) -> None:
        args = parse_args(["--server", "wsus01", "--activity-days", "14"])
        assert settings_overrides(args) == {"server": "wsus01", "activity_window_days": 14}

    def test_no_use_ssl(self) -> None:
        args = parse_args(["--no-use-ssl"])
        assert settings_overrides(args) == {"use_ssl": False}

    def test_email_to(self) -> None:
        args = parse_args(["--email-to", "a@x.com,b@x.com"])
        assert args.email_recipients == "a@x.com,b@x.com"

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])
        assert exc_info.value.code == 0
        assert "patch-compliance-report" in capsys.readouterr().out


class TestMain:
    """Tests for main() exit codes."""

    def test_success_prints_paths(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr(patch_compliance.pipeline, "run_report", lambda settings: _run_result())

        assert main(["--server", "wsus01"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "PatchCompliance-20261018.md" in out
        assert "PatchCompliance-20261018.html" in out

    def test_delivery_failure_still_succeeds(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr(
            patch_compliance.pipeline,
            "run_report",
            lambda settings: _run_result(["webhook: Webhook returned HTTP 500"]),
        )

        assert main(["--server", "wsus01"]) == EXIT_SUCCESS
        assert "Delivery warning: webhook" in capsys.readouterr().err

    def test_cli_values_reach_settings(self, monkeypatch) -> None:
        seen = []

        def fake_run(settings):
            seen.append(settings)
            return _run_result()

        monkeypatch.setattr(patch_compliance.pipeline, "run_report", fake_run)
        main(["--server", "wsus01", "--scope", "Servers", "--activity-days", "7"])

        assert seen[0].scope == "Servers"
        assert seen[0].activity_window_days == 7

    def test_missing_server(self, capsys) -> None:
        assert main([]) == EXIT_CONFIG_ERROR
        assert "server" in capsys.readouterr().err

    def test_invalid_window(self) -> None:
        assert main(["--server", "wsus01", "--activity-days", "-3"]) == EXIT_CONFIG_ERROR

    @pytest.mark.parametrize(
        "error,expected",
        [
            (SourceUnavailableError(message="connection refused"), EXIT_SOURCE_ERROR),
            (AuthenticationError(), EXIT_AUTH_ERROR),
            (ScopeNotFoundError("Kiosks", ["Servers"]), EXIT_SCOPE_NOT_FOUND),
            (RenderError("table left open"), EXIT_RENDER_ERROR),
            (FileDeliveryError("Permission denied"), EXIT_OUTPUT_ERROR),
        ],
    )
    def test_error_exit_codes(self, monkeypatch, capsys, error, expected) -> None:
        def fail(settings):
            raise error

        monkeypatch.setattr(patch_compliance.pipeline, "run_report", fail)

        assert main(["--server", "wsus01"]) == expected


class TestConnectionTest:
    """Tests for --test."""

    class FakeClient:
        machines = ["m1", "m2"]
        error = None

        def __init__(self, settings):
            self.settings = settings

        def __enter__(self):
            return self

        def __exit__(self, *args):
            return None

        def list_machines(self, scope=None):
            if self.error is not None:
                raise self.error
            return self.machines

    def test_ok(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr(patch_compliance.source, "PatchServerClient", self.FakeClient)

        assert main(["--server", "wsus01", "--test"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "https://wsus01:8531" in out
        assert "All Computers (2 machines)" in out

    def test_unknown_scope(self, monkeypatch) -> None:
        client = type("ScopeFailClient", (self.FakeClient,), {"error": ScopeNotFoundError("Kiosks")})
        monkeypatch.setattr(patch_compliance.source, "PatchServerClient", client)

        assert main(["--server", "wsus01", "--scope", "Kiosks", "--test"]) == EXIT_SCOPE_NOT_FOUND

    def test_auth_failure(self, monkeypatch) -> None:
        client = type("AuthFailClient", (self.FakeClient,), {"error": AuthenticationError()})
        monkeypatch.setattr(patch_compliance.source, "PatchServerClient", client)

        assert main(["--server", "wsus01", "--test"]) == EXIT_AUTH_ERROR
