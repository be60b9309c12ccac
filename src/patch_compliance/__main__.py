"""
Entry point for the patch-compliance-report CLI.

Usage:
    patch-compliance-report             Collect, render and deliver one report
    patch-compliance-report --test      Validate configuration and connection, then exit
    patch-compliance-report --help      Show help message
    patch-compliance-report --version   Show version and exit

Exit Codes:
    0 - Success (webhook/email failures are logged but do not change the code)
    1 - Configuration error (invalid settings, missing required values)
    2 - Patch server unavailable
    3 - Authentication error
    4 - Requested computer group not found
    5 - Internal rendering error
    6 - Report files could not be written
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List, Optional

from patch_compliance import __version__

EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_SOURCE_ERROR = 2
EXIT_AUTH_ERROR = 3
EXIT_SCOPE_NOT_FOUND = 4
EXIT_RENDER_ERROR = 5
EXIT_OUTPUT_ERROR = 6


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="patch-compliance-report",
        description="Report per-machine update compliance from a patch-management server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0   Success
  1   Configuration error
  2   Patch server unavailable
  3   Authentication error
  4   Computer group not found
  5   Internal rendering error
  6   Report files could not be written

Environment Variables:
  CONFIG_PATH                        Path to YAML configuration file
  PATCH_REPORT_SERVER                Patch server hostname
  PATCH_REPORT_PORT                  Server port (8531 SSL / 8530 plain if not set)
  PATCH_REPORT_USE_SSL               Use HTTPS (default: true)
  PATCH_REPORT_API_TOKEN             Bearer token (or PATCH_REPORT_API_TOKEN_FILE)
  PATCH_REPORT_SCOPE                 Computer group (all computers if not set)
  PATCH_REPORT_OUTPUT_DIR            Report directory (default: ./reports)
  PATCH_REPORT_ACTIVITY_WINDOW_DAYS  Activity window in days (0 = off)
  PATCH_REPORT_WEBHOOK_URL           Chat webhook URL
  PATCH_REPORT_EMAIL_FROM            Email sender
  PATCH_REPORT_EMAIL_RECIPIENTS      Comma-separated recipients
  PATCH_REPORT_SMTP_HOST             SMTP relay host
  PATCH_REPORT_LOG_LEVEL             Logging level: DEBUG, INFO, WARNING, ERROR
  PATCH_REPORT_LOG_FORMAT            Log format: json or text

Examples:
  # Whole fleet, files only
  patch-compliance-report --server wsus01.corp.local --output-dir /srv/reports

  # One group, machines seen in the last 14 days, posted to chat
  patch-compliance-report --scope Workstations --activity-days 14 \\
      --webhook-url https://chat.example.com/hooks/abc

  # Test configuration and connection
  CONFIG_PATH=/etc/patch-report/config.yaml patch-compliance-report --test
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--test",
        action="store_true",
        help="Test configuration and connection, then exit",
    )
    parser.add_argument("--config", dest="config_path", help="Path to YAML configuration file")

    server = parser.add_argument_group("patch server")
    server.add_argument("--server", help="Patch server hostname")
    server.add_argument("--port", type=int, help="Patch server port")
    server.add_argument(
        "--use-ssl",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Connect over HTTPS",
    )
    server.add_argument("--scope", help="Computer group to report on")

    report = parser.add_argument_group("report")
    report.add_argument("--output-dir", help="Directory for the .md and .html reports")
    report.add_argument(
        "--activity-days",
        dest="activity_window_days",
        type=int,
        help="Only treat machines synced within N days as active",
    )

    delivery = parser.add_argument_group("delivery")
    delivery.add_argument("--webhook-url", help="Chat webhook URL")
    delivery.add_argument("--email-from", help="Email sender address")
    delivery.add_argument("--email-to", dest="email_recipients", help="Comma-separated recipients")
    delivery.add_argument("--email-subject", help="Email subject")
    delivery.add_argument("--smtp-host", help="SMTP relay host")
    delivery.add_argument("--smtp-port", type=int, help="SMTP relay port")

    logging_group = parser.add_argument_group("logging")
    logging_group.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    logging_group.add_argument("--log-format", choices=["json", "text"], help="Log output format")

    return parser.parse_args(argv)


def settings_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Settings values given on the command line."""
    fields = (
        "server",
        "port",
        "use_ssl",
        "scope",
        "output_dir",
        "activity_window_days",
        "webhook_url",
        "email_from",
        "email_recipients",
        "email_subject",
        "smtp_host",
        "smtp_port",
        "log_level",
        "log_format",
    )
    return {name: getattr(args, name) for name in fields if getattr(args, name) is not None}


def run_connection_test(settings: Any, log: Any) -> int:
    """Connect, resolve the scope and count machines."""
    from patch_compliance.source import (
        AuthenticationError,
        PatchServerClient,
        ScopeNotFoundError,
        SourceUnavailableError,
    )

    try:
        with PatchServerClient(settings) as client:
            machines = client.list_machines(settings.scope)
    except ScopeNotFoundError as e:
        log.error("scope_not_found", scope=e.scope)
        print(f"\nScope error: {e}", file=sys.stderr)
        return EXIT_SCOPE_NOT_FOUND
    except AuthenticationError as e:
        log.error("authentication_failed", error=str(e))
        print(f"\nAuthentication error: {e}", file=sys.stderr)
        return EXIT_AUTH_ERROR
    except SourceUnavailableError as e:
        log.error("connection_failed", error=str(e))
        print(f"\nConnection error: {e}", file=sys.stderr)
        return EXIT_SOURCE_ERROR

    print(f"Server: {settings.base_url}")
    print(f"Scope:  {settings.scope_label} ({len(machines)} machines)")
    print("Configuration and connection: OK")
    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for patch-compliance-report.

    Returns:
        Exit code (see module docstring)
    """
    args = parse_args(argv)

    # Import here to allow --help without loading dependencies
    from patch_compliance.config import ConfigurationError, load_config
    from patch_compliance.delivery import FileDeliveryError
    from patch_compliance.logging import configure_logging, get_logger
    from patch_compliance.pipeline import run_report
    from patch_compliance.reports import RenderError
    from patch_compliance.source import PatchServerError

    try:
        settings = load_config(args.config_path, overrides=settings_overrides(args))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(log_format=settings.log_format, log_level=settings.log_level)
    log = get_logger()

    if args.test:
        return run_connection_test(settings, log)

    log.info(
        "run_starting",
        version=__version__,
        server=settings.base_url,
        scope=settings.scope_label,
        activity_window_days=settings.activity_window_days,
    )

    try:
        result = run_report(settings)
    except PatchServerError as e:
        log.error("collection_failed", error=e.message, exit_code=e.exit_code)
        print(f"\nReport aborted: {e}", file=sys.stderr)
        return e.exit_code
    except RenderError as e:
        log.error("render_failed", error=str(e))
        print(f"\nInternal rendering error: {e}", file=sys.stderr)
        return EXIT_RENDER_ERROR
    except FileDeliveryError as e:
        log.error("output_failed", error=str(e))
        print(f"\nCould not write report: {e}", file=sys.stderr)
        return EXIT_OUTPUT_ERROR

    for path in result.delivery.paths:
        print(path)
    for error in result.delivery.errors:
        print(f"Delivery warning: {error}", file=sys.stderr)

    log.info(
        "run_complete",
        total_machines=result.report.summary.total_machines,
        needed_updates=result.report.summary.needed_updates,
        webhook_sent=result.delivery.webhook_sent,
        email_sent=result.delivery.email_sent,
    )
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
