"""Configuration loading with YAML, environment override, and Docker secrets support."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import structlog
import yaml
from pydantic import ValidationError

from patch_compliance.config.settings import ReportSettings

ENV_PREFIX = "PATCH_REPORT_"

log = structlog.get_logger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


def resolve_file_secrets() -> Dict[str, str]:
    """Resolve Docker secrets pattern (_FILE suffix) from environment.

    Scans environment for variables matching PATCH_REPORT_*_FILE pattern,
    reads the file contents, and returns a dict of the base variable
    names to their values.

    Example:
        PATCH_REPORT_SMTP_PASSWORD_FILE=/run/secrets/smtp_password
        -> Returns {"SMTP_PASSWORD": "<file contents>"}
    """
    secrets: Dict[str, str] = {}
    suffix = "_FILE"

    for key, filepath in os.environ.items():
        if key.startswith(ENV_PREFIX) and key.endswith(suffix):
            base_name = key[len(ENV_PREFIX) : -len(suffix)]
            path = Path(filepath)
            if not path.exists():
                # Let validation report the missing value
                log.warning("secret_file_not_found", env_var=key, path=filepath)
                continue
            try:
                secrets[base_name] = path.read_text().strip()
            except PermissionError:
                raise ConfigurationError(
                    f"Cannot read secret file '{filepath}' specified by {key}: permission denied"
                )
            except OSError as e:
                raise ConfigurationError(
                    f"Error reading secret file '{filepath}' specified by {key}: {e}"
                )

    return secrets


def load_yaml_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file if specified.

    Args:
        config_path: Path to YAML config file. If None, checks CONFIG_PATH env var.

    Returns:
        Dict of configuration values from YAML, or empty dict if no file.
    """
    path = config_path or os.environ.get("CONFIG_PATH")

    if not path:
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}\n"
            "Ensure CONFIG_PATH points to a valid YAML file, or remove it to use environment variables only."
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}")
    except PermissionError:
        raise ConfigurationError(f"Cannot read configuration file {path}: permission denied")


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[str]:
    """Format Pydantic validation errors into user-friendly messages."""
    messages: List[str] = []
    for error in errors:
        loc = ".".join(str(part) for part in error.get("loc", []))
        msg = error.get("msg", "Invalid value")
        input_val = error.get("input")

        if "missing" in msg.lower() or "required" in msg.lower():
            hint = f"Set {ENV_PREFIX}{loc.upper()} environment variable or add '{loc}:' to config file."
            messages.append(f"Configuration error: '{loc}' is required. {hint}")
        elif input_val is not None:
            messages.append(f"Configuration error: '{loc}' {msg}, got: {input_val}")
        else:
            messages.append(f"Configuration error: '{loc}' {msg}")

    return messages


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ReportSettings:
    """Load and validate configuration.

    Configuration is loaded with the following precedence:
    1. Explicit overrides (CLI flags)
    2. Environment variables
    3. Docker secrets (_FILE pattern)
    4. YAML configuration file
    5. Default values (lowest priority)

    Args:
        config_path: Optional path to YAML config file (sets CONFIG_PATH env).
        overrides: Values given at invocation time; None entries are skipped.

    Returns:
        Validated ReportSettings instance.

    Raises:
        ConfigurationError: If the file cannot be read or validation fails.
    """
    if config_path:
        os.environ["CONFIG_PATH"] = config_path

    # Validate YAML file exists and is readable (gives better errors)
    # The actual loading happens in the pydantic settings source
    _ = load_yaml_config()

    secrets = resolve_file_secrets()
    for key, value in secrets.items():
        env_key = f"{ENV_PREFIX}{key}"
        if env_key not in os.environ:
            os.environ[env_key] = value

    init_values = {k: v for k, v in (overrides or {}).items() if v is not None}

    try:
        return ReportSettings(**init_values)
    except ValidationError as e:
        raise ConfigurationError("\n".join(format_validation_errors(e.errors())))
