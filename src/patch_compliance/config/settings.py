"""Pydantic settings models for patch compliance report configuration."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Literal, Optional, Tuple, Type
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_SCOPE_LABEL = "All Computers"
DEFAULT_TLS_PORT = 8531
DEFAULT_PLAIN_PORT = 8530


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads values from a YAML file.

    The YAML file path is determined by the CONFIG_PATH environment variable.
    """

    def get_field_value(
        self, field: Any, field_name: str
    ) -> Tuple[Any, str, bool]:
        """Get field value from YAML config."""
        yaml_config = self._load_yaml_config()
        field_value = yaml_config.get(field_name)
        return field_value, field_name, False

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load YAML configuration file."""
        config_path = os.environ.get("CONFIG_PATH")
        if not config_path:
            return {}

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except (FileNotFoundError, yaml.YAMLError, PermissionError):
            # Errors will be handled by loader.py
            return {}

    def __call__(self) -> Dict[str, Any]:
        """Return the YAML config values."""
        return self._load_yaml_config()


class ReportSettings(BaseSettings):
    """Patch compliance report configuration settings.

    Configuration is loaded in the following precedence (highest to lowest):
    1. Constructor arguments (used for CLI flag overrides)
    2. Environment variables (PATCH_REPORT_ prefix)
    3. Docker secrets (_FILE pattern, applied via env)
    4. YAML configuration file (via CONFIG_PATH)
    5. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="PATCH_REPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Patch server connection
    server: str = Field(
        ...,
        description="Patch-management server hostname or IP address",
    )
    port: Optional[int] = Field(
        default=None,
        description="Server port (8531 with SSL, 8530 without, if not set)",
        ge=1,
        le=65535,
    )
    use_ssl: bool = Field(
        default=True,
        description="Connect to the server over HTTPS",
    )
    verify_ssl: bool = Field(
        default=True,
        description="Verify SSL certificates (set to false for self-signed certs)",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token for the server API",
    )
    username: Optional[str] = Field(
        default=None,
        description="Username for basic authentication (ignored if api_token is set)",
    )
    password: Optional[str] = Field(
        default=None,
        description="Password for basic authentication",
    )
    request_timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds",
        gt=0,
    )

    # Report content
    scope: Optional[str] = Field(
        default=None,
        description="Computer group to report on (all computers if not set)",
    )
    activity_window_days: int = Field(
        default=0,
        description="Only count machines synced within this many days as active (0 = off)",
        ge=0,
    )
    report_title: str = Field(
        default="Patch Compliance Report",
        description="Title used in the report heading and HTML document",
    )
    timezone: str = Field(
        default="UTC",
        description="Timezone for report dates and last-sync timestamps",
    )

    # File output
    output_dir: str = Field(
        default="./reports",
        description="Directory the Markdown and HTML reports are written to",
    )
    report_prefix: str = Field(
        default="PatchCompliance",
        description="File name prefix: <prefix>-<YYYYMMDD>.md / .html",
    )

    # Chat webhook delivery
    webhook_url: Optional[str] = Field(
        default=None,
        description="Chat webhook URL; the report is posted only when set",
    )
    webhook_timeout: float = Field(
        default=10.0,
        description="Webhook request timeout in seconds",
        gt=0,
    )

    # Email delivery
    email_from: Optional[str] = Field(
        default=None,
        description="Sender address; email is sent only when set",
    )
    email_recipients: str = Field(
        default="",
        description="Comma-separated list of recipient email addresses",
    )
    email_subject: Optional[str] = Field(
        default=None,
        description="Email subject (defaults to '<title> - <scope> - <date>')",
    )
    smtp_host: Optional[str] = Field(
        default=None,
        description="SMTP relay hostname; email is sent only when set",
    )
    smtp_port: int = Field(
        default=25,
        description="SMTP relay port (587 for STARTTLS, 465 for implicit TLS)",
        ge=1,
        le=65535,
    )
    smtp_user: Optional[str] = Field(
        default=None,
        description="SMTP authentication username",
    )
    smtp_password: Optional[str] = Field(
        default=None,
        description="SMTP authentication password",
    )
    smtp_use_tls: bool = Field(
        default=False,
        description="Use TLS for the SMTP connection",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format: json (scheduled runs) or text (interactive)",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to set precedence.

        Order (first = highest priority):
        1. init_settings (CLI overrides)
        2. env_settings (environment variables with PATCH_REPORT_ prefix)
        3. dotenv_settings (.env file)
        4. yaml_settings (CONFIG_PATH YAML file)
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
        )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"}
        normalized = v.upper()
        if normalized == "WARN":
            normalized = "WARNING"
        if normalized not in valid_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: DEBUG, INFO, WARNING, ERROR"
            )
        return normalized

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: str) -> str:
        """Validate server is not empty."""
        if not v or not v.strip():
            raise ValueError("Server cannot be empty")
        return v.strip()

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone '{v}'")
        return v

    @field_validator("scope", "webhook_url", "email_from", "smtp_host")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank optional strings as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def effective_port(self) -> int:
        """Configured port, or the default for the transport in use."""
        if self.port is not None:
            return self.port
        return DEFAULT_TLS_PORT if self.use_ssl else DEFAULT_PLAIN_PORT

    @property
    def base_url(self) -> str:
        """Base URL of the patch server API."""
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.server}:{self.effective_port}"

    @property
    def scope_label(self) -> str:
        """Human-readable scope name for the report."""
        return self.scope or DEFAULT_SCOPE_LABEL

    @property
    def email_configured(self) -> bool:
        """True when sender, recipients and relay host are all set."""
        return bool(self.email_from and self.get_email_recipients() and self.smtp_host)

    def get_email_recipients(self) -> List[str]:
        """Parse email_recipients string into a list of addresses.

        Returns:
            List of email addresses, filtered for empty strings.
        """
        if not self.email_recipients:
            return []
        return [addr.strip() for addr in self.email_recipients.split(",") if addr.strip()]
