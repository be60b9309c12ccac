"""Configuration management for the patch compliance reporter."""

from patch_compliance.config.loader import ConfigurationError, load_config
from patch_compliance.config.settings import DEFAULT_SCOPE_LABEL, ReportSettings

__all__ = [
    "ConfigurationError",
    "DEFAULT_SCOPE_LABEL",
    "ReportSettings",
    "load_config",
]
