"""Patch server data source.

Provides the PatchServerClient for the server's administrative API, the
ComplianceSource Protocol the collection phase depends on, and the
exceptions raised when the source cannot be used.
"""

from patch_compliance.source.base import ComplianceSource
from patch_compliance.source.client import PatchServerClient
from patch_compliance.source.endpoints import ENDPOINTS, Endpoints
from patch_compliance.source.exceptions import (
    AuthenticationError,
    PatchServerError,
    ScopeNotFoundError,
    SourceUnavailableError,
)

__all__ = [
    # Client
    "ComplianceSource",
    "PatchServerClient",
    # Exceptions
    "AuthenticationError",
    "PatchServerError",
    "ScopeNotFoundError",
    "SourceUnavailableError",
    # Endpoints
    "ENDPOINTS",
    "Endpoints",
]
