"""Custom exceptions for patch server operations.

All exceptions inherit from PatchServerError for consistent error handling.
Each exception includes a troubleshooting hint and a suggested exit code.
"""

from typing import List, Optional


class PatchServerError(Exception):
    """Base exception for all patch server errors.

    Attributes:
        message: Human-readable error message.
        hint: Optional troubleshooting hint.
        exit_code: Suggested exit code for CLI applications.
    """

    exit_code: int = 2

    def __init__(
        self,
        message: str,
        hint: Optional[str] = None,
        exit_code: Optional[int] = None,
    ) -> None:
        self.message = message
        self.hint = hint
        if exit_code is not None:
            self.exit_code = exit_code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional hint."""
        if self.hint:
            return f"{self.message}\n\nHint: {self.hint}"
        return self.message


class SourceUnavailableError(PatchServerError):
    """The patch server cannot be reached or a call failed partway.

    This is fatal for the run: a report built from partial data would
    misrepresent fleet compliance.
    """

    exit_code: int = 2

    def __init__(
        self,
        message: str = "Cannot retrieve data from the patch server",
        hint: Optional[str] = None,
        exit_code: Optional[int] = None,
    ) -> None:
        if hint is None:
            hint = (
                "Is the patch server running? Check the server name, port "
                "(8531 for SSL, 8530 without) and the use_ssl setting."
            )
        super().__init__(message=message, hint=hint, exit_code=exit_code)


class AuthenticationError(SourceUnavailableError):
    """The patch server rejected the configured credentials."""

    exit_code: int = 3

    def __init__(
        self,
        message: str = "Authentication with the patch server failed",
        hint: Optional[str] = None,
    ) -> None:
        if hint is None:
            hint = (
                "Check api_token, or username and password. The account needs "
                "read access to computers and update status."
            )
        super().__init__(message=message, hint=hint, exit_code=3)


class ScopeNotFoundError(PatchServerError):
    """The requested computer group does not exist on the server."""

    exit_code: int = 4

    def __init__(
        self,
        scope: str,
        available_groups: Optional[List[str]] = None,
    ) -> None:
        self.scope = scope
        message = f"Computer group '{scope}' not found on the patch server"
        hint = None
        if available_groups:
            hint = f"Available groups: {', '.join(available_groups)}"
        super().__init__(message=message, hint=hint)
