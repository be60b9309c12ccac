"""
Patch Compliance Reporter - fleet update compliance reports from a patch server.

This package queries a patch-management server for per-machine update
states, aggregates fleet-wide statistics, and renders the result as a
Markdown and HTML report that can be published to a chat webhook or email.

Features:
- Configuration via YAML with environment variable overrides
- Docker secrets support for sensitive credentials
- Structured logging (JSON for production, text for development)
- Deterministic Markdown output with a narrow Markdown-to-HTML converter
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
