"""Report generation module for the patch compliance reporter.

Provides deterministic Markdown rendering and a narrow Markdown-to-HTML
converter whose document skeleton is a Jinja2 template.
"""

from .converter import MarkdownHtmlConverter, TableState, convert_markdown_body, markdown_to_html
from .exceptions import RenderError
from .generator import ReportGenerator
from .markdown import DETAIL_ROW_LIMIT, render_markdown

__all__ = [
    "DETAIL_ROW_LIMIT",
    "MarkdownHtmlConverter",
    "RenderError",
    "ReportGenerator",
    "TableState",
    "convert_markdown_body",
    "markdown_to_html",
    "render_markdown",
]
