"""Markdown-to-HTML conversion for compliance reports.

Only the constructs render_markdown emits are recognized, tested per line
in this order:

- "# text"   -> <h1>
- "## text"  -> <h2>
- "|..."     -> table row (separator rows of dashes are dropped)
- otherwise  -> paragraph with **bold** spans; a blank line becomes <br>

Consecutive table rows share one <table>. Conversion is a two-state
machine: OUTSIDE a table or INSIDE one. The first row of each table is
rendered as header cells.
"""

import re
from enum import Enum
from typing import List, Optional

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup, escape

from .exceptions import RenderError

TEMPLATE_NAME = "report.html"

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_SEPARATOR_CELL_RE = re.compile(r"^-+$")


class TableState(Enum):
    """Converter state: whether a <table> is currently open."""

    OUTSIDE = "outside"
    INSIDE = "inside"


def create_environment() -> Environment:
    """Jinja2 environment for the HTML document skeleton."""
    return Environment(
        loader=PackageLoader("patch_compliance.reports", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def split_table_row(line: str) -> List[str]:
    """Split a table row line into trimmed cells."""
    content = line.strip()
    if content.startswith("|"):
        content = content[1:]
    if content.endswith("|"):
        content = content[:-1]
    return [cell.strip() for cell in content.split("|")]


def is_separator_row(cells: List[str]) -> bool:
    """True when every cell is made of dashes only."""
    return bool(cells) and all(_SEPARATOR_CELL_RE.match(cell) for cell in cells)


def _inline(text: str) -> str:
    """Escape text, then turn **bold** spans into <strong>."""
    return _BOLD_RE.sub(r"<strong>\1</strong>", str(escape(text)))


class MarkdownHtmlConverter:
    """Line-oriented converter with explicit table state.

    Attributes:
        state: Current TableState
    """

    def __init__(self) -> None:
        self.state = TableState.OUTSIDE
        self._lines: List[str] = []
        self._rows_in_table = 0

    def convert(self, markdown: str) -> str:
        """Convert a report's Markdown to an HTML body fragment.

        Lines end at newline characters only; other Unicode line
        boundaries in cell text stay inside their row.
        """
        self.state = TableState.OUTSIDE
        self._lines = []
        self._rows_in_table = 0

        lines = markdown.split("\n")
        if lines[-1] == "":
            lines.pop()
        for line in lines:
            self.feed(line)
        self.finish()

        return "\n".join(self._lines) + "\n"

    def feed(self, line: str) -> None:
        """Process one line.

        Raises:
            RenderError: If line contains a newline.
        """
        if "\n" in line:
            raise RenderError(f"feed() expects a single line, got {line!r}")

        if line.startswith("|"):
            self._table_row(line)
            return

        self._close_table()

        if line.startswith("# "):
            self._lines.append(f"<h1>{escape(line[2:].strip())}</h1>")
        elif line.startswith("## "):
            self._lines.append(f"<h2>{escape(line[3:].strip())}</h2>")
        elif not line.strip():
            self._lines.append("<br>")
        else:
            self._lines.append(f"<p>{_inline(line)}</p>")

    def finish(self) -> None:
        """Close any open table at end of input."""
        self._close_table()

    def _table_row(self, line: str) -> None:
        cells = split_table_row(line)
        if self.state is TableState.OUTSIDE:
            self._lines.append("<table>")
            self.state = TableState.INSIDE
            self._rows_in_table = 0
        if is_separator_row(cells):
            return

        tag = "th" if self._rows_in_table == 0 else "td"
        rendered = "".join(f"<{tag}>{escape(cell)}</{tag}>" for cell in cells)
        self._lines.append(f"<tr>{rendered}</tr>")
        self._rows_in_table += 1

    def _close_table(self) -> None:
        if self.state is TableState.INSIDE:
            self._lines.append("</table>")
            self.state = TableState.OUTSIDE


def convert_markdown_body(markdown: str) -> str:
    """Convert report Markdown to an HTML body fragment."""
    return MarkdownHtmlConverter().convert(markdown)


def markdown_to_html(
    markdown: str,
    title: str = "Patch Compliance Report",
    env: Optional[Environment] = None,
) -> str:
    """Convert report Markdown to a complete, self-contained HTML document.

    Args:
        markdown: Markdown produced by render_markdown
        title: Document <title>
        env: Jinja2 environment to load the skeleton from

    Returns:
        HTML document as string
    """
    body = convert_markdown_body(markdown)
    template = (env or create_environment()).get_template(TEMPLATE_NAME)
    return template.render(title=title, body=Markup(body))
