"""Tests for canonical Markdown rendering."""

from datetime import datetime, timedelta, timezone

from patch_compliance.analysis import summarize_fleet
from patch_compliance.models import ComplianceRow
from patch_compliance.reports.markdown import (
    DETAIL_ROW_LIMIT,
    format_groups,
    render_markdown,
    select_detail_rows,
    summary_metrics,
)

GENERATED_AT = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _render(rows, days=0, scope="All Computers", tz="UTC"):
    summary = summarize_fleet(rows, days, now=GENERATED_AT)
    return render_markdown(
        scope=scope,
        summary=summary,
        rows=rows,
        generated_at=GENERATED_AT,
        activity_window_days=days,
        display_timezone=tz,
    )


def _detail_lines(markdown):
    section = markdown.split("## Per-Machine Detail\n\n", 1)[1]
    return section.splitlines()[2:]


class TestRenderMarkdown:
    """Tests for render_markdown()."""

    def test_full_document(self):
        """A single-machine report renders byte-for-byte as expected."""
        rows = [
            ComplianceRow(
                computer_name="web01",
                group_names=["Servers", "Web|Prod"],
                last_sync=datetime(2026, 10, 17, 8, 30, tzinfo=timezone.utc),
                needed=5,
                failed=1,
                installed=10,
                not_applicable=3,
            )
        ]
        expected = (
            "# Patch Compliance Report - 2026-10-18\n"
            "\n"
            "**Scope:** All Computers\n"
            "\n"
            "## Fleet Summary\n"
            "\n"
            "| Metric | Count |\n"
            "|---|---|\n"
            "| Total machines | 1 |\n"
            "| Machines needing updates | 1 |\n"
            "| Machines with failed updates | 1 |\n"
            "| Machines pending reboot | 0 |\n"
            "| Needed updates (total) | 5 |\n"
            "| Failed updates (total) | 1 |\n"
            "\n"
            "## Per-Machine Detail\n"
            "\n"
            "| Computer | Needed | Failed | Pending Reboot | Installed | Not Applicable | Last Sync | Groups |\n"
            "|---|---|---|---|---|---|---|---|\n"
            "| web01 | 5 | 1 | 0 | 10 | 3 | 2026-10-17 08:30 | Servers, Web-Prod |\n"
        )
        assert _render(rows) == expected

    def test_activity_window_note_and_metric(self):
        """A window adds the note line and the active-machines metric."""
        rows = [ComplianceRow(computer_name="a", last_sync=GENERATED_AT - timedelta(days=1))]
        markdown = _render(rows, days=14)

        assert "**Activity window:** last 14 days (detail table and active count only)\n" in markdown
        assert "| Active machines (last 14 days) | 1 |\n" in markdown

    def test_summary_has_six_or_seven_metrics(self):
        """Six metrics without a window, seven with one."""
        summary = summarize_fleet([])
        assert len(summary_metrics(summary, 0)) == 6
        assert len(summary_metrics(summarize_fleet([], 7), 7)) == 7

    def test_scenario_detail_order(self):
        """Detail rows are ordered by needed descending."""
        rows = [
            ComplianceRow(computer_name="five", needed=5, failed=1),
            ComplianceRow(computer_name="zero"),
            ComplianceRow(computer_name="two", needed=2),
        ]
        names = [line.split(" | ")[0].lstrip("| ") for line in _detail_lines(_render(rows))]
        assert names == ["five", "two", "zero"]

    def test_top_fifty_of_sixty(self):
        """Only the 50 highest needed counts appear, descending."""
        rows = [ComplianceRow(computer_name=f"pc{n}", needed=n) for n in range(1, 61)]
        lines = _detail_lines(_render(rows))

        assert len(lines) == DETAIL_ROW_LIMIT
        needed = [int(line.split(" | ")[1]) for line in lines]
        assert needed == list(range(60, 10, -1))

    def test_ties_keep_input_order(self):
        """Equal needed counts keep their original order."""
        rows = [ComplianceRow(computer_name=name, needed=1) for name in ("c", "a", "b")]
        assert [r.computer_name for r in select_detail_rows(rows)] == ["c", "a", "b"]

    def test_window_excludes_stale_rows_from_detail(self):
        """Stale machines are left out of the detail table but not the totals."""
        rows = [
            ComplianceRow(computer_name="stale", needed=3, last_sync=GENERATED_AT - timedelta(days=40)),
            ComplianceRow(computer_name="fresh", needed=2, last_sync=GENERATED_AT - timedelta(days=1)),
        ]
        markdown = _render(rows, days=14)
        lines = _detail_lines(markdown)

        assert len(lines) == 1
        assert lines[0].startswith("| fresh |")
        assert "| Needed updates (total) | 5 |" in markdown

    def test_never_synced_label(self):
        """Missing last sync renders as 'never'."""
        markdown = _render([ComplianceRow(computer_name="new")])
        assert "| new | 0 | 0 | 0 | 0 | 0 | never |  |" in markdown

    def test_display_timezone(self):
        """Last sync is shown in the display timezone."""
        rows = [
            ComplianceRow(
                computer_name="a",
                last_sync=datetime(2026, 10, 17, 22, 30, tzinfo=timezone.utc),
            )
        ]
        assert "| 2026-10-18 00:30 |" in _render(rows, tz="Europe/Berlin")

    def test_deterministic(self):
        """Rendering twice gives identical bytes."""
        rows = [ComplianceRow(computer_name=f"pc{n}", needed=n % 3) for n in range(10)]
        assert _render(rows) == _render(rows)

    def test_single_line_ending(self):
        """Only \\n line endings, and the document ends with one."""
        markdown = _render([ComplianceRow(computer_name="a")])
        assert "\r" not in markdown
        assert markdown.endswith("|\n")

    def test_cells_verbatim_except_group_pipes(self):
        """Only group pipes are replaced; other text is left alone."""
        rows = [ComplianceRow(computer_name="<b>&", group_names=["A|B", "<script>"])]
        markdown = _render(rows)
        assert "| <b>& |" in markdown
        assert "A-B, <script>" in markdown


class TestFormatGroups:
    """Tests for format_groups()."""

    def test_pipes_replaced(self):
        assert format_groups(["a|b|c", "d"]) == "a-b-c, d"

    def test_empty(self):
        assert format_groups([]) == ""
