"""
=============================================================================
Extraction Tests
=============================================================================

WHAT THESE TESTS VERIFY:
------------------------
1. Extraction-service CSV is parsed with quoting, fences and headers
2. Unusable service output raises ExtractionError (triggers the fallback)
3. The regex fallback recovers every fixture row with the right columns
=============================================================================
"""

import pytest

from task_planner.errors import ExtractionError
from task_planner.extraction import fallback_parse_html, parse_rows
from task_planner.models import AgentKind, TaskItem
from task_planner.sources import render_fixture


class TestParseRows:
    """CSV text returned by the extraction service."""

    def test_quoted_field_with_delimiter(self):
        text = 'APP-001,Security,Vulnerability,"Update OpenSSL, then restart",2026-03-15,SEC-1234,,,'

        [item] = parse_rows(text, "APP-001")

        assert item.task == "Update OpenSSL, then restart"
        assert item.parent_ticket == "SEC-1234"
        assert item.status == ""

    def test_code_fences_and_header_are_ignored(self):
        text = (
            "```csv\n"
            "App_id,Task_Type,Task_SubType,Task,DueDate,Parent_JIRA,JIRA,Status,MoreDetails\n"
            "APP-002,Bug,Critical,Fix login timeout issue,2026-02-20,,BUG-2001,Open,Slow\n"
            "\n"
            "```"
        )

        items = parse_rows(text, "APP-002")

        assert [i.ticket for i in items] == ["BUG-2001"]

    def test_short_rows_are_padded_and_app_id_filled(self):
        [item] = parse_rows(",Task,Docs,Update API documentation", "APP-009")

        assert item == TaskItem(
            app_id="APP-009",
            task_type="Task",
            task_subtype="Docs",
            task="Update API documentation",
        )

    @pytest.mark.parametrize("text", ["", "   \n", "```csv\n```"])
    def test_empty_output_raises(self, text):
        with pytest.raises(ExtractionError):
            parse_rows(text, "APP-001")


class TestFallbackParser:
    """Regex extraction over the raw HTML tables."""

    def test_compliance_fixture(self):
        items = fallback_parse_html(render_fixture(AgentKind.COMPLIANCE, "APP-001"), AgentKind.COMPLIANCE, "APP-001")

        assert len(items) == 4
        first = items[0]
        assert first.app_id == "APP-001"
        assert first.task == "Update OpenSSL to v3.0"
        assert first.parent_ticket == "SEC-1234"
        assert first.ticket == ""

    def test_issue_fixture(self):
        items = fallback_parse_html(render_fixture(AgentKind.ISSUE, "APP-002"), AgentKind.ISSUE, "APP-002")

        assert len(items) == 4
        assert items[0].ticket == "BUG-2001"
        assert items[0].status == "In Progress"
        assert items[0].more_details == "Users experiencing 30s timeout on login"

    def test_scan_fixture_unescapes_entities(self):
        items = fallback_parse_html(render_fixture(AgentKind.SCAN, "APP-003"), AgentKind.SCAN, "APP-003")

        assert len(items) == 5
        lodash = next(i for i in items if i.ticket == "SCAN-1003")
        assert lodash.more_details == "CVE-2021-23337 affects lodash <4.17.21"

    def test_rows_with_wrong_cell_count_are_skipped(self):
        html = (
            "<table><tr><th>Task</th></tr>"
            "<tr><td>only</td><td>two</td></tr>"
            "<tr><td>Bug</td><td>Low</td><td>Typo</td><td>2026-01-01</td><td>P-1</td></tr>"
            "</table>"
        )

        items = fallback_parse_html(html, AgentKind.COMPLIANCE, "APP-001")

        assert [i.task for i in items] == ["Typo"]

    def test_no_table_yields_nothing(self):
        assert fallback_parse_html("<html><body>down for maintenance</body></html>", AgentKind.SCAN, "APP-001") == []
