"""Tests for the domain models."""

import pytest

from task_planner.models import AgentKind, TaskItem


class TestAgentKind:
    def test_priority_order(self):
        assert AgentKind.priority_order() == [AgentKind.COMPLIANCE, AgentKind.ISSUE, AgentKind.SCAN]

    @pytest.mark.parametrize(
        "tag, expected",
        [
            ("compliance", AgentKind.COMPLIANCE),
            ("tci", AgentKind.COMPLIANCE),
            ("iTracker", AgentKind.ISSUE),
            (" Scan ", AgentKind.SCAN),
            ("scanissues", AgentKind.SCAN),
        ],
    )
    def test_tags_and_aliases(self, tag, expected):
        assert AgentKind(tag) is expected

    def test_unknown_tag_is_rejected(self):
        with pytest.raises(ValueError):
            AgentKind("billing")


class TestTaskItem:
    def test_none_becomes_empty_string(self):
        item = TaskItem(app_id="APP-001", task="Renew SSL certificate", status=None)

        assert item.status == ""
        assert item.more_details == ""

    def test_identity_ignores_other_fields(self):
        a = TaskItem(app_id="APP-001", task="Renew SSL certificate", status="Open")
        b = TaskItem(app_id="APP-001", task="Renew SSL certificate", due_date="2026-04-01")

        assert a.key == b.key
        assert a != b

    def test_from_row_pads_missing_columns(self):
        item = TaskItem.from_row(["APP-001", "Bug"])

        assert item.app_id == "APP-001"
        assert item.task_type == "Bug"
        assert item.to_row()[2:] == [""] * 7
