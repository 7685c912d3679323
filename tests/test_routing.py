"""
=============================================================================
Routing Tests
=============================================================================

next_after() decides every conditional edge in the graph. Agents must run
in priority order regardless of how the planner listed them, each at most
once, and the summarizer must always be reached.
=============================================================================
"""

from itertools import permutations

import pytest

from task_planner.graph.routing import WorkflowNode, next_after, successors
from task_planner.models import AgentKind

C, I, S = AgentKind.COMPLIANCE, AgentKind.ISSUE, AgentKind.SCAN


def walk(agents: list[AgentKind]) -> list[WorkflowNode]:
    """Follow next_after from the planner until the summarizer."""
    path = []
    current = WorkflowNode.PLANNER
    while current is not WorkflowNode.SUMMARIZER:
        current = next_after(current, agents)
        path.append(current)
    return path


class TestNextAfter:
    def test_planner_with_no_agents_goes_to_summarizer(self):
        assert next_after(WorkflowNode.PLANNER, []) is WorkflowNode.SUMMARIZER

    def test_priority_order_ignores_input_order(self):
        assert walk([S, C]) == [WorkflowNode.COMPLIANCE, WorkflowNode.SCAN, WorkflowNode.SUMMARIZER]

    @pytest.mark.parametrize("agents", [list(p) for p in permutations([C, I, S])])
    def test_every_order_of_all_three(self, agents):
        assert walk(agents) == [
            WorkflowNode.COMPLIANCE,
            WorkflowNode.ISSUE,
            WorkflowNode.SCAN,
            WorkflowNode.SUMMARIZER,
        ]

    @pytest.mark.parametrize(
        "agents, expected",
        [
            ([C], [WorkflowNode.COMPLIANCE]),
            ([I], [WorkflowNode.ISSUE]),
            ([S], [WorkflowNode.SCAN]),
            ([I, C], [WorkflowNode.COMPLIANCE, WorkflowNode.ISSUE]),
            ([S, I], [WorkflowNode.ISSUE, WorkflowNode.SCAN]),
        ],
    )
    def test_unselected_agents_never_run(self, agents, expected):
        assert walk(agents) == expected + [WorkflowNode.SUMMARIZER]

    def test_scan_always_goes_to_summarizer(self):
        assert next_after(WorkflowNode.SCAN, [C, I, S]) is WorkflowNode.SUMMARIZER

    def test_accepts_string_tags(self):
        assert next_after(WorkflowNode.COMPLIANCE, ["scan"]) is WorkflowNode.SCAN

    def test_summarizer_has_no_successor(self):
        with pytest.raises(ValueError):
            next_after(WorkflowNode.SUMMARIZER, [C])

    def test_unknown_agent_tag_is_rejected(self):
        with pytest.raises(ValueError):
            next_after(WorkflowNode.PLANNER, ["billing"])


class TestSuccessors:
    def test_planner_can_reach_every_agent_and_summarizer(self):
        assert successors(WorkflowNode.PLANNER) == [
            WorkflowNode.COMPLIANCE,
            WorkflowNode.ISSUE,
            WorkflowNode.SCAN,
            WorkflowNode.SUMMARIZER,
        ]

    def test_issue_can_only_move_forward(self):
        assert successors(WorkflowNode.ISSUE) == [WorkflowNode.SCAN, WorkflowNode.SUMMARIZER]
