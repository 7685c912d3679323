"""
Conditional routing for the workflow graph.

Agents always run in priority order (compliance, issue, scan) no matter how
the planner listed them; each selected agent runs exactly once and the
summarizer always runs last.
"""

from collections.abc import Iterable
from enum import StrEnum

from task_planner.models import AgentKind


class WorkflowNode(StrEnum):
    PLANNER = "planner"
    COMPLIANCE = "compliance"
    ISSUE = "issue"
    SCAN = "scan"
    SUMMARIZER = "summarizer"

    @classmethod
    def for_agent(cls, agent: AgentKind) -> "WorkflowNode":
        return cls(agent.value)


def next_after(current: WorkflowNode, agents_to_invoke: Iterable[AgentKind]) -> WorkflowNode:
    """
    Destination after `current` completes.

    From the planner: the first selected agent in priority order. From an
    agent: the next selected agent after it. Summarizer when none remain.
    """
    current = WorkflowNode(current)
    if current is WorkflowNode.SUMMARIZER:
        raise ValueError("summarizer is terminal and has no successor")

    selected = {AgentKind(agent) for agent in agents_to_invoke}
    order = AgentKind.priority_order()

    if current is WorkflowNode.PLANNER:
        remaining = order
    else:
        remaining = order[order.index(AgentKind(current.value)) + 1 :]

    for agent in remaining:
        if agent in selected:
            return WorkflowNode.for_agent(agent)
    return WorkflowNode.SUMMARIZER


def successors(current: WorkflowNode) -> list[WorkflowNode]:
    """Every node `next_after` can return for `current`."""
    if current is WorkflowNode.PLANNER:
        return [WorkflowNode.for_agent(agent) for agent in AgentKind] + [WorkflowNode.SUMMARIZER]
    order = AgentKind.priority_order()
    later = order[order.index(AgentKind(current.value)) + 1 :]
    return [WorkflowNode.for_agent(agent) for agent in later] + [WorkflowNode.SUMMARIZER]
