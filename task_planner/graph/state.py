"""
=============================================================================
LangGraph State Definition
=============================================================================

Defines the state schema for the task planner workflow.

STATE DESIGN NOTES:
-------------------
- Every field is Annotated with the keep_latest reducer: a node's partial
  update replaces a field only when it carries a non-None value
- Omitting a field never erases what an earlier node wrote
- Collection fields are replaced wholesale, never merged element-wise
- Each field has exactly one writing node (inputs are set once at start)
=============================================================================
"""

from typing import Annotated, Any, TypedDict

from task_planner.models import AgentKind, TaskItem


def keep_latest(previous: Any, incoming: Any) -> Any:
    """Reducer: take the incoming value when present, else keep the previous one."""
    return previous if incoming is None else incoming


class WorkflowState(TypedDict, total=False):
    """
    State schema for the task planner workflow.

    This state is passed through all nodes in the LangGraph.
    """

    # Input (set once at workflow start)
    user_query: Annotated[str, keep_latest]
    app_id: Annotated[str, keep_latest]

    # Planner output
    agents_to_invoke: Annotated[list[AgentKind], keep_latest]

    # Agent outputs, one writer each
    compliance_response: Annotated[str, keep_latest]
    compliance_items: Annotated[list[TaskItem], keep_latest]
    issue_response: Annotated[str, keep_latest]
    issue_items: Annotated[list[TaskItem], keep_latest]
    scan_response: Annotated[str, keep_latest]
    scan_items: Annotated[list[TaskItem], keep_latest]

    # Summarizer output
    final_summary: Annotated[str, keep_latest]
    all_items: Annotated[list[TaskItem], keep_latest]


def items_key(source: AgentKind) -> str:
    return f"{source.value}_items"


def response_key(source: AgentKind) -> str:
    return f"{source.value}_response"


def create_initial_state(user_query: str, app_id: str) -> WorkflowState:
    """Initial state factory. Both inputs must be non-empty."""
    if not user_query or not user_query.strip():
        raise ValueError("user_query must be a non-empty string")
    if not app_id or not app_id.strip():
        raise ValueError("app_id must be a non-empty string")

    return {
        "user_query": user_query.strip(),
        "app_id": app_id.strip(),
        "agents_to_invoke": [],
    }
