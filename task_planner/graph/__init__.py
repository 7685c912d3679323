# Graph package
from task_planner.graph.builder import build_graph, run_workflow
from task_planner.graph.routing import WorkflowNode, next_after
from task_planner.graph.services import WorkflowServices
from task_planner.graph.state import WorkflowState, create_initial_state

__all__ = [
    "build_graph",
    "run_workflow",
    "WorkflowNode",
    "next_after",
    "WorkflowServices",
    "WorkflowState",
    "create_initial_state",
]
