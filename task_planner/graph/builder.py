"""
=============================================================================
LangGraph Builder
=============================================================================

Constructs the task planner workflow graph.

GRAPH STRUCTURE:
----------------
START -> planner -> [compliance] -> [issue] -> [scan] -> summarizer -> END

Agents in brackets run only when the planner selected them. The edge out
of the planner and out of each agent is conditional and resolved by
next_after() against agents_to_invoke, so agents always execute in
priority order, one at a time.

CHECKPOINTER SUPPORT:
---------------------
build_graph accepts an optional checkpointer for in-process state
inspection (MemorySaver). Runs are not resumed across restarts.
=============================================================================
"""

import logging
from typing import Union

from langchain_core.runnables import RunnableConfig
from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.checkpoint.memory import MemorySaver
from langgraph.graph import END, START, StateGraph
from langgraph.graph.state import CompiledStateGraph

from task_planner.graph.nodes import AGENT_NODES, planner_node, summarizer_node
from task_planner.graph.routing import WorkflowNode, next_after, successors
from task_planner.graph.services import WorkflowServices
from task_planner.graph.state import WorkflowState, create_initial_state
from task_planner.models import AgentKind

logger = logging.getLogger(__name__)


def _router_for(current: WorkflowNode):
    def route(state: WorkflowState) -> str:
        return next_after(current, state.get("agents_to_invoke") or []).value

    route.__name__ = f"route_after_{current.value}"
    return route


def build_graph(
    checkpointer: Union[MemorySaver, BaseCheckpointSaver, None] = None
) -> CompiledStateGraph:
    """
    Build and compile the task planner workflow graph.

    Args:
        checkpointer: Optional checkpointer for state inspection.

    FLOW:
    -----
    1. Planner decides which agents to call
    2. Selected agents run sequentially in priority order
    3. Summarizer combines their reports
    """
    logger.info("[GRAPH] Building task planner workflow graph")

    builder = StateGraph(WorkflowState)

    builder.add_node(WorkflowNode.PLANNER.value, planner_node)
    for agent, node in AGENT_NODES.items():
        builder.add_node(WorkflowNode.for_agent(agent).value, node)
    builder.add_node(WorkflowNode.SUMMARIZER.value, summarizer_node)

    builder.add_edge(START, WorkflowNode.PLANNER.value)

    # Conditional routing out of the planner and every agent but the last
    for current in (WorkflowNode.PLANNER, WorkflowNode.COMPLIANCE, WorkflowNode.ISSUE):
        builder.add_conditional_edges(
            current.value,
            _router_for(current),
            {node.value: node.value for node in successors(current)},
        )

    builder.add_edge(WorkflowNode.SCAN.value, WorkflowNode.SUMMARIZER.value)
    builder.add_edge(WorkflowNode.SUMMARIZER.value, END)

    graph = builder.compile(checkpointer=checkpointer)

    logger.info(
        f"[GRAPH] Graph compiled successfully "
        f"(checkpointer={'enabled' if checkpointer else 'disabled'})"
    )

    return graph


async def run_workflow(
    user_query: str,
    app_id: str,
    services: WorkflowServices | None = None,
    config: RunnableConfig | None = None,
    graph: CompiledStateGraph | None = None,
) -> WorkflowState:
    """
    Run the workflow for one query and return the final state.

    services defaults to WorkflowServices.from_settings(). Extra config
    (callbacks, thread_id for a checkpointer) is merged with the services
    entry. Cancel the awaiting task to abort an in-flight run.
    """
    initial_state = create_initial_state(user_query, app_id)
    services = services or WorkflowServices.from_settings()
    graph = graph or build_graph()

    run_config: RunnableConfig = dict(config or {})
    run_config["configurable"] = {**run_config.get("configurable", {}), "services": services}

    logger.info("=" * 60)
    logger.info(f"[WORKFLOW] Starting run: app={initial_state['app_id']}")
    logger.info("=" * 60)

    result = await graph.ainvoke(initial_state, run_config)

    agents = [AgentKind(agent).value for agent in result.get("agents_to_invoke") or []]
    logger.info("=" * 60)
    logger.info(
        f"[WORKFLOW] Complete: agents={agents}, items={len(result.get('all_items') or [])}"
    )
    logger.info("=" * 60)

    return result
