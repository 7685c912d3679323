"""
=============================================================================
LangGraph Node Implementations
=============================================================================

This module contains the node functions for the task planner workflow:
1. Planner Node - decides which agents to run (LLM, keyword fallback)
2. Agent Nodes - compliance / issue / scan: fetch -> extract -> store -> report
3. Summarizer Node - final narrative (LLM, template fallback)

ERROR POLICY:
-------------
- Decision/extraction failures are recovered inside the node with a
  deterministic fallback and logged
- FetchError and StoreError propagate and abort the run
- asyncio.CancelledError is not an Exception, so cancellation is never
  mistaken for a service failure

NOTE: Every node returns ONLY the fields it owns.
=============================================================================
"""

import asyncio
import logging

from langchain_core.runnables import RunnableConfig

from task_planner.config.langfuse import observe, propagate_attributes
from task_planner.errors import SummaryError
from task_planner.extraction import fallback_parse_html, parse_rows
from task_planner.graph.services import get_services
from task_planner.graph.state import WorkflowState, items_key, response_key
from task_planner.llm.services import ExtractionService
from task_planner.models import AgentKind, TaskItem
from task_planner.planning import (
    build_fallback_summary,
    fallback_agents_for_query,
    render_report,
)

logger = logging.getLogger(__name__)


@observe(name="planner_node", capture_input=False)
async def planner_node(state: WorkflowState, config: RunnableConfig) -> dict:
    """Decide which agents to invoke for the user query."""
    services = get_services(config)
    query = state["user_query"]
    logger.info(f"[PLANNER] Analyzing query: {query[:100]}")

    with propagate_attributes(metadata={"node": "planner", "app_id": state["app_id"]}):
        try:
            decided = await services.decision.decide(query)
            agents: list[AgentKind] = []
            for name in decided:
                try:
                    agent = AgentKind(name)
                except ValueError:
                    logger.warning(f"[PLANNER] Ignoring unknown agent {name!r}")
                    continue
                if agent not in agents:
                    agents.append(agent)
            logger.info(f"[PLANNER] Decision service selected: {[a.value for a in agents]}")
        except Exception as e:
            logger.warning(f"[PLANNER] Decision service failed, using keyword routing: {e}")
            agents = fallback_agents_for_query(query)
            logger.info(f"[PLANNER] Keyword routing selected: {[a.value for a in agents]}")

    return {"agents_to_invoke": agents}


async def extract_items(
    extraction: ExtractionService, document: str, source: AgentKind, app_id: str
) -> list[TaskItem]:
    """Extraction service first, regex table parser if it fails in any way."""
    try:
        text = await extraction.extract(document, source, app_id)
        items = parse_rows(text, app_id)
        logger.info(f"[AGENT] {source} extraction service returned {len(items)} items")
    except Exception as e:
        logger.warning(f"[AGENT] {source} extraction failed, using fallback parser: {e}")
        items = fallback_parse_html(document, source, app_id)
        logger.info(f"[AGENT] {source} fallback parser extracted {len(items)} items")
    return items


async def run_agent(source: AgentKind, state: WorkflowState, config: RunnableConfig) -> dict:
    """Shared fetch -> extract -> persist -> report pipeline."""
    services = get_services(config)
    app_id = state["app_id"]

    with propagate_attributes(metadata={"node": source.value, "app_id": app_id}):
        logger.info(f"[AGENT] {source} fetching document for app {app_id}")
        document = await services.source_for(source).fetch(app_id)

        items = await extract_items(services.extraction, document, source, app_id)

        result = await asyncio.to_thread(services.store.merge, items)
        logger.info(
            f"[AGENT] {source} stored items - added={result.added}, updated={result.updated}"
        )

    return {
        items_key(source): items,
        response_key(source): render_report(source, items),
    }


@observe(name="compliance_agent_node", capture_input=False)
async def compliance_agent_node(state: WorkflowState, config: RunnableConfig) -> dict:
    return await run_agent(AgentKind.COMPLIANCE, state, config)


@observe(name="issue_agent_node", capture_input=False)
async def issue_agent_node(state: WorkflowState, config: RunnableConfig) -> dict:
    return await run_agent(AgentKind.ISSUE, state, config)


@observe(name="scan_agent_node", capture_input=False)
async def scan_agent_node(state: WorkflowState, config: RunnableConfig) -> dict:
    return await run_agent(AgentKind.SCAN, state, config)


AGENT_NODES = {
    AgentKind.COMPLIANCE: compliance_agent_node,
    AgentKind.ISSUE: issue_agent_node,
    AgentKind.SCAN: scan_agent_node,
}


@observe(name="summarizer_node", capture_input=False)
async def summarizer_node(state: WorkflowState, config: RunnableConfig) -> dict:
    """
    Combine every agent's output into the final summary.

    all_items keeps priority order; agents that did not run contribute
    nothing.
    """
    services = get_services(config)

    all_items: list[TaskItem] = []
    fragments: dict[AgentKind, str] = {}
    for agent in AgentKind.priority_order():
        all_items.extend(state.get(items_key(agent)) or [])
        fragment = state.get(response_key(agent))
        if fragment:
            fragments[agent] = fragment

    logger.info(f"[SUMMARIZER] Summarizing {len(all_items)} items from {len(fragments)} agents")

    with propagate_attributes(metadata={"node": "summarizer", "app_id": state["app_id"]}):
        try:
            final_summary = await services.decision.summarize(fragments, state["user_query"])
            if not final_summary or not final_summary.strip():
                raise SummaryError("Decision service returned an empty summary")
            logger.info("[SUMMARIZER] Decision service summary generated")
        except Exception as e:
            logger.warning(f"[SUMMARIZER] Decision service failed, using template: {e}")
            final_summary = build_fallback_summary(
                user_query=state["user_query"],
                app_id=state["app_id"],
                agents=state.get("agents_to_invoke") or [],
                fragments=fragments,
                total_items=len(all_items),
                store_location=str(services.store.path),
            )

    return {
        "final_summary": final_summary,
        "all_items": all_items,
    }
