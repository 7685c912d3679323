"""
=============================================================================
Workflow Dependencies
=============================================================================

Everything a node needs besides the state travels in one WorkflowServices
bundle, passed per run through config["configurable"]["services"]. There
are no module-level service handles, so concurrent runs never share
state they did not ask to share.

USAGE:
------
    services = WorkflowServices.from_settings()
    config = {"configurable": {"services": services}}
    result = await graph.ainvoke(initial_state, config)
=============================================================================
"""

import logging
from dataclasses import dataclass, field

from langchain_core.runnables import RunnableConfig

from task_planner.config.settings import Settings, get_settings
from task_planner.errors import ExtractionError, RoutingError, SummaryError
from task_planner.llm.services import DecisionService, ExtractionService, LLMTaskPlannerService
from task_planner.models import AgentKind
from task_planner.sources import DocumentSource, FixtureDocumentSource, HttpDocumentSource
from task_planner.store.csv_store import TaskItemStore

logger = logging.getLogger(__name__)


class UnavailableLLMService:
    """Stand-in used when no LLM endpoint is configured; every call fails fast."""

    async def decide(self, query: str) -> list[AgentKind]:
        raise RoutingError("LLM is not configured")

    async def extract(self, raw_document: str, source: AgentKind, app_id: str) -> str:
        raise ExtractionError("LLM is not configured")

    async def summarize(self, fragments: dict[AgentKind, str], query: str) -> str:
        raise SummaryError("LLM is not configured")


def default_sources(settings: Settings) -> dict[AgentKind, DocumentSource]:
    """HTTP source where a URL template is configured, fixture otherwise."""
    urls = {
        AgentKind.COMPLIANCE: settings.compliance_source_url,
        AgentKind.ISSUE: settings.issue_source_url,
        AgentKind.SCAN: settings.scan_source_url,
    }
    sources: dict[AgentKind, DocumentSource] = {}
    for agent, url in urls.items():
        if url:
            sources[agent] = HttpDocumentSource(
                agent, url, timeout=settings.fetch_timeout_seconds
            )
        else:
            sources[agent] = FixtureDocumentSource(agent)
    return sources


@dataclass
class WorkflowServices:
    decision: DecisionService
    extraction: ExtractionService
    store: TaskItemStore
    sources: dict[AgentKind, DocumentSource] = field(
        default_factory=lambda: {agent: FixtureDocumentSource(agent) for agent in AgentKind}
    )

    def source_for(self, agent: AgentKind) -> DocumentSource:
        return self.sources[agent]

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "WorkflowServices":
        settings = settings or get_settings()

        if settings.llm_configured:
            llm_service = LLMTaskPlannerService()
        else:
            logger.warning("[SERVICES] LLM not configured, deterministic fallbacks only")
            llm_service = UnavailableLLMService()

        return cls(
            decision=llm_service,
            extraction=llm_service,
            store=TaskItemStore(settings.store_full_path),
            sources=default_sources(settings),
        )


def get_services(config: RunnableConfig | None) -> WorkflowServices:
    """Resolve the services bundle for this run."""
    configurable = (config or {}).get("configurable", {})
    services = configurable.get("services")
    if services is None:
        raise LookupError(
            "No WorkflowServices in config['configurable']['services']; "
            "use run_workflow() or pass one explicitly"
        )
    return services
