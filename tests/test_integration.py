"""
=============================================================================
Integration Tests - Real LLM Endpoint
=============================================================================

Runs the workflow with the OpenAI-compatible endpoint from settings.

USAGE:
------
# Run integration tests only (requires LLM_API_KEY)
uv run pytest tests/test_integration.py -v -m integration

# Skip integration tests (default for CI)
uv run pytest tests/ -v -m "not integration"

REQUIRES:
---------
- LLM_API_KEY (and optionally LLM_BASE_URL / LLM_MODEL) in env or .env
=============================================================================
"""

import pytest

from task_planner.config.settings import get_settings
from task_planner.graph import WorkflowServices, run_workflow
from task_planner.llm.services import LLMTaskPlannerService
from task_planner.models import AgentKind

# Mark all tests in this module as integration tests
pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not get_settings().llm_configured, reason="LLM endpoint not configured"),
]


@pytest.fixture
def live_services(store) -> WorkflowServices:
    llm_service = LLMTaskPlannerService()
    return WorkflowServices(decision=llm_service, extraction=llm_service, store=store)


class TestLiveWorkflow:
    @pytest.mark.asyncio
    async def test_compliance_query_routes_to_compliance(self, live_services):
        """The router should pick at least the compliance agent for a TCI query."""
        result = await run_workflow("Get TCI compliance items", "APP-001", services=live_services)

        assert AgentKind.COMPLIANCE in result["agents_to_invoke"]
        assert result["compliance_items"]
        assert result["final_summary"].strip()

    @pytest.mark.asyncio
    async def test_full_run_stores_items(self, live_services, store):
        result = await run_workflow(
            "Fetch all tasks including TCI, issues and scan results", "APP-003", services=live_services
        )

        stored = store.load()
        assert result["all_items"]
        assert stored
        assert all(item.app_id == "APP-003" for item in stored)
