"""
Test configuration and fixtures.
"""

import os

import pytest
from dotenv import load_dotenv

from task_planner.errors import ExtractionError, RoutingError, SummaryError
from task_planner.graph.services import WorkflowServices
from task_planner.models import AgentKind, TaskItem
from task_planner.sources import render_fixture
from task_planner.store import TaskItemStore


@pytest.fixture(autouse=True, scope="session")
def set_test_environment():
    """Load environment variables from .env file for tests.

    Uses the same dotenv loading pattern as task_planner/config/settings.py
    to ensure consistency between application and tests.
    """
    load_dotenv()

    # Tracing stays off unless explicitly configured
    os.environ.setdefault("LANGFUSE_PUBLIC_KEY", "")
    os.environ.setdefault("LANGFUSE_SECRET_KEY", "")
    yield


class FakeLLMService:
    """
    Scripted decision + extraction service.

    decision: list of agent names, or an exception to raise
    extraction: per-source CSV text or exception; missing sources fail
    summary: summary text or exception; None fails
    """

    def __init__(self, decision=None, extraction=None, summary=None):
        self.decision = decision
        self.extraction = extraction or {}
        self.summary = summary
        self.extract_calls: list[AgentKind] = []
        self.summarize_calls: list[dict] = []

    async def decide(self, query: str) -> list[AgentKind]:
        if isinstance(self.decision, BaseException):
            raise self.decision
        if self.decision is None:
            raise RoutingError("no decision scripted")
        return list(self.decision)

    async def extract(self, raw_document: str, source: AgentKind, app_id: str) -> str:
        self.extract_calls.append(source)
        value = self.extraction.get(source)
        if isinstance(value, BaseException):
            raise value
        if value is None:
            raise ExtractionError(f"no extraction scripted for {source}")
        return value

    async def summarize(self, fragments: dict[AgentKind, str], query: str) -> str:
        self.summarize_calls.append(dict(fragments))
        if isinstance(self.summary, BaseException):
            raise self.summary
        if self.summary is None:
            raise SummaryError("no summary scripted")
        return self.summary


class RecordingSource:
    """Serves the fixture document and records fetch order."""

    def __init__(self, source: AgentKind, log: list[AgentKind], error: Exception | None = None):
        self.source = source
        self.log = log
        self.error = error

    async def fetch(self, app_id: str) -> str:
        self.log.append(self.source)
        if self.error is not None:
            raise self.error
        return render_fixture(self.source, app_id)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "task_items.csv"


@pytest.fixture
def store(store_path) -> TaskItemStore:
    return TaskItemStore(store_path)


@pytest.fixture
def fetch_log() -> list[AgentKind]:
    return []


@pytest.fixture
def make_services(store, fetch_log):
    """Factory for WorkflowServices wired to fakes and a temp store."""

    def _make(llm: FakeLLMService | None = None, source_errors=None) -> WorkflowServices:
        llm = llm or FakeLLMService()
        source_errors = source_errors or {}
        return WorkflowServices(
            decision=llm,
            extraction=llm,
            store=store,
            sources={
                agent: RecordingSource(agent, fetch_log, source_errors.get(agent))
                for agent in AgentKind
            },
        )

    return _make


@pytest.fixture
def sample_items() -> list[TaskItem]:
    return [
        TaskItem(
            app_id="APP-001",
            task_type="Security",
            task_subtype="Vulnerability",
            task="Update OpenSSL to v3.0",
            due_date="2026-03-15",
            parent_ticket="SEC-1234",
        ),
        TaskItem(
            app_id="APP-001",
            task_type="Bug",
            task_subtype="Critical",
            task="Fix login timeout issue",
            due_date="2026-02-20",
            ticket="BUG-2001",
            status="In Progress",
            more_details="Users experiencing 30s timeout on login",
        ),
    ]


@pytest.fixture
def fake_llm():
    """Factory for scripted decision/extraction services."""
    return FakeLLMService
