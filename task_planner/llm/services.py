"""
=============================================================================
Decision & Extraction Services
=============================================================================

The workflow talks to the language model through two narrow protocols:

- DecisionService: routing decision and final summary
- ExtractionService: raw HTML document -> CSV row text

LLMTaskPlannerService implements both over ChatOpenAI. Tests and offline
runs substitute their own implementations through WorkflowServices.
=============================================================================
"""

import json
import logging
import re
from typing import Protocol

from langchain_openai import ChatOpenAI

from task_planner.errors import RoutingError, SummaryError
from task_planner.llm.client import get_llm, invoke_llm_with_retry
from task_planner.models import CSV_COLUMNS, AgentKind
from task_planner.prompts.manager import PromptManager, get_prompt_manager

logger = logging.getLogger(__name__)

_JSON_ARRAY_RE = re.compile(r"\[.*?\]", re.DOTALL)


class DecisionService(Protocol):
    async def decide(self, query: str) -> list[AgentKind]: ...

    async def summarize(self, fragments: dict[AgentKind, str], query: str) -> str: ...


class ExtractionService(Protocol):
    async def extract(self, raw_document: str, source: AgentKind, app_id: str) -> str: ...


def parse_agent_list(response: str) -> list[AgentKind]:
    """
    Parse a routing response into agent kinds.

    Accepts a bare JSON array or one wrapped in prose/code fences. Unknown
    names are dropped. Raises RoutingError if no JSON array is found.
    """
    text = response.strip()
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        match = _JSON_ARRAY_RE.search(text)
        if match is None:
            raise RoutingError(f"Routing response is not a JSON array: {text[:200]!r}")
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise RoutingError(f"Routing response is not valid JSON: {e}") from e

    if not isinstance(parsed, list):
        raise RoutingError(f"Routing response is {type(parsed).__name__}, expected list")

    agents: list[AgentKind] = []
    for name in parsed:
        try:
            agent = AgentKind(name)
        except ValueError:
            logger.warning(f"[PLANNER] Ignoring unknown agent {name!r} from decision service")
            continue
        if agent not in agents:
            agents.append(agent)
    return agents


class LLMTaskPlannerService:
    """Decision and extraction service backed by an OpenAI-compatible chat model."""

    def __init__(self, llm: ChatOpenAI | None = None, prompts: PromptManager | None = None):
        self._llm = llm
        self._prompts = prompts or get_prompt_manager()

    @property
    def llm(self) -> ChatOpenAI:
        if self._llm is None:
            self._llm = get_llm()
        return self._llm

    async def decide(self, query: str) -> list[AgentKind]:
        messages = self._prompts.build("router", query=query)
        response = await invoke_llm_with_retry(self.llm, messages, metadata={"prompt": "router"})
        return parse_agent_list(response)

    async def extract(self, raw_document: str, source: AgentKind, app_id: str) -> str:
        messages = self._prompts.build(
            "extractor",
            app_id=app_id,
            source=source.label.upper(),
            columns=",".join(CSV_COLUMNS),
            document=raw_document,
        )
        response = await invoke_llm_with_retry(
            self.llm, messages, metadata={"prompt": "extractor", "source": source.value}
        )
        return response.strip()

    async def summarize(self, fragments: dict[AgentKind, str], query: str) -> str:
        def section(kind: AgentKind) -> str:
            return fragments.get(kind) or f"No {kind.label} items found"

        messages = self._prompts.build(
            "summarizer",
            query=query,
            compliance_results=section(AgentKind.COMPLIANCE),
            issue_results=section(AgentKind.ISSUE),
            scan_results=section(AgentKind.SCAN),
        )
        response = await invoke_llm_with_retry(self.llm, messages, metadata={"prompt": "summarizer"})
        if not response.strip():
            raise SummaryError("Decision service returned an empty summary")
        return response
