"""
=============================================================================
LLM Client
=============================================================================

ChatOpenAI factory and a retrying invoke helper shared by every prompt.

Only network/transient errors are retried here. Anything else (bad output,
auth failures) surfaces to the calling node, which owns the fallback.
=============================================================================
"""

import logging
import time

import httpx
import openai
from langchain_openai import ChatOpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from task_planner.config.langfuse import get_callbacks
from task_planner.config.settings import Settings, get_settings
from task_planner.prompts.manager import ChatMessages

logger = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (
    httpx.HTTPError,
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
)


def get_llm(settings: Settings | None = None) -> ChatOpenAI:
    """Get the chat model configured for the OpenAI-compatible endpoint."""
    settings = settings or get_settings()
    return ChatOpenAI(
        base_url=settings.llm_base_url,
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        max_retries=0,
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(_TRANSIENT_ERRORS),
    reraise=True,
)
async def invoke_llm_with_retry(
    llm: ChatOpenAI, messages: ChatMessages, metadata: dict | None = None
) -> str:
    """
    Retry LLM calls for network/transient errors only.

    Returns the response text.
    """
    start_time = time.perf_counter()

    response = await llm.ainvoke(
        messages,
        config={"callbacks": get_callbacks(), "metadata": metadata or {}},
    )

    elapsed = time.perf_counter() - start_time
    logger.debug(f"[LLM] {metadata or {}} completed in {elapsed:.2f}s")

    content = response.content
    if isinstance(content, list):
        content = "".join(
            part.get("text", "") if isinstance(part, dict) else str(part) for part in content
        )
    return str(content)
