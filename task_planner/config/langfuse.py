"""
=============================================================================
Langfuse Observability Configuration
=============================================================================

Langfuse v3 integration for LangChain observability.

IMPORTANT: Langfuse CallbackHandler reads credentials from environment variables:
- LANGFUSE_PUBLIC_KEY
- LANGFUSE_SECRET_KEY
- LANGFUSE_BASE_URL (standardized from settings)

When the keys are not configured no handler is created and LLM calls run
untraced; the @observe decorators on graph nodes become no-ops.
=============================================================================
"""

import logging
import os

from langfuse import observe, propagate_attributes
from langfuse.langchain import CallbackHandler

from task_planner.config.settings import get_settings

logger = logging.getLogger(__name__)


def _ensure_langfuse_env_vars():
    """
    Ensure Langfuse environment variables are set from settings.

    The Langfuse CallbackHandler reads from env vars directly,
    so we need to set them before creating handlers.
    """
    settings = get_settings()

    if settings.langfuse_public_key and not os.environ.get("LANGFUSE_PUBLIC_KEY"):
        os.environ["LANGFUSE_PUBLIC_KEY"] = settings.langfuse_public_key

    if settings.langfuse_secret_key and not os.environ.get("LANGFUSE_SECRET_KEY"):
        os.environ["LANGFUSE_SECRET_KEY"] = settings.langfuse_secret_key

    if settings.langfuse_base_url and not os.environ.get("LANGFUSE_BASE_URL"):
        os.environ["LANGFUSE_BASE_URL"] = settings.langfuse_base_url
        os.environ["LANGFUSE_HOST"] = settings.langfuse_base_url


def get_langfuse_handler() -> CallbackHandler | None:
    """
    Create a Langfuse callback handler for LangChain.

    Returns None when credentials are missing so callers can skip the
    callbacks list entirely.
    """
    settings = get_settings()

    if not settings.langfuse_configured:
        logger.debug("[LANGFUSE] Credentials not set, tracing disabled")
        return None

    _ensure_langfuse_env_vars()
    return CallbackHandler()


def get_callbacks() -> list[CallbackHandler]:
    """Callbacks list for a LangChain invoke() config."""
    handler = get_langfuse_handler()
    return [handler] if handler is not None else []


__all__ = [
    "get_callbacks",
    "get_langfuse_handler",
    "observe",
    "propagate_attributes",
]
