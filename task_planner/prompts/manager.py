"""
=============================================================================
Prompt Manager - Prompty-based Prompt Construction
=============================================================================

Loads the .prompty templates shipped next to this module and hydrates them
into chat messages for the LLM client.

TEMPLATES:
----------
- router.prompty      - JSON array of agents to invoke
- extractor.prompty   - HTML table to CSV rows
- summarizer.prompty  - final narrative over all agent reports
=============================================================================
"""

import logging
from functools import lru_cache
from pathlib import Path

import prompty

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent.absolute()

# A hydrated chat prompt: (role, content) pairs accepted by LangChain chat models
ChatMessages = list[tuple[str, str]]


class PromptNotFoundError(FileNotFoundError):
    pass


class PromptManager:
    """Loads and hydrates .prompty templates from a directory."""

    def __init__(self, prompts_dir: Path | str = PROMPTS_DIR):
        self._prompts_dir = Path(prompts_dir)
        self._loaded: dict[str, object] = {}

    def _get_prompty(self, name: str):
        """Load and cache a .prompty file."""
        if name in self._loaded:
            return self._loaded[name]

        prompty_path = self._prompts_dir / f"{name}.prompty"
        if not prompty_path.exists():
            raise PromptNotFoundError(f"Prompty file not found: {prompty_path}")

        logger.debug(f"[PROMPT] Loading {prompty_path}")
        self._loaded[name] = prompty.load(str(prompty_path))
        return self._loaded[name]

    def build(self, name: str, **inputs: str) -> ChatMessages:
        """Hydrate a template into chat messages."""
        p = self._get_prompty(name)
        prepared = prompty.prepare(p, inputs)
        return self._to_messages(prepared)

    @staticmethod
    def _normalize(text: str) -> str:
        """Strip BOM and trailing whitespace, use Unix line endings."""
        if not text:
            return ""

        if text.startswith("\ufeff"):
            text = text[1:]

        lines = [line.rstrip() for line in text.splitlines()]
        return "\n".join(lines).strip()

    @classmethod
    def _to_messages(cls, prepared) -> ChatMessages:
        # Depending on the prompty configuration this is a string or a list of messages
        if isinstance(prepared, str):
            return [("user", cls._normalize(prepared))]

        messages: ChatMessages = []
        for msg in prepared:
            role = str(msg.get("role", "user")).lower()
            content = msg.get("content", "")
            if not isinstance(content, str):
                content = str(content)
            content = cls._normalize(content)
            if content:
                messages.append((role, content))
        return messages


@lru_cache
def get_prompt_manager() -> PromptManager:
    return PromptManager()
