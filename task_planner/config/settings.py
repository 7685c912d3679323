"""
=============================================================================
Configuration Settings Module
=============================================================================

Pydantic-based settings management with environment variable support.
All configuration is loaded from .env file or environment variables.

STORE NOTE:
-----------
STORE_PATH points at the CSV table that every agent merges into. The file
is created on first write and survives across workflow runs.
=============================================================================
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env into os.environ for libraries like 'prompty' that read from env vars
load_dotenv()


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # LLM Endpoint (OpenAI-compatible)
    # -------------------------------------------------------------------------
    # Used for routing, HTML extraction and summarization. When disabled the
    # workflow runs entirely on its deterministic fallbacks.
    llm_enabled: bool = True
    llm_base_url: str = "https://api.openai.com/v1"
    llm_api_key: str = ""
    llm_model: str = "gpt-4o"
    llm_temperature: float = 0.0
    llm_max_tokens: int = 2048

    # -------------------------------------------------------------------------
    # Langfuse Observability
    # -------------------------------------------------------------------------
    # Tracing is attached to LLM calls only when both keys are configured.
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://us.cloud.langfuse.com"

    # -------------------------------------------------------------------------
    # Document Sources
    # -------------------------------------------------------------------------
    # Optional URL templates with an {app_id} placeholder. When unset the
    # built-in HTML fixtures are used for that agent.
    compliance_source_url: str = ""
    issue_source_url: str = ""
    scan_source_url: str = ""
    fetch_timeout_seconds: float = 30.0

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    log_level: str = "INFO"
    default_app_id: str = "APP-001"

    # Durable task table shared by all agents
    store_path: str = "task_items.csv"

    @property
    def store_full_path(self) -> Path:
        """Get the full path to the task item table."""
        return Path(self.store_path)

    @property
    def llm_configured(self) -> bool:
        return self.llm_enabled and bool(self.llm_api_key)

    @property
    def langfuse_configured(self) -> bool:
        return bool(self.langfuse_public_key and self.langfuse_secret_key)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
