"""Configuration models for the Wazuh assistant."""

from __future__ import annotations

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class RetrievalConfig(BaseModel):
    """Configures lexical retrieval over the documentation store."""

    search_limit: int = Field(default=5, ge=1)
    context_limit: int = Field(default=3, ge=1)
    knowledge_limit: int = Field(default=2, ge=1)
    docs_dir: str | None = None


class AgentConfig(BaseModel):
    """Configures the tool-calling loop."""

    max_iterations: int = Field(default=5, ge=1)
    tool_output_preview_chars: int = Field(default=320, ge=16)


class LLMConfig(BaseModel):
    """Selects and configures the chat model backend."""

    provider: Literal["openai", "ollama"] = "openai"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama2"
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)

    @property
    def configured(self) -> bool:
        if self.provider == "openai":
            return bool(self.openai_api_key)
        return bool(self.ollama_base_url)


class MonitoringConfig(BaseModel):
    """Connection settings for the Wazuh REST API."""

    base_url: str | None = None
    user: str | None = None
    password: str | None = None
    verify_ssl: bool = True
    timeout_seconds: float = Field(default=30.0, gt=0.0)

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.user and self.password)


class StorageConfig(BaseModel):
    """Location of the SQLite audit/chat-history database."""

    database_path: str = "sqlite.db"


class Settings(BaseModel):
    """Top-level settings bundle handed to the application factory."""

    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    log_level: str = "INFO"


def _env(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def load_settings() -> Settings:
    """Build settings from the process environment (and a `.env` file if present)."""

    load_dotenv()

    retrieval = RetrievalConfig(docs_dir=_env("KNOWLEDGE_DOCS_DIR"))
    agent = AgentConfig(max_iterations=int(_env("AGENT_MAX_ITERATIONS") or 5))
    llm = LLMConfig(
        provider=(_env("LLM_PROVIDER") or "openai").lower(),
        openai_api_key=_env("OPENAI_API_KEY"),
        openai_model=_env("OPENAI_MODEL") or "gpt-4o-mini",
        ollama_base_url=_env("OLLAMA_BASE_URL") or "http://localhost:11434",
        ollama_model=_env("OLLAMA_MODEL") or "llama2",
    )
    monitoring = MonitoringConfig(
        base_url=_env("WAZUH_API_BASE_URL"),
        user=_env("WAZUH_API_USER"),
        password=_env("WAZUH_API_PASS"),
        verify_ssl=_env_bool("WAZUH_VERIFY_SSL", True),
        timeout_seconds=float(_env("WAZUH_TIMEOUT_SECONDS") or 30.0),
    )
    storage = StorageConfig(database_path=_env("DATABASE_URL") or "sqlite.db")

    return Settings(
        retrieval=retrieval,
        agent=agent,
        llm=llm,
        monitoring=monitoring,
        storage=storage,
        log_level=(_env("LOG_LEVEL") or "INFO").upper(),
    )
