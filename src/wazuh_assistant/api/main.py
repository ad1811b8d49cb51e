"""FastAPI entrypoint for chat, Wazuh proxy, knowledge and trace endpoints."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from wazuh_assistant.agent.fallback import DeterministicResponder
from wazuh_assistant.agent.messages import ChatMessage
from wazuh_assistant.agent.orchestrator import SYSTEM_PROMPT, ConversationOrchestrator
from wazuh_assistant.agent.queries import SecurityQueries
from wazuh_assistant.agent.registry import ToolRegistry
from wazuh_assistant.agent.tools import register_builtin_tools
from wazuh_assistant.config import LLMConfig, Settings, load_settings
from wazuh_assistant.errors import MonitoringAPIError
from wazuh_assistant.ingest.parser import ParserRegistry
from wazuh_assistant.ingest.pipeline import IngestPipeline
from wazuh_assistant.monitoring.client import WazuhClient, require_client
from wazuh_assistant.obs.tracing import TraceStore
from wazuh_assistant.retrieval.knowledge import seed_default_documents
from wazuh_assistant.retrieval.vector_store import InMemoryDocumentStore
from wazuh_assistant.storage.audit import AuditStore

logger = logging.getLogger(__name__)


def create_llm(config: LLMConfig) -> Any:
    if config.provider == "openai":
        if not config.openai_api_key:
            return None

        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=config.openai_model,
            temperature=config.temperature,
            api_key=config.openai_api_key,
        )

    from langchain_ollama import ChatOllama

    return ChatOllama(
        model=config.ollama_model,
        base_url=config.ollama_base_url,
        temperature=config.temperature,
    )


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage] = Field(default_factory=list)
    session_id: str | None = Field(default=None, alias="sessionId")


@dataclass(slots=True)
class AppContext:
    """Everything one application instance owns; built once per `create_app`."""

    settings: Settings
    store: InMemoryDocumentStore
    client: WazuhClient | None
    queries: SecurityQueries
    registry: ToolRegistry
    trace_store: TraceStore
    audit_store: AuditStore
    assistant: ConversationOrchestrator | DeterministicResponder
    llm: Any
    owns_client: bool


def build_context(
    settings: Settings,
    *,
    llm: Any | None = None,
    client: WazuhClient | None = None,
) -> AppContext:
    store = InMemoryDocumentStore()
    seed_default_documents(store)
    if settings.retrieval.docs_dir:
        IngestPipeline(ParserRegistry(), store).ingest_directory(settings.retrieval.docs_dir)

    owns_client = client is None
    if client is None and settings.monitoring.configured:
        client = WazuhClient(settings.monitoring)
    if client is None:
        logger.warning("[api] Wazuh API is not configured; monitoring tools will fail")

    queries = SecurityQueries(client, store, knowledge_limit=settings.retrieval.knowledge_limit)
    registry = ToolRegistry(output_preview_chars=settings.agent.tool_output_preview_chars)
    register_builtin_tools(registry, client, queries)

    trace_store = TraceStore()
    llm = llm if llm is not None else create_llm(settings.llm)
    assistant: ConversationOrchestrator | DeterministicResponder = (
        ConversationOrchestrator(
            llm=llm,
            tool_registry=registry,
            trace_store=trace_store,
            config=settings.agent,
        )
        if llm is not None
        else DeterministicResponder(tool_registry=registry, trace_store=trace_store)
    )
    logger.info(
        "[api] context ready documents=%d tools=%d mode=%s",
        len(store),
        len(registry),
        "llm" if llm is not None else "deterministic",
    )

    return AppContext(
        settings=settings,
        store=store,
        client=client,
        queries=queries,
        registry=registry,
        trace_store=trace_store,
        audit_store=AuditStore(settings.storage.database_path),
        assistant=assistant,
        llm=llm,
        owns_client=owns_client,
    )


def create_app(
    settings: Settings | None = None,
    *,
    llm: Any | None = None,
    client: WazuhClient | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)
    ctx = build_context(settings, llm=llm, client=client)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        if ctx.client is not None and ctx.owns_client:
            await ctx.client.aclose()

    app = FastAPI(title="Wazuh Security Assistant", version="0.1.0", lifespan=lifespan)
    app.state.context = ctx

    def _audit(request: Request, action: str, resource: str) -> None:
        forwarded = request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip")
        client_ip = forwarded or (request.client.host if request.client else "unknown")
        try:
            ctx.audit_store.insert_audit_log(
                user_id="anonymous",
                action=action,
                resource=resource,
                details={"method": request.method, "url": str(request.url)},
                ip_address=client_ip,
            )
        except sqlite3.Error as exc:
            logger.warning("[api:audit] failed to write audit log: %s", exc)

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "llm_configured": ctx.llm is not None,
            "assistant_mode": "llm" if ctx.llm is not None else "deterministic",
            "monitoring_configured": ctx.client is not None,
            "documents": len(ctx.store),
            "tools": ctx.registry.names(),
        }

    @app.get("/api/tools")
    def list_tools() -> dict[str, Any]:
        return {
            "items": [
                {
                    "name": spec.name,
                    "description": spec.description,
                    "parameters": spec.parameters(),
                    "tags": spec.tags,
                }
                for spec in ctx.registry.specs()
            ]
        }

    @app.get("/api/tools/alerts")
    async def get_alerts(
        request: Request,
        limit: int = 20,
        offset: int = 0,
        level: str | None = None,
        time: str | None = None,
        search: str | None = None,
    ) -> dict[str, Any]:
        _audit(request, "read", "alerts")
        try:
            return await require_client(ctx.client).get_alerts(
                limit=limit, offset=offset, level=level, time=time, search=search
            )
        except MonitoringAPIError as exc:
            logger.error("[api:get_alerts] %s", exc)
            raise HTTPException(status_code=500, detail="Failed to fetch alerts") from exc

    @app.get("/api/tools/agents")
    async def get_agents(
        request: Request,
        limit: int = 20,
        offset: int = 0,
        status: str | None = None,
        search: str | None = None,
    ) -> dict[str, Any]:
        _audit(request, "read", "agents")
        try:
            return await require_client(ctx.client).get_agents(
                limit=limit, offset=offset, status=status, search=search
            )
        except MonitoringAPIError as exc:
            logger.error("[api:get_agents] %s", exc)
            raise HTTPException(status_code=500, detail="Failed to fetch agents") from exc

    @app.post("/api/chat")
    async def chat(body: ChatRequest, request: Request) -> dict[str, str]:
        _audit(request, "chat", "assistant")
        full_messages = [ChatMessage(role="system", content=SYSTEM_PROMPT), *body.messages]
        try:
            response = await ctx.assistant.chat(full_messages)
        except Exception as exc:
            logger.exception("[api:chat] failed")
            raise HTTPException(status_code=500, detail="Failed to process chat request") from exc

        if body.session_id and body.messages and body.messages[-1].role == "user":
            try:
                ctx.audit_store.insert_chat_history(
                    session_id=body.session_id,
                    user_message=body.messages[-1].content,
                    assistant_message=response,
                )
            except sqlite3.Error as exc:
                logger.warning("[api:chat] failed to store chat history: %s", exc)
        return {"response": response}

    @app.post("/api/chat/stream")
    def chat_stream(body: ChatRequest, request: Request) -> StreamingResponse:
        _audit(request, "chat_stream", "assistant")
        full_messages = [ChatMessage(role="system", content=SYSTEM_PROMPT), *body.messages]
        return StreamingResponse(
            ctx.assistant.chat_stream(full_messages),
            media_type="text/plain; charset=utf-8",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )

    @app.get("/api/chat/history/{session_id}")
    def chat_history(session_id: str, limit: int = 50) -> dict[str, Any]:
        return {"items": ctx.audit_store.get_chat_history(session_id, limit=limit)}

    @app.get("/api/knowledge/search")
    def knowledge_search(q: str, limit: int = 5) -> dict[str, Any]:
        results = ctx.store.search(q, limit)
        return {
            "items": [
                {
                    "id": doc.id,
                    "score": score,
                    "content": doc.content,
                    "metadata": doc.metadata,
                }
                for doc, score in zip(results.documents, results.scores, strict=True)
            ]
        }

    @app.get("/api/audit")
    def audit_logs(limit: int = 100) -> dict[str, Any]:
        return {"items": ctx.audit_store.get_audit_logs(limit=limit)}

    @app.get("/traces")
    def traces(limit: int = 20) -> dict[str, Any]:
        return {"items": [asdict(record) for record in ctx.trace_store.list_recent(limit=limit)]}

    @app.get("/traces/{trace_id}")
    def trace_detail(trace_id: str) -> dict[str, Any]:
        try:
            record = ctx.trace_store.get(trace_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return asdict(record)

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return ctx.trace_store.summary()

    return app
