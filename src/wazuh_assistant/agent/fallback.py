"""Deterministic responder used when no LLM backend is configured."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any

from wazuh_assistant.agent.messages import ChatMessage, last_user_content
from wazuh_assistant.agent.orchestrator import STREAM_ERROR_MESSAGE
from wazuh_assistant.agent.registry import ToolRegistry
from wazuh_assistant.obs.tracing import Timer, TraceStore
from wazuh_assistant.types import QueryResult, ToolTrace

logger = logging.getLogger(__name__)

NO_EVIDENCE_ANSWER = (
    "I could not find relevant documentation for that question. Configure an LLM "
    "backend (OPENAI_API_KEY, or LLM_PROVIDER=ollama) to query live Wazuh data."
)


class DeterministicResponder:
    """Answers from the documentation store without calling a language model.

    It keeps the same `chat`/`chat_stream` contract as
    `ConversationOrchestrator` and is useful for local/offline environments. The
    latest user message is looked up with `search_security_knowledge` and the
    matching documentation is returned verbatim.
    """

    def __init__(
        self,
        *,
        tool_registry: ToolRegistry,
        trace_store: TraceStore | None = None,
    ) -> None:
        self.tool_registry = tool_registry
        self.trace_store = trace_store or TraceStore()

    async def chat(self, messages: Sequence[ChatMessage | dict[str, Any]]) -> str:
        question = last_user_content(messages).strip()
        observed_tools: list[ToolTrace] = []

        with Timer() as timer:
            if question:
                result = await self.tool_registry.execute(
                    "search_security_knowledge",
                    {"query": question},
                    observer=observed_tools.append,
                )
                answer = _build_answer(result)
            else:
                answer = NO_EVIDENCE_ANSWER

        self.trace_store.create_record(
            question=question,
            answer=answer,
            tool_traces=observed_tools,
            model_calls=0,
            latency_ms=timer.elapsed_ms,
        )
        return answer

    async def chat_stream(
        self, messages: Sequence[ChatMessage | dict[str, Any]]
    ) -> AsyncIterator[str]:
        try:
            answer = await self.chat(messages)
        except Exception:
            logger.exception("[fallback:chat_stream] lookup failed")
            answer = STREAM_ERROR_MESSAGE
        yield answer


def _build_answer(result: QueryResult) -> str:
    context = result.data.get("context", "") if isinstance(result.data, dict) else ""
    if not context:
        return NO_EVIDENCE_ANSWER
    return f"Here is what the security documentation says:\n\n{context}"
