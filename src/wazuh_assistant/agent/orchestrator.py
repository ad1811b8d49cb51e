"""Tool-calling conversation loop over a LangChain chat model."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, ToolMessage

from wazuh_assistant.agent.messages import (
    ChatMessage,
    last_user_content,
    message_text,
    to_langchain_messages,
)
from wazuh_assistant.agent.registry import ToolRegistry, ToolSpec, serialize_tool_output
from wazuh_assistant.config import AgentConfig
from wazuh_assistant.errors import (
    AssistantError,
    LLMBackendError,
    ToolExecutionError,
    ToolLoopLimitError,
)
from wazuh_assistant.obs.tracing import Timer, TraceStore
from wazuh_assistant.types import ToolTrace

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful cybersecurity assistant integrated with Wazuh SIEM. You have access "
    "to security alerts, agent status, and vulnerability data. Use the available tools to "
    "gather information and provide clear, actionable insights. Always be concise but "
    "informative in your responses. When providing summaries, include key statistics and "
    "actionable recommendations."
)

STREAM_ERROR_MESSAGE = "Sorry, I encountered an error while processing your request."


@dataclass(slots=True)
class _TurnState:
    model_calls: int = 0
    tool_traces: list[ToolTrace] = field(default_factory=list)


class ConversationOrchestrator:
    """Drives one user turn through the model, running at most one tool per step.

    Each step sends the full history plus the tool catalog to the model. When the
    model asks for tools, the first requested call is executed, the call and its
    JSON result are appended to the history, and the model is asked again. The
    first response without a tool request ends the turn. A turn may not use
    more than `AgentConfig.max_iterations` model calls.
    """

    def __init__(
        self,
        *,
        llm: Any,
        tool_registry: ToolRegistry,
        trace_store: TraceStore | None = None,
        config: AgentConfig | None = None,
    ) -> None:
        self.llm = llm
        self.tool_registry = tool_registry
        self.trace_store = trace_store or TraceStore()
        self.config = config or AgentConfig()

    def register_tool(self, spec: ToolSpec) -> None:
        self.tool_registry.register(spec)

    async def chat(self, messages: Sequence[ChatMessage | dict[str, Any]]) -> str:
        """Run one full turn and return the model's final text answer.

        Raises:
            UnknownToolError: the model asked for a tool that is not registered.
            ToolExecutionError: a tool rejected its arguments or failed.
            ToolLoopLimitError: the model kept requesting tools.
            LLMBackendError: the model backend failed.
        """

        question = last_user_content(messages)
        history = to_langchain_messages(messages)
        state = _TurnState()
        timer = Timer()
        logger.info("[orchestrator:chat] IN  messages=%d question=%r", len(history), question[:200])

        try:
            with timer:
                answer = await self._run(history, state)
        except AssistantError as exc:
            self._record(question, "", state, timer, error=str(exc))
            logger.warning("[orchestrator:chat] failed after %d model calls: %s", state.model_calls, exc)
            raise

        self._record(question, answer, state, timer)
        logger.info(
            "[orchestrator:chat] OUT model_calls=%d tools=%s answer_len=%d",
            state.model_calls,
            [trace.name for trace in state.tool_traces],
            len(answer),
        )
        return answer

    async def chat_stream(
        self, messages: Sequence[ChatMessage | dict[str, Any]]
    ) -> AsyncIterator[str]:
        """Yield text deltas of the model's answer.

        Backends without native streaming produce the whole answer as one chunk.
        Errors never escape the stream: they end it with `STREAM_ERROR_MESSAGE`.
        """

        try:
            history = to_langchain_messages(messages)
            async for chunk in self.llm.astream(history):
                text = message_text(chunk)
                if text:
                    yield text
        except Exception:
            logger.exception("[orchestrator:chat_stream] streaming failed")
            yield STREAM_ERROR_MESSAGE

    async def _run(self, history: list[BaseMessage], state: _TurnState) -> str:
        tools = self.tool_registry.as_langchain_tools()
        model = self.llm.bind_tools(tools) if tools else self.llm

        for step in range(self.config.max_iterations):
            response = await self._invoke_model(model, history)
            state.model_calls += 1

            tool_calls = getattr(response, "tool_calls", None) or []
            if not tool_calls:
                invalid_calls = getattr(response, "invalid_tool_calls", None) or []
                if invalid_calls:
                    bad_call = invalid_calls[0]
                    raise ToolExecutionError(
                        bad_call.get("name") or "unknown",
                        f"unparseable arguments: {bad_call.get('error') or bad_call.get('args')}",
                    )
                return message_text(response)

            call = tool_calls[0]
            name = call["name"]
            args = call.get("args") or {}
            call_id = call.get("id") or f"call_{step}"
            if len(tool_calls) > 1:
                logger.info(
                    "[orchestrator:run] model requested %d tools; running only %s",
                    len(tool_calls),
                    name,
                )

            result = await self.tool_registry.execute(
                name, args, observer=state.tool_traces.append
            )
            history.append(
                AIMessage(
                    content=response.content,
                    tool_calls=[{"name": name, "args": args, "id": call_id}],
                )
            )
            history.append(
                ToolMessage(content=serialize_tool_output(result), tool_call_id=call_id)
            )

        raise ToolLoopLimitError(self.config.max_iterations)

    async def _invoke_model(self, model: Any, history: list[BaseMessage]) -> Any:
        try:
            return await model.ainvoke(history)
        except Exception as exc:
            logger.exception("[orchestrator:invoke_model] backend call failed")
            raise LLMBackendError("Failed to get response from LLM service") from exc

    def _record(
        self,
        question: str,
        answer: str,
        state: _TurnState,
        timer: Timer,
        *,
        error: str | None = None,
    ) -> None:
        self.trace_store.create_record(
            question=question,
            answer=answer,
            tool_traces=state.tool_traces,
            model_calls=state.model_calls,
            latency_ms=timer.elapsed_ms,
            error=error,
        )
