import pytest
from langchain_core.messages import AIMessage, SystemMessage, ToolMessage

from wazuh_assistant.agent.fallback import NO_EVIDENCE_ANSWER, DeterministicResponder
from wazuh_assistant.agent.orchestrator import (
    STREAM_ERROR_MESSAGE,
    SYSTEM_PROMPT,
    ConversationOrchestrator,
)
from wazuh_assistant.agent.queries import SecurityQueries
from wazuh_assistant.agent.registry import ToolRegistry
from wazuh_assistant.agent.tools import register_builtin_tools
from wazuh_assistant.config import AgentConfig
from wazuh_assistant.errors import (
    LLMBackendError,
    ToolExecutionError,
    ToolLoopLimitError,
    UnknownToolError,
)
from wazuh_assistant.obs.tracing import TraceStore
from wazuh_assistant.retrieval.knowledge import seed_default_documents
from wazuh_assistant.retrieval.vector_store import InMemoryDocumentStore

from fakes import FakeWazuhClient, ScriptedChatModel, tool_call


def _registry(client=None) -> ToolRegistry:
    store = InMemoryDocumentStore()
    seed_default_documents(store)
    registry = ToolRegistry()
    register_builtin_tools(registry, client, SecurityQueries(client, store))
    return registry


def _orchestrator(llm, client=None, **config) -> ConversationOrchestrator:
    return ConversationOrchestrator(
        llm=llm,
        tool_registry=_registry(client),
        trace_store=TraceStore(),
        config=AgentConfig(**config),
    )


def _conversation(text: str) -> list[dict[str, str]]:
    return [{"role": "system", "content": SYSTEM_PROMPT}, {"role": "user", "content": text}]


@pytest.mark.asyncio
async def test_plain_answer_passes_through() -> None:
    llm = ScriptedChatModel([AIMessage(content="Hello, how can I help?")])
    orchestrator = _orchestrator(llm)

    answer = await orchestrator.chat(_conversation("hi"))

    assert answer == "Hello, how can I help?"
    assert len(llm.calls) == 1
    assert isinstance(llm.calls[0][0], SystemMessage)
    assert "get_agent_summary" in llm.bound_tools
    assert len(llm.bound_tools) == 9
    record = orchestrator.trace_store.list_recent()[-1]
    assert record.model_calls == 1
    assert record.tool_traces == []


@pytest.mark.asyncio
async def test_tool_call_result_is_fed_back_once() -> None:
    client = FakeWazuhClient(agents=[{"id": "000", "status": "active"}, {"id": "001", "status": "active"}])
    llm = ScriptedChatModel(
        [
            AIMessage(content="", tool_calls=[tool_call("get_agent_summary")]),
            AIMessage(content="You have 2 active agents."),
        ]
    )
    orchestrator = _orchestrator(llm, client)

    answer = await orchestrator.chat(_conversation("How many agents are active?"))

    assert answer == "You have 2 active agents."
    assert len(llm.calls) == 2
    *_, assistant_turn, tool_turn = llm.calls[1]
    assert isinstance(assistant_turn, AIMessage)
    assert [call["name"] for call in assistant_turn.tool_calls] == ["get_agent_summary"]
    assert isinstance(tool_turn, ToolMessage)
    assert tool_turn.tool_call_id == "call_1"
    assert '"summary": "Total agents: 2"' in tool_turn.content
    record = orchestrator.trace_store.list_recent()[-1]
    assert [trace.name for trace in record.tool_traces] == ["get_agent_summary"]
    assert record.model_calls == 2


@pytest.mark.asyncio
async def test_only_first_requested_tool_runs() -> None:
    llm = ScriptedChatModel(
        [
            AIMessage(
                content="",
                tool_calls=[
                    tool_call("search_security_knowledge", {"query": "alert levels"}, "call_a"),
                    tool_call("get_agent_summary", {}, "call_b"),
                ],
            ),
            AIMessage(content="Levels range from 0 to 15."),
        ]
    )
    orchestrator = _orchestrator(llm)

    await orchestrator.chat(_conversation("What do alert levels mean?"))

    *_, assistant_turn, tool_turn = llm.calls[1]
    assert [call["id"] for call in assistant_turn.tool_calls] == ["call_a"]
    assert tool_turn.tool_call_id == "call_a"
    record = orchestrator.trace_store.list_recent()[-1]
    assert [trace.name for trace in record.tool_traces] == ["search_security_knowledge"]


@pytest.mark.asyncio
async def test_unknown_tool_fails_the_turn() -> None:
    llm = ScriptedChatModel([AIMessage(content="", tool_calls=[tool_call("delete_agents")])])
    orchestrator = _orchestrator(llm)

    with pytest.raises(UnknownToolError):
        await orchestrator.chat(_conversation("wipe everything"))

    assert len(llm.calls) == 1
    assert orchestrator.trace_store.list_recent()[-1].error == "Unknown tool: delete_agents"


@pytest.mark.asyncio
async def test_unparseable_tool_arguments_fail_the_turn() -> None:
    llm = ScriptedChatModel(
        [
            AIMessage(
                content="",
                invalid_tool_calls=[
                    {
                        "name": "get_alerts",
                        "args": "{not json",
                        "id": "call_1",
                        "error": "Function get_alerts arguments are not valid JSON",
                    }
                ],
            )
        ]
    )
    orchestrator = _orchestrator(llm)

    with pytest.raises(ToolExecutionError, match="get_alerts") as excinfo:
        await orchestrator.chat(_conversation("show me alerts"))

    assert excinfo.value.name == "get_alerts"
    assert len(llm.calls) == 1
    record = orchestrator.trace_store.list_recent()[-1]
    assert record.answer == ""
    assert "not valid JSON" in record.error


@pytest.mark.asyncio
async def test_tool_failure_aborts_the_turn() -> None:
    llm = ScriptedChatModel(
        [
            AIMessage(content="", tool_calls=[tool_call("get_agents", {"status": "active"})]),
            AIMessage(content="never reached"),
        ]
    )
    orchestrator = _orchestrator(llm)

    with pytest.raises(ToolExecutionError, match="Wazuh environment variables are not configured"):
        await orchestrator.chat(_conversation("list active agents"))

    assert len(llm.calls) == 1
    assert len(llm.responses) == 1
    record = orchestrator.trace_store.list_recent()[-1]
    assert record.model_calls == 1
    assert record.error.startswith("Tool 'get_agents' failed")


@pytest.mark.asyncio
async def test_tool_loop_is_bounded() -> None:
    llm = ScriptedChatModel(
        [
            AIMessage(content="", tool_calls=[tool_call("get_agent_summary", call_id=f"call_{i}")])
            for i in range(10)
        ]
    )
    orchestrator = _orchestrator(llm, FakeWazuhClient(), max_iterations=3)

    with pytest.raises(ToolLoopLimitError):
        await orchestrator.chat(_conversation("loop forever"))

    assert len(llm.calls) == 3


@pytest.mark.asyncio
async def test_backend_failure_is_reported() -> None:
    llm = ScriptedChatModel([ConnectionError("model server unreachable")])
    orchestrator = _orchestrator(llm)

    with pytest.raises(LLMBackendError, match="Failed to get response from LLM service"):
        await orchestrator.chat(_conversation("hi"))

    assert orchestrator.trace_store.summary()["failed_requests"] == 1


@pytest.mark.asyncio
async def test_stream_yields_non_empty_chunks() -> None:
    llm = ScriptedChatModel(stream_chunks=["Two ", "", "agents ", "offline."])
    orchestrator = _orchestrator(llm)

    chunks = [chunk async for chunk in orchestrator.chat_stream(_conversation("offline?"))]

    assert chunks == ["Two ", "agents ", "offline."]


@pytest.mark.asyncio
async def test_non_streaming_backend_yields_single_chunk() -> None:
    llm = ScriptedChatModel(stream_chunks=["Two agents are offline: web-01 and db-02."])
    orchestrator = _orchestrator(llm)

    chunks = [chunk async for chunk in orchestrator.chat_stream(_conversation("offline?"))]

    assert chunks == ["Two agents are offline: web-01 and db-02."]


@pytest.mark.asyncio
async def test_stream_failure_ends_with_apology() -> None:
    llm = ScriptedChatModel(stream_chunks=["Partial", RuntimeError("connection reset")])
    orchestrator = _orchestrator(llm)

    chunks = [chunk async for chunk in orchestrator.chat_stream(_conversation("status?"))]

    assert chunks == ["Partial", STREAM_ERROR_MESSAGE]


@pytest.mark.asyncio
async def test_deterministic_responder_answers_from_documentation() -> None:
    responder = DeterministicResponder(tool_registry=_registry(), trace_store=TraceStore())

    answer = await responder.chat(_conversation("alert severity levels"))
    empty = await responder.chat([{"role": "user", "content": "   "}])
    streamed = [chunk async for chunk in responder.chat_stream(_conversation("alert severity levels"))]

    assert answer.startswith("Here is what the security documentation says:")
    assert "Wazuh alert levels range from 0-15" in answer
    assert empty == NO_EVIDENCE_ANSWER
    assert streamed == [answer]
    record = responder.trace_store.list_recent()[0]
    assert record.model_calls == 0
    assert [trace.name for trace in record.tool_traces] == ["search_security_knowledge"]
