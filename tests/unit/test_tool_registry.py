import pytest
from pydantic import BaseModel, Field

from wazuh_assistant.agent.registry import ToolRegistry, ToolSpec, serialize_tool_output
from wazuh_assistant.errors import ToolExecutionError, UnknownToolError
from wazuh_assistant.types import QueryResult


class EchoInput(BaseModel):
    value: int = Field(ge=1)


async def _echo(data: EchoInput) -> str:
    return str(data.value)


async def _double(data: EchoInput) -> str:
    return str(data.value * 2)


def _spec(handler=_echo, description: str = "echo positive int") -> ToolSpec:
    return ToolSpec(
        name="echo",
        description=description,
        args_schema=EchoInput,
        handler=handler,
    )


@pytest.mark.asyncio
async def test_tool_registry_validation() -> None:
    registry = ToolRegistry()
    registry.register(_spec())

    assert await registry.execute("echo", {"value": 3}) == "3"

    with pytest.raises(ToolExecutionError) as excinfo:
        await registry.execute("echo", {"value": 0})
    assert excinfo.value.name == "echo"


@pytest.mark.asyncio
async def test_duplicate_tool_registration_replaces_earlier_spec() -> None:
    registry = ToolRegistry()
    registry.register(_spec())
    registry.register(_spec(handler=_double, description="double"))

    assert len(registry) == 1
    assert registry.get("echo").description == "double"
    assert await registry.execute("echo", {"value": 4}) == "8"


@pytest.mark.asyncio
async def test_unknown_tool_raises() -> None:
    registry = ToolRegistry()

    assert "missing" not in registry
    with pytest.raises(UnknownToolError, match="Unknown tool: missing"):
        await registry.execute("missing", {})


@pytest.mark.asyncio
async def test_handler_failure_is_wrapped() -> None:
    async def _boom(data: EchoInput) -> str:
        raise RuntimeError("backend down")

    registry = ToolRegistry()
    registry.register(_spec(handler=_boom))

    with pytest.raises(ToolExecutionError, match="backend down"):
        await registry.execute("echo", {"value": 1})


def test_langchain_export_and_parameters() -> None:
    registry = ToolRegistry()
    registry.register(_spec())

    tools = registry.as_langchain_tools()

    assert [tool.name for tool in tools] == ["echo"]
    assert tools[0].description == "echo positive int"
    assert registry.get("echo").parameters() == {"value": {"type": "integer"}}


def test_serialize_tool_output() -> None:
    assert serialize_tool_output("plain") == "plain"
    assert serialize_tool_output({"data": {"affected_items": []}}) == '{"data": {"affected_items": []}}'
    assert serialize_tool_output(
        QueryResult(data=[], summary="Found 0 offline agents", insights=[])
    ) == '{"data": [], "summary": "Found 0 offline agents", "insights": []}'
