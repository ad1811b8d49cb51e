"""Tool registry built on Pydantic v2 models."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict, is_dataclass
from time import perf_counter
from typing import Any

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wazuh_assistant.errors import ToolExecutionError, UnknownToolError
from wazuh_assistant.types import ToolTrace

logger = logging.getLogger(__name__)

ToolHandler = Callable[[BaseModel], Awaitable[Any]]


class ToolSpec(BaseModel):
    """Declarative tool specification for registration and validation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    args_schema: type[BaseModel]
    handler: ToolHandler
    tags: list[str] = Field(default_factory=list)

    async def invoke(self, payload: dict[str, Any]) -> Any:
        data = self.args_schema.model_validate(payload)
        return await self.handler(data)

    def parameters(self) -> dict[str, dict[str, Any]]:
        """Return `{param: {type, description}}` as advertised to the model."""
        schema = self.args_schema.model_json_schema()
        return {
            name: {key: value for key, value in prop.items() if key in {"type", "description", "anyOf"}}
            for name, prop in schema.get("properties", {}).items()
        }


class ToolRegistry:
    """Stores tool specs and exports LangChain-compatible tool objects.

    Registering a name that already exists replaces the earlier spec.
    """

    def __init__(self, *, output_preview_chars: int = 320) -> None:
        self._tools: dict[str, ToolSpec] = {}
        self._observer: Callable[[ToolTrace], None] | None = None
        self._output_preview_chars = output_preview_chars

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            logger.info("[registry:register] replacing tool %s", spec.name)
        self._tools[spec.name] = spec

    def get(self, name: str) -> ToolSpec:
        spec = self._tools.get(name)
        if spec is None:
            raise UnknownToolError(name)
        return spec

    def names(self) -> list[str]:
        return list(self._tools)

    def specs(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    async def execute(
        self,
        name: str,
        payload: dict[str, Any],
        *,
        observer: Callable[[ToolTrace], None] | None = None,
    ) -> Any:
        """Validate `payload` and run the named tool.

        `observer` overrides the registry-wide observer for this call only.
        """
        return await self._execute_spec(self.get(name), payload, observer)

    def as_langchain_tools(self) -> list[StructuredTool]:
        tools: list[StructuredTool] = []
        for spec in self._tools.values():
            tools.append(
                StructuredTool.from_function(
                    name=spec.name,
                    description=spec.description,
                    args_schema=spec.args_schema,
                    coroutine=self._build_coroutine(spec),
                )
            )
        return tools

    def _build_coroutine(self, spec: ToolSpec) -> Callable[..., Awaitable[Any]]:
        async def _callable(**kwargs: Any) -> Any:
            return await self._execute_spec(spec, kwargs)

        return _callable

    async def _execute_spec(
        self,
        spec: ToolSpec,
        payload: dict[str, Any],
        observer: Callable[[ToolTrace], None] | None = None,
    ) -> Any:
        logger.info("[registry:execute] IN  name=%s payload=%r", spec.name, payload)
        start = perf_counter()
        try:
            output = await spec.invoke(payload)
        except ValidationError as exc:
            raise ToolExecutionError(spec.name, f"invalid arguments: {exc}") from exc
        except Exception as exc:
            raise ToolExecutionError(spec.name, str(exc)) from exc
        latency_ms = (perf_counter() - start) * 1000.0
        logger.info("[registry:execute] OUT name=%s latency_ms=%.1f", spec.name, latency_ms)

        observer = observer or self._observer
        if observer is not None:
            observer(
                ToolTrace(
                    name=spec.name,
                    input_payload=payload,
                    output_preview=serialize_tool_output(output)[: self._output_preview_chars],
                    latency_ms=latency_ms,
                )
            )
        return output


def serialize_tool_output(output: Any) -> str:
    """Render a tool result as the JSON text handed back to the model."""
    if isinstance(output, str):
        return output
    if isinstance(output, BaseModel):
        return output.model_dump_json()
    return json.dumps(output, default=_json_default, ensure_ascii=False)


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return str(value)
