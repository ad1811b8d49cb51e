"""Chat message model and conversion to LangChain message objects."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Literal

from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """One message of a conversation as exchanged with API clients."""

    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    tool_call_id: str | None = None
    tool_calls: list[dict[str, Any]] = Field(default_factory=list)


def to_langchain_messages(
    messages: Sequence[ChatMessage | dict[str, Any]],
) -> list[BaseMessage]:
    converted: list[BaseMessage] = []
    for raw in messages:
        message = raw if isinstance(raw, ChatMessage) else ChatMessage.model_validate(raw)
        if message.role == "system":
            converted.append(SystemMessage(content=message.content))
        elif message.role == "user":
            converted.append(HumanMessage(content=message.content))
        elif message.role == "assistant":
            converted.append(
                AIMessage(content=message.content, tool_calls=message.tool_calls)
            )
        else:
            converted.append(
                ToolMessage(content=message.content, tool_call_id=message.tool_call_id or "")
            )
    return converted


def last_user_content(messages: Sequence[ChatMessage | dict[str, Any]]) -> str:
    for raw in reversed(messages):
        message = raw if isinstance(raw, ChatMessage) else ChatMessage.model_validate(raw)
        if message.role == "user":
            return message.content
    return ""


def message_text(message: Any) -> str:
    """Extract plain text from a LangChain message or chunk."""
    if isinstance(message, str):
        return message
    content = getattr(message, "content", "")
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict):
                if item.get("type", "text") == "text" and "text" in item:
                    parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return "".join(parts)
    return str(content or "")
