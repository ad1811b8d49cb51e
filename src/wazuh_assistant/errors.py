"""Application errors shared by the agent, monitoring and API layers."""

from __future__ import annotations


class AssistantError(Exception):
    """Base class for errors raised by the assistant core."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnknownToolError(AssistantError):
    """Raised when the model requests a tool that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolExecutionError(AssistantError):
    """Raised when a registered tool rejects its arguments or fails while running."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"Tool {name!r} failed: {message}")


class ToolLoopLimitError(AssistantError):
    """Raised when the model keeps requesting tools past the iteration limit."""

    def __init__(self, max_iterations: int) -> None:
        self.max_iterations = max_iterations
        super().__init__(
            f"Model requested tools for more than {max_iterations} iterations"
        )


class LLMBackendError(AssistantError):
    """Raised when the language model backend is missing or fails."""


class MonitoringAPIError(AssistantError):
    """Raised when the Wazuh API is unreachable or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class MonitoringNotConfiguredError(MonitoringAPIError):
    """Raised when Wazuh connection settings are missing."""

    def __init__(self) -> None:
        super().__init__("Wazuh environment variables are not configured")
