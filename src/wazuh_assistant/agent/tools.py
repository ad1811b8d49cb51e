"""Built-in tool catalog for the Wazuh assistant."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from wazuh_assistant.agent.queries import SecurityQueries
from wazuh_assistant.agent.registry import ToolRegistry, ToolSpec
from wazuh_assistant.monitoring.client import WazuhClient, require_client
from wazuh_assistant.types import QueryResult


class AlertsToolInput(BaseModel):
    limit: int = Field(default=20, ge=1, le=500, description="Number of alerts to retrieve (default: 20)")
    level: str | None = Field(default=None, description='Minimum alert level (e.g., "10" for critical)')
    time: str | None = Field(default=None, description='Time filter (e.g., "1h" for last hour)')


class AgentsToolInput(BaseModel):
    status: str | None = Field(
        default=None,
        description="Agent status filter (active, disconnected, never_connected)",
    )
    limit: int = Field(default=20, ge=1, le=1000, description="Number of agents to retrieve (default: 20)")


class VulnerabilitiesToolInput(BaseModel):
    agent_id: str | None = Field(default=None, description="Specific agent ID to check")
    severity: str | None = Field(
        default=None, description="Severity filter (Critical, High, Medium, Low)"
    )
    limit: int = Field(
        default=50, ge=1, le=500, description="Number of vulnerabilities to retrieve (default: 50)"
    )


class TimeFrameInput(BaseModel):
    time_frame: str | None = Field(
        default=None, description='Look-back window such as "1h" or "24h"'
    )


class NoInput(BaseModel):
    pass


class AgentFilterInput(BaseModel):
    agent_id: str | None = Field(
        default=None, description="Restrict to one agent ID; omit for all agents"
    )


class KnowledgeSearchInput(BaseModel):
    query: str = Field(min_length=1, description="Question or keywords to look up")


def register_builtin_tools(
    registry: ToolRegistry,
    client: WazuhClient | None,
    queries: SecurityQueries,
) -> None:
    """Register the default tool set used by the orchestrator.

    Tools:
    - `get_alerts` / `get_agents` / `get_vulnerabilities`: raw Wazuh reads.
    - `get_critical_alerts` / `get_high_severity_alerts`: alert summaries.
    - `get_offline_agents` / `get_agent_summary`: agent summaries.
    - `get_critical_vulnerabilities`: CVE summary, optionally per agent.
    - `search_security_knowledge`: lexical lookup in the documentation store.
    """

    async def _alerts(input_data: AlertsToolInput) -> dict[str, Any]:
        return await require_client(client).get_alerts(**input_data.model_dump())

    async def _agents(input_data: AgentsToolInput) -> dict[str, Any]:
        return await require_client(client).get_agents(**input_data.model_dump())

    async def _vulnerabilities(input_data: VulnerabilitiesToolInput) -> dict[str, Any]:
        return await require_client(client).get_vulnerabilities(**input_data.model_dump())

    async def _critical_alerts(input_data: TimeFrameInput) -> QueryResult:
        return await queries.get_critical_alerts(input_data.time_frame or "1h")

    async def _high_severity_alerts(input_data: TimeFrameInput) -> QueryResult:
        return await queries.get_high_severity_alerts(input_data.time_frame or "24h")

    async def _offline_agents(input_data: NoInput) -> QueryResult:
        return await queries.get_offline_agents()

    async def _agent_summary(input_data: NoInput) -> QueryResult:
        return await queries.get_agent_summary()

    async def _critical_vulnerabilities(input_data: AgentFilterInput) -> QueryResult:
        return await queries.get_critical_vulnerabilities(input_data.agent_id)

    async def _knowledge(input_data: KnowledgeSearchInput) -> QueryResult:
        return await queries.search_security_knowledge(input_data.query)

    specs = [
        ToolSpec(
            name="get_alerts",
            description="Get security alerts from Wazuh with optional filtering",
            args_schema=AlertsToolInput,
            handler=_alerts,
            tags=["wazuh", "alerts"],
        ),
        ToolSpec(
            name="get_agents",
            description="Get agent status information from Wazuh",
            args_schema=AgentsToolInput,
            handler=_agents,
            tags=["wazuh", "agents"],
        ),
        ToolSpec(
            name="get_vulnerabilities",
            description="Get vulnerability information from Wazuh agents",
            args_schema=VulnerabilitiesToolInput,
            handler=_vulnerabilities,
            tags=["wazuh", "vulnerabilities"],
        ),
        ToolSpec(
            name="get_critical_alerts",
            description="Summarize critical alerts (level 12+) grouped by rule for a time window (default 1h)",
            args_schema=TimeFrameInput,
            handler=_critical_alerts,
            tags=["summary", "alerts"],
        ),
        ToolSpec(
            name="get_high_severity_alerts",
            description="Summarize high-severity alerts (level 8+) grouped by agent for a time window (default 24h)",
            args_schema=TimeFrameInput,
            handler=_high_severity_alerts,
            tags=["summary", "alerts"],
        ),
        ToolSpec(
            name="get_offline_agents",
            description="List disconnected agents grouped by operating system",
            args_schema=NoInput,
            handler=_offline_agents,
            tags=["summary", "agents"],
        ),
        ToolSpec(
            name="get_agent_summary",
            description="Count agents by connection status",
            args_schema=NoInput,
            handler=_agent_summary,
            tags=["summary", "agents"],
        ),
        ToolSpec(
            name="get_critical_vulnerabilities",
            description="Summarize critical CVEs, grouped by agent unless one agent is given",
            args_schema=AgentFilterInput,
            handler=_critical_vulnerabilities,
            tags=["summary", "vulnerabilities"],
        ),
        ToolSpec(
            name="search_security_knowledge",
            description="Search built-in Wazuh and security operations documentation",
            args_schema=KnowledgeSearchInput,
            handler=_knowledge,
            tags=["retrieval", "rag"],
        ),
    ]
    for spec in specs:
        registry.register(spec)
