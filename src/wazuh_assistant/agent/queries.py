"""Pre-built security queries that summarize Wazuh data for the assistant.

Each helper makes one read-only call, groups the returned collection into a few
short insight strings and packages `QueryResult(data, summary, insights)`.
Helpers never raise: any failure is logged and turned into an empty result
carrying a diagnostic insight.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from wazuh_assistant.monitoring.client import WazuhClient, require_client
from wazuh_assistant.monitoring.models import Agent, Alert, Vulnerability
from wazuh_assistant.retrieval.vector_store import DocumentStore
from wazuh_assistant.types import QueryResult

logger = logging.getLogger(__name__)

CONNECTION_HINT = "Check connection and authentication"
CRITICAL_ALERT_LEVEL = "12"
HIGH_ALERT_LEVEL = "8"


class SecurityQueries:
    """Catalog of summary queries over the monitoring client and knowledge store."""

    def __init__(
        self,
        client: WazuhClient | None,
        store: DocumentStore,
        *,
        knowledge_limit: int = 2,
    ) -> None:
        self.client = client
        self.store = store
        self.knowledge_limit = knowledge_limit

    async def get_critical_alerts(self, time_frame: str = "1h") -> QueryResult:
        try:
            payload = await require_client(self.client).get_alerts(
                level=CRITICAL_ALERT_LEVEL, time=time_frame, limit=50
            )
            alerts = _collection(payload, "alerts")
            parsed = _parse(Alert, alerts)
            insights = [
                f"{count} alerts from rule {rule_id}"
                for rule_id, count in _top(parsed, lambda alert: alert.rule.id, 3)
            ]
            return QueryResult(
                data=alerts,
                summary=f"Found {len(alerts)} critical alerts in the last {time_frame}",
                insights=insights,
            )
        except Exception:
            logger.exception("[queries:get_critical_alerts] failed")
            return _failure([], "Failed to retrieve critical alerts")

    async def get_high_severity_alerts(self, time_frame: str = "24h") -> QueryResult:
        try:
            payload = await require_client(self.client).get_alerts(
                level=HIGH_ALERT_LEVEL, time=time_frame, limit=100
            )
            alerts = _collection(payload, "alerts")
            parsed = _parse(Alert, alerts)
            insights = [
                f"Agent {agent_id}: {count} alerts"
                for agent_id, count in _top(parsed, lambda alert: alert.agent.id, 3)
            ]
            return QueryResult(
                data=alerts,
                summary=f"Found {len(alerts)} high-severity alerts in the last {time_frame}",
                insights=insights,
            )
        except Exception:
            logger.exception("[queries:get_high_severity_alerts] failed")
            return _failure([], "Failed to retrieve high-severity alerts")

    async def get_offline_agents(self) -> QueryResult:
        try:
            payload = await require_client(self.client).get_agents(status="disconnected", limit=100)
            agents = _collection(payload, "agents")
            os_counts = Counter(agent.os.name for agent in _parse(Agent, agents))
            return QueryResult(
                data=agents,
                summary=f"Found {len(agents)} offline agents",
                insights=[f"{count} {os_name} agents offline" for os_name, count in os_counts.items()],
            )
        except Exception:
            logger.exception("[queries:get_offline_agents] failed")
            return _failure([], "Failed to retrieve offline agents")

    async def get_agent_summary(self) -> QueryResult:
        try:
            payload = await require_client(self.client).get_agents(limit=1000)
            agents = _collection(payload, "agents")
            status_counts = dict(Counter(agent.status for agent in _parse(Agent, agents)))
            return QueryResult(
                data=status_counts,
                summary=f"Total agents: {len(agents)}",
                insights=[
                    f"{count} agents {status.replace('_', ' ', 1)}"
                    for status, count in status_counts.items()
                ],
            )
        except Exception:
            logger.exception("[queries:get_agent_summary] failed")
            return _failure({}, "Failed to retrieve agent summary")

    async def get_critical_vulnerabilities(self, agent_id: str | None = None) -> QueryResult:
        try:
            payload = await require_client(self.client).get_vulnerabilities(
                severity="Critical", agent_id=agent_id, limit=100
            )
            vulnerabilities = _collection(payload, "vulnerabilities")
            insights: list[str] = []
            if vulnerabilities:
                if agent_id:
                    insights.append(f"All critical vulnerabilities are from agent {agent_id}")
                else:
                    insights.extend(
                        f"Agent {agent}: {count} critical vulnerabilities"
                        for agent, count in _top(
                            _parse(Vulnerability, vulnerabilities),
                            lambda vuln: vuln.agent.id,
                            5,
                        )
                    )
            return QueryResult(
                data=vulnerabilities,
                summary=f"Found {len(vulnerabilities)} critical vulnerabilities",
                insights=insights,
            )
        except Exception:
            logger.exception("[queries:get_critical_vulnerabilities] failed")
            return _failure([], "Failed to retrieve critical vulnerabilities")

    async def search_security_knowledge(self, query: str) -> QueryResult:
        try:
            context = self.store.get_context(query, self.knowledge_limit)
            return QueryResult(
                data={"context": context},
                summary="Security knowledge retrieved",
                insights=[
                    "Relevant documentation found" if context else "No relevant documentation found"
                ],
            )
        except Exception:
            logger.exception("[queries:search_security_knowledge] failed")
            return QueryResult(
                data={},
                summary="Failed to search security knowledge",
                insights=["Retrieval service error"],
            )


def _failure(data: Any, summary: str) -> QueryResult:
    return QueryResult(data=data, summary=summary, insights=[CONNECTION_HINT])


def _collection(payload: dict[str, Any], key: str) -> list[dict[str, Any]]:
    data = payload.get("data") or {}
    items = data.get(key) or []
    return list(items)


def _parse(model: type[BaseModel], items: Iterable[dict[str, Any]]) -> list[Any]:
    return [model.model_validate(item) for item in items]


def _top(items: Iterable[Any], key: Any, n: int) -> list[tuple[str, int]]:
    # most_common keeps first-seen order among equal counts.
    return Counter(key(item) for item in items).most_common(n)
