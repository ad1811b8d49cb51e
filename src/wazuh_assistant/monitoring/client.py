"""Async client for the Wazuh REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from wazuh_assistant.config import MonitoringConfig
from wazuh_assistant.errors import MonitoringAPIError, MonitoringNotConfiguredError

logger = logging.getLogger(__name__)

JSONPayload = dict[str, Any]


def require_client(client: WazuhClient | None) -> WazuhClient:
    """Return `client`, or raise when the Wazuh API is not configured."""
    if client is None:
        raise MonitoringNotConfiguredError()
    return client


class WazuhClient:
    """Thin read-only wrapper around the Wazuh endpoints the assistant uses.

    Every call returns the decoded JSON body (`{"data": {...}, ...}`).
    Filters whose value is `None` are not sent.
    """

    def __init__(
        self,
        config: MonitoringConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not config.configured:
            raise MonitoringNotConfiguredError()

        self.config = config
        self._http = httpx.AsyncClient(
            base_url=str(config.base_url),
            auth=httpx.BasicAuth(str(config.user), str(config.password)),
            headers={"Content-Type": "application/json"},
            timeout=config.timeout_seconds,
            verify=config.verify_ssl,
            transport=transport,
        )

    async def __aenter__(self) -> "WazuhClient":
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_alerts(
        self,
        *,
        limit: int | None = None,
        offset: int | None = None,
        sort: str | None = None,
        search: str | None = None,
        time: str | None = None,
        level: str | None = None,
    ) -> JSONPayload:
        return await self._request(
            "/events/alerts",
            {
                "limit": limit,
                "offset": offset,
                "sort": sort,
                "search": search,
                "time": time,
                "level": level,
            },
        )

    async def get_agents(
        self,
        *,
        limit: int | None = None,
        offset: int | None = None,
        sort: str | None = None,
        search: str | None = None,
        status: str | None = None,
    ) -> JSONPayload:
        return await self._request(
            "/agents",
            {
                "limit": limit,
                "offset": offset,
                "sort": sort,
                "search": search,
                "status": status,
            },
        )

    async def get_agent(self, agent_id: str) -> JSONPayload:
        return await self._request(f"/agents/{agent_id}")

    async def get_vulnerabilities(
        self,
        *,
        limit: int | None = None,
        offset: int | None = None,
        agent_id: str | None = None,
        cve: str | None = None,
        severity: str | None = None,
    ) -> JSONPayload:
        return await self._request(
            "/vulnerability",
            {
                "limit": limit,
                "offset": offset,
                "agent_id": agent_id,
                "cve": cve,
                "severity": severity,
            },
        )

    async def get_security_events(
        self,
        *,
        limit: int | None = None,
        offset: int | None = None,
        sort: str | None = None,
        search: str | None = None,
        time: str | None = None,
    ) -> JSONPayload:
        return await self._request(
            "/events",
            {
                "limit": limit,
                "offset": offset,
                "sort": sort,
                "search": search,
                "time": time,
            },
        )

    async def _request(
        self, endpoint: str, params: dict[str, Any] | None = None
    ) -> JSONPayload:
        query = {key: str(value) for key, value in (params or {}).items() if value is not None}
        logger.info("[wazuh:request] IN  endpoint=%s params=%s", endpoint, query)
        try:
            response = await self._http.get(endpoint, params=query)
        except httpx.HTTPError as exc:
            logger.warning("[wazuh:request] transport error endpoint=%s: %s", endpoint, exc)
            raise MonitoringAPIError(f"Failed to fetch from Wazuh API: {exc}") from exc

        if response.is_error:
            logger.warning(
                "[wazuh:request] endpoint=%s status=%d body=%r",
                endpoint,
                response.status_code,
                response.text[:200],
            )
            raise MonitoringAPIError(
                f"Wazuh API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise MonitoringAPIError(f"Wazuh API returned invalid JSON: {exc}") from exc
        logger.info("[wazuh:request] OUT endpoint=%s status=%d", endpoint, response.status_code)
        return payload
