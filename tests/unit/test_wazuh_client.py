import base64
import json

import httpx
import pytest

from wazuh_assistant.config import MonitoringConfig
from wazuh_assistant.errors import MonitoringAPIError, MonitoringNotConfiguredError
from wazuh_assistant.monitoring.client import WazuhClient, require_client

CONFIG = MonitoringConfig(
    base_url="https://wazuh.test:55000",
    user="wazuh-wui",
    password="secret",
)


def _client(handler) -> WazuhClient:
    return WazuhClient(CONFIG, transport=httpx.MockTransport(handler))


def test_client_requires_configuration() -> None:
    with pytest.raises(MonitoringNotConfiguredError, match="not configured"):
        WazuhClient(MonitoringConfig(base_url="https://wazuh.test:55000"))


def test_require_client_rejects_missing_client() -> None:
    with pytest.raises(MonitoringNotConfiguredError):
        require_client(None)

    client = _client(lambda request: httpx.Response(200, json={}))
    assert require_client(client) is client


@pytest.mark.asyncio
async def test_get_alerts_sends_auth_and_filters() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {"alerts": [{"id": "1"}]}})

    async with _client(handler) as client:
        payload = await client.get_alerts(limit=50, level="12", time="1h")

    assert payload == {"data": {"alerts": [{"id": "1"}]}}
    request = seen[0]
    assert request.url.path == "/events/alerts"
    assert dict(request.url.params) == {"limit": "50", "time": "1h", "level": "12"}
    expected = base64.b64encode(b"wazuh-wui:secret").decode()
    assert request.headers["authorization"] == f"Basic {expected}"
    assert request.headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_endpoints_and_agent_lookup() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, content=json.dumps({"data": {}}).encode())

    async with _client(handler) as client:
        await client.get_agents(status="active")
        await client.get_agent("001")
        await client.get_vulnerabilities(agent_id="001", severity="Critical")
        await client.get_security_events(limit=5)

    assert paths == ["/agents", "/agents/001", "/vulnerability", "/events"]


@pytest.mark.asyncio
async def test_non_2xx_status_raises_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"title": "Unauthorized"})

    async with _client(handler) as client:
        with pytest.raises(MonitoringAPIError) as excinfo:
            await client.get_agents()

    assert excinfo.value.status_code == 401
    assert str(excinfo.value) == "Wazuh API error: 401 Unauthorized"


@pytest.mark.asyncio
async def test_transport_error_raises_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(MonitoringAPIError, match="Failed to fetch from Wazuh API"):
            await client.get_alerts()


@pytest.mark.asyncio
async def test_invalid_json_raises_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>")

    async with _client(handler) as client:
        with pytest.raises(MonitoringAPIError, match="invalid JSON"):
            await client.get_alerts()
