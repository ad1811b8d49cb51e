"""Lenient pydantic views over Wazuh API collection items.

Only the fields used for grouping are declared; everything else the API sends
is kept as extra data. Missing nested objects default to empty placeholders so
a partially populated agent (e.g. one that never connected and has no OS
inventory) still groups under `"unknown"`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _WazuhModel(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class RuleRef(_WazuhModel):
    id: str = "unknown"
    level: int = 0
    description: str = ""


class AgentRef(_WazuhModel):
    id: str = "unknown"
    name: str = ""


class OperatingSystem(_WazuhModel):
    name: str = "unknown"
    version: str = ""


class Alert(_WazuhModel):
    id: str = ""
    timestamp: str = ""
    rule: RuleRef = Field(default_factory=RuleRef)
    agent: AgentRef = Field(default_factory=AgentRef)
    location: str = ""
    full_log: str = ""


class Agent(_WazuhModel):
    id: str = ""
    name: str = ""
    ip: str = ""
    status: str = "unknown"
    os: OperatingSystem = Field(default_factory=OperatingSystem)


class Vulnerability(_WazuhModel):
    cve: str = ""
    title: str = ""
    severity: str = ""
    package: str | dict[str, object] = ""
    agent: AgentRef = Field(default_factory=AgentRef)
