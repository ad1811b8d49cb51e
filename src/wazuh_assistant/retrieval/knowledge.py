"""Built-in Wazuh documentation used to ground assistant answers."""

from __future__ import annotations

from wazuh_assistant.retrieval.vector_store import DocumentStore
from wazuh_assistant.types import Document

SEED_DOCUMENTS: tuple[Document, ...] = (
    Document(
        id="alert-levels",
        content=(
            "Wazuh alert levels range from 0-15, where 0-3 are informational, 4-7 are low "
            "severity, 8-11 are medium severity, and 12-15 are high/critical severity alerts."
        ),
        metadata={"source": "Wazuh Documentation", "type": "alerts"},
    ),
    Document(
        id="agent-status",
        content=(
            "Wazuh agents can have three main statuses: active (online and communicating), "
            "disconnected (offline but previously connected), and never_connected (agent "
            "installed but never checked in)."
        ),
        metadata={"source": "Wazuh Documentation", "type": "agents"},
    ),
    Document(
        id="vulnerabilities",
        content=(
            "Wazuh vulnerability detection scans agents for known CVEs and provides severity "
            "ratings: Critical, High, Medium, and Low. Scan frequency can be configured per agent."
        ),
        metadata={"source": "Wazuh Documentation", "type": "vulnerabilities"},
    ),
    Document(
        id="common-queries",
        content=(
            "Common security queries include: critical alerts in last hour, offline agents, "
            "high-severity vulnerabilities, and active agent count."
        ),
        metadata={"source": "Security Best Practices", "type": "queries"},
    ),
)

REFERENCE_DOCUMENTS: tuple[Document, ...] = (
    Document(
        id="wazuh-overview",
        content=(
            "Wazuh is a free, open-source security monitoring platform that provides unified "
            "XDR and SIEM protection for endpoints and cloud workloads. It offers threat "
            "detection, incident response, compliance, and infrastructure monitoring."
        ),
        metadata={"source": "Wazuh Official", "type": "overview", "category": "general"},
    ),
    Document(
        id="alert-classification",
        content=(
            "Wazuh alerts are classified by severity levels: 0-3 (informational/low), 4-7 "
            "(medium), 8-11 (high), 12-15 (critical). Each alert includes rule ID, "
            "description, affected agent, and full log details."
        ),
        metadata={
            "source": "Wazuh Documentation",
            "type": "alerts",
            "category": "classification",
        },
    ),
    Document(
        id="agent-management",
        content=(
            "Wazuh agents are deployed on endpoints to collect security data. Agents can be "
            "in states: active (online), disconnected (offline), never_connected (not "
            "registered). Agent status is updated via keep-alive messages."
        ),
        metadata={"source": "Wazuh Documentation", "type": "agents", "category": "management"},
    ),
    Document(
        id="vulnerability-detection",
        content=(
            "Wazuh performs vulnerability scans using system inventory data and vulnerability "
            "feeds. It detects CVEs with severity ratings: Critical, High, Medium, Low. Scans "
            "can be scheduled or run on-demand."
        ),
        metadata={
            "source": "Wazuh Documentation",
            "type": "vulnerabilities",
            "category": "detection",
        },
    ),
    Document(
        id="common-security-events",
        content=(
            "Common security events monitored by Wazuh include: file integrity changes, "
            "rootkit detection, malware alerts, unauthorized access attempts, configuration "
            "changes, and system anomalies."
        ),
        metadata={"source": "Security Best Practices", "type": "events", "category": "monitoring"},
    ),
    Document(
        id="threat-hunting",
        content=(
            "Security analysts use Wazuh queries to hunt for threats by filtering alerts by "
            "time, severity, agent, rule ID, or content. Common queries include critical "
            "alerts in last hour, offline agents, and vulnerability summaries."
        ),
        metadata={
            "source": "Security Operations",
            "type": "threat-hunting",
            "category": "analysis",
        },
    ),
    Document(
        id="incident-response",
        content=(
            "When security incidents occur, analysts review alert details, check affected "
            "systems, assess impact, contain threats, and document response actions. Wazuh "
            "provides comprehensive logging for forensic analysis."
        ),
        metadata={
            "source": "Incident Response Guide",
            "type": "response",
            "category": "operations",
        },
    ),
    Document(
        id="compliance-monitoring",
        content=(
            "Wazuh helps organizations maintain compliance with standards like PCI-DSS, "
            "HIPAA, GDPR through continuous monitoring, audit logging, and automated "
            "reporting of security events and configurations."
        ),
        metadata={
            "source": "Compliance Documentation",
            "type": "compliance",
            "category": "governance",
        },
    ),
)


def seed_default_documents(store: DocumentStore, *, include_reference: bool = True) -> int:
    """Load the built-in corpus into `store` and return how many documents were added."""

    docs = list(SEED_DOCUMENTS)
    if include_reference:
        docs.extend(REFERENCE_DOCUMENTS)
    store.add_documents(docs)
    return len(docs)
