"""SQLite persistence for audit logs and chat history."""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS audit_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp INTEGER NOT NULL,
    user_id TEXT NOT NULL,
    action TEXT NOT NULL,
    resource TEXT NOT NULL,
    details TEXT,
    ip_address TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_logs(timestamp);
CREATE INDEX IF NOT EXISTS idx_audit_user ON audit_logs(user_id);
CREATE INDEX IF NOT EXISTS idx_audit_action ON audit_logs(action);

CREATE TABLE IF NOT EXISTS chat_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT,
    user_message TEXT NOT NULL,
    assistant_message TEXT NOT NULL,
    timestamp INTEGER NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_chat_session ON chat_history(session_id);
CREATE INDEX IF NOT EXISTS idx_chat_timestamp ON chat_history(timestamp);
"""


def now_ms() -> int:
    return int(time.time() * 1000)


class AuditStore:
    """Append/query store keyed by timestamp, user and session id.

    A new connection is opened per call; timestamps are epoch milliseconds.
    """

    def __init__(self, database_path: str | Path) -> None:
        self.database_path = Path(database_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        with self._session() as conn:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.executescript(_SCHEMA)

    def insert_audit_log(
        self,
        *,
        user_id: str,
        action: str,
        resource: str,
        details: dict[str, Any] | None = None,
        ip_address: str | None = None,
        timestamp: int | None = None,
    ) -> None:
        with self._session() as conn:
            conn.execute(
                "INSERT INTO audit_logs (timestamp, user_id, action, resource, details, ip_address) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    timestamp if timestamp is not None else now_ms(),
                    user_id,
                    action,
                    resource,
                    json.dumps(details) if details else None,
                    ip_address,
                ),
            )
        logger.debug("[audit] user=%s action=%s resource=%s", user_id, action, resource)

    def get_audit_logs(self, limit: int = 100) -> list[dict[str, Any]]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM audit_logs ORDER BY timestamp DESC, id DESC LIMIT ?", (limit,)
            ).fetchall()
        entries = []
        for row in rows:
            entry = dict(row)
            entry["details"] = json.loads(entry["details"]) if entry["details"] else None
            entries.append(entry)
        return entries

    def insert_chat_history(
        self,
        *,
        session_id: str | None,
        user_message: str,
        assistant_message: str,
        timestamp: int | None = None,
    ) -> None:
        with self._session() as conn:
            conn.execute(
                "INSERT INTO chat_history (session_id, user_message, assistant_message, timestamp) "
                "VALUES (?, ?, ?, ?)",
                (
                    session_id,
                    user_message,
                    assistant_message,
                    timestamp if timestamp is not None else now_ms(),
                ),
            )
        logger.info("[audit:chat_history] session_id=%s", (session_id or "")[:16])

    def get_chat_history(self, session_id: str, limit: int = 50) -> list[dict[str, Any]]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM chat_history WHERE session_id = ? "
                "ORDER BY timestamp DESC, id DESC LIMIT ?",
                (session_id, limit),
            ).fetchall()
        return [dict(row) for row in rows]
