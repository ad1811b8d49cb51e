from wazuh_assistant.storage.audit import AuditStore


def test_audit_logs_newest_first_with_details(tmp_path) -> None:
    store = AuditStore(tmp_path / "data" / "audit.db")
    store.insert_audit_log(user_id="anonymous", action="read", resource="alerts", timestamp=1000)
    store.insert_audit_log(
        user_id="anonymous",
        action="chat",
        resource="assistant",
        details={"method": "POST", "url": "http://testserver/api/chat"},
        ip_address="10.0.0.5",
        timestamp=2000,
    )

    logs = store.get_audit_logs()

    assert [entry["action"] for entry in logs] == ["chat", "read"]
    assert logs[0]["details"] == {"method": "POST", "url": "http://testserver/api/chat"}
    assert logs[0]["ip_address"] == "10.0.0.5"
    assert logs[1]["details"] is None
    assert len(store.get_audit_logs(limit=1)) == 1


def test_chat_history_filtered_by_session(tmp_path) -> None:
    store = AuditStore(tmp_path / "audit.db")
    store.insert_chat_history(session_id="s1", user_message="hi", assistant_message="hello", timestamp=1)
    store.insert_chat_history(session_id="s2", user_message="other", assistant_message="x", timestamp=2)
    store.insert_chat_history(session_id="s1", user_message="agents?", assistant_message="3 active", timestamp=3)

    history = store.get_chat_history("s1")

    assert [row["user_message"] for row in history] == ["agents?", "hi"]
    assert store.get_chat_history("missing") == []


def test_schema_survives_reopen(tmp_path) -> None:
    path = tmp_path / "audit.db"
    AuditStore(path).insert_audit_log(user_id="u", action="read", resource="agents")

    assert len(AuditStore(path).get_audit_logs()) == 1
