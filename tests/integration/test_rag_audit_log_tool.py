from __future__ import annotations

from coderag.server import StdioServer


def test_audit_log_returns_recent_sanitized_entries(server: StdioServer) -> None:
    server.handle_payload({"id": "req-300", "method": "rag.status", "params": {}})
    server.handle_payload(
        {
            "id": "req-301",
            "method": "rag.search",
            "params": {"query": "secret invoice words", "limit": 2},
        }
    )

    response = server.handle_payload(
        {"id": "req-302", "method": "rag.audit_log", "params": {"limit": 2}}
    )

    assert response["ok"] is True
    assert response["blocked"] is False
    entries = response["result"]["entries"]
    assert [entry["request_id"] for entry in entries] == ["req-300", "req-301"]
    assert entries[0]["tool"] == "rag.status"
    assert entries[1]["tool"] == "rag.search"
    assert entries[1]["metadata"]["limit"] == 2
    assert "secret invoice words" not in str(entries)


def test_audit_log_filters_by_tool_and_since(server: StdioServer) -> None:
    server.handle_payload({"id": "req-400", "method": "rag.status", "params": {}})
    server.handle_payload({"id": "req-401", "method": "rag.unknown", "params": {}})

    by_tool = server.handle_payload(
        {"id": "req-402", "method": "rag.audit_log", "params": {"tool": "rag.unknown"}}
    )
    future = server.handle_payload(
        {
            "id": "req-403",
            "method": "rag.audit_log",
            "params": {"since": "9999-01-01T00:00:00.000Z"},
        }
    )

    entries = by_tool["result"]["entries"]
    assert [entry["request_id"] for entry in entries] == ["req-401"]
    assert entries[0]["ok"] is False
    assert entries[0]["error_code"] == "UNKNOWN_TOOL"
    assert future["result"]["entries"] == []


def test_audit_log_rejects_malformed_arguments(server: StdioServer) -> None:
    boolean_limit = server.handle_payload(
        {"id": "req-500", "method": "rag.audit_log", "params": {"limit": True}}
    )
    numeric_tool = server.handle_payload(
        {"id": "req-501", "method": "rag.audit_log", "params": {"tool": 5}}
    )
    list_since = server.handle_payload(
        {"id": "req-502", "method": "rag.audit_log", "params": {"since": ["2026"]}}
    )

    assert boolean_limit["error"] == {
        "code": "INVALID_PARAMS",
        "message": "rag.audit_log limit must be an integer.",
    }
    assert numeric_tool["error"] == {
        "code": "INVALID_PARAMS",
        "message": "rag.audit_log tool must be a string.",
    }
    assert list_since["error"]["code"] == "INVALID_PARAMS"


def test_audit_log_limit_above_cap_is_blocked(server: StdioServer) -> None:
    response = server.handle_payload(
        {"id": "req-503", "method": "rag.audit_log", "params": {"limit": 51}}
    )

    assert response["blocked"] is True
    assert response["error"]["code"] == "LIMIT_EXCEEDED"
