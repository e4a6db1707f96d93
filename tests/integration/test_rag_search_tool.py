from __future__ import annotations

from coderag.server import StdioServer


def test_update_index_reports_ready_status(server: StdioServer) -> None:
    response = server.handle_payload(
        {"id": "u-1", "method": "rag.update_index", "params": {"wait": True}}
    )

    assert response["ok"] is True
    result = response["result"]
    assert result["index_status"] == "ready"
    assert result["indexed_file_count"] == 3
    assert result["indexed_chunk_count"] == 3
    assert result["last_error"] is None


def test_search_returns_ranked_results(indexed_server: StdioServer) -> None:
    response = indexed_server.handle_payload(
        {"id": "s-1", "method": "rag.search", "params": {"query": "invoice subtotal"}}
    )

    assert response["ok"] is True
    results = response["result"]["results"]
    assert [hit["file_id"] for hit in results] == ["src/billing.py", "README.md"]
    top = results[0]
    assert top["chunk_id"] == "src/billing.py:1"
    assert top["file_path"] == "src/billing.py"
    assert top["start_line"] == 1
    assert top["end_line"] == 4
    assert top["snippet"].startswith("def compute_invoice_total(items):")
    assert results[0]["score"] > results[1]["score"] > 0.05


def test_search_via_tools_call_matches_direct_method(indexed_server: StdioServer) -> None:
    direct = indexed_server.handle_payload(
        {"id": "s-2", "method": "rag.search", "params": {"query": "parcel weight"}}
    )
    wrapped = indexed_server.handle_payload(
        {
            "id": "s-3",
            "method": "tools/call",
            "params": {"name": "rag.search", "arguments": {"query": "parcel weight"}},
        }
    )

    assert direct["result"] == wrapped["result"]
    assert [hit["file_id"] for hit in direct["result"]["results"]] == ["src/shipping.py"]


def test_search_limit_above_cap_is_blocked(indexed_server: StdioServer) -> None:
    response = indexed_server.handle_payload(
        {"id": "s-4", "method": "rag.search", "params": {"query": "invoice", "limit": 51}}
    )

    assert response["ok"] is False
    assert response["blocked"] is True
    assert response["error"]["code"] == "LIMIT_EXCEEDED"
    assert "max_search_hits" in response["result"]["reason"]


def test_search_without_matching_terms_is_empty(indexed_server: StdioServer) -> None:
    response = indexed_server.handle_payload(
        {"id": "s-5", "method": "rag.search", "params": {"query": "the and of"}}
    )

    assert response["ok"] is True
    assert response["result"] == {"results": []}
