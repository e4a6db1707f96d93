from __future__ import annotations

from coderag.server import StdioServer

STRUCTURE = "\n".join(
    [
        "PROJECT STRUCTURE:",
        "[DIR] src",
        "[FILE] README.md",
        "[FILE] src/billing.py",
        "[FILE] src/shipping.py",
    ]
)


def test_context_includes_structure_snippets_and_active_file(
    indexed_server: StdioServer,
) -> None:
    response = indexed_server.handle_payload(
        {
            "id": "c-1",
            "method": "rag.get_context",
            "params": {"query": "parcel weight", "active_path": "README.md"},
        }
    )

    assert response["ok"] is True
    assert response["result"]["context"] == (
        f"{STRUCTURE}\n\n"
        "Potentially relevant code snippets:\n"
        "---\n"
        "File: src/shipping.py (lines 1-3)\n"
        "def shipping_estimate(parcel):\n"
        "    return parcel.weight * carrier_rate()\n"
        "\n"
        "---\n\n"
        "Currently active file (README.md):\n"
        "Invoice tooling for the storefront.\n"
        "\n\n"
    )


def test_context_before_indexing_is_structure_only(server: StdioServer) -> None:
    response = server.handle_payload(
        {"id": "c-2", "method": "rag.get_context", "params": {"query": "invoice"}}
    )

    assert response["ok"] is True
    assert response["result"]["context"] == "PROJECT STRUCTURE:\n"


def test_unknown_active_path_is_not_found(indexed_server: StdioServer) -> None:
    response = indexed_server.handle_payload(
        {
            "id": "c-3",
            "method": "rag.get_context",
            "params": {"query": "invoice", "active_path": "src/missing.py"},
        }
    )

    assert response["ok"] is False
    assert response["error"]["code"] == "NOT_FOUND"


def test_top_k_above_cap_is_blocked(indexed_server: StdioServer) -> None:
    response = indexed_server.handle_payload(
        {"id": "c-4", "method": "rag.get_context", "params": {"query": "invoice", "top_k": 500}}
    )

    assert response["blocked"] is True
    assert response["error"]["code"] == "LIMIT_EXCEEDED"
