from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from coderag.server import StdioServer, create_server


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "billing.py").write_text(
        "\n".join(
            [
                "def compute_invoice_total(items):",
                "    subtotal = sum(item.price for item in items)",
                "    return subtotal + invoice_tax(subtotal)",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    (tmp_path / "src" / "shipping.py").write_text(
        "def shipping_estimate(parcel):\n    return parcel.weight * carrier_rate()\n",
        encoding="utf-8",
    )
    (tmp_path / "README.md").write_text("Invoice tooling for the storefront.\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def server(project: Path) -> Iterator[StdioServer]:
    instance = create_server(project_root=str(project))
    yield instance
    instance.close()


@pytest.fixture
def indexed_server(server: StdioServer) -> StdioServer:
    response = server.handle_payload(
        {"id": "setup-1", "method": "rag.update_index", "params": {"wait": True}}
    )
    assert response["ok"] is True
    return server
