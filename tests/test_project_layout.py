from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/coderag/server.py",
        "src/coderag/engine.py",
        "src/coderag/config.py",
        "src/coderag/protocol.py",
        "src/coderag/tools/__init__.py",
        "src/coderag/index/__init__.py",
        "src/coderag/files/__init__.py",
        "src/coderag/context/__init__.py",
        "src/coderag/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
