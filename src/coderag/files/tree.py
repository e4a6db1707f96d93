"""Parent-chain path resolution and structure summaries."""

from __future__ import annotations

from collections.abc import Iterable

from coderag.files.models import FileNode

MAX_PARENT_DEPTH = 10
STRUCTURE_HEADER = "PROJECT STRUCTURE:"


class FileTree:
    """Read-only view over an ordered collection of file records."""

    def __init__(self, nodes: Iterable[FileNode]) -> None:
        self._nodes = tuple(nodes)
        self._by_id = {node.id: node for node in self._nodes}
        self._path_cache: dict[str, str] = {}

    @property
    def nodes(self) -> tuple[FileNode, ...]:
        """Return records in caller order."""
        return self._nodes

    def get(self, node_id: str | None) -> FileNode | None:
        """Return the record with the given id, if present."""
        if node_id is None:
            return None
        return self._by_id.get(node_id)

    def files(self) -> list[FileNode]:
        """Return file records (not folders) in caller order."""
        return [node for node in self._nodes if node.is_file]

    def resolve_path(self, node: FileNode) -> str:
        """Walk the parent chain and join names with '/'."""
        cached = self._path_cache.get(node.id)
        if cached is not None and node is self._by_id.get(node.id):
            return cached
        parts = [node.name]
        current = node
        depth = 0
        while current.parent_id and depth < MAX_PARENT_DEPTH:
            parent = self._by_id.get(current.parent_id)
            if parent is None:
                break
            parts.append(parent.name)
            current = parent
            depth += 1
        path = "/".join(reversed(parts))
        if node is self._by_id.get(node.id):
            self._path_cache[node.id] = path
        return path

    def find_by_path(self, path: str) -> FileNode | None:
        """Return the first record whose resolved path equals ``path``."""
        normalized = path.replace("\\", "/").strip().strip("/")
        for node in self._nodes:
            if self.resolve_path(node) == normalized:
                return node
        return None

    def structure_summary(self) -> str:
        """Render the sorted [DIR]/[FILE] listing used as the context header."""
        entries = sorted(
            f"{'[FILE]' if node.is_file else '[DIR]'} {self.resolve_path(node)}"
            for node in self._nodes
        )
        return f"{STRUCTURE_HEADER}\n" + "\n".join(entries)
