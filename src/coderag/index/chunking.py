"""Deterministic line-window chunking with stable chunk IDs."""

from __future__ import annotations

from coderag.files import FileNode, FileTree
from coderag.index.models import Chunk

DEFAULT_CHUNK_LINES = 20
DEFAULT_CHUNK_OVERLAP_LINES = 5
DEFAULT_MAX_FILE_CHARS = 100_000


def is_indexable(node: FileNode, max_file_chars: int = DEFAULT_MAX_FILE_CHARS) -> bool:
    """Return True for non-empty files under the size ceiling."""
    if not node.is_file:
        return False
    return 0 < len(node.content) < max_file_chars


def chunk_file(
    node: FileNode,
    tree: FileTree,
    chunk_lines: int = DEFAULT_CHUNK_LINES,
    overlap_lines: int = DEFAULT_CHUNK_OVERLAP_LINES,
) -> list[Chunk]:
    """Split one file into overlapping line windows.

    Windows start every ``chunk_lines - overlap_lines`` lines until the start
    offset passes the last line, so short tail windows are kept even when a
    previous window already covers them. Whitespace-only windows are skipped.
    """
    if chunk_lines < 1:
        raise ValueError("chunk_lines must be >= 1")
    if overlap_lines < 0:
        raise ValueError("overlap_lines must be >= 0")
    if overlap_lines >= chunk_lines:
        raise ValueError("overlap_lines must be less than chunk_lines")

    lines = node.content.split("\n")
    file_path = tree.resolve_path(node)
    step = chunk_lines - overlap_lines
    chunks: list[Chunk] = []
    for start_index in range(0, len(lines), step):
        end_index_exclusive = min(start_index + chunk_lines, len(lines))
        content = "\n".join(lines[start_index:end_index_exclusive])
        if not content.strip():
            continue
        start_line = start_index + 1
        chunks.append(
            Chunk(
                id=build_chunk_id(node.id, start_line),
                file_id=node.id,
                file_path=file_path,
                content=content,
                start_line=start_line,
                end_line=end_index_exclusive,
            )
        )
    return chunks


def build_chunk_id(file_id: str, start_line: int) -> str:
    """Build a chunk identifier unique per (file, window start)."""
    return f"{file_id}:{start_line}"
