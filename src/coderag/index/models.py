"""Typed models for indexing state."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

SparseVector = Mapping[str, float]


@dataclass(slots=True, frozen=True)
class Chunk:
    """One overlapping line window of a file."""

    id: str
    file_id: str
    file_path: str
    content: str
    start_line: int
    end_line: int


@dataclass(slots=True, frozen=True)
class IndexSnapshot:
    """Complete, read-only result of one index build."""

    chunks: tuple[Chunk, ...]
    vocabulary: frozenset[str]
    idf: Mapping[str, float]
    chunk_vectors: Mapping[str, SparseVector]
    file_count: int
    built_at: str

    def vector_for(self, chunk_id: str) -> SparseVector:
        """Return the chunk vector, or an empty mapping for unknown ids."""
        return self.chunk_vectors.get(chunk_id, {})


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Ranked chunk hit before serialization."""

    file_id: str
    file_path: str
    score: float
    snippet: str
    start_line: int
    end_line: int
    chunk_id: str


@dataclass(slots=True, frozen=True)
class IndexStatus:
    """Current engine status snapshot."""

    index_status: str
    last_build_timestamp: str | None
    indexed_file_count: int
    indexed_chunk_count: int
    vocabulary_size: int
    progress_loaded: int | None = None
    progress_total: int | None = None
    last_error: str | None = None
