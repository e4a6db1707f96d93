"""Cosine-similarity ranking over an index snapshot."""

from __future__ import annotations

from dataclasses import asdict

from coderag.index.builder import weight_vector
from coderag.index.models import IndexSnapshot, SearchResult, SparseVector
from coderag.index.tokenize import term_frequencies

DEFAULT_SEARCH_LIMIT = 5
MIN_RELEVANCE_SCORE = 0.05


def search_index(
    snapshot: IndexSnapshot | None,
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
    min_score: float = MIN_RELEVANCE_SCORE,
) -> list[SearchResult]:
    """Return chunks ranked by cosine similarity to ``query``.

    Ties keep snapshot order (file order, then line order). Scores at or below
    ``min_score`` are dropped before truncating to ``limit``.
    """
    if snapshot is None or limit < 1:
        return []
    query_vector = weight_vector(term_frequencies(query), snapshot.idf)
    if not query_vector:
        return []

    scored: list[tuple[float, int]] = []
    for position, chunk in enumerate(snapshot.chunks):
        score = cosine_similarity(query_vector, snapshot.vector_for(chunk.id))
        if score > min_score:
            scored.append((score, position))
    scored.sort(key=lambda item: (-item[0], item[1]))

    results: list[SearchResult] = []
    for score, position in scored[:limit]:
        chunk = snapshot.chunks[position]
        results.append(
            SearchResult(
                file_id=chunk.file_id,
                file_path=chunk.file_path,
                score=score,
                snippet=chunk.content,
                start_line=chunk.start_line,
                end_line=chunk.end_line,
                chunk_id=chunk.id,
            )
        )
    return results


def cosine_similarity(left: SparseVector, right: SparseVector) -> float:
    """Dot product of two unit-normalized sparse vectors."""
    if len(left) > len(right):
        left, right = right, left
    total = 0.0
    for term, value in left.items():
        other = right.get(term)
        if other is not None:
            total += value * other
    return total


def result_to_dict(result: SearchResult) -> dict[str, object]:
    """Serialize one hit for tool responses."""
    return asdict(result)
