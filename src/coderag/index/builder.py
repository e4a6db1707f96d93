"""Whole-corpus TF-IDF index construction."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Callable, Iterable
from types import MappingProxyType

from coderag.files import FileNode, FileTree
from coderag.index.chunking import (
    DEFAULT_CHUNK_LINES,
    DEFAULT_CHUNK_OVERLAP_LINES,
    DEFAULT_MAX_FILE_CHARS,
    chunk_file,
    is_indexable,
)
from coderag.index.models import Chunk, IndexSnapshot, SparseVector
from coderag.index.tokenize import term_frequencies
from coderag.logging import get_logger, utc_timestamp

logger = get_logger(__name__)

ProgressFn = Callable[[int, int], None]


def build_index(
    files: Iterable[FileNode],
    chunk_lines: int = DEFAULT_CHUNK_LINES,
    overlap_lines: int = DEFAULT_CHUNK_OVERLAP_LINES,
    max_file_chars: int = DEFAULT_MAX_FILE_CHARS,
    progress: ProgressFn | None = None,
) -> IndexSnapshot | None:
    """Build a fresh snapshot from the full file set.

    Returns None when no eligible file yields a chunk. The returned snapshot
    shares no mutable state with any earlier build.
    """
    tree = files if isinstance(files, FileTree) else FileTree(files)
    eligible = [node for node in tree.nodes if is_indexable(node, max_file_chars)]
    total = len(eligible)
    if progress is not None:
        progress(0, total)

    chunks: list[Chunk] = []
    for loaded, node in enumerate(eligible, start=1):
        chunks.extend(chunk_file(node, tree, chunk_lines=chunk_lines, overlap_lines=overlap_lines))
        if progress is not None:
            progress(loaded, total)

    if not chunks:
        logger.info("Index build produced no chunks from %d eligible files", total)
        return None

    chunk_counts = [term_frequencies(chunk.content) for chunk in chunks]
    doc_freq: Counter[str] = Counter()
    for counts in chunk_counts:
        doc_freq.update(counts.keys())

    idf = compute_idf(doc_freq, total_chunks=len(chunks))
    chunk_vectors: dict[str, SparseVector] = {}
    for chunk, counts in zip(chunks, chunk_counts, strict=True):
        chunk_vectors[chunk.id] = MappingProxyType(weight_vector(counts, idf))

    snapshot = IndexSnapshot(
        chunks=tuple(chunks),
        vocabulary=frozenset(doc_freq),
        idf=MappingProxyType(idf),
        chunk_vectors=MappingProxyType(chunk_vectors),
        file_count=len({chunk.file_id for chunk in chunks}),
        built_at=utc_timestamp(),
    )
    logger.info(
        "Index built: %d files, %d chunks, %d terms",
        snapshot.file_count,
        len(snapshot.chunks),
        len(snapshot.vocabulary),
    )
    return snapshot


def compute_idf(doc_freq: Counter[str], total_chunks: int) -> dict[str, float]:
    """Return smoothed idf weights, ln((N + 1) / (df + 1)) + 1, always > 0."""
    return {
        term: math.log((total_chunks + 1) / (df + 1)) + 1.0 for term, df in doc_freq.items()
    }


def weight_vector(counts: Counter[str], idf: dict[str, float] | SparseVector) -> dict[str, float]:
    """Return the L2-normalized TF-IDF vector for one term-count map.

    Terms absent from ``idf`` carry zero weight and are left out. A map with
    no weighted terms yields the empty (zero) vector.
    """
    total_terms = sum(counts.values())
    if total_terms == 0:
        return {}
    vector: dict[str, float] = {}
    for term, count in counts.items():
        weight = idf.get(term, 0.0)
        if weight <= 0:
            continue
        vector[term] = (count / total_terms) * weight
    return l2_normalize(vector)


def l2_normalize(vector: dict[str, float]) -> dict[str, float]:
    """Scale a sparse vector to unit length; zero vectors are returned as is."""
    norm = math.sqrt(sum(value * value for value in vector.values()))
    if norm <= 0:
        return vector
    return {term: value / norm for term, value in vector.items()}
