"""Indexing and search package."""

from .builder import build_index, compute_idf, l2_normalize, weight_vector
from .chunking import (
    DEFAULT_CHUNK_LINES,
    DEFAULT_CHUNK_OVERLAP_LINES,
    DEFAULT_MAX_FILE_CHARS,
    build_chunk_id,
    chunk_file,
    is_indexable,
)
from .models import Chunk, IndexSnapshot, IndexStatus, SearchResult
from .search import (
    DEFAULT_SEARCH_LIMIT,
    MIN_RELEVANCE_SCORE,
    cosine_similarity,
    result_to_dict,
    search_index,
)
from .tokenize import STOPWORDS, term_frequencies, tokenize

__all__ = [
    "Chunk",
    "DEFAULT_CHUNK_LINES",
    "DEFAULT_CHUNK_OVERLAP_LINES",
    "DEFAULT_MAX_FILE_CHARS",
    "DEFAULT_SEARCH_LIMIT",
    "IndexSnapshot",
    "IndexStatus",
    "MIN_RELEVANCE_SCORE",
    "STOPWORDS",
    "SearchResult",
    "build_chunk_id",
    "build_index",
    "chunk_file",
    "compute_idf",
    "cosine_similarity",
    "is_indexable",
    "l2_normalize",
    "result_to_dict",
    "search_index",
    "term_frequencies",
    "tokenize",
    "weight_vector",
]
