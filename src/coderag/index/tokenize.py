"""Deterministic term extraction shared by indexing and queries."""

from __future__ import annotations

import re
from collections import Counter

TOKEN_SPLIT_PATTERN = re.compile(r"[^a-zA-Z0-9_]+")
MIN_TERM_LENGTH = 2

ENGLISH_STOPWORDS = frozenset(
    {
        "a", "about", "above", "after", "again", "against", "all", "am", "an", "and",
        "any", "are", "as", "at", "be", "because", "been", "before", "being", "below",
        "between", "both", "but", "by", "can", "did", "do", "does", "doing", "down",
        "during", "each", "few", "for", "from", "further", "had", "has", "have",
        "having", "he", "her", "here", "hers", "herself", "him", "himself", "his",
        "how", "i", "if", "in", "into", "is", "it", "its", "itself", "just", "me",
        "more", "most", "my", "myself", "no", "nor", "not", "now", "of", "off", "on",
        "once", "only", "or", "other", "our", "ours", "ourselves", "out", "over",
        "own", "s", "same", "she", "should", "so", "some", "such", "t", "than",
        "that", "the", "their", "theirs", "them", "themselves", "then", "there",
        "these", "they", "this", "those", "through", "to", "too", "under", "until",
        "up", "very", "was", "we", "were", "what", "when", "where", "which", "while",
        "who", "whom", "why", "will", "with", "you", "your", "yours", "yourself",
        "yourselves",
    }
)  # fmt: skip

# Source keywords that would otherwise dominate term statistics.
CODE_STOPWORDS = frozenset(
    {
        "return", "const", "let", "var", "function", "import", "export", "from",
        "div", "class", "classname", "interface", "type", "public", "private",
        "protected", "static", "async", "await", "new", "this", "super", "extends",
        "implements", "while", "for", "switch", "case", "default", "try", "catch",
    }
)  # fmt: skip

STOPWORDS = ENGLISH_STOPWORDS | CODE_STOPWORDS


def tokenize(text: str) -> list[str]:
    """Lowercase, split on non-word runs, and drop short terms and stopwords."""
    return [
        token
        for token in TOKEN_SPLIT_PATTERN.split(text.lower())
        if len(token) >= MIN_TERM_LENGTH and token not in STOPWORDS
    ]


def term_frequencies(text: str) -> Counter[str]:
    """Return raw per-term counts for one text."""
    return Counter(tokenize(text))
