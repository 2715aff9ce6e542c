"""Engine core module.

This module contains core utilities and data structures for the pattern
search engine:
- Tokenization and query preparation
- Indexed document structure
"""

from .document import IndexedDocument
from .query import (
    PreparedQuery,
    index_tokens,
    prepare_query,
    remove_stop_words,
    split_related_term,
    tokenize,
)

__all__ = [
    # Document structures
    "IndexedDocument",
    # Query utilities
    "PreparedQuery",
    "index_tokens",
    "prepare_query",
    "remove_stop_words",
    "split_related_term",
    "tokenize",
]
