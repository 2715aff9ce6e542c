"""Query preparation and text tokenization.

The same tokenizer feeds the term index at build time and the lexical
strategy at query time, so terms line up on both sides.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ...errors import QueryParseError
from ..scoring.constants import NON_ALPHANUMERIC, QUERY_STRIP_CHARS, STOP_WORDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedQuery:
    """A query ready for the retrieval strategies.

    Attributes:
        raw: The query as submitted, used for competency question matching
        tokens: Normalized query tokens
        expanded_terms: Tokens plus their synonyms/hypernyms, used for lexical
            and embedding search
    """

    raw: str
    tokens: tuple[str, ...]
    expanded_terms: frozenset[str]


def tokenize(text: str | None) -> list[str]:
    """Split text into lowercase alphanumeric tokens.

    Args:
        text: Text to tokenize (None yields no tokens).

    Returns:
        Tokens in order of appearance, duplicates kept.
    """
    if not text:
        return []
    return [t for t in NON_ALPHANUMERIC.split(text.lower()) if t]


def remove_stop_words(tokens: Iterable[str]) -> list[str]:
    return [t for t in tokens if t not in STOP_WORDS]


def index_tokens(texts: Iterable[str | None]) -> list[str]:
    """Tokenize several fields into one stop-word-free term list."""
    terms: list[str] = []
    for text in texts:
        terms.extend(remove_stop_words(tokenize(text)))
    return terms


def prepare_query(query: str) -> list[str]:
    """Normalize a query string into an array of lowercase words.

    Lower-cases the query, removes ``?`` and ``/`` and splits on whitespace.

    Args:
        query: The input query string.

    Returns:
        The query words.

    Raises:
        QueryParseError: If the query is not a string or has no words.
    """
    if not isinstance(query, str):
        raise QueryParseError(f"Query must be a string, got {type(query).__name__}")

    normalized = query.lower()
    for char in QUERY_STRIP_CHARS:
        normalized = normalized.replace(char, "")

    words = normalized.split()
    if not words:
        raise QueryParseError("Query contains no searchable terms")
    return words


def split_related_term(term: str) -> list[str]:
    """Split a dictionary lemma (``"social_group"``) into index tokens."""
    return tokenize(term.replace("_", " "))
