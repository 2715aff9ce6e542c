"""Lexical term-overlap scoring.

Searches the expanded query terms against the ``all_terms`` bag of the term
index, so a query word matches a pattern either directly or through one of
the synonyms/hypernyms added to the pattern at index time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...errors import IndexUnavailableError
from ...models.enums import IndexField, StrategyName
from .constants import DEFAULT_LEXICAL_LIMIT

if TYPE_CHECKING:
    from ..core.query import PreparedQuery
    from ..index.registry import IndexGeneration

logger = logging.getLogger(__name__)


class LexicalStrategy:
    """Term overlap between the expanded query and each pattern's term bag."""

    name = StrategyName.LEXICAL

    def __init__(self, limit: int = DEFAULT_LEXICAL_LIMIT, field: IndexField = IndexField.ALL_TERMS):
        self.limit = limit
        self.field = field

    def score(self, generation: IndexGeneration, query: PreparedQuery) -> list[tuple[str, float]]:
        if generation.term_index is None:
            raise IndexUnavailableError("Term index is not loaded")
        results = generation.term_index.search(self.field, query.expanded_terms, self.limit)
        logger.debug(f"Lexical search on '{self.field}': {len(results)} hits")
        return results
