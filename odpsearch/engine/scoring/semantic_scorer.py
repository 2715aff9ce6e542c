"""Semantic scoring via the embedding index.

The expanded query terms are summed into one query vector and the nearest
pattern vectors are returned with their cosine similarity.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...errors import IndexUnavailableError
from ...models.enums import StrategyName
from .constants import DEFAULT_EMBEDDING_NEIGHBORS

if TYPE_CHECKING:
    from ..core.query import PreparedQuery
    from ..index.registry import IndexGeneration

logger = logging.getLogger(__name__)


class EmbeddingStrategy:
    """Nearest-neighbour similarity in the embedding space."""

    name = StrategyName.EMBEDDING

    def __init__(self, neighbors: int = DEFAULT_EMBEDDING_NEIGHBORS):
        """Initialize the embedding strategy.

        Args:
            neighbors: Number of nearest patterns requested per query.
        """
        self.neighbors = neighbors

    def score(self, generation: IndexGeneration, query: PreparedQuery) -> list[tuple[str, float]]:
        if generation.embedding_index is None:
            raise IndexUnavailableError("Embedding index is not loaded")
        # Sorted so the query vector is summed in a stable order.
        terms = sorted(query.expanded_terms)
        results = generation.embedding_index.nearest_neighbors(terms, self.neighbors)
        logger.debug(f"Embedding search: {len(results)} neighbours for {len(terms)} terms")
        return results
