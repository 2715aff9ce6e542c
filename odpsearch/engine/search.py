"""Score Fusion Engine.

Runs the retrieval strategies concurrently against one index generation and
fuses their outputs into a single ranked list of ``SearchResult``.
"""

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Protocol

from ..errors import IndexUnavailableError
from ..models.enums import StrategyName
from ..models.responses import SearchResult
from .core.query import PreparedQuery
from .index.registry import IndexGeneration
from .scoring import (
    CompetencyQuestionStrategy,
    EmbeddingStrategy,
    LexicalStrategy,
    fuse_score_lists,
)
from .scoring.constants import DEFAULT_EMBEDDING_NEIGHBORS, DEFAULT_LEXICAL_LIMIT

logger = logging.getLogger(__name__)


class ScoringStrategy(Protocol):
    """One independent retrieval signal."""

    name: StrategyName

    def score(self, generation: IndexGeneration, query: PreparedQuery) -> list[tuple[str, float]]:
        """Return ``(pattern_id, raw score)`` pairs; raises if its index is missing."""
        ...


def default_strategies(
    lexical_limit: int = DEFAULT_LEXICAL_LIMIT,
    embedding_neighbors: int = DEFAULT_EMBEDDING_NEIGHBORS,
) -> list[ScoringStrategy]:
    return [
        LexicalStrategy(limit=lexical_limit),
        EmbeddingStrategy(neighbors=embedding_neighbors),
        CompetencyQuestionStrategy(),
    ]


class ScoreFusionEngine:
    """Fans a prepared query out to every strategy and fuses the results.

    A strategy that fails contributes an empty list; the search itself never
    fails because of one signal.
    """

    def __init__(self, strategies: Sequence[ScoringStrategy] | None = None):
        self.strategies = list(strategies) if strategies is not None else default_strategies()

    async def search(self, generation: IndexGeneration, query: PreparedQuery) -> list[SearchResult]:
        """Rank patterns for a prepared query.

        Args:
            generation: Index generation read for the whole query.
            query: The prepared query.

        Returns:
            Results sorted by confidence descending, ties by id. Confidences
            lie in [0, 1].
        """

        async def run_strategy(strategy: ScoringStrategy) -> list[tuple[str, float]]:
            start_time = time.perf_counter()
            try:
                results = await asyncio.to_thread(strategy.score, generation, query)
            except IndexUnavailableError as e:
                logger.warning(f"Strategy '{strategy.name}' skipped: {e}")
                return []
            except Exception as e:
                logger.error(f"Strategy '{strategy.name}' failed: {e}", exc_info=True)
                return []

            latency_ms = int((time.perf_counter() - start_time) * 1000)
            logger.debug(f"Strategy '{strategy.name}': {len(results)} results in {latency_ms}ms")
            return results

        score_lists = await asyncio.gather(*[run_strategy(s) for s in self.strategies])
        fused = fuse_score_lists(score_lists)
        return [SearchResult(pattern_id, confidence) for pattern_id, confidence in fused]
