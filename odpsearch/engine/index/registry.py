"""Current index generation, swapped atomically after each rebuild."""

import logging
import threading
from dataclasses import dataclass

from ...models.enums import IndexState
from .embedding_index import EmbeddingIndex
from .term_index import TermIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexGeneration:
    """The indices one query reads from.

    Either index may be None when it was never built or failed to load; the
    strategy depending on it then contributes no results.
    """

    term_index: TermIndex | None = None
    embedding_index: EmbeddingIndex | None = None
    number: int = 0

    @property
    def documents(self) -> int:
        return len(self.term_index) if self.term_index is not None else 0

    def states(self) -> dict[str, IndexState]:
        return {
            "term": IndexState.LOADED if self.term_index is not None else IndexState.UNAVAILABLE,
            "embedding": (
                IndexState.LOADED if self.embedding_index is not None else IndexState.UNAVAILABLE
            ),
        }


class IndexRegistry:
    """Holds the current ``IndexGeneration``.

    Readers take ``current`` once per request and keep that reference for the
    whole request; ``swap`` replaces it under a lock.
    """

    def __init__(self, initial: IndexGeneration | None = None):
        self._lock = threading.Lock()
        self._current = initial or IndexGeneration()

    @property
    def current(self) -> IndexGeneration:
        return self._current

    def swap(self, term_index: TermIndex | None, embedding_index: EmbeddingIndex | None) -> IndexGeneration:
        """Publish a new generation and return it."""
        with self._lock:
            generation = IndexGeneration(
                term_index=term_index,
                embedding_index=embedding_index,
                number=self._current.number + 1,
            )
            self._current = generation

        logger.info(
            f"Index generation {generation.number} published "
            f"({generation.documents} documents, embedding "
            f"{'loaded' if embedding_index is not None else 'unavailable'})"
        )
        return generation

    def states(self) -> dict[str, IndexState]:
        return self._current.states()
