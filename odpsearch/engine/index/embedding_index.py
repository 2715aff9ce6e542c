"""Embedding index over pattern term bags.

``RandomIndexingModel`` is a small reflective random-indexing model:

1. Every document gets a deterministic sparse ternary elemental vector
   (a few +1/-1 entries, seeded from the document id).
2. Term vectors are tf-weighted sums of the elemental vectors of the
   documents the term occurs in.
3. Document vectors are sums of the normalized vectors of their terms.
4. Each further training cycle reuses the document vectors as the elemental
   vectors (reflective training).

Queries sum the normalized vectors of the query terms and rank documents by
cosine similarity.
"""

import logging
import os
import tempfile
import zlib
from collections import Counter
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

import numpy as np

from ...errors import IndexUnavailableError

logger = logging.getLogger(__name__)

# Non-zero entries per elemental vector
SEED_LENGTH = 10


@runtime_checkable
class EmbeddingIndex(Protocol):
    """Nearest-neighbour lookup over pattern documents."""

    def nearest_neighbors(self, terms: Iterable[str], k: int) -> list[tuple[str, float]]:
        """Return up to ``k`` ``(pattern_id, similarity)`` pairs, most similar first."""
        ...


def _normalize_rows(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return matrix / norms


def _elemental_vector(doc_id: str, dimension: int, seed: int) -> np.ndarray:
    """Deterministic sparse ternary vector for one document id."""
    rng = np.random.default_rng([seed, zlib.crc32(doc_id.encode("utf-8"))])
    vector = np.zeros(dimension, dtype=np.float32)
    positions = rng.choice(dimension, size=min(SEED_LENGTH, dimension), replace=False)
    vector[positions] = rng.choice([-1.0, 1.0], size=len(positions))
    return vector


class RandomIndexingModel:
    """Random-indexing term/document vector space persisted as ``.npz``."""

    def __init__(
        self,
        doc_ids: list[str],
        doc_vectors: np.ndarray,
        terms: list[str],
        term_vectors: np.ndarray,
    ):
        self.doc_ids = list(doc_ids)
        self.terms = list(terms)
        self._term_rows = {term: i for i, term in enumerate(self.terms)}
        self.dimension = int(doc_vectors.shape[1]) if doc_vectors.ndim == 2 else 0
        # Rows are stored normalized so lookups are plain dot products.
        self._doc_vectors = _normalize_rows(doc_vectors.astype(np.float32, copy=False))
        self._term_vectors = _normalize_rows(term_vectors.astype(np.float32, copy=False))

    def __len__(self) -> int:
        return len(self.doc_ids)

    @classmethod
    def train(
        cls,
        corpus: Mapping[str, Iterable[str]],
        dimension: int = 512,
        seed: int = 7,
        training_cycles: int = 2,
    ) -> "RandomIndexingModel":
        """Train a model from ``{pattern_id: term bag}``.

        Args:
            corpus: Term bag per pattern id.
            dimension: Vector dimension.
            seed: Seed for the elemental vectors.
            training_cycles: Number of (reflective) training passes, at least 1.

        Returns:
            The trained model. An empty corpus yields an empty model.
        """
        doc_ids = sorted(corpus)
        counts = [Counter(t for t in corpus[doc_id] if t) for doc_id in doc_ids]
        terms = sorted({term for c in counts for term in c})

        if not doc_ids or not terms:
            logger.info("Embedding training skipped: empty corpus")
            return cls(
                doc_ids,
                np.zeros((len(doc_ids), dimension), dtype=np.float32),
                terms,
                np.zeros((len(terms), dimension), dtype=np.float32),
            )

        term_rows = {term: i for i, term in enumerate(terms)}
        # doc x term frequency matrix
        tf = np.zeros((len(doc_ids), len(terms)), dtype=np.float32)
        for row, c in enumerate(counts):
            for term, n in c.items():
                tf[row, term_rows[term]] = n

        basis = np.stack([_elemental_vector(d, dimension, seed) for d in doc_ids])
        term_vectors = np.zeros((len(terms), dimension), dtype=np.float32)
        doc_vectors = basis

        for cycle in range(max(1, training_cycles)):
            term_vectors = tf.T @ basis
            doc_vectors = (tf > 0).astype(np.float32) @ _normalize_rows(term_vectors)
            basis = _normalize_rows(doc_vectors)
            logger.debug(f"Random indexing cycle {cycle + 1}/{training_cycles} complete")

        logger.info(
            f"Embedding index trained: {len(doc_ids)} documents, {len(terms)} terms, "
            f"dimension {dimension}, {training_cycles} cycle(s)"
        )
        return cls(doc_ids, doc_vectors, terms, term_vectors)

    def query_vector(self, terms: Iterable[str]) -> np.ndarray | None:
        """Sum of the normalized vectors of the known query terms."""
        rows = [self._term_rows[t] for t in terms if t in self._term_rows]
        if not rows:
            return None
        vector = self._term_vectors[rows].sum(axis=0)
        norm = np.linalg.norm(vector)
        if norm == 0:
            return None
        return vector / norm

    def nearest_neighbors(self, terms: Iterable[str], k: int) -> list[tuple[str, float]]:
        if k <= 0 or not self.doc_ids:
            return []
        vector = self.query_vector(t.lower() for t in terms)
        if vector is None:
            return []

        similarities = self._doc_vectors @ vector
        ranked = [
            (self.doc_ids[i], float(similarities[i]))
            for i in range(len(self.doc_ids))
            if similarities[i] > 0
        ]
        ranked.sort(key=lambda r: (-r[1], r[0]))
        return ranked[:k]

    # ============ PERSISTENCE ============

    def save(self, path: str | Path) -> None:
        """Write the model as ``.npz``, replacing any previous file atomically."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                np.savez_compressed(
                    f,
                    doc_ids=np.array(self.doc_ids, dtype=str),
                    doc_vectors=self._doc_vectors,
                    terms=np.array(self.terms, dtype=str),
                    term_vectors=self._term_vectors,
                )
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Embedding index saved: {len(self)} documents -> {target}")

    @classmethod
    def load(cls, path: str | Path) -> "RandomIndexingModel":
        """Load a model written by ``save``.

        Raises:
            IndexUnavailableError: If the file is missing or unreadable.
        """
        source = Path(path)
        if not source.is_file():
            raise IndexUnavailableError(f"Embedding index not found: {source}")
        try:
            with np.load(source, allow_pickle=False) as data:
                model = cls(
                    [str(d) for d in data["doc_ids"]],
                    data["doc_vectors"],
                    [str(t) for t in data["terms"]],
                    data["term_vectors"],
                )
        except (OSError, ValueError, KeyError) as e:
            raise IndexUnavailableError(f"Embedding index unreadable: {source}: {e}") from e

        logger.info(f"Embedding index loaded: {len(model)} documents from {source}")
        return model
