"""Inverted term index over pattern documents.

Keeps per-field postings (term -> {pattern id: term frequency}) for every
searchable field plus the expanded ``all_terms`` bag. An index is always
created empty; a rebuild fills a fresh instance and never mutates the one
readers are using.

Scoring for a document *d* and the distinct query terms *Q*::

    score(d) = sum(tf(t, d) * idf(t) for t in Q) * |Q ∩ d| / |Q|
    idf(t)   = 1 + ln(N / (df(t) + 1))
"""

import json
import logging
import math
import os
import tempfile
from collections import Counter, defaultdict
from collections.abc import Iterable
from pathlib import Path

from ...errors import IndexUnavailableError
from ...models.enums import IndexField
from ..core.document import IndexedDocument
from ..core.query import tokenize

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _resolve_field(field: IndexField | str) -> IndexField:
    try:
        return IndexField(field)
    except ValueError:
        raise ValueError(
            f"Unknown index field '{field}'. Valid fields: {', '.join(f.value for f in IndexField)}"
        ) from None


class TermIndex:
    """In-memory inverted index with JSON snapshot persistence."""

    def __init__(self) -> None:
        self._documents: dict[str, IndexedDocument] = {}
        self._postings: dict[IndexField, dict[str, dict[str, int]]] = {
            field: defaultdict(dict) for field in IndexField
        }

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, pattern_id: object) -> bool:
        return pattern_id in self._documents

    # ============ WRITE ============

    def put(self, doc: IndexedDocument) -> None:
        """Add a document, replacing any previous document with the same id."""
        if doc.id in self._documents:
            self._remove(doc.id)

        self._documents[doc.id] = doc
        for field in IndexField:
            for term, tf in Counter(doc.field_terms(field)).items():
                self._postings[field][term][doc.id] = tf

    def _remove(self, pattern_id: str) -> None:
        old = self._documents.pop(pattern_id)
        for field in IndexField:
            postings = self._postings[field]
            for term in set(old.field_terms(field)):
                docs = postings.get(term)
                if docs is None:
                    continue
                docs.pop(pattern_id, None)
                if not docs:
                    del postings[term]

    # ============ READ ============

    def get_by_id(self, pattern_id: str) -> IndexedDocument | None:
        return self._documents.get(pattern_id)

    def documents(self) -> list[IndexedDocument]:
        """All documents, ordered by id."""
        return [self._documents[k] for k in sorted(self._documents)]

    def search(
        self,
        field: IndexField | str,
        query: str | Iterable[str],
        limit: int | None = None,
    ) -> list[tuple[str, float]]:
        """Rank documents by relevance of one field to the query terms.

        Args:
            field: Searchable field name.
            query: Query text (tokenized here) or an iterable of terms.
            limit: Maximum number of hits (None = all).

        Returns:
            ``(pattern_id, score)`` pairs, most relevant first, ties by id.
            Documents with a zero score are not returned.

        Raises:
            ValueError: If ``field`` is not a searchable field.
        """
        resolved = _resolve_field(field)
        if isinstance(query, str):
            terms = set(tokenize(query))
        else:
            terms = {t.lower() for t in query if t and t.strip()}
        if not terms or not self._documents:
            return []

        postings = self._postings[resolved]
        total_docs = len(self._documents)
        weighted: dict[str, float] = defaultdict(float)
        matched: dict[str, int] = defaultdict(int)

        for term in terms:
            docs = postings.get(term)
            if not docs:
                continue
            idf = 1.0 + math.log(total_docs / (len(docs) + 1))
            for pattern_id, tf in docs.items():
                weighted[pattern_id] += tf * idf
                matched[pattern_id] += 1

        results = [
            (pattern_id, score * matched[pattern_id] / len(terms))
            for pattern_id, score in weighted.items()
        ]
        results = [r for r in results if r[1] > 0]
        results.sort(key=lambda r: (-r[1], r[0]))
        if limit is not None:
            results = results[:limit]
        return results

    # ============ PERSISTENCE ============

    def save(self, path: str | Path) -> None:
        """Write a JSON snapshot, replacing any previous one atomically."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "version": SNAPSHOT_VERSION,
            "documents": [doc.to_dict() for doc in self.documents()],
        }

        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Term index saved: {len(self)} documents -> {target}")

    @classmethod
    def load(cls, path: str | Path) -> "TermIndex":
        """Load a snapshot written by ``save``.

        Raises:
            IndexUnavailableError: If the snapshot is missing or unreadable.
        """
        source = Path(path)
        try:
            with source.open(encoding="utf-8") as f:
                payload = json.load(f)
            index = cls()
            for entry in payload["documents"]:
                index.put(IndexedDocument.from_dict(entry))
        except FileNotFoundError as e:
            raise IndexUnavailableError(f"Term index snapshot not found: {source}") from e
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise IndexUnavailableError(f"Term index snapshot unreadable: {source}: {e}") from e

        logger.info(f"Term index loaded: {len(index)} documents from {source}")
        return index
