"""Competency question matching by edit distance.

A query phrased as a competency question ("Which objects take part in a
certain event?") is compared whole-string against every competency question
of every pattern. A pattern's similarity is ``1 - d`` where ``d`` is the
smallest relative edit distance between the query and one of its questions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ...errors import IndexUnavailableError
from ...models.enums import StrategyName

if TYPE_CHECKING:
    from ..core.document import IndexedDocument
    from ..core.query import PreparedQuery
    from ..index.registry import IndexGeneration

logger = logging.getLogger(__name__)


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (insert, delete, substitute)."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous_row = list(range(len(b) + 1))
    for i, ca in enumerate(a):
        current_row = [i + 1]
        for j, cb in enumerate(b):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (ca != cb)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def relative_distance(a: str, b: str) -> float:
    """Edit distance divided by the longer length; 0.0 for two empty strings."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    return levenshtein(a, b) / longest


def _normalize_question(text: str) -> str:
    return text.strip().lower()


def match_competency_questions(
    query: str,
    documents: Iterable[IndexedDocument],
) -> list[tuple[str, float]]:
    """Score patterns by their closest competency question.

    Args:
        query: The raw query text.
        documents: Indexed patterns to compare against.

    Returns:
        ``(pattern_id, 1 - min relative distance)`` for every pattern with at
        least one competency question and a positive similarity, best first,
        ties by id.
    """
    normalized_query = _normalize_question(query)
    results: list[tuple[str, float]] = []

    for doc in documents:
        questions = [q for q in doc.record.competency_questions if q.strip()]
        if not questions:
            continue
        shortest = min(relative_distance(normalized_query, _normalize_question(q)) for q in questions)
        similarity = 1.0 - shortest
        if similarity > 0:
            results.append((doc.id, similarity))

    results.sort(key=lambda r: (-r[1], r[0]))
    return results


class CompetencyQuestionStrategy:
    """Edit-distance matching of the raw query against competency questions."""

    name = StrategyName.COMPETENCY_QUESTION

    def score(self, generation: IndexGeneration, query: PreparedQuery) -> list[tuple[str, float]]:
        if generation.term_index is None:
            raise IndexUnavailableError("Term index is not loaded")
        return match_competency_questions(query.raw, generation.term_index.documents())
