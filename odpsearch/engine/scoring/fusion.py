"""Score fusion for the composite pattern search.

Each retrieval strategy produces ``(pattern_id, raw score)`` pairs on its
own scale. Fusion rescales every list by its maximum, sums the scores per
pattern, sorts, and rescales the merged list once more so the best pattern
has confidence 1.0.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence

from .constants import MAX_CONFIDENCE, MIN_ENTRIES_FOR_RESCALE

ScoreList = list[tuple[str, float]]


def sort_scores(scores: Iterable[tuple[str, float]]) -> ScoreList:
    """Sort by score descending, ties by id ascending."""
    return sorted(scores, key=lambda r: (-r[1], r[0]))


def normalize_by_max(scores: Sequence[tuple[str, float]]) -> ScoreList:
    """Divide every score by the list maximum.

    Lists with fewer than two entries, or whose maximum is not positive, are
    returned unscaled. Order is preserved.
    """
    if len(scores) < MIN_ENTRIES_FOR_RESCALE:
        return list(scores)
    top = max(score for _, score in scores)
    if top <= 0:
        return list(scores)
    return [(pattern_id, score / top) for pattern_id, score in scores]


def merge_score_lists(*score_lists: Iterable[tuple[str, float]]) -> ScoreList:
    """Sum scores per pattern across lists; a missing pattern contributes 0.

    Returns:
        Merged scores, sorted by score descending then id.
    """
    totals: dict[str, float] = defaultdict(float)
    for scores in score_lists:
        for pattern_id, score in scores:
            totals[pattern_id] += score
    return sort_scores(totals.items())


def fuse_score_lists(score_lists: Iterable[Sequence[tuple[str, float]]]) -> ScoreList:
    """Normalize, merge and re-normalize strategy outputs into confidences.

    Every returned confidence lies in [0, 1].

    Args:
        score_lists: One raw score list per strategy.

    Returns:
        ``(pattern_id, confidence)`` pairs, best first, ties by id.
    """
    merged = merge_score_lists(*(normalize_by_max(scores) for scores in score_lists))
    fused = normalize_by_max(merged)
    return [
        (pattern_id, min(max(score, 0.0), MAX_CONFIDENCE)) for pattern_id, score in fused
    ]
