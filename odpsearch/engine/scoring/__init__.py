"""Scoring engine for the composite pattern search.

This package provides the retrieval strategies and the fusion math:
- Lexical term overlap against the expanded term bag
- Embedding-space nearest neighbours
- Edit-distance matching against competency questions
- Max-normalization and additive fusion of strategy scores

Usage:
    from odpsearch.engine.scoring import (
        LexicalStrategy,
        EmbeddingStrategy,
        CompetencyQuestionStrategy,
        fuse_score_lists,
    )
"""

from .constants import (
    DEFAULT_EMBEDDING_NEIGHBORS,
    DEFAULT_LEXICAL_LIMIT,
    DOMAIN_EXPANSIONS,
    MAX_CONFIDENCE,
    STOP_WORDS,
)
from .cq_matcher import (
    CompetencyQuestionStrategy,
    levenshtein,
    match_competency_questions,
    relative_distance,
)
from .fusion import (
    fuse_score_lists,
    merge_score_lists,
    normalize_by_max,
    sort_scores,
)
from .lexical_scorer import LexicalStrategy
from .semantic_scorer import EmbeddingStrategy

__all__ = [
    # Constants
    "DEFAULT_EMBEDDING_NEIGHBORS",
    "DEFAULT_LEXICAL_LIMIT",
    "DOMAIN_EXPANSIONS",
    "MAX_CONFIDENCE",
    "STOP_WORDS",
    # CQ matcher
    "CompetencyQuestionStrategy",
    "levenshtein",
    "match_competency_questions",
    "relative_distance",
    # Fusion
    "fuse_score_lists",
    "merge_score_lists",
    "normalize_by_max",
    "sort_scores",
    # Strategies
    "EmbeddingStrategy",
    "LexicalStrategy",
]
