"""Pydantic models for the pattern search service.

This module re-exports all models. Import from submodules directly for
cleaner imports:

    from odpsearch.models.patterns import PatternRecord, merge_pattern_metadata
    from odpsearch.models.requests import FilterConfiguration
"""

# ============ ENUMS ============
from .enums import (
    ANY_CATEGORY,
    IndexField,
    IndexState,
    MappingVocabulary,
    StrategyName,
)

# ============ PATTERN MODELS ============
from .patterns import (
    PatternMetadata,
    PatternRecord,
    derive_name,
    merge_pattern_metadata,
)

# ============ REQUEST MODELS ============
from .requests import FilterConfiguration, SearchParams

# ============ RESPONSE MODELS ============
from .responses import (
    CategoryListResponse,
    HealthResponse,
    PatternListResponse,
    RankedPattern,
    ReadyResponse,
    RebuildReport,
    SearchResponse,
    SearchResult,
)

__all__ = [
    # Enums
    "ANY_CATEGORY",
    "IndexField",
    "IndexState",
    "MappingVocabulary",
    "StrategyName",
    # Patterns
    "PatternMetadata",
    "PatternRecord",
    "derive_name",
    "merge_pattern_metadata",
    # Requests
    "FilterConfiguration",
    "SearchParams",
    # Responses
    "CategoryListResponse",
    "HealthResponse",
    "PatternListResponse",
    "RankedPattern",
    "ReadyResponse",
    "RebuildReport",
    "SearchResponse",
    "SearchResult",
]
