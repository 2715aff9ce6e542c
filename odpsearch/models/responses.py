"""Response models for the pattern search service."""

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, Field

from .enums import IndexState
from .patterns import PatternRecord


@dataclass(frozen=True, order=True)
class SearchResult:
    """One ranked pattern for a query.

    Equality and ordering are defined over ``(pattern_id, confidence)``; the
    attached display record does not take part.
    """

    pattern_id: str
    confidence: float
    pattern: PatternRecord | None = field(default=None, compare=False, repr=False)

    def with_pattern(self, pattern: PatternRecord) -> "SearchResult":
        return SearchResult(self.pattern_id, self.confidence, pattern)


class RankedPattern(BaseModel):
    """A search hit as sent over the wire."""

    pattern: PatternRecord
    confidence: float = Field(..., ge=0.0, le=1.0)


class SearchResponse(BaseModel):
    """Result of a pattern search."""

    query: str
    results: list[RankedPattern] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)


class RebuildReport(BaseModel):
    """Outcome of an index rebuild."""

    success: bool
    message: str = Field(..., description="Human-readable status")
    documents_indexed: int = Field(default=0, ge=0)
    documents_skipped: int = Field(default=0, ge=0)
    term_index_seconds: float = Field(default=0.0, ge=0.0)
    embedding_index_seconds: float = Field(default=0.0, ge=0.0)


class CategoryListResponse(BaseModel):
    categories: list[str] = Field(default_factory=list)


class PatternListResponse(BaseModel):
    category: str
    patterns: list[PatternRecord] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)


# ============ HEALTH MODELS ============


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: datetime


class ReadyResponse(BaseModel):
    """Readiness check response."""

    status: str
    version: str
    indices: dict[str, IndexState] = Field(default_factory=dict)
    documents: int = Field(default=0, ge=0)
