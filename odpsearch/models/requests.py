"""Request models for the pattern search service."""

from pydantic import BaseModel, Field

from .enums import ANY_CATEGORY, MappingVocabulary
from .patterns import PatternRecord


class FilterConfiguration(BaseModel):
    """Search filters enabled by the user.

    Every predicate is optional. A predicate that is ``None`` imposes no
    constraint; the present ones are combined with a conjunctive AND.
    """

    # Core filters
    category: str | None = Field(
        default=None, description=f"Category the pattern must belong to ('{ANY_CATEGORY}' = all)"
    )
    size: str | None = Field(default=None, description="Required size tag")
    profile: str | None = Field(default=None, description="Required profile tag")
    strategy: str | None = Field(default=None, description="Required modelling strategy tag")

    # Alignment filters
    dolce_mapping_required: bool | None = Field(default=None)
    schema_org_mapping_required: bool | None = Field(default=None)
    dbpedia_mapping_required: bool | None = Field(default=None)

    def matches(self, record: PatternRecord) -> bool:
        """Return True if the record satisfies every present predicate."""
        if self.category is not None and self.category.lower() != ANY_CATEGORY.lower():
            wanted = self.category.lower()
            if not any(c.lower() == wanted for c in record.categories):
                return False

        for field_name in ("size", "profile", "strategy"):
            wanted_tag = getattr(self, field_name)
            if wanted_tag is None:
                continue
            actual = getattr(record, field_name)
            if actual is None or actual.lower() != wanted_tag.lower():
                return False

        required = (
            (self.dolce_mapping_required, MappingVocabulary.DOLCE),
            (self.schema_org_mapping_required, MappingVocabulary.SCHEMA_ORG),
            (self.dbpedia_mapping_required, MappingVocabulary.DBPEDIA),
        )
        for flag, vocabulary in required:
            if flag and not record.has_mapping(vocabulary):
                return False

        return True


class SearchParams(BaseModel):
    """Body of a pattern search request."""

    query: str = Field(..., description="Free-text query or competency question")
    filters: FilterConfiguration | None = Field(default=None, description="Optional filters")
    limit: int | None = Field(
        default=None, ge=1, le=1000, description="Maximum results to return"
    )
