"""Pattern metadata models and the merge policy between sources of record.

Two sources describe a pattern:
- the pattern document itself, via the extractor (``PatternMetadata``)
- curated bulk metadata imported from CSV (``PatternMetadata``)

``merge_pattern_metadata`` reconciles them into one canonical ``PatternRecord``.
The bulk source is authoritative when it has a value; for list fields the
longer list wins, ties favouring the bulk list.
"""

from pydantic import BaseModel, ConfigDict, Field

from .enums import MappingVocabulary

UNKNOWN_PATTERN_NAME = "Unknown"

SINGLE_VALUED_FIELDS = (
    "image_ref",
    "intent",
    "description",
    "consequences",
    "size",
    "profile",
    "strategy",
    "source_path",
)

LIST_FIELDS = (
    "categories",
    "scenarios",
    "competency_questions",
    "classes",
    "properties",
    "mappings",
)


class PatternMetadata(BaseModel):
    """Partial description of a pattern from a single source."""

    id: str = Field(..., min_length=1, description="Pattern IRI")
    name: str | None = Field(default=None, description="Display name, if the source has one")
    image_ref: str | None = Field(default=None, description="Illustration IRI or path")
    intent: str | None = None
    description: str | None = None
    consequences: str | None = None
    categories: list[str] = Field(default_factory=list)
    scenarios: list[str] = Field(default_factory=list)
    competency_questions: list[str] = Field(default_factory=list)
    classes: list[str] = Field(default_factory=list, description="Class labels")
    properties: list[str] = Field(default_factory=list, description="Property labels")
    size: str | None = None
    profile: str | None = None
    strategy: str | None = None
    mappings: list[MappingVocabulary] = Field(default_factory=list)
    source_path: str | None = Field(default=None, description="Pattern document on disk")


class PatternRecord(PatternMetadata):
    """Canonical, immutable record of one pattern within an index generation."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)

    @classmethod
    def from_metadata(cls, metadata: PatternMetadata) -> "PatternRecord":
        """Promote a single-source record, deriving the name if it has none."""
        data = metadata.model_dump()
        data["name"] = _present(metadata.name) or derive_name(metadata.id)
        return cls(**data)

    def has_mapping(self, vocabulary: MappingVocabulary) -> bool:
        return vocabulary in self.mappings


def derive_name(pattern_id: str) -> str:
    """Derive a display name from the last path segment of a pattern IRI.

    ``http://example.org/cp/owl/agentrole.owl`` -> ``agentrole.owl``.
    A trailing slash is ignored.
    """
    segment = pattern_id.rstrip("/").rsplit("/", 1)[-1].strip()
    return segment or UNKNOWN_PATTERN_NAME


def _present(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def _first_present(*values: str | None) -> str | None:
    for value in values:
        if _present(value) is not None:
            return value
    return None


def _longer(preferred: list, other: list) -> list:
    """Pick the longer list; ties go to ``preferred``."""
    return list(other) if len(other) > len(preferred) else list(preferred)


def merge_pattern_metadata(
    bulk: PatternMetadata | None,
    extracted: PatternMetadata,
) -> PatternRecord:
    """Merge bulk-imported and extracted metadata for the same pattern.

    Args:
        bulk: Curated record for the pattern, if one exists.
        extracted: Record extracted from the pattern document.

    Returns:
        The canonical record. Keeps the extracted ``id`` (the bulk source may
        use a slightly different IRI form).
    """
    if bulk is None:
        return PatternRecord.from_metadata(extracted)

    merged: dict = {"id": extracted.id}
    merged["name"] = (
        _first_present(bulk.name, extracted.name) or derive_name(extracted.id)
    )
    for field_name in SINGLE_VALUED_FIELDS:
        merged[field_name] = _first_present(
            getattr(bulk, field_name), getattr(extracted, field_name)
        )
    for field_name in LIST_FIELDS:
        merged[field_name] = _longer(getattr(bulk, field_name), getattr(extracted, field_name))

    return PatternRecord(**merged)
