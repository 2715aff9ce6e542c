"""Document data structures for the pattern search engine.

This module contains the unit stored in the term index: one canonical
pattern record together with its expanded term bag.
"""

from dataclasses import dataclass, field

from ...models.enums import IndexField
from ...models.patterns import PatternRecord
from .query import tokenize

# Record fields holding a single text value
TEXT_FIELDS = (
    IndexField.NAME,
    IndexField.INTENT,
    IndexField.DESCRIPTION,
    IndexField.CONSEQUENCES,
)

# Record fields holding a list of text values
LIST_TEXT_FIELDS = (
    IndexField.CATEGORIES,
    IndexField.SCENARIOS,
    IndexField.COMPETENCY_QUESTIONS,
    IndexField.CLASSES,
    IndexField.PROPERTIES,
)


@dataclass(frozen=True)
class IndexedDocument:
    """A pattern as stored in the term index.

    Attributes:
        id: Pattern IRI (same as ``record.id``)
        record: Canonical record, kept verbatim for display
        all_terms: Tokenized, stop-word-free, synonym-expanded term bag used
            for lexical matching and embedding training
    """

    id: str
    record: PatternRecord
    all_terms: tuple[str, ...] = field(default_factory=tuple)

    def field_text(self, name: IndexField) -> list[str]:
        """Raw text values of a record field."""
        if name in TEXT_FIELDS:
            value = getattr(self.record, name.value)
            return [value] if value else []
        return list(getattr(self.record, name.value))

    def field_terms(self, name: IndexField) -> list[str]:
        """Tokens of a searchable field, duplicates kept."""
        if name is IndexField.ALL_TERMS:
            return list(self.all_terms)
        terms: list[str] = []
        for text in self.field_text(name):
            terms.extend(tokenize(text))
        return terms

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "record": self.record.model_dump(mode="json"),
            "all_terms": list(self.all_terms),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IndexedDocument":
        record = PatternRecord.model_validate(data["record"])
        return cls(id=data["id"], record=record, all_terms=tuple(data.get("all_terms", ())))
