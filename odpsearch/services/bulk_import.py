"""Bulk import of curated pattern metadata.

The bulk file is a semicolon-separated CSV with a header row::

    iri;name;image;intent;description;consequences;categories;scenarios;cqs;size;profile;strategy;mappings

Only ``iri`` is required. Multi-valued cells (categories, scenarios, cqs,
mappings) separate their values with ``|``.
"""

import logging
from pathlib import Path

import pandas as pd

from ..models.enums import MappingVocabulary
from ..models.patterns import PatternMetadata

logger = logging.getLogger(__name__)

MULTI_VALUE_SEPARATOR = "|"

# CSV column -> PatternMetadata field
SINGLE_VALUED_COLUMNS = {
    "name": "name",
    "image": "image_ref",
    "intent": "intent",
    "description": "description",
    "consequences": "consequences",
    "size": "size",
    "profile": "profile",
    "strategy": "strategy",
}
MULTI_VALUED_COLUMNS = {
    "categories": "categories",
    "scenarios": "scenarios",
    "cqs": "competency_questions",
}


def _split_cell(value: str) -> list[str]:
    return [v.strip() for v in value.split(MULTI_VALUE_SEPARATOR) if v.strip()]


def _parse_mappings(value: str, iri: str) -> list[MappingVocabulary]:
    mappings: list[MappingVocabulary] = []
    for item in _split_cell(value):
        try:
            vocabulary = MappingVocabulary(item.lower().replace(".", "").replace("_", ""))
        except ValueError:
            logger.warning(f"Unknown mapping vocabulary '{item}' for {iri}; ignored")
            continue
        if vocabulary not in mappings:
            mappings.append(vocabulary)
    return mappings


def load_bulk_metadata(path: str | Path) -> dict[str, PatternMetadata]:
    """Load curated metadata keyed by pattern IRI.

    Args:
        path: Path to the semicolon-separated CSV file.

    Returns:
        Mapping of IRI to metadata. Rows without an IRI are skipped; a later
        row with the same IRI replaces an earlier one.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file has no ``iri`` column.
    """
    source = Path(path)
    if not source.is_file():
        raise FileNotFoundError(f"Bulk metadata file not found: {source}")

    df = pd.read_csv(source, sep=";", dtype=str, keep_default_na=False)
    df.columns = [str(c).strip().lower() for c in df.columns]
    if "iri" not in df.columns:
        raise ValueError(f"Bulk metadata file {source} has no 'iri' column")

    records: dict[str, PatternMetadata] = {}
    skipped = 0
    for row in df.to_dict(orient="records"):
        iri = row.get("iri", "").strip()
        if not iri:
            skipped += 1
            continue

        data: dict = {"id": iri}
        for column, field_name in SINGLE_VALUED_COLUMNS.items():
            value = row.get(column, "").strip()
            data[field_name] = value or None
        for column, field_name in MULTI_VALUED_COLUMNS.items():
            data[field_name] = _split_cell(row.get(column, ""))
        data["mappings"] = _parse_mappings(row.get("mappings", ""), iri)

        records[iri] = PatternMetadata(**data)

    logger.info(f"Loaded bulk metadata for {len(records)} patterns from {source} ({skipped} rows skipped)")
    return records


def load_category_list(path: str | Path) -> list[str]:
    """Read one category per line, skipping blanks and duplicates (order kept).

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    source = Path(path)
    categories: list[str] = []
    with source.open(encoding="utf-8") as f:
        for line in f:
            category = line.strip()
            if category and category not in categories:
                categories.append(category)
    return categories
