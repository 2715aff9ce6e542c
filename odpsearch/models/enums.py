"""Enumeration types for the pattern search service."""

from enum import StrEnum


class MappingVocabulary(StrEnum):
    """External vocabularies a pattern may be aligned to."""

    DOLCE = "dolce"
    SCHEMA_ORG = "schemaorg"
    DBPEDIA = "dbpedia"


class StrategyName(StrEnum):
    """Retrieval strategies combined by the fusion engine."""

    LEXICAL = "lexical"
    EMBEDDING = "embedding"
    COMPETENCY_QUESTION = "competency_question"


class IndexState(StrEnum):
    """Availability of a backing index."""

    LOADED = "loaded"
    UNAVAILABLE = "unavailable"


class IndexField(StrEnum):
    """Searchable fields of the term index."""

    NAME = "name"
    INTENT = "intent"
    DESCRIPTION = "description"
    CONSEQUENCES = "consequences"
    CATEGORIES = "categories"
    SCENARIOS = "scenarios"
    COMPETENCY_QUESTIONS = "competency_questions"
    CLASSES = "classes"
    PROPERTIES = "properties"
    ALL_TERMS = "all_terms"


# Sentinel category matching every pattern
ANY_CATEGORY = "Any"
