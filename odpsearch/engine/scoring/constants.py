"""Scoring constants for the pattern search engine.

This module contains the constants shared by indexing and retrieval:
- Stop words removed from the indexed term bag
- Token cleanup pattern
- Retrieval limits and fusion bounds
- Built-in expansions for ontology engineering shorthand
"""

import re

# ---------------------------------------------------------------------------
# Stop words: removed from the indexed ``all_terms`` bag only.
# Query terms are not stop-word filtered.
# ---------------------------------------------------------------------------
STOP_WORDS = frozenset(
    {
        # Articles, auxiliaries, modals
        "a", "an", "the", "is", "are", "was", "were", "be", "been", "being",
        "have", "has", "had", "do", "does", "did", "will", "would", "could",
        "should", "may", "might", "shall", "can", "must",
        # Prepositions
        "to", "of", "in", "for", "on", "with", "at", "by", "from", "as", "into",
        "through", "during", "before", "after", "above", "below", "between",
        "out", "off", "over", "under", "again", "further", "about", "against",
        # Adverbs and conjunctions
        "then", "once", "here", "there", "when", "where", "why", "how", "all",
        "both", "each", "few", "more", "most", "other", "some", "such", "no",
        "nor", "not", "only", "own", "same", "so", "than", "too", "very",
        "just", "because", "but", "and", "or", "if", "while", "until",
        # Pronouns and determiners
        "what", "which", "who", "whom", "this", "that", "these", "those", "it",
        "its", "i", "me", "my", "we", "us", "you", "your", "he", "him", "his",
        "she", "her", "our", "they", "them", "their", "any", "itself",
    }
)

# Characters kept when cleaning a token; everything else is dropped.
NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")

# Characters removed from a query before tokenization.
QUERY_STRIP_CHARS = ("?", "/")

# ---------------------------------------------------------------------------
# Retrieval limits
# ---------------------------------------------------------------------------
# Nearest neighbours requested from the embedding index per query.
DEFAULT_EMBEDDING_NEIGHBORS = 25
# Maximum hits taken from the lexical term search per query.
DEFAULT_LEXICAL_LIMIT = 100

# ---------------------------------------------------------------------------
# Fusion bounds
# ---------------------------------------------------------------------------
# A score list needs at least this many entries to be rescaled by its maximum.
MIN_ENTRIES_FOR_RESCALE = 2
# Upper bound of a fused confidence.
MAX_CONFIDENCE = 1.0

# ---------------------------------------------------------------------------
# Ontology engineering shorthand → expanded terms.
# Used by the static lexical expander; WordNet does not know these.
# ---------------------------------------------------------------------------
DOMAIN_EXPANSIONS: dict[str, list[str]] = {
    "odp": ["ontology", "design", "pattern"],
    "cq": ["competency", "question", "requirement"],
    "cqs": ["competency", "questions", "requirements"],
    "owl": ["ontology", "language"],
    "nary": ["relation", "participation", "participant"],
    "n-ary": ["relation", "participation", "participant"],
    "partof": ["part", "whole", "component"],
    "mereology": ["part", "whole", "component"],
    "provenance": ["origin", "source", "derivation"],
    "spatiotemporal": ["space", "time", "location", "interval"],
}
