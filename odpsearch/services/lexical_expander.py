"""Lexical expansion of words into related terms.

Used at index time (to enrich each pattern's term bag) and at query time
(to enrich the query terms). An expander never raises: any lookup problem
yields an empty set, so a missing dictionary only costs recall.
"""

import logging
import threading
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from ..engine.scoring.constants import DOMAIN_EXPANSIONS

logger = logging.getLogger(__name__)


@runtime_checkable
class LexicalExpander(Protocol):
    """Source of synonyms and hypernyms for a single word."""

    def related_terms(self, word: str) -> set[str]:
        """Return terms related to ``word`` (never including ``word`` itself)."""
        ...


class NullExpander:
    """Expander that knows no related terms."""

    def related_terms(self, word: str) -> set[str]:
        return set()


class StaticExpander:
    """Expander backed by a fixed dictionary of word -> related terms."""

    def __init__(self, expansions: Mapping[str, list[str] | set[str]] | None = None):
        source = DOMAIN_EXPANSIONS if expansions is None else expansions
        self._expansions = {k.lower(): {t.lower() for t in v} for k, v in source.items()}

    def related_terms(self, word: str) -> set[str]:
        key = word.lower()
        return {t for t in self._expansions.get(key, ()) if t != key}


class WordNetExpander:
    """Noun synonyms and hypernyms from WordNet via nltk.

    Lemma names come back with underscores replaced by spaces
    (``social_group`` -> ``social group``). If the WordNet corpus is not
    installed the problem is logged once and every lookup returns an empty set.
    """

    def __init__(self, include_hypernyms: bool = True):
        self.include_hypernyms = include_hypernyms
        self._unavailable = False
        self._cache: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def _lookup(self, word: str) -> set[str]:
        from nltk.corpus import wordnet as wn

        related: set[str] = set()
        for synset in wn.synsets(word, pos=wn.NOUN):
            synsets = [synset]
            if self.include_hypernyms:
                synsets.extend(synset.hypernyms())
            for s in synsets:
                for lemma in s.lemma_names():
                    related.add(lemma.replace("_", " ").lower())
        related.discard(word)
        return related

    def related_terms(self, word: str) -> set[str]:
        key = word.strip().lower()
        if not key or self._unavailable:
            return set()

        cached = self._cache.get(key)
        if cached is not None:
            return set(cached)

        try:
            related = self._lookup(key)
        except LookupError as e:
            with self._lock:
                if not self._unavailable:
                    self._unavailable = True
                    logger.warning(
                        f"WordNet corpus not available, lexical expansion disabled: {e}. "
                        "Install it with: python -m nltk.downloader wordnet"
                    )
            return set()
        except Exception as e:
            logger.warning(f"WordNet lookup failed for '{key}': {e}")
            return set()

        self._cache[key] = related
        return set(related)


def build_expander(kind: str) -> LexicalExpander:
    """Create the expander configured by ``settings.lexical_expander``."""
    if kind == "wordnet":
        return WordNetExpander()
    if kind == "none":
        return NullExpander()
    if kind == "static":
        return StaticExpander()
    raise ValueError(f"Unknown lexical expander '{kind}'")
