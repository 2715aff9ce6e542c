"""Query Service.

Entry point for pattern search and pattern lookups. Every request reads the
registry's current generation once, so a rebuild finishing mid-request never
mixes two generations in one answer.
"""

import asyncio
import logging
from pathlib import Path

from ..engine.core.query import PreparedQuery, prepare_query, split_related_term, tokenize
from ..engine.index.registry import IndexGeneration, IndexRegistry
from ..engine.search import ScoreFusionEngine
from ..errors import ExtractionError, QueryParseError
from ..models.enums import ANY_CATEGORY
from ..models.patterns import PatternRecord
from ..models.requests import FilterConfiguration
from ..models.responses import SearchResult
from .bulk_import import load_category_list
from .extractor import serialize_pattern_document
from .lexical_expander import LexicalExpander, NullExpander

logger = logging.getLogger(__name__)

OWL_SUFFIX = ".owl"


class QueryService:
    """Composite pattern search plus read access to indexed patterns."""

    def __init__(
        self,
        registry: IndexRegistry,
        expander: LexicalExpander | None = None,
        engine: ScoreFusionEngine | None = None,
        category_list_path: str | Path | None = None,
    ):
        self.registry = registry
        self.expander = expander or NullExpander()
        self.engine = engine or ScoreFusionEngine()
        self.category_list_path = Path(category_list_path) if category_list_path else None

    # ============ SEARCH ============

    def prepare(self, query: str) -> PreparedQuery:
        """Normalize and expand a query.

        Raises:
            QueryParseError: If the query has no searchable terms.
        """
        tokens = prepare_query(query)
        expanded: set[str] = set(tokens)
        for token in dict.fromkeys(tokens):
            expanded.update(tokenize(token))
            for related in self.expander.related_terms(token):
                expanded.update(split_related_term(related))
        return PreparedQuery(raw=query, tokens=tuple(tokens), expanded_terms=frozenset(expanded))

    async def search(
        self,
        query: str,
        filters: FilterConfiguration | None = None,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """Run the composite search.

        Args:
            query: Free-text query or competency question.
            filters: Optional filter predicates (AND-combined).
            limit: Maximum number of results (None = all).

        Returns:
            Ranked results with their display records attached. A query with
            no searchable terms returns an empty list.
        """
        try:
            prepared = await asyncio.to_thread(self.prepare, query)
        except QueryParseError as e:
            logger.debug(f"Query rejected: {e}")
            return []

        generation = self.registry.current
        ranked = await self.engine.search(generation, prepared)

        results: list[SearchResult] = []
        for result in ranked:
            record = self._record(generation, result.pattern_id)
            if record is None:
                continue
            if filters is not None and not filters.matches(record):
                continue
            results.append(result.with_pattern(record))
            if limit is not None and len(results) >= limit:
                break

        logger.info(
            f"Search '{query[:80]}': {len(ranked)} ranked, {len(results)} returned "
            f"(generation {generation.number})"
        )
        return results

    # ============ LOOKUPS ============

    @staticmethod
    def _record(generation: IndexGeneration, pattern_id: str) -> PatternRecord | None:
        if generation.term_index is None:
            return None
        doc = generation.term_index.get_by_id(pattern_id)
        return doc.record if doc is not None else None

    def get_pattern(self, pattern_id: str) -> PatternRecord | None:
        """Look up a pattern by IRI, with or without the ``.owl`` suffix."""
        generation = self.registry.current
        candidates = [pattern_id, pattern_id + OWL_SUFFIX]
        if pattern_id.endswith(OWL_SUFFIX):
            candidates.append(pattern_id[: -len(OWL_SUFFIX)])
        for candidate in candidates:
            record = self._record(generation, candidate)
            if record is not None:
                return record
        return None

    def list_patterns_by_category(self, category: str = ANY_CATEGORY) -> list[PatternRecord]:
        """Patterns in a category (case-insensitive), sorted by name then id.

        ``"Any"`` returns every pattern.
        """
        term_index = self.registry.current.term_index
        if term_index is None:
            return []
        category_filter = FilterConfiguration(category=category)
        records = [doc.record for doc in term_index.documents() if category_filter.matches(doc.record)]
        return sorted(records, key=lambda r: (r.name.lower(), r.id))

    def list_categories(self) -> list[str]:
        """Known categories, ``"Any"`` first.

        Uses the configured category list if it is readable, otherwise the
        categories of the indexed patterns.
        """
        categories: list[str] = []
        if self.category_list_path is not None:
            try:
                categories = load_category_list(self.category_list_path)
            except OSError as e:
                logger.warning(f"Category list unavailable, using indexed categories: {e}")

        if not categories:
            term_index = self.registry.current.term_index
            indexed: set[str] = set()
            if term_index is not None:
                for doc in term_index.documents():
                    indexed.update(doc.record.categories)
            categories = sorted(indexed, key=str.lower)

        return [ANY_CATEGORY] + [c for c in categories if c.lower() != ANY_CATEGORY.lower()]

    def get_pattern_document(self, pattern_id: str, fmt: str = "turtle") -> str | None:
        """Serialize the stored document of a pattern, or None if unavailable."""
        record = self.get_pattern(pattern_id)
        if record is None or not record.source_path:
            return None
        source = Path(record.source_path)
        if not source.is_file():
            logger.warning(f"Document for {record.id} missing on disk: {source}")
            return None
        try:
            return serialize_pattern_document(source, fmt)
        except ExtractionError as e:
            logger.warning(f"Document for {record.id} could not be serialized: {e}")
            return None
