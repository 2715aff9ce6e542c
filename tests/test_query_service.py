"""Tests for the query service."""

import pytest

from odpsearch.engine.index.registry import IndexRegistry
from odpsearch.engine.search import ScoreFusionEngine, default_strategies
from odpsearch.errors import QueryParseError
from odpsearch.models import FilterConfiguration, StrategyName
from odpsearch.services.index_builder import IndexBuilder
from odpsearch.services.lexical_expander import NullExpander, StaticExpander
from odpsearch.services.query_service import QueryService

from .conftest import AGENTROLE_IRI, PARTICIPATION_IRI, TIMEINTERVAL_IRI


@pytest.fixture
def registry(make_settings, pattern_repo) -> IndexRegistry:
    registry = IndexRegistry()
    report = IndexBuilder.from_settings(make_settings(pattern_repo), registry, expander=NullExpander()).rebuild()
    assert report.success
    return registry


@pytest.fixture
def service(registry) -> QueryService:
    return QueryService(registry)


class ExplodingStrategy:
    name = StrategyName.LEXICAL

    def score(self, generation, query):
        raise RuntimeError("boom")


# ============ SEARCH ============


@pytest.mark.asyncio
async def test_competency_question_ranks_pattern_first(service):
    results = await service.search("Which objects take part in a certain event?")

    assert results[0].pattern_id == PARTICIPATION_IRI
    assert results[0].confidence == pytest.approx(1.0)
    assert results[0].pattern.name == "Participation"
    assert all(0.0 <= r.confidence <= 1.0 for r in results)


@pytest.mark.asyncio
async def test_results_sorted_by_confidence(service):
    results = await service.search("agent role event")
    confidences = [r.confidence for r in results]
    assert confidences == sorted(confidences, reverse=True)
    assert {r.pattern_id for r in results} >= {AGENTROLE_IRI, PARTICIPATION_IRI}


@pytest.mark.asyncio
async def test_category_filter(service):
    results = await service.search("event", filters=FilterConfiguration(category="event"))
    assert results
    assert all("Event" in r.pattern.categories for r in results)
    assert AGENTROLE_IRI not in {r.pattern_id for r in results}


@pytest.mark.asyncio
async def test_any_category_does_not_filter(service):
    unfiltered = await service.search("date interval role event")
    filtered = await service.search("date interval role event", filters=FilterConfiguration(category="Any"))
    assert unfiltered == filtered


@pytest.mark.asyncio
async def test_limit(service):
    results = await service.search("event role interval", limit=1)
    assert len(results) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   ", "?/?"])
async def test_empty_query_returns_nothing(service, query):
    assert await service.search(query) == []


@pytest.mark.asyncio
async def test_search_without_indices():
    service = QueryService(IndexRegistry())
    assert await service.search("event") == []


@pytest.mark.asyncio
async def test_search_without_embedding_index(registry):
    generation = registry.current
    registry.swap(generation.term_index, None)

    results = await QueryService(registry).search("starting date of this interval")
    assert results[0].pattern_id == TIMEINTERVAL_IRI


@pytest.mark.asyncio
async def test_failing_strategy_is_ignored(registry):
    engine = ScoreFusionEngine([ExplodingStrategy(), *default_strategies()])
    results = await QueryService(registry, engine=engine).search("Which agent plays this role?")
    assert results[0].pattern_id == AGENTROLE_IRI


def test_prepare_expands_terms(registry):
    service = QueryService(registry, expander=StaticExpander({"event": ["social_event", "happening"]}))
    prepared = service.prepare("Which Event?")

    assert prepared.raw == "Which Event?"
    assert prepared.tokens == ("which", "event")
    assert prepared.expanded_terms == frozenset({"which", "event", "social", "happening"})


def test_prepare_rejects_empty(service):
    with pytest.raises(QueryParseError):
        service.prepare("  ")


# ============ LOOKUPS ============


def test_get_pattern(service):
    assert service.get_pattern(AGENTROLE_IRI).name == "Agent Role"
    assert service.get_pattern("http://example.org/unknown.owl") is None


def test_get_pattern_owl_suffix(service):
    stem = AGENTROLE_IRI[: -len(".owl")]
    assert service.get_pattern(stem).id == AGENTROLE_IRI
    assert service.get_pattern(AGENTROLE_IRI + ".owl").id == AGENTROLE_IRI


def test_list_patterns_by_category(service):
    general = service.list_patterns_by_category("general")
    assert [p.id for p in general] == [AGENTROLE_IRI, PARTICIPATION_IRI]

    everything = service.list_patterns_by_category("Any")
    assert [p.name for p in everything] == ["Agent Role", "Participation", "timeinterval.owl"]


def test_list_categories_from_index(service):
    assert service.list_categories() == ["Any", "Event", "General", "Organization", "Time"]


def test_list_categories_from_file(registry, tmp_path):
    path = tmp_path / "categories.txt"
    path.write_text("Time\nAny\nEvent\n", encoding="utf-8")
    assert QueryService(registry, category_list_path=path).list_categories() == ["Any", "Time", "Event"]


def test_list_categories_missing_file_falls_back(registry, tmp_path):
    service = QueryService(registry, category_list_path=tmp_path / "missing.txt")
    assert service.list_categories()[0] == "Any"
    assert "Time" in service.list_categories()


def test_get_pattern_document(service):
    document = service.get_pattern_document(PARTICIPATION_IRI, "nt")
    assert PARTICIPATION_IRI in document


def test_get_pattern_document_missing_source(service, pattern_repo):
    (pattern_repo / "timeinterval.ttl").unlink()
    assert service.get_pattern_document(TIMEINTERVAL_IRI) is None
    assert service.get_pattern_document("http://example.org/unknown.owl") is None
