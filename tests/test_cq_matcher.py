"""Tests for edit-distance competency question matching."""

import pytest

from odpsearch.engine.core.query import PreparedQuery
from odpsearch.engine.index.registry import IndexGeneration
from odpsearch.engine.index.term_index import TermIndex
from odpsearch.engine.scoring.cq_matcher import (
    CompetencyQuestionStrategy,
    levenshtein,
    match_competency_questions,
    relative_distance,
)
from odpsearch.errors import IndexUnavailableError

from .conftest import make_document, make_record


@pytest.mark.parametrize(
    "a,b,expected",
    [
        ("kitten", "sitting", 3),
        ("flaw", "lawn", 2),
        ("", "abc", 3),
        ("abc", "", 3),
        ("same", "same", 0),
    ],
)
def test_levenshtein(a, b, expected):
    assert levenshtein(a, b) == expected


@pytest.mark.parametrize("a,b", [("event", "events"), ("which role?", "what is a role"), ("", "x")])
def test_levenshtein_symmetric(a, b):
    assert levenshtein(a, b) == levenshtein(b, a)


def test_relative_distance():
    assert relative_distance("kitten", "sitting") == pytest.approx(3 / 7)
    assert relative_distance("", "") == 0.0
    assert relative_distance("abc", "abc") == 0.0


def test_exact_question_scores_one():
    doc = make_document(
        make_record("p", competency_questions=["Which objects take part in a certain event?"])
    )
    results = match_competency_questions("which objects take part in a certain event?  ", [doc])
    assert results == [("p", 1.0)]


def test_closest_question_is_used():
    doc = make_document(
        make_record(
            "p",
            competency_questions=["What is the starting date of this interval?", "Which agent plays this role?"],
        )
    )
    [(pattern_id, score)] = match_competency_questions("Which agent plays this role?", [doc])
    assert pattern_id == "p"
    assert score == 1.0


def test_patterns_without_questions_omitted():
    docs = [
        make_document(make_record("with", competency_questions=["Which agent plays this role?"])),
        make_document(make_record("without")),
    ]
    results = match_competency_questions("Which agent plays a role?", docs)
    assert [pid for pid, _ in results] == ["with"]
    assert 0 < results[0][1] < 1


def test_ranked_best_first():
    docs = [
        make_document(make_record("far", competency_questions=["What is the ending date?"])),
        make_document(make_record("near", competency_questions=["Which agent plays this role?"])),
    ]
    results = match_competency_questions("Which agent plays the role?", docs)
    assert results[0][0] == "near"


def test_strategy_requires_term_index():
    query = PreparedQuery(raw="x", tokens=("x",), expanded_terms=frozenset({"x"}))
    with pytest.raises(IndexUnavailableError):
        CompetencyQuestionStrategy().score(IndexGeneration(), query)


def test_strategy_uses_raw_query():
    index = TermIndex()
    index.put(make_document(make_record("p", competency_questions=["Which agent plays this role?"])))
    query = PreparedQuery(
        raw="Which agent plays this role?",
        tokens=("which", "agent", "plays", "this", "role"),
        expanded_terms=frozenset({"which", "agent", "plays", "this", "role"}),
    )
    assert CompetencyQuestionStrategy().score(IndexGeneration(term_index=index), query) == [("p", 1.0)]
