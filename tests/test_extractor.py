"""Tests for the rdflib pattern extractor."""

import pytest

from odpsearch.errors import ExtractionError
from odpsearch.models import MappingVocabulary
from odpsearch.services.extractor import (
    PatternExtractor,
    RdfPatternExtractor,
    humanize_local_name,
    serialize_pattern_document,
    split_competency_questions,
)

from .conftest import PARTICIPATION_IRI, TIMEINTERVAL_IRI

RDF_XML = """<?xml version="1.0"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns:rdfs="http://www.w3.org/2000/01/rdf-schema#"
         xmlns:owl="http://www.w3.org/2002/07/owl#"
         xmlns:cpa="http://www.ontologydesignpatterns.org/schemas/cpannotationschema.owl#">
  <owl:Ontology rdf:about="http://example.org/cp/owl/situation.owl">
    <cpa:coversRequirements>What is the setting of this situation?</cpa:coversRequirements>
  </owl:Ontology>
  <owl:Class rdf:about="http://example.org/cp/owl/situation.owl#Situation">
    <rdfs:label xml:lang="it">Situazione</rdfs:label>
  </owl:Class>
</rdf:RDF>
"""


@pytest.fixture
def extractor() -> RdfPatternExtractor:
    return RdfPatternExtractor()


def test_implements_protocol(extractor):
    assert isinstance(extractor, PatternExtractor)


def test_extracts_annotations(extractor, pattern_repo):
    metadata = extractor.extract(pattern_repo / "participation.ttl")

    assert metadata.id == PARTICIPATION_IRI
    assert metadata.name == "Participation"
    assert metadata.intent == "To represent the participation of objects in events."
    assert metadata.description == "An object participates in an event at some time."
    assert metadata.consequences == "Participants of an event can be listed."
    assert metadata.categories == ["Event", "General"]
    assert metadata.scenarios == ["Mico participated in the concert."]
    assert metadata.source_path == str(pattern_repo / "participation.ttl")


def test_competency_questions_split(extractor, pattern_repo):
    metadata = extractor.extract(pattern_repo / "participation.ttl")
    assert metadata.competency_questions == [
        "Which objects take part in a certain event?",
        "Which events does an object take part in?",
    ]


def test_class_and_property_labels(extractor, pattern_repo):
    metadata = extractor.extract(pattern_repo / "participation.ttl")
    assert metadata.classes == ["Event", "object"]
    assert metadata.properties == ["has participant", "is participant in"]


def test_mappings_detected(extractor, pattern_repo):
    assert extractor.extract(pattern_repo / "participation.ttl").mappings == [MappingVocabulary.DOLCE]
    assert extractor.extract(pattern_repo / "agentrole.ttl").mappings == []


def test_missing_label_leaves_name_empty(extractor, pattern_repo):
    metadata = extractor.extract(pattern_repo / "timeinterval.ttl")
    assert metadata.id == TIMEINTERVAL_IRI
    assert metadata.name is None
    assert metadata.properties == ["has interval date"]


def test_rdf_xml_with_owl_suffix(extractor, tmp_path):
    path = tmp_path / "situation.owl"
    path.write_text(RDF_XML, encoding="utf-8")
    metadata = extractor.extract(path)
    assert metadata.id == "http://example.org/cp/owl/situation.owl"
    assert metadata.competency_questions == ["What is the setting of this situation?"]
    # Non-English label falls back to the local name.
    assert metadata.classes == ["situation"]


def test_unparseable_file_raises(extractor, tmp_path):
    path = tmp_path / "broken.ttl"
    path.write_text("this is @@ not turtle", encoding="utf-8")
    with pytest.raises(ExtractionError) as exc_info:
        extractor.extract(path)
    assert exc_info.value.source == str(path)


def test_document_without_ontology_raises(extractor, tmp_path):
    path = tmp_path / "plain.ttl"
    path.write_text(
        "@prefix owl: <http://www.w3.org/2002/07/owl#> .\n"
        "<http://example.org/A> a owl:Class .\n",
        encoding="utf-8",
    )
    with pytest.raises(ExtractionError):
        extractor.extract(path)


@pytest.mark.parametrize(
    "iri,expected",
    [
        ("http://x/agentrole.owl#hasRole", "has role"),
        ("http://x/situation.owl#time_indexed-situation", "time indexed situation"),
        ("http://x/p.owl#URLPath", "url path"),
        ("http://x/p/Agent", "agent"),
    ],
)
def test_humanize_local_name(iri, expected):
    assert humanize_local_name(iri) == expected


def test_split_competency_questions():
    assert split_competency_questions("who is it? what is it ?  ") == ["Who is it?", "What is it?"]


def test_serialize_as_turtle(pattern_repo):
    document = serialize_pattern_document(pattern_repo / "agentrole.ttl")
    assert "agentrole.owl" in document
    assert "Agent Role" in document
    assert "<?xml" not in document
