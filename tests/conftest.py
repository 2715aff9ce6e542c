"""Shared fixtures: a small pattern repository and record factories."""

from pathlib import Path

import pytest

from odpsearch.config import Settings
from odpsearch.engine.core.document import IndexedDocument
from odpsearch.engine.core.query import index_tokens
from odpsearch.models import PatternRecord

PARTICIPATION_IRI = "http://www.ontologydesignpatterns.org/cp/owl/participation.owl"
AGENTROLE_IRI = "http://www.ontologydesignpatterns.org/cp/owl/agentrole.owl"
TIMEINTERVAL_IRI = "http://www.ontologydesignpatterns.org/cp/owl/timeinterval.owl"

PREFIXES = """\
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix cpa: <http://www.ontologydesignpatterns.org/schemas/cpannotationschema.owl#> .
@prefix cpas: <http://xd-protege.com/schemas/cpas-ext.owl#> .
"""

PARTICIPATION_TTL = PREFIXES + f"""\
@prefix : <{PARTICIPATION_IRI}#> .

<{PARTICIPATION_IRI}> a owl:Ontology ;
    rdfs:label "Participation"@en ;
    cpa:hasIntent "To represent the participation of objects in events." ;
    cpas:solutionDescription "An object participates in an event at some time." ;
    cpa:hasConsequences "Participants of an event can be listed." ;
    cpas:category "Event", "General" ;
    cpa:coversRequirements "Which objects take part in a certain event? Which events does an object take part in?" ;
    cpa:scenarios "mico participated in the concert." .

:Event a owl:Class ;
    rdfs:label "Event"@en ;
    rdfs:subClassOf <http://www.ontologydesignpatterns.org/ont/dul/DUL.owl#Event> .
:Object a owl:Class .
:isParticipantIn a owl:ObjectProperty ;
    rdfs:label "is participant in"@en .
:hasParticipant a owl:ObjectProperty .
"""

AGENTROLE_TTL = PREFIXES + f"""\
@prefix : <{AGENTROLE_IRI}#> .

<{AGENTROLE_IRI}> a owl:Ontology ;
    rdfs:label "Agent Role"@en ;
    cpa:hasIntent "To represent agents and the roles they play." ;
    cpas:category "Organization", "General" ;
    cpa:coversRequirements "Which agent plays this role?" .

:Agent a owl:Class .
:Role a owl:Class .
:classifies a owl:ObjectProperty .
"""

TIMEINTERVAL_TTL = PREFIXES + f"""\
@prefix : <{TIMEINTERVAL_IRI}#> .

<{TIMEINTERVAL_IRI}> a owl:Ontology ;
    cpa:hasIntent "To represent time intervals with a start and end date." ;
    cpas:category "Time" ;
    cpa:coversRequirements "What is the starting date of this interval? What is the ending date of this interval?" .

:TimeInterval a owl:Class .
:hasIntervalDate a owl:DatatypeProperty .
"""


def write_pattern_repository(root: Path) -> Path:
    """Write the three sample patterns (plus a hidden file) into ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "participation.ttl").write_text(PARTICIPATION_TTL, encoding="utf-8")
    (root / "agentrole.ttl").write_text(AGENTROLE_TTL, encoding="utf-8")
    (root / "timeinterval.ttl").write_text(TIMEINTERVAL_TTL, encoding="utf-8")
    (root / ".hidden.ttl").write_text("this is not rdf", encoding="utf-8")
    return root


@pytest.fixture
def pattern_repo(tmp_path: Path) -> Path:
    return write_pattern_repository(tmp_path / "patterns")


@pytest.fixture
def bulk_csv(tmp_path: Path) -> Path:
    path = tmp_path / "bulk.csv"
    path.write_text(
        "iri;name;image;intent;description;consequences;categories;scenarios;cqs;size;profile;strategy;mappings\n"
        f"{AGENTROLE_IRI};AgentRole;agentrole.png;;;;Organization|General|Social;;;small;OWL 2 DL;Role-based;schema.org|dbpedia\n"
        f"{TIMEINTERVAL_IRI}.owl;Time Interval;;;;;;;;;;;\n"
        ";Orphan;;;;;;;;;;;\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def make_settings(tmp_path: Path):
    def _make(repository: Path, **overrides) -> Settings:
        values = {
            "pattern_repository_path": str(repository),
            "data_dir": str(tmp_path / "data"),
            "lexical_expander": "none",
            "embedding_dimension": 128,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


def make_record(pattern_id: str, **fields) -> PatternRecord:
    fields.setdefault("name", pattern_id.rsplit("/", 1)[-1])
    return PatternRecord(id=pattern_id, **fields)


def make_document(record: PatternRecord, extra_terms: list[str] | None = None) -> IndexedDocument:
    terms = index_tokens(
        [
            record.name,
            record.intent,
            record.description,
            *record.categories,
            *record.competency_questions,
            *record.classes,
        ]
    )
    return IndexedDocument(id=record.id, record=record, all_terms=tuple(terms + (extra_terms or [])))
