"""Pattern document extraction with rdflib.

Reads one ontology design pattern document (RDF/XML, Turtle, ...) and maps
the annotations on its ``owl:Ontology`` node onto ``PatternMetadata``:

| Annotation | Field |
|---|---|
| ``rdfs:label`` | name |
| ``cpannotationschema#hasIntent`` | intent |
| ``cpas-ext#solutionDescription`` | description |
| ``cpannotationschema#hasConsequences`` | consequences |
| ``cpas-ext#category`` | categories |
| ``cpannotationschema#coversRequirements`` | competency_questions |
| ``cpas-ext#hasImage`` | image_ref |
| ``cpannotationschema#scenarios`` | scenarios |

Class and property labels are read from the pattern's signature, and
alignments to DOLCE, schema.org and DBpedia are detected from the IRIs the
document references.
"""

import logging
import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from rdflib import OWL, RDF, RDFS, Graph, Literal, URIRef
from rdflib.namespace import Namespace
from rdflib.util import guess_format

from ..errors import ExtractionError
from ..models.enums import MappingVocabulary
from ..models.patterns import PatternMetadata

logger = logging.getLogger(__name__)

CPANNOTATIONSCHEMA = Namespace("http://www.ontologydesignpatterns.org/schemas/cpannotationschema.owl#")
CPAS_EXT = Namespace("http://xd-protege.com/schemas/cpas-ext.owl#")

# Namespace prefixes that identify an alignment to an external vocabulary
MAPPING_NAMESPACES: dict[MappingVocabulary, tuple[str, ...]] = {
    MappingVocabulary.DOLCE: (
        "http://www.ontologydesignpatterns.org/ont/dul/",
        "http://www.loa-cnr.it/ontologies/DOLCE",
        "http://www.loa.istc.cnr.it/ontologies/DOLCE",
    ),
    MappingVocabulary.SCHEMA_ORG: ("http://schema.org/", "https://schema.org/"),
    MappingVocabulary.DBPEDIA: ("http://dbpedia.org/ontology/", "http://dbpedia.org/resource/"),
}

PROPERTY_TYPES = (OWL.ObjectProperty, OWL.DatatypeProperty)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


@runtime_checkable
class PatternExtractor(Protocol):
    """Turns a pattern document into partial metadata."""

    def extract(self, path: Path) -> PatternMetadata:
        """Extract metadata from one document.

        Raises:
            ExtractionError: If the document cannot be parsed or has no IRI.
        """
        ...


def load_graph(path: str | Path) -> Graph:
    """Parse a pattern document, guessing the RDF syntax from its suffix.

    Raises:
        ExtractionError: If the file cannot be read or parsed.
    """
    source = Path(path)
    fmt = guess_format(str(source)) or "xml"
    graph = Graph()
    try:
        graph.parse(source=str(source), format=fmt)
    except Exception as e:
        raise ExtractionError(f"Unable to parse pattern file {source}: {e}", source=str(source)) from e
    return graph


def humanize_local_name(iri: str) -> str:
    """Turn the local part of an IRI into words.

    ``http://x/agentrole.owl#hasRole`` -> ``has role``,
    ``time_indexed-situation`` -> ``time indexed situation``.
    """
    local = iri.replace("#", "/").rstrip("/").rsplit("/", 1)[-1]
    local = _CAMEL_BOUNDARY.sub("_", local)
    return " ".join(local.replace("_", " ").replace("-", " ").lower().split())


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def split_competency_questions(text: str) -> list[str]:
    """Split a block of questions on ``?``, re-appending the mark to each."""
    return [f"{_capitalize(q.strip())}?" for q in text.split("?") if q.strip()]


class RdfPatternExtractor:
    """``PatternExtractor`` backed by rdflib."""

    def _literals(self, graph: Graph, subject: URIRef, predicate: URIRef) -> list[str]:
        values = [str(o).strip() for o in graph.objects(subject, predicate) if isinstance(o, Literal)]
        return sorted(v for v in values if v)

    def _label(self, graph: Graph, entity: URIRef) -> str | None:
        for label in graph.objects(entity, RDFS.label):
            if isinstance(label, Literal) and (label.language is None or label.language.lower() == "en"):
                text = str(label).strip()
                if text:
                    return text
        return None

    def _entity_labels(self, graph: Graph, types: tuple[URIRef, ...]) -> list[str]:
        labels: set[str] = set()
        for rdf_type in types:
            for entity in graph.subjects(RDF.type, rdf_type):
                if not isinstance(entity, URIRef):
                    continue
                labels.add(self._label(graph, entity) or humanize_local_name(str(entity)))
        labels.discard("")
        return sorted(labels)

    def _mappings(self, graph: Graph) -> list[MappingVocabulary]:
        iris = {str(node) for triple in graph for node in triple if isinstance(node, URIRef)}
        found = []
        for vocabulary, prefixes in MAPPING_NAMESPACES.items():
            if any(iri.startswith(prefixes) for iri in iris):
                found.append(vocabulary)
        return found

    def extract(self, path: Path) -> PatternMetadata:
        graph = load_graph(path)

        ontology = next(
            (s for s in graph.subjects(RDF.type, OWL.Ontology) if isinstance(s, URIRef)), None
        )
        if ontology is None:
            raise ExtractionError(f"Pattern file {path} has no ontology IRI", source=str(path))

        names = self._literals(graph, ontology, RDFS.label)
        questions: list[str] = []
        for block in self._literals(graph, ontology, CPANNOTATIONSCHEMA.coversRequirements):
            questions.extend(split_competency_questions(block))
        images = self._literals(graph, ontology, CPAS_EXT.hasImage)

        metadata = PatternMetadata(
            id=str(ontology),
            name=names[0] if names else None,
            image_ref=images[0] if images else None,
            intent="\n\n".join(self._literals(graph, ontology, CPANNOTATIONSCHEMA.hasIntent)) or None,
            description="\n\n".join(self._literals(graph, ontology, CPAS_EXT.solutionDescription))
            or None,
            consequences="\n\n".join(
                self._literals(graph, ontology, CPANNOTATIONSCHEMA.hasConsequences)
            )
            or None,
            categories=self._literals(graph, ontology, CPAS_EXT.category),
            scenarios=[
                _capitalize(s) for s in self._literals(graph, ontology, CPANNOTATIONSCHEMA.scenarios)
            ],
            competency_questions=questions,
            classes=self._entity_labels(graph, (OWL.Class,)),
            properties=self._entity_labels(graph, PROPERTY_TYPES),
            mappings=self._mappings(graph),
            source_path=str(path),
        )
        logger.debug(
            f"Extracted {metadata.id}: {len(metadata.competency_questions)} CQs, "
            f"{len(metadata.classes)} classes, {len(metadata.properties)} properties"
        )
        return metadata


def serialize_pattern_document(path: str | Path, fmt: str = "turtle") -> str:
    """Re-serialize a stored pattern document (Turtle by default).

    Raises:
        ExtractionError: If the document cannot be parsed or serialized.
    """
    graph = load_graph(path)
    try:
        return graph.serialize(format=fmt)
    except Exception as e:
        raise ExtractionError(f"Unable to serialize {path} as {fmt}: {e}", source=str(path)) from e
