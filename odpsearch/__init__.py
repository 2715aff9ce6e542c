"""Ontology design pattern search service."""

__version__ = "0.4.0"
