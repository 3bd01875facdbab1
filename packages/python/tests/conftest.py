"""Shared fixtures: a small HL7-terminology-shaped directory under tests/data."""

from pathlib import Path

import pytest

from fhir_concept_iri.converter import ConceptIRI, get_default_converter

TERMINOLOGY_DIR = Path(__file__).parent / "data" / "terminology"


@pytest.fixture(scope="session")
def terminology_dir() -> Path:
    return TERMINOLOGY_DIR


@pytest.fixture(scope="session")
def converter(terminology_dir) -> ConceptIRI:
    return ConceptIRI(terminology_dir)


@pytest.fixture
def default_converter_env(monkeypatch, terminology_dir):
    """Point the process-wide default converter at the test terminology."""
    monkeypatch.setenv("FHIR_CONCEPT_IRI_TERMINOLOGY_DIR", str(terminology_dir))
    get_default_converter.cache_clear()
    yield
    get_default_converter.cache_clear()
