"""
fhir-concept-iri: FHIR Coding ↔ concept IRI conversion

Maps FHIR Codings (system URI + code) to concept IRIs usable as RDF
nodes, and back, using the IRI stems registered in HL7 terminology
CodeSystem and NamingSystem documents.
"""

__version__ = "0.1.0"

from fhir_concept_iri.errors import (
    ConceptIRIError,
    ConfigurationError,
    InvalidCharacterError,
)
from fhir_concept_iri.coding import Coding, RFC3986_SYSTEM
from fhir_concept_iri.encoding import (
    CharClass,
    classify,
    code_to_iri,
    iri_to_code,
    format_code_point,
)
from fhir_concept_iri.prefix_index import (
    IRI_STEM_MARKER,
    PrefixIndex,
    CodeSystemDocument,
    NamingSystemDocument,
    build_index,
    load_document,
)
from fhir_concept_iri.config import (
    ConverterConfig,
    DEFAULT_TERMINOLOGY_PACKAGE,
    locate_terminology_dir,
)
from fhir_concept_iri.converter import ConceptIRI, get_default_converter, split_iri
from fhir_concept_iri.resources import (
    ResourceConversion,
    convert_resource,
    iter_codings,
    iter_resource_files,
)
from fhir_concept_iri.rdf import coding_to_jsonld, codings_from_jsonld

__all__ = [
    # Errors
    "ConceptIRIError",
    "ConfigurationError",
    "InvalidCharacterError",
    # Coding
    "Coding",
    "RFC3986_SYSTEM",
    # Encoding
    "CharClass",
    "classify",
    "code_to_iri",
    "iri_to_code",
    "format_code_point",
    # Prefix index
    "IRI_STEM_MARKER",
    "PrefixIndex",
    "CodeSystemDocument",
    "NamingSystemDocument",
    "build_index",
    "load_document",
    # Configuration
    "ConverterConfig",
    "DEFAULT_TERMINOLOGY_PACKAGE",
    "locate_terminology_dir",
    # Conversion
    "ConceptIRI",
    "get_default_converter",
    "split_iri",
    # Resources
    "ResourceConversion",
    "convert_resource",
    "iter_codings",
    "iter_resource_files",
    # FHIR RDF
    "coding_to_jsonld",
    "codings_from_jsonld",
]
