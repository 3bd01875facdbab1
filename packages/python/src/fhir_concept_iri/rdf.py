"""
FHIR RDF rendering of Codings.

In FHIR RDF a Coding node is typed with its concept IRIs, next to the
plain ``fhir:system`` and ``fhir:code`` values.  These helpers build
such a JSON-LD node and, in the other direction, expand a JSON-LD
document with PyLD and map each ``@type`` back to Codings.
"""

from __future__ import annotations

from typing import Any, Iterator

from pyld import jsonld

from fhir_concept_iri.coding import RFC3986_SYSTEM, Coding
from fhir_concept_iri.converter import ConceptIRI

FHIR = "http://hl7.org/fhir/"
XSD = "http://www.w3.org/2001/XMLSchema#"

FHIR_RDF_CONTEXT: dict[str, str] = {"fhir": FHIR, "xsd": XSD}


def coding_to_jsonld(coding: Coding, converter: ConceptIRI) -> dict[str, Any]:
    """Build a FHIR RDF JSON-LD node for *coding*, typed by its concept IRIs.

    Raises:
        InvalidCharacterError: If the code cannot appear in an IRI.
    """
    node: dict[str, Any] = {"@context": dict(FHIR_RDF_CONTEXT)}
    iris = converter.from_coding(coding)
    if iris:
        node["@type"] = iris
    if coding.system:
        node["fhir:system"] = {"fhir:v": {"@value": coding.system, "@type": "xsd:anyURI"}}
    node["fhir:code"] = {"fhir:v": coding.code}
    return node


def _iter_types(obj: Any) -> Iterator[str]:
    if isinstance(obj, dict):
        types = obj.get("@type")
        if isinstance(types, list) and "@value" not in obj:
            for t in types:
                if isinstance(t, str):
                    yield t
        for key, value in obj.items():
            if key != "@type":
                yield from _iter_types(value)
    elif isinstance(obj, list):
        for item in obj:
            yield from _iter_types(item)


def codings_from_jsonld(
    document: Any,
    converter: ConceptIRI,
    include_unresolved: bool = False,
) -> list[Coding]:
    """Expand *document* and convert every node type back to Codings.

    Types whose prefix is not in the index produce only the opaque
    ``urn:ietf:rfc:3986`` fallback, which is dropped unless
    *include_unresolved* is set.
    """
    expanded = jsonld.expand(document)
    out: dict[Coding, None] = {}
    for iri in _iter_types(expanded):
        for coding in converter.to_coding(iri):
            if coding.system == RFC3986_SYSTEM and not include_unresolved:
                continue
            out.setdefault(coding, None)
    return list(out)
