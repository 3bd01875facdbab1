"""
fhir-concept-iri MCP Server: Model Context Protocol integration.

Exposes Coding ↔ concept IRI conversion as MCP tools for LLM agents.
4 read-only tools: code encoding, forward and reverse conversion, and
whole-resource conversion.

The converter is built lazily from environment configuration
(``FHIR_CONCEPT_IRI_TERMINOLOGY_DIR`` etc.) on the first tool call.

Usage::

    python -m fhir_concept_iri.mcp          # stdio transport (default)
    python -m fhir_concept_iri.mcp --http   # streamable HTTP

Requires: pip install fhir-concept-iri[mcp]
"""

from __future__ import annotations

import json
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP

from fhir_concept_iri.coding import Coding
from fhir_concept_iri.converter import get_default_converter
from fhir_concept_iri.encoding import code_to_iri as _code_to_iri
from fhir_concept_iri.resources import convert_resource as _convert_resource


mcp = FastMCP(
    "fhir-concept-iri",
    instructions=(
        "Converts FHIR Codings (system + code) to concept IRIs usable as "
        "RDF nodes, and concept IRIs back to Codings, using IRI stems "
        "registered in HL7 terminology. All tools are read-only."
    ),
)


# ── Helpers ────────────────────────────────────────────────────────

def _parse_json(s: str, label: str = "input") -> Any:
    """Parse a JSON string, raising ValueError with a clear message."""
    try:
        return json.loads(s)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {label}: {e}") from e


# ═══════════════════════════════════════════════════════════════════
# Tools
# ═══════════════════════════════════════════════════════════════════


@mcp.tool()
def code_to_iri(code: str) -> str:
    """Percent-encode a FHIR code for use as the local part of an IRI.

    Unreserved ASCII and Unicode characters allowed in IRIs pass through;
    other ASCII characters (space, %, /, #, ...) become %XX escapes.

    Args:
        code: The FHIR code.

    Returns:
        The encoded code. Fails if the code contains private-use or
        noncharacter code points, listing each as U+XXXX.
    """
    return _code_to_iri(code)


@mcp.tool()
def from_coding(code: str, system: Optional[str] = None) -> list[str]:
    """Convert a FHIR Coding to its concept IRIs.

    Args:
        code: The Coding's code.
        system: The Coding's system URI. ``urn:ietf:rfc:3986`` means the
            code is already an IRI and is returned unchanged.

    Returns:
        One IRI per IRI stem registered for the system; empty if the
        system has none.
    """
    return get_default_converter().from_coding(Coding(system=system or "", code=code))


@mcp.tool()
def to_coding(iri: str) -> list[dict]:
    """Convert a concept IRI to the FHIR Codings it may denote.

    Args:
        iri: The concept IRI.

    Returns:
        List of {"system", "code"} dicts, one per system registered for
        the IRI's stem. Unknown stems yield a single urn:ietf:rfc:3986
        Coding holding the whole IRI.
    """
    return [c.to_fhir() for c in get_default_converter().to_coding(iri)]


@mcp.tool()
def convert_resource(resource_json: str) -> dict:
    """Find every system/code pair in a FHIR JSON resource and convert it.

    Args:
        resource_json: JSON string of a FHIR resource or Bundle.

    Returns:
        Dict with "converted" (Coding + IRIs), "unmapped" (Codings
        without a registered IRI stem) and "invalid" (Coding + error).
    """
    resource = _parse_json(resource_json, "resource_json")
    report = _convert_resource(resource, get_default_converter())
    return {
        "converted": [
            {"coding": coding.to_fhir(), "iris": iris}
            for coding, iris in report.iris.items()
        ],
        "unmapped": [coding.to_fhir() for coding in report.unmapped],
        "invalid": [
            {"coding": coding.to_fhir(), "error": message}
            for coding, message in report.invalid.items()
        ],
    }
