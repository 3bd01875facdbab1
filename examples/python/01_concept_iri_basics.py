"""
Example 01: Concept IRI Basics
==============================

Converts FHIR Codings to concept IRIs and back, using the small
terminology directory shipped with the test suite.

Use case: an RDF pipeline needs one IRI per coded concept so that
Observations coded in LOINC and SNOMED CT can be joined in SPARQL.
"""

from pathlib import Path

from fhir_concept_iri import (
    ConceptIRI,
    Coding,
    InvalidCharacterError,
    code_to_iri,
    coding_to_jsonld,
    convert_resource,
)

TERMINOLOGY = Path(__file__).resolve().parents[2] / "packages" / "python" / "tests" / "data" / "terminology"

converter = ConceptIRI(TERMINOLOGY)
print(f"Index: {converter.index!r}\n")

# ── 1. Encoding codes ────────────────────────────────────────────

print("=== 1. Encoding Codes ===\n")

print(code_to_iri("valid FHIR code"))      # valid%20FHIR%20code
print(code_to_iri("\U0001F44B\U0001F3FE"))  # unchanged: allowed in IRIs

try:
    code_to_iri("bad\U0001FFFE")
except InvalidCharacterError as exc:
    print(f"Rejected: {exc}")              # reports U+1FFFE

# ── 2. Coding → concept IRIs ─────────────────────────────────────

print("\n=== 2. Coding → IRIs ===\n")

for coding in [
    Coding("http://snomed.info/sct", "87512008"),
    Coding("http://loinc.org", "8480-6"),           # two registered stems
    Coding("urn:ietf:rfc:3986", "urn:oid:1.2.840.10008.5.1.4.1.1.2"),
    Coding("http://example.org/local", "X1"),      # no stem: no IRIs
]:
    print(f"{coding.system}|{coding.code} -> {converter.from_coding(coding)}")

# ── 3. Concept IRI → Codings ─────────────────────────────────────

print("\n=== 3. IRI → Codings ===\n")

for iri in [
    "https://www.omg.org/spec/LCC/Countries/ISO3166-1-CountryCodes/CA",  # shared stem
    "http://loinc.org/rdf#8480-6",
    "plaintoken",
]:
    print(f"{iri} -> {[c.to_fhir() for c in converter.to_coding(iri)]}")

# ── 4. Whole resources and FHIR RDF ──────────────────────────────

print("\n=== 4. Resources ===\n")

observation = {
    "resourceType": "Observation",
    "code": {"coding": [{"system": "http://loinc.org", "code": "8480-6"}]},
    "valueQuantity": {"value": 107, "system": "http://unitsofmeasure.org", "code": "mm[Hg]"},
}
report = convert_resource(observation, converter)
print(f"Converted: {report.iris}")
print(f"Unmapped:  {report.unmapped}")

print(coding_to_jsonld(Coding("http://loinc.org", "8480-6"), converter))
