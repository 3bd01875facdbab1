"""Tests for the Coding value type."""

import pytest

from fhir_concept_iri.coding import Coding


class TestCoding:
    def test_frozen_and_hashable(self):
        coding = Coding("http://loinc.org", "8480-6")
        assert {coding, Coding("http://loinc.org", "8480-6")} == {coding}
        with pytest.raises(AttributeError):
            coding.code = "x"

    def test_empty_code_rejected(self):
        with pytest.raises(ValueError, match="non-empty"):
            Coding("http://loinc.org", "")

    def test_non_string_code_rejected(self):
        with pytest.raises(TypeError, match="code must be a str"):
            Coding("http://loinc.org", 8480)

    def test_empty_system_allowed(self):
        assert Coding("", "x").system == ""


class TestFhirJson:
    def test_from_fhir(self):
        coding = Coding.from_fhir({"system": "http://loinc.org", "code": "8480-6", "display": "SBP"})
        assert coding == Coding("http://loinc.org", "8480-6")

    def test_from_fhir_without_system(self):
        assert Coding.from_fhir({"code": "x"}) == Coding("", "x")

    def test_from_fhir_without_code(self):
        with pytest.raises(ValueError):
            Coding.from_fhir({"system": "http://loinc.org"})

    def test_from_fhir_not_mapping(self):
        with pytest.raises(TypeError, match="mapping"):
            Coding.from_fhir(["http://loinc.org", "x"])

    def test_to_fhir(self):
        assert Coding("http://loinc.org", "8480-6").to_fhir() == {
            "system": "http://loinc.org", "code": "8480-6",
        }

    def test_to_fhir_omits_empty_system(self):
        assert Coding("", "x").to_fhir() == {"code": "x"}
