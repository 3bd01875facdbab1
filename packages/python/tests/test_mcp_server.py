"""Tests for the fhir-concept-iri MCP server.

Tests the MCP tool handler functions directly (no transport needed).
The default converter is pointed at the test terminology directory
through the environment.
"""

import json
import os

import pytest

# Guard: skip entire module if `mcp` is not installed.
mcp = pytest.importorskip("mcp", reason="MCP SDK not installed (pip install mcp)")

from fhir_concept_iri.config import ENV_MARKER, ENV_PACKAGE, ENV_TERMINOLOGY_DIR  # noqa: E402
from fhir_concept_iri.errors import InvalidCharacterError  # noqa: E402
from fhir_concept_iri.mcp.__main__ import apply_environment, parse_args  # noqa: E402
from fhir_concept_iri.mcp.server import mcp as mcp_server  # noqa: E402


def _get_tool_fn(name: str):
    """Retrieve a registered tool's underlying function by name."""
    tool_manager = mcp_server._tool_manager
    tool = tool_manager._tools.get(name)
    if tool is None:
        available = list(tool_manager._tools.keys())
        raise KeyError(f"Tool '{name}' not found. Available: {available}")
    return tool.fn


class TestToolRegistration:
    EXPECTED_TOOLS = ["code_to_iri", "from_coding", "to_coding", "convert_resource"]

    def test_all_tools_registered(self):
        registered = set(mcp_server._tool_manager._tools.keys())
        assert registered == set(self.EXPECTED_TOOLS)

    def test_all_tools_have_descriptions(self):
        for name, tool in mcp_server._tool_manager._tools.items():
            assert tool.description, f"Tool '{name}' has no description"


class TestCodeToIRITool:
    def test_escapes(self):
        assert _get_tool_fn("code_to_iri")(code="valid FHIR code") == "valid%20FHIR%20code"

    def test_invalid(self):
        with pytest.raises(InvalidCharacterError, match="U\\+1FFFE"):
            _get_tool_fn("code_to_iri")(code="\U0001FFFE")


@pytest.mark.usefixtures("default_converter_env")
class TestConversionTools:
    def test_from_coding(self):
        fn = _get_tool_fn("from_coding")
        assert fn(system="http://snomed.info/sct", code="87512008") == [
            "https://purl.bioontology.org/ontology/SNOMEDCT/87512008"
        ]

    def test_from_coding_unknown_system(self):
        assert _get_tool_fn("from_coding")(system="http://example.org", code="1") == []

    def test_from_coding_without_system(self):
        assert _get_tool_fn("from_coding")(code="1") == []

    def test_to_coding(self):
        result = _get_tool_fn("to_coding")(iri="http://loinc.org/rdf#8480-6")
        assert result == [{"system": "http://loinc.org", "code": "8480-6"}]

    def test_to_coding_fallback(self):
        result = _get_tool_fn("to_coding")(iri="plaintoken")
        assert result == [{"system": "urn:ietf:rfc:3986", "code": "plaintoken"}]

    def test_convert_resource(self):
        resource = {
            "resourceType": "Condition",
            "code": {"coding": [
                {"system": "http://snomed.info/sct", "code": "87512008"},
                {"system": "http://example.org/local", "code": "MDD"},
            ]},
        }
        result = _get_tool_fn("convert_resource")(resource_json=json.dumps(resource))
        assert result["converted"] == [{
            "coding": {"system": "http://snomed.info/sct", "code": "87512008"},
            "iris": ["https://purl.bioontology.org/ontology/SNOMEDCT/87512008"],
        }]
        assert result["unmapped"] == [{"system": "http://example.org/local", "code": "MDD"}]
        assert result["invalid"] == []

    def test_convert_resource_bad_json(self):
        with pytest.raises(ValueError, match="Invalid JSON in resource_json"):
            _get_tool_fn("convert_resource")(resource_json="{nope")

    def test_to_coding_empty_iri(self):
        assert _get_tool_fn("to_coding")(iri="") == []


class TestEntryPoint:
    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for name in (ENV_TERMINOLOGY_DIR, ENV_PACKAGE, ENV_MARKER):
            monkeypatch.delenv(name, raising=False)

    def test_defaults_to_stdio(self):
        args = parse_args([])
        assert args.transport == "stdio"
        assert args.terminology_dir is None

    @pytest.mark.parametrize("flag, transport", [
        ("--http", "streamable-http"),
        ("--sse", "sse"),
    ])
    def test_transport_flags(self, flag, transport):
        assert parse_args([flag]).transport == transport

    def test_transport_flags_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["--http", "--sse"])

    def test_terminology_dir_exported(self, terminology_dir):
        apply_environment(parse_args(["--terminology-dir", str(terminology_dir)]))
        assert os.environ[ENV_TERMINOLOGY_DIR] == str(terminology_dir)
        assert ENV_PACKAGE not in os.environ

    def test_package_and_marker_exported(self):
        apply_environment(parse_args(["--package", "hl7.terminology.r4", "--marker", "urn:x"]))
        assert os.environ[ENV_PACKAGE] == "hl7.terminology.r4"
        assert os.environ[ENV_MARKER] == "urn:x"
