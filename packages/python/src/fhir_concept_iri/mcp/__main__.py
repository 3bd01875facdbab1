"""Entry point for running the fhir-concept-iri MCP server.

Usage::

    python -m fhir_concept_iri.mcp                          # stdio transport (default)
    python -m fhir_concept_iri.mcp --http                   # streamable HTTP
    python -m fhir_concept_iri.mcp --sse                    # SSE transport
    python -m fhir_concept_iri.mcp --terminology-dir DIR    # explicit terminology package
"""

from __future__ import annotations

import argparse
import os
from typing import Optional, Sequence

from fhir_concept_iri.config import ENV_MARKER, ENV_PACKAGE, ENV_TERMINOLOGY_DIR


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m fhir_concept_iri.mcp",
        description="Serve FHIR Coding <-> concept IRI conversion over MCP.",
    )
    transport = parser.add_mutually_exclusive_group()
    transport.add_argument(
        "--http", dest="transport", action="store_const", const="streamable-http",
        help="Use the streamable HTTP transport.",
    )
    transport.add_argument(
        "--sse", dest="transport", action="store_const", const="sse",
        help="Use the SSE transport.",
    )
    parser.set_defaults(transport="stdio")
    parser.add_argument(
        "--terminology-dir",
        help=f"Directory of CodeSystem/NamingSystem documents (sets {ENV_TERMINOLOGY_DIR}).",
    )
    parser.add_argument(
        "--package",
        help=f"Terminology package name to locate (sets {ENV_PACKAGE}).",
    )
    parser.add_argument(
        "--marker",
        help=f"IRI-stem marker recognised in the documents (sets {ENV_MARKER}).",
    )
    return parser.parse_args(argv)


def apply_environment(args: argparse.Namespace) -> None:
    """Export command-line settings for the lazily built default converter."""
    for env_var, value in (
        (ENV_TERMINOLOGY_DIR, args.terminology_dir),
        (ENV_PACKAGE, args.package),
        (ENV_MARKER, args.marker),
    ):
        if value:
            os.environ[env_var] = value


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    apply_environment(args)

    from fhir_concept_iri.mcp.server import mcp

    mcp.run(transport=args.transport)


if __name__ == "__main__":
    main()
