"""Exception types raised by fhir-concept-iri."""

from __future__ import annotations

from typing import Iterable


def format_code_point(code_point: int) -> str:
    """Render a code point as ``U+XXXX`` (at least four uppercase hex digits)."""
    return f"U+{code_point:04X}"


class ConceptIRIError(Exception):
    """Base class for all fhir-concept-iri errors."""


class ConfigurationError(ConceptIRIError):
    """The terminology source for the prefix index could not be located."""


class InvalidCharacterError(ConceptIRIError, ValueError):
    """A code contains code points that may not appear in a concept IRI.

    Attributes:
        code: The offending input string.
        code_points: Every disallowed code point found in ``code``, in
            first-seen order and without duplicates.
    """

    def __init__(self, code: str, code_points: Iterable[int]) -> None:
        self.code = code
        self.code_points = tuple(dict.fromkeys(code_points))
        listed = ", ".join(format_code_point(cp) for cp in self.code_points)
        super().__init__(
            f"Code {code!r} contains characters not allowed in an IRI: {listed}"
        )
