"""
Code-to-IRI percent encoding.

A FHIR code becomes the local part of a concept IRI.  Each code point is
classified against the character classes of RFC 3987:

  - ``unreserved`` (``A-Z a-z 0-9 - . _ ~``) and ``ucschar`` code points
    are emitted as-is;
  - every other code point below U+00A0 is percent-encoded from its
    UTF-8 bytes;
  - any other code point (private use, noncharacters, lone surrogates)
    cannot appear in an IRI path and is rejected.

The ``ucschar`` ranges live in a static sorted table searched with
:func:`bisect.bisect_right`, so the classification is a pure function
that can be audited and tested on its own.
"""

from __future__ import annotations

import string
from bisect import bisect_right
from enum import Enum
from urllib.parse import unquote

from fhir_concept_iri.errors import InvalidCharacterError, format_code_point

__all__ = [
    "CharClass",
    "UNRESERVED",
    "UCSCHAR_RANGES",
    "classify",
    "code_to_iri",
    "iri_to_code",
    "format_code_point",
]


UNRESERVED = frozenset(string.ascii_letters + string.digits + "-._~")

# ── RFC 3987 ucschar, inclusive ranges, sorted ─────────────────────

UCSCHAR_RANGES: tuple[tuple[int, int], ...] = (
    (0x00A0, 0xD7FF),
    (0xF900, 0xFDCF),
    (0xFDF0, 0xFFEF),
    *((plane << 16, (plane << 16) | 0xFFFD) for plane in range(0x1, 0xE)),
    (0xE1000, 0xEFFFD),
)

_RANGE_STARTS = tuple(start for start, _ in UCSCHAR_RANGES)

_ESCAPE_LIMIT = 0xA0


class CharClass(str, Enum):
    """How a single code point is treated by :func:`code_to_iri`."""

    UNRESERVED = "unreserved"
    UCSCHAR = "ucschar"
    ESCAPE = "escape"
    INVALID = "invalid"


def is_ucschar(code_point: int) -> bool:
    """Return True if *code_point* lies in one of :data:`UCSCHAR_RANGES`."""
    i = bisect_right(_RANGE_STARTS, code_point) - 1
    return i >= 0 and code_point <= UCSCHAR_RANGES[i][1]


def classify(code_point: int) -> CharClass:
    """Classify a code point for concept IRI encoding."""
    if code_point < _ESCAPE_LIMIT:
        if chr(code_point) in UNRESERVED:
            return CharClass.UNRESERVED
        return CharClass.ESCAPE
    if is_ucschar(code_point):
        return CharClass.UCSCHAR
    return CharClass.INVALID


def _escape(ch: str) -> str:
    return "".join(f"%{byte:02X}" for byte in ch.encode("utf-8"))


def code_to_iri(code: str) -> str:
    """Encode a FHIR code as the local part of a concept IRI.

    The whole input is scanned before failing, so the error reports
    every disallowed code point rather than only the first.

    Args:
        code: The FHIR code.

    Returns:
        The encoded string, e.g. ``"valid FHIR code"`` becomes
        ``"valid%20FHIR%20code"``.

    Raises:
        InvalidCharacterError: If *code* contains code points outside
            the unreserved, ucschar and escapable classes.
    """
    if not isinstance(code, str):
        raise TypeError(f"code must be a str, got: {type(code).__name__}")

    parts: list[str] = []
    invalid: list[int] = []
    for ch in code:
        char_class = classify(ord(ch))
        if char_class is CharClass.ESCAPE:
            parts.append(_escape(ch))
        elif char_class is CharClass.INVALID:
            invalid.append(ord(ch))
        else:
            parts.append(ch)

    if invalid:
        raise InvalidCharacterError(code, invalid)
    return "".join(parts)


def iri_to_code(local_part: str) -> str:
    """Reverse :func:`code_to_iri`: decode ``%XX`` triplets as UTF-8.

    Malformed escapes are left untouched and undecodable byte sequences
    become U+FFFD, so this never raises for string input.
    """
    return unquote(local_part, encoding="utf-8", errors="replace")
