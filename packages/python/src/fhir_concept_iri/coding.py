"""FHIR Coding value type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

RFC3986_SYSTEM = "urn:ietf:rfc:3986"
"""System URI meaning "the code is itself a complete IRI"."""


@dataclass(frozen=True)
class Coding:
    """A (system, code) pair identifying a term in a code system.

    ``system`` may be empty; ``code`` must be a non-empty string.
    """

    system: str
    code: str

    def __post_init__(self) -> None:
        if not isinstance(self.system, str):
            raise TypeError(
                f"system must be a str, got: {type(self.system).__name__}"
            )
        if not isinstance(self.code, str):
            raise TypeError(f"code must be a str, got: {type(self.code).__name__}")
        if not self.code:
            raise ValueError("code must be a non-empty string")

    @classmethod
    def from_fhir(cls, data: Mapping[str, Any]) -> Coding:
        """Build a Coding from FHIR JSON (``{"system": ..., "code": ...}``)."""
        if not isinstance(data, Mapping):
            raise TypeError(f"Coding must be a mapping, got: {type(data).__name__}")
        return cls(system=data.get("system") or "", code=data.get("code") or "")

    def to_fhir(self) -> dict[str, str]:
        """Serialize to FHIR JSON, omitting an empty system."""
        out: dict[str, str] = {}
        if self.system:
            out["system"] = self.system
        out["code"] = self.code
        return out
