"""
Conversion between FHIR Codings and concept IRIs.

A concept IRI is a registered prefix (IRI stem) followed by the
encoded code.  Going forward, every prefix registered for the Coding's
system yields one IRI; going back, the IRI is split at its last ``#``
(or else its last ``/``) and every system registered for that prefix
yields one Coding.  IRIs that cannot be split, or whose prefix is not
registered, come back as an opaque ``urn:ietf:rfc:3986`` Coding.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from fhir_concept_iri.coding import RFC3986_SYSTEM, Coding
from fhir_concept_iri.config import (
    DEFAULT_TERMINOLOGY_PACKAGE,
    ConverterConfig,
    locate_terminology_dir,
)
from fhir_concept_iri.encoding import code_to_iri, iri_to_code
from fhir_concept_iri.prefix_index import IRI_STEM_MARKER, PrefixIndex, build_index


_SEPARATORS = ("#", "/")


def split_iri(iri: str) -> Optional[tuple[str, str]]:
    """Split *iri* into ``(prefix, local)`` at its last ``#``, else last ``/``.

    The separator stays on the prefix.  Returns None if neither occurs.
    """
    for sep in _SEPARATORS:
        pos = iri.rfind(sep)
        if pos >= 0:
            return iri[: pos + 1], iri[pos + 1:]
    return None


class ConceptIRI:
    """Converts FHIR Codings to concept IRIs and back.

    The prefix index is built once, at construction, and never changes
    afterwards; an instance can be shared between threads.

    Args:
        terminology_dir: Directory of ``CodeSystem-*.json`` /
            ``NamingSystem-*.json`` documents.  When omitted the
            directory is located from the environment and installed
            packages (see :mod:`fhir_concept_iri.config`).
        index: A ready-made index; skips directory scanning entirely.
        marker: The IRI-stem marker recognised in the documents.
        package: Terminology package name used when locating the directory.

    Raises:
        ConfigurationError: If no terminology directory can be located.
    """

    def __init__(
        self,
        terminology_dir: Union[str, Path, None] = None,
        *,
        index: Optional[PrefixIndex] = None,
        marker: str = IRI_STEM_MARKER,
        package: str = DEFAULT_TERMINOLOGY_PACKAGE,
    ) -> None:
        if index is None:
            directory = locate_terminology_dir(terminology_dir, package=package)
            index = build_index(directory, marker=marker)
        self._index = index

    @classmethod
    def from_config(cls, config: ConverterConfig) -> ConceptIRI:
        return cls(config.terminology_dir, marker=config.marker, package=config.package)

    @property
    def index(self) -> PrefixIndex:
        return self._index

    def from_coding(self, coding: Union[Coding, Mapping[str, Any]]) -> list[str]:
        """Convert a Coding to all of its concept IRIs.

        Args:
            coding: A :class:`Coding` or FHIR JSON ``{"system", "code"}``.

        Returns:
            One IRI per registered prefix (sorted by prefix); ``[code]``
            for ``urn:ietf:rfc:3986``; empty for unregistered systems.

        Raises:
            InvalidCharacterError: If the code cannot appear in an IRI.
        """
        if not isinstance(coding, Coding):
            coding = Coding.from_fhir(coding)

        if coding.system == RFC3986_SYSTEM:
            return [coding.code]

        prefixes = self._index.prefixes_for(coding.system)
        if not prefixes:
            return []
        local = code_to_iri(coding.code)
        return [prefix + local for prefix in prefixes]

    def to_coding(self, iri: str) -> list[Coding]:
        """Convert a concept IRI to every Coding it may denote.

        Never empty: an IRI without ``#`` or ``/``, or with an
        unregistered prefix, yields ``[Coding("urn:ietf:rfc:3986", iri)]``.
        The empty string is not an IRI and yields ``[]``.
        """
        if not iri:
            return []
        split = split_iri(iri)
        if split is not None:
            prefix, local = split
            uris = self._index.uris_for(prefix)
            if uris and local:
                code = iri_to_code(local)
                return [Coding(system=uri, code=code) for uri in uris]
        return [Coding(system=RFC3986_SYSTEM, code=iri)]


@lru_cache(maxsize=1)
def get_default_converter() -> ConceptIRI:
    """Process-wide converter built from environment configuration."""
    return ConceptIRI.from_config(ConverterConfig.from_env())
