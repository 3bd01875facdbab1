"""
Prefix index built from HL7 terminology definition documents.

Terminology packages do not publish a ready-made prefix index.  The
same fact ("members of this code system live at IRI stem X") is
recorded in two document shapes:

  - ``CodeSystem-*.json``: an ``identifier[]`` entry whose ``system``
    is the IRI-stem marker carries the stem in ``value``;
  - ``NamingSystem-*.json``: a ``uniqueId[]`` entry whose ``comment``
    is the IRI-stem marker carries the stem, and applies to every
    preferred ``uri`` unique id of the same document.

Both shapes are parsed into small frozen records that project onto the
same ``(system_uri, prefix)`` pairs, and :class:`PrefixIndex` holds the
two inverse many-to-many mappings.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Union

from fhir_concept_iri.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    "IRI_STEM_MARKER",
    "CODE_SYSTEM_KIND",
    "NAMING_SYSTEM_KIND",
    "DOCUMENT_SUFFIX",
    "PrefixIndex",
    "CodeSystemDocument",
    "NamingSystemDocument",
    "UniqueId",
    "TerminologyDocument",
    "document_kind",
    "load_document",
    "build_index",
]


IRI_STEM_MARKER = "http://hl7.org/fhir/namingsystem-identifier-type#iri-stem"
"""Marks an identifier / unique id whose value is an IRI stem.

Matched against ``identifier[].system`` in CodeSystem documents and
``uniqueId[].comment`` in NamingSystem documents.
"""

CODE_SYSTEM_KIND = "CodeSystem-"
NAMING_SYSTEM_KIND = "NamingSystem-"
DOCUMENT_SUFFIX = ".json"


# ═══════════════════════════════════════════════════════════════════
# Index
# ═══════════════════════════════════════════════════════════════════


class PrefixIndex:
    """Bidirectional many-to-many map between system URIs and IRI prefixes.

    ``prefix in uri_to_prefixes[uri]`` holds exactly when
    ``uri in prefix_to_uris[prefix]``; :meth:`register` is the only
    mutator and always writes both sides.  Several systems sharing one
    prefix is kept as-is rather than resolved.
    """

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        self._uri_to_prefixes: dict[str, set[str]] = {}
        self._prefix_to_uris: dict[str, set[str]] = {}
        for uri, prefix in pairs:
            self.register(uri, prefix)

    def register(self, uri: str, prefix: str) -> None:
        """Record *prefix* as an IRI stem for system *uri*."""
        if not uri or not prefix:
            raise ValueError("uri and prefix must be non-empty strings")
        self._uri_to_prefixes.setdefault(uri, set()).add(prefix)
        self._prefix_to_uris.setdefault(prefix, set()).add(uri)

    def prefixes_for(self, uri: str) -> tuple[str, ...]:
        """Registered prefixes for *uri*, sorted; empty if unknown."""
        return tuple(sorted(self._uri_to_prefixes.get(uri, ())))

    def uris_for(self, prefix: str) -> tuple[str, ...]:
        """System URIs registered under *prefix*, sorted; empty if unknown."""
        return tuple(sorted(self._prefix_to_uris.get(prefix, ())))

    @property
    def uri_to_prefixes(self) -> Mapping[str, frozenset[str]]:
        return MappingProxyType(
            {uri: frozenset(p) for uri, p in self._uri_to_prefixes.items()}
        )

    @property
    def prefix_to_uris(self) -> Mapping[str, frozenset[str]]:
        return MappingProxyType(
            {prefix: frozenset(u) for prefix, u in self._prefix_to_uris.items()}
        )

    def pairs(self) -> Iterator[tuple[str, str]]:
        """Yield every ``(uri, prefix)`` pair, sorted."""
        for uri in sorted(self._uri_to_prefixes):
            for prefix in self.prefixes_for(uri):
                yield uri, prefix

    def check_invariant(self) -> None:
        """Raise AssertionError unless the two mappings are exact inverses."""
        forward = {
            (uri, p) for uri, ps in self._uri_to_prefixes.items() for p in ps
        }
        backward = {
            (uri, p) for p, uris in self._prefix_to_uris.items() for uri in uris
        }
        if forward != backward:
            raise AssertionError(
                f"Prefix index is inconsistent: {len(forward ^ backward)} "
                f"pairs present on one side only"
            )

    def __contains__(self, uri: object) -> bool:
        return uri in self._uri_to_prefixes

    def __len__(self) -> int:
        return sum(len(p) for p in self._uri_to_prefixes.values())

    def __repr__(self) -> str:
        return (
            f"PrefixIndex(systems={len(self._uri_to_prefixes)}, "
            f"prefixes={len(self._prefix_to_uris)})"
        )


# ═══════════════════════════════════════════════════════════════════
# Document shapes
# ═══════════════════════════════════════════════════════════════════


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _dict_items(value: Any) -> Iterator[dict[str, Any]]:
    if isinstance(value, list):
        for item in value:
            if isinstance(item, dict):
                yield item


@dataclass(frozen=True)
class CodeSystemDocument:
    """The parts of a CodeSystem resource that carry IRI stems."""

    url: Optional[str] = None
    identifiers: tuple[tuple[Optional[str], Optional[str]], ...] = ()

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> CodeSystemDocument:
        identifiers = tuple(
            (_str_or_none(item.get("system")), _str_or_none(item.get("value")))
            for item in _dict_items(data.get("identifier"))
        )
        return cls(url=_str_or_none(data.get("url")), identifiers=identifiers)

    def prefix_registrations(self, marker: str = IRI_STEM_MARKER) -> Iterator[tuple[str, str]]:
        if self.url is None:
            return
        for system, value in self.identifiers:
            if system == marker and value is not None:
                yield self.url, value


@dataclass(frozen=True)
class UniqueId:
    """One ``NamingSystem.uniqueId`` entry."""

    type: Optional[str] = None
    value: Optional[str] = None
    comment: Optional[str] = None
    preferred: bool = False


@dataclass(frozen=True)
class NamingSystemDocument:
    """The unique ids of a NamingSystem resource."""

    unique_ids: tuple[UniqueId, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> NamingSystemDocument:
        unique_ids = tuple(
            UniqueId(
                type=_str_or_none(item.get("type")),
                value=_str_or_none(item.get("value")),
                comment=_str_or_none(item.get("comment")),
                preferred=bool(item.get("preferred")),
            )
            for item in _dict_items(data.get("uniqueId"))
        )
        return cls(unique_ids=unique_ids)

    @property
    def preferred_uris(self) -> tuple[str, ...]:
        """Values of preferred ``uri`` unique ids: the systems this document names."""
        return tuple(dict.fromkeys(
            uid.value
            for uid in self.unique_ids
            if uid.type == "uri" and uid.preferred and uid.value is not None
        ))

    def prefix_registrations(self, marker: str = IRI_STEM_MARKER) -> Iterator[tuple[str, str]]:
        uris = self.preferred_uris
        for uid in self.unique_ids:
            if uid.comment == marker and uid.value is not None:
                for uri in uris:
                    yield uri, uid.value


TerminologyDocument = Union[CodeSystemDocument, NamingSystemDocument]

_DOCUMENT_PARSERS: dict[str, Callable[[dict[str, Any]], TerminologyDocument]] = {
    CODE_SYSTEM_KIND: CodeSystemDocument.from_json,
    NAMING_SYSTEM_KIND: NamingSystemDocument.from_json,
}


def document_kind(filename: str) -> Optional[str]:
    """Return the kind marker of a terminology document filename, or None."""
    if not filename.endswith(DOCUMENT_SUFFIX):
        return None
    for kind in _DOCUMENT_PARSERS:
        if filename.startswith(kind):
            return kind
    return None


def load_document(path: Path) -> Optional[TerminologyDocument]:
    """Parse one terminology document.

    Returns None for unrecognised filenames and for documents that
    cannot be read or parsed; those are logged, never raised.
    """
    path = Path(path)
    kind = document_kind(path.name)
    if kind is None:
        logger.debug("Ignoring %s: not a terminology document", path.name)
        return None
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Skipping unreadable terminology document %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Skipping %s: expected a JSON object, got %s", path, type(data).__name__)
        return None
    return _DOCUMENT_PARSERS[kind](data)


def build_index(
    directory: Union[str, Path],
    marker: str = IRI_STEM_MARKER,
) -> PrefixIndex:
    """Build a :class:`PrefixIndex` from the documents in *directory*.

    Only files directly inside *directory* are read.  A bad document is
    skipped without aborting the build.

    Raises:
        ConfigurationError: If *directory* is not an existing directory.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ConfigurationError(f"Terminology directory not found: {directory}")

    index = PrefixIndex()
    documents = 0
    for path in sorted(directory.iterdir()):
        if not path.is_file() or document_kind(path.name) is None:
            continue
        document = load_document(path)
        if document is None:
            continue
        documents += 1
        for uri, prefix in document.prefix_registrations(marker):
            index.register(uri, prefix)

    logger.info(
        "Built prefix index from %d documents in %s: %r", documents, directory, index
    )
    return index
