"""
Concept IRIs for every Coding inside FHIR JSON resources.

Rather than only visiting properties typed as ``Coding``, the walker
picks up every JSON object carrying a string ``system`` and a non-empty
string ``code`` at any depth, so nothing is missed in bundles,
extensions or contained resources.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Union

from fhir_concept_iri.coding import Coding
from fhir_concept_iri.converter import ConceptIRI
from fhir_concept_iri.errors import InvalidCharacterError

logger = logging.getLogger(__name__)


@dataclass
class ResourceConversion:
    """Concept IRIs found for the Codings of one resource."""

    iris: dict[Coding, list[str]] = field(default_factory=dict)
    unmapped: list[Coding] = field(default_factory=list)
    invalid: dict[Coding, str] = field(default_factory=dict)

    @property
    def codings_seen(self) -> int:
        return len(self.iris) + len(self.unmapped) + len(self.invalid)


def iter_codings(obj: Any) -> Iterator[Coding]:
    """Yield a :class:`Coding` for every system/code pair in *obj*."""
    if isinstance(obj, dict):
        system, code = obj.get("system"), obj.get("code")
        if isinstance(system, str) and isinstance(code, str) and code:
            yield Coding(system=system, code=code)
        for value in obj.values():
            yield from iter_codings(value)
    elif isinstance(obj, list):
        for item in obj:
            yield from iter_codings(item)


def iter_resource_files(
    directory: Union[str, Path], recursive: bool = True
) -> Iterator[Path]:
    """Yield ``*.json`` files under *directory* in sorted order."""
    directory = Path(directory)
    pattern = "**/*.json" if recursive else "*.json"
    for path in sorted(directory.glob(pattern)):
        if path.is_file():
            yield path


def load_resource(path: Union[str, Path]) -> Any:
    with Path(path).open("r", encoding="utf-8") as fh:
        return json.load(fh)


def convert_resource(resource: Any, converter: ConceptIRI) -> ResourceConversion:
    """Convert every distinct Coding in *resource* to concept IRIs.

    Codings whose code contains characters not allowed in an IRI are
    reported in :attr:`ResourceConversion.invalid` instead of aborting.
    """
    report = ResourceConversion()
    seen: set[Coding] = set()
    for coding in iter_codings(resource):
        if coding in seen:
            continue
        seen.add(coding)
        try:
            iris = converter.from_coding(coding)
        except InvalidCharacterError as exc:
            logger.debug("No concept IRI for %s|%s: %s", coding.system, coding.code, exc)
            report.invalid[coding] = str(exc)
            continue
        if iris:
            report.iris[coding] = iris
        else:
            report.unmapped.append(coding)
    return report
