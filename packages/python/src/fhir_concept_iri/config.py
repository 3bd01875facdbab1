"""
Locating the terminology package that feeds the prefix index.

Resolution order for the terminology directory:

  1. an explicit directory passed by the caller;
  2. ``FHIR_CONCEPT_IRI_TERMINOLOGY_DIR``;
  3. the nearest ``node_modules/<package>`` walking up from the working
     directory (npm install layout, or its ``package/`` subdirectory);
  4. the newest ``<package>#<version>/package`` in the FHIR package
     cache (``FHIR_PACKAGE_CACHE`` or ``~/.fhir/packages``).

If none of these yields a directory, :class:`ConfigurationError` is
raised: without a terminology source no converter can be built.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from fhir_concept_iri.errors import ConfigurationError
from fhir_concept_iri.prefix_index import IRI_STEM_MARKER

DEFAULT_TERMINOLOGY_PACKAGE = "hl7.terminology"

ENV_TERMINOLOGY_DIR = "FHIR_CONCEPT_IRI_TERMINOLOGY_DIR"
ENV_PACKAGE = "FHIR_CONCEPT_IRI_PACKAGE"
ENV_MARKER = "FHIR_CONCEPT_IRI_MARKER"
ENV_PACKAGE_CACHE = "FHIR_PACKAGE_CACHE"


@dataclass(frozen=True)
class ConverterConfig:
    """Settings for building a :class:`~fhir_concept_iri.converter.ConceptIRI`."""

    terminology_dir: Optional[Path] = None
    package: str = DEFAULT_TERMINOLOGY_PACKAGE
    marker: str = IRI_STEM_MARKER

    def __post_init__(self) -> None:
        if not self.package:
            raise ValueError("package must be a non-empty string")
        if not self.marker:
            raise ValueError("marker must be a non-empty string")

    @classmethod
    def from_env(cls) -> ConverterConfig:
        raw_dir = os.getenv(ENV_TERMINOLOGY_DIR, "").strip()
        return cls(
            terminology_dir=Path(raw_dir).expanduser() if raw_dir else None,
            package=os.getenv(ENV_PACKAGE, "").strip() or DEFAULT_TERMINOLOGY_PACKAGE,
            marker=os.getenv(ENV_MARKER, "").strip() or IRI_STEM_MARKER,
        )


def _node_modules_dir(package: str, start: Path) -> Optional[Path]:
    for base in (start, *start.parents):
        candidate = base / "node_modules" / package
        if (candidate / "package").is_dir():
            return candidate / "package"
        if candidate.is_dir():
            return candidate
    return None


def _version_key(version: str) -> tuple:
    return tuple(
        (0, int(part)) if part.isdigit() else (1, part)
        for part in re.split(r"[.\-]", version)
    )


def _package_cache_dir(package: str) -> Optional[Path]:
    raw = os.getenv(ENV_PACKAGE_CACHE, "").strip()
    cache = Path(raw).expanduser() if raw else Path.home() / ".fhir" / "packages"
    if not cache.is_dir():
        return None
    candidates = [
        d / "package"
        for d in cache.glob(f"{package}#*")
        if (d / "package").is_dir()
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda p: _version_key(p.parent.name.split("#", 1)[1]))


def locate_terminology_dir(
    directory: Union[str, Path, None] = None,
    package: str = DEFAULT_TERMINOLOGY_PACKAGE,
    search_from: Union[str, Path, None] = None,
) -> Path:
    """Resolve the directory holding the terminology documents.

    Raises:
        ConfigurationError: If an explicit or configured directory does
            not exist, or no installed package can be found.
    """
    if directory is not None:
        path = Path(directory).expanduser()
        if not path.is_dir():
            raise ConfigurationError(f"Terminology directory not found: {path}")
        return path

    env_dir = os.getenv(ENV_TERMINOLOGY_DIR, "").strip()
    if env_dir:
        path = Path(env_dir).expanduser()
        if not path.is_dir():
            raise ConfigurationError(
                f"{ENV_TERMINOLOGY_DIR} points to a missing directory: {path}"
            )
        return path

    start = Path(search_from) if search_from is not None else Path.cwd()
    found = _node_modules_dir(package, start.resolve())
    if found is None:
        found = _package_cache_dir(package)
    if found is None:
        raise ConfigurationError(
            f"Could not locate terminology package {package!r}; set "
            f"{ENV_TERMINOLOGY_DIR} or install the package"
        )
    return found
