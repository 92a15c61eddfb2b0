"""Per-type configuration for sources.

A ``Resource`` subclass is configured with ``configure(**options)``:

  base_uri   — prefix used to resolve short identifiers into URIs
  rdf_label  — predicate preferred by ``Resource.rdf_label()``
  type       — one or more rdf:type IRIs, merged with inherited ones
  repository — name of the registered repository the type persists to
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable

from rdflib import URIRef

from .exceptions import InvalidDeclarationError


CONFIG_OPTIONS = ("base_uri", "rdf_label", "type", "repository")


@dataclass(frozen=True)
class Configuration:
    """Immutable configuration; ``merge`` returns a new instance."""
    base_uri: str | None = None
    rdf_label: URIRef | None = None
    types: tuple[URIRef, ...] = ()
    repository: str | None = None

    def merge(self, **options: Any) -> Configuration:
        """Merge options into a copy of this configuration.

        ``type`` accumulates (duplicates dropped, order kept); the other
        options replace the current value.

        Raises:
            InvalidDeclarationError: for an option that is not recognized.
        """
        unknown = set(options) - set(CONFIG_OPTIONS)
        if unknown:
            raise InvalidDeclarationError(
                f"Unknown configuration option(s): {', '.join(sorted(unknown))}"
            )

        changes: dict[str, Any] = {}
        if "type" in options:
            merged = list(self.types)
            for iri in _as_iris(options["type"]):
                if iri not in merged:
                    merged.append(iri)
            changes["types"] = tuple(merged)
        if "base_uri" in options:
            base = options["base_uri"]
            changes["base_uri"] = None if base is None else str(base)
        if "rdf_label" in options:
            label = options["rdf_label"]
            changes["rdf_label"] = None if label is None else URIRef(label)
        if "repository" in options:
            changes["repository"] = options["repository"]
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_uri": self.base_uri,
            "rdf_label": self.rdf_label,
            "type": list(self.types),
            "repository": self.repository,
        }


def _as_iris(value: URIRef | str | Iterable[URIRef | str] | None) -> list[URIRef]:
    if value is None:
        return []
    if isinstance(value, str):
        return [URIRef(value)]
    return [URIRef(v) for v in value]
