"""Core value types for rdfsource.

A source's declared properties are described by ``NodeConfig`` entries: each
one projects a Python-side name onto an RDF predicate, and says how objects
found under that predicate are turned back into Python values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rdflib import URIRef


# ---------------------------------------------------------------------------
# NodeConfig: one Property Registry entry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NodeConfig:
    """Metadata for a declared property.

    ``target_type`` is a ``Resource`` subclass, the name of one (resolved
    lazily so that types may refer to each other), or ``None``. When ``cast``
    is true, URI and blank-node objects are returned as sources; otherwise
    they are returned as raw terms. ``multivalue`` false makes the property
    single-valued.
    """
    name: str
    predicate: URIRef
    target_type: type | str | None = None
    cast: bool = True
    multivalue: bool = True
    # module of the declaring class, used to resolve string target types
    module: str | None = field(default=None, compare=False)

    def __repr__(self) -> str:
        target = ""
        if self.target_type is not None:
            name = getattr(self.target_type, "__name__", self.target_type)
            target = f" -> {name}"
        return f"NodeConfig({self.name}: <{self.predicate}>{target})"


# ---------------------------------------------------------------------------
# StrategyKind: tag of the persistence strategy variant
# ---------------------------------------------------------------------------

class StrategyKind(Enum):
    """Where a source's backing store lives."""
    REPOSITORY = "repository"
    PARENT = "parent"
