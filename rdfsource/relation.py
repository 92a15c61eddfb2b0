"""Relation Accessor — property reads and writes as graph operations.

A ``Relation`` binds one property (a ``NodeConfig``) to one subject inside a
source's graph. Reading queries ``(subject, predicate, ?)`` and converts each
object; writing replaces that whole slice of the graph.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from rdflib import Literal
from rdflib.term import Identifier

from .exceptions import InvalidValueError
from .materializer import Materializer
from .properties import resolve_target_type
from .terms import native_value, to_object_term
from .types import NodeConfig

if TYPE_CHECKING:
    from .resource import Resource


class Relation:
    """The values of one property for one subject."""

    def __init__(
        self,
        parent: Resource,
        config: NodeConfig,
        subject: Identifier | None = None,
    ) -> None:
        self.parent = parent
        self.config = config
        self.subject = parent.rdf_subject if subject is None else subject

    @property
    def predicate(self) -> Identifier:
        return self.config.predicate

    def objects(self) -> list[Identifier]:
        """The raw object terms, as stored."""
        return list(self.parent.graph.objects(self.subject, self.predicate))

    # -----------------------------------------------------------------------
    # Reading
    # -----------------------------------------------------------------------

    def values(self, literal: bool = False) -> list[Any]:
        """Convert each object term for the caller.

        Literals become native values, or stay ``Literal`` terms when
        ``literal`` is true (two literals that differ only in language tag
        are distinct values and must not be collapsed). URIs and blank nodes
        become sources when the property casts, raw terms otherwise.
        """
        result: list[Any] = []
        for term in self.objects():
            if isinstance(term, Literal):
                result.append(term if literal else native_value(term))
            elif self.config.cast:
                result.append(self._node_for(term))
            else:
                result.append(term)
        return result

    def _node_for(self, term: Identifier) -> Resource:
        target = resolve_target_type(self.config)
        cached = self.parent.cached_node(term)
        if cached is not None and (target is None or isinstance(cached, target)):
            return cached

        materializer = Materializer()
        materializer.remember(self.parent)
        parent = self.parent if self.parent.is_mutable() else None
        node = materializer.materialize(term, self.parent.graph, target=target, parent=parent)
        if node is not self.parent:
            self.parent.cache_node(term, node)
        return node

    # -----------------------------------------------------------------------
    # Writing
    # -----------------------------------------------------------------------

    def set(self, values: Any) -> None:
        """Replace every value of the property.

        The input is copied before anything is removed: callers may pass a
        list obtained from this very relation, or a live iterator over the
        graph, and removal must not disturb it. Every value is coerced before
        the graph is touched, so a rejected value leaves the graph unchanged.

        Raises:
            InvalidValueError: for a value that is not a URI, blank node,
                literal, string, native literal value, or source; or for more
                than one value on a single-valued property.
        """
        from .resource import Resource

        snapshot = _snapshot(values)
        terms = [to_object_term(value) for value in snapshot]
        if not self.config.multivalue and len(terms) > 1:
            raise InvalidValueError(
                f"{self.config.name} is single-valued; got {len(terms)} values"
            )

        self.clear()
        graph = self.parent.graph
        for value, term in zip(snapshot, terms):
            graph.add((self.subject, self.predicate, term))
            if isinstance(value, Resource):
                self.parent.capture(value)

    def clear(self) -> None:
        for term in self.objects():
            self.parent.graph.remove((self.subject, self.predicate, term))
            self.parent.forget_node(term)

    def __repr__(self) -> str:
        return f"Relation({self.subject.n3()} {self.config!r})"


def _snapshot(values: Any) -> list[Any]:
    """An independent list of the values to write."""
    if values is None:
        return []
    if isinstance(values, (str, bytes, Identifier, Mapping)):
        return [values]
    if hasattr(values, "rdf_subject"):
        return [values]
    if isinstance(values, Iterable):
        return list(values)
    return [values]
