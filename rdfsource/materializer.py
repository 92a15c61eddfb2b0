"""Resource Materializer — typed sources from raw statements.

Given a subject term and a graph, the materializer builds a source of the
most specific declared class for the term's rdf:type values, fills it with
the statements reachable from the term, and then does the same for every
object linked through a casting property that declares a target type.

Traversal is memoized by ``(term, id(graph))``. A source is memoized before
its children are visited, so cyclic graphs (A knows B, B knows A) terminate,
and every path to the same term within one traversal yields the same
instance. The work list is explicit, so depth is not limited by the Python
recursion limit.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator

from rdflib import RDF, Graph
from rdflib.term import Identifier

from .properties import most_specific_class, property_for_predicate, resolve_target_type
from .terms import is_subject_term

if TYPE_CHECKING:
    from .resource import Resource

logger = logging.getLogger(__name__)

Triple = tuple[Identifier, Identifier, Identifier]


def reachable_statements(graph: Graph, term: Identifier) -> Iterator[Triple]:
    """Statements about ``term`` and, transitively, about the resources it
    links to.

    Objects of rdf:type are classes, not linked resources, and are not
    followed.
    """
    seen = {term}
    pending = [term]
    while pending:
        node = pending.pop()
        for s, p, o in list(graph.triples((node, None, None))):
            yield s, p, o
            if p != RDF.type and is_subject_term(o) and o not in seen:
                seen.add(o)
                pending.append(o)


class Materializer:
    """Builds typed sources for one traversal.

    A materializer is meant to be short-lived: its memo is the identity map
    of a single traversal.
    """

    def __init__(self) -> None:
        self._memo: dict[tuple[Identifier, int], Resource] = {}
        self._pending: list[tuple[Resource, Graph]] = []

    def remember(self, source: Resource, graph: Graph | None = None) -> None:
        """Seed the memo with an existing source, e.g. the one being read."""
        if graph is None:
            graph = source.graph
        self._memo[(source.rdf_subject, id(graph))] = source

    def class_for(self, term: Identifier, graph: Graph, target: type | None = None) -> type:
        """The most specific class for ``term``, else ``target``, else ``Resource``."""
        from .resource import Resource

        cls = most_specific_class(graph.objects(term, RDF.type), base=target)
        return cls or target or Resource

    def materialize(
        self,
        term: Identifier,
        graph: Graph,
        target: type | None = None,
        parent: Resource | None = None,
    ) -> Resource:
        """Build (or fetch from the memo) the source for ``term``."""
        root = self._build(term, graph, target, parent)
        while self._pending:
            source, origin = self._pending.pop()
            self._expand(source, origin)
        return root

    def _build(
        self,
        term: Identifier,
        graph: Graph,
        target: type | None,
        parent: Resource | None,
    ) -> Resource:
        key = (term, id(graph))
        cached = self._memo.get(key)
        if cached is not None:
            return cached

        cls = self.class_for(term, graph, target)
        source = cls(term, parent=parent, graph=Graph())
        self._memo[key] = source
        source.persistence_strategy.load(graph)
        source.apply_types()
        self._pending.append((source, graph))
        logger.debug("Materialized %s as %s", term.n3(), cls.__name__)
        return source

    def _expand(self, source: Resource, graph: Graph) -> None:
        owner = type(source)
        subject = source.rdf_subject
        for predicate, obj in list(source.graph.predicate_objects(subject)):
            if not is_subject_term(obj):
                continue
            config = property_for_predicate(owner, predicate)
            if config is None or not config.cast or config.target_type is None:
                continue
            child = self._build(obj, graph, resolve_target_type(config), source)
            source.cache_node(obj, child)


def materialize(
    graph: Graph,
    term: Identifier,
    target: type | None = None,
    parent: Resource | None = None,
) -> Resource:
    """Materialize ``term`` from ``graph`` in a fresh traversal."""
    return Materializer().materialize(term, graph, target=target, parent=parent)
