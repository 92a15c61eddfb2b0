"""Resource — a typed, mutable source backed by an RDF graph.

A ``Resource`` keeps its state as statements in its own rdflib ``Graph``.
Declared properties project Python attributes onto predicates; reading one
queries the graph and writing one rewrites that slice of the graph.

Identity: a URI or a blank node (assigned lazily). See ``identity``.
Storage: a ``RepositoryStrategy`` when constructed without a parent, a
``ParentStrategy`` when constructed with one. See ``persistence``.

    class Book(Resource):
        title = Property(DCTERMS.title)
        chapters = Property(EX.hasChapter, target_type="Chapter")

    Book.configure(type=EX.Book, base_uri="http://example.org/books/",
                   repository="default")

    book = Book("moomin")
    book.title = "Comet in Moominland"
    book.persist()

``Resource`` itself is the abstract base: properties cannot be declared on
it, but it can be instantiated as a generic, untyped source.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator

from rdflib import RDF, RDFS, BNode, Graph, URIRef
from rdflib.graph import ReadOnlyGraphAggregate
from rdflib.namespace import DCTERMS, SKOS
from rdflib.term import Identifier

from .configuration import Configuration
from .identity import check_reassignable, resolve_subject, rewrite_subject
from .persistence import ParentStrategy, PersistenceStrategy, RepositoryStrategy
from .properties import (
    Property,
    declare,
    install,
    properties as properties_of,
    property_for_predicate,
    reflect_on_property,
    register_type,
)
from .relation import Relation
from .repositories import get_repository
from .serialization import attributes, to_json
from .terms import parse_uri
from .types import NodeConfig
from .validation import validate_resource

logger = logging.getLogger(__name__)

# Predicates tried by rdf_label() after the configured one
DEFAULT_LABELS = (
    SKOS.prefLabel,
    DCTERMS.title,
    RDFS.label,
    SKOS.altLabel,
    SKOS.hiddenLabel,
)

Triple = tuple[Identifier, Identifier, Identifier]


class Resource:
    """A source whose state is a set of RDF statements."""

    _abstract_source = True
    configuration = Configuration()
    _before_persist: tuple[str | Callable[[Resource], Any], ...] = ()

    def __init__(
        self,
        subject: Any = None,
        parent: Resource | None = None,
        *,
        graph: Graph | None = None,
    ) -> None:
        """Create a source.

        Args:
            subject: URI, blank node, URI string, or an identifier resolved
                against the configured ``base_uri``. A fresh blank node when
                omitted.
            parent: project this source onto ``parent`` (``ParentStrategy``)
                instead of persisting to a repository.
            graph: use this graph as the source's own, as is. Without it the
                source starts empty and is reloaded from its backing store.

        Raises:
            InvalidURIError: if ``subject`` does not resolve to a valid URI.
            RepositoryNotFoundError: if the configured repository is missing.
            UnmutableParentError: if ``parent`` cannot receive statements.
        """
        self._subject: Identifier | None = None
        self._node_cache: dict[Identifier, Resource] = {}
        self._captured: dict[Identifier, Resource] = {}
        self.errors: list = []
        self.graph = Graph() if graph is None else graph

        self.persistence_strategy: PersistenceStrategy
        if parent is not None:
            self.persistence_strategy = ParentStrategy(self, parent)
        else:
            self.persistence_strategy = RepositoryStrategy(self)

        if subject is not None:
            self.set_subject(subject)
        if graph is None:
            self.reload()
        self.apply_types()

    # -----------------------------------------------------------------------
    # Type-level declarations
    # -----------------------------------------------------------------------

    @classmethod
    def configure(cls, **options: Any) -> Configuration:
        """Set ``base_uri``, ``rdf_label``, ``type`` or ``repository``."""
        cls.configuration = cls.configuration.merge(**options)
        if "type" in options:
            register_type(cls)
        return cls.configuration

    @classmethod
    def declare(
        cls,
        name: str,
        predicate: URIRef | str,
        *,
        target_type: type | str | None = None,
        cast: bool = True,
        multivalue: bool = True,
    ) -> NodeConfig:
        """Declare a property on this class.

        Raises:
            InvalidDeclarationError: when called on ``Resource`` itself, or
                for an invalid ``target_type``.
        """
        prop = Property(predicate, target_type=target_type, cast=cast, multivalue=multivalue)
        return declare(cls, name, prop)

    @classmethod
    def properties(cls) -> dict[str, NodeConfig]:
        return properties_of(cls)

    @classmethod
    def reflect_on_property(cls, name: str) -> NodeConfig:
        return reflect_on_property(cls, name)

    @classmethod
    def property_for_predicate(cls, predicate: URIRef) -> NodeConfig | None:
        return property_for_predicate(cls, predicate)

    @classmethod
    def before_persist(cls, *callbacks: str | Callable[[Resource], Any]) -> None:
        """Run ``callbacks`` (method names or callables) before each write.

        Callbacks may change properties; the changes are written.
        """
        cls._before_persist = tuple(cls._before_persist) + callbacks

    @classmethod
    def uri_for(cls, identifier: Any) -> URIRef:
        """Resolve an identifier against the configured ``base_uri``."""
        return parse_uri(identifier, cls.configuration.base_uri)

    @classmethod
    def from_uri(cls, uri: Any, parent: Resource | None = None) -> Resource:
        return cls(uri, parent)

    @classmethod
    def uri_persisted(cls, uri: Any) -> bool:
        """True if the configured repository holds statements about ``uri``."""
        name = cls.configuration.repository
        if name is None:
            return False
        return (parse_uri(uri), None, None) in get_repository(name)

    @classmethod
    def id_persisted(cls, identifier: Any) -> bool:
        return cls.uri_persisted(cls.uri_for(identifier))

    # -----------------------------------------------------------------------
    # Identity
    # -----------------------------------------------------------------------

    @property
    def rdf_subject(self) -> Identifier:
        if self._subject is None:
            self._subject = BNode()
        return self._subject

    def set_subject(self, value: Any) -> None:
        """Assign the subject, rewriting statements that mention the old one.

        Raises:
            SubjectAlreadyAssignedError: if a URI subject is already fixed.
            InvalidURIError: if ``value`` does not resolve to a valid URI.
        """
        current = self.rdf_subject
        check_reassignable(current)
        new = resolve_subject(value, self.configuration.base_uri)
        if new is None:
            return
        rewrite_subject(self.graph, current, new)
        self._subject = new

    def is_node(self) -> bool:
        return isinstance(self.rdf_subject, BNode)

    def apply_types(self) -> None:
        """Assert the class's configured rdf:types for the subject."""
        if not self.is_mutable():
            return
        for iri in self.configuration.types:
            triple = (self.rdf_subject, RDF.type, iri)
            if triple not in self.graph:
                self.graph.add(triple)

    # -----------------------------------------------------------------------
    # Property values
    # -----------------------------------------------------------------------

    def relation(self, prop: str | URIRef | NodeConfig, subject: Any = None) -> Relation:
        """A relation accessor for a property name, predicate or entry."""
        if subject is not None:
            subject = resolve_subject(subject, self.configuration.base_uri)
        return Relation(self, self._config_for(prop), subject)

    def _config_for(self, prop: str | URIRef | NodeConfig) -> NodeConfig:
        if isinstance(prop, NodeConfig):
            return prop
        if isinstance(prop, URIRef):
            found = property_for_predicate(type(self), prop)
            return found or NodeConfig(name=str(prop), predicate=prop)
        return reflect_on_property(type(self), prop)

    def get_values(
        self,
        prop: str | URIRef | NodeConfig,
        *,
        subject: Any = None,
        literal: bool = False,
    ) -> list[Any]:
        """Values of a property, for this source or another ``subject``.

        Raises:
            UnknownPropertyError: for an undeclared property name.
        """
        return self.relation(prop, subject).values(literal=literal)

    def set_value(
        self,
        prop: str | URIRef | NodeConfig,
        values: Any,
        *,
        subject: Any = None,
    ) -> None:
        """Replace the values of a property.

        Raises:
            UnknownPropertyError: for an undeclared property name.
            InvalidValueError: for a value that cannot become a term.
        """
        self.relation(prop, subject).set(values)

    def __getitem__(self, prop: str | URIRef) -> list[Any]:
        return self.get_values(prop)

    def __setitem__(self, prop: str | URIRef, values: Any) -> None:
        self.set_value(prop, values)

    def unregistered_predicates(self) -> list[URIRef]:
        """Predicates used about the subject that no property declares."""
        found: list[URIRef] = []
        for predicate in self.graph.predicates(self.rdf_subject, None):
            if predicate in found:
                continue
            if property_for_predicate(type(self), predicate) is None:
                found.append(predicate)
        return found

    def rdf_label(self) -> list[Any]:
        """The first non-empty label values, else the subject URI."""
        labels = list(DEFAULT_LABELS)
        if self.configuration.rdf_label is not None:
            labels.insert(0, self.configuration.rdf_label)
        for label in labels:
            values = self.get_values(label)
            if values:
                return values
        return [] if self.is_node() else [str(self.rdf_subject)]

    # -----------------------------------------------------------------------
    # Child sources
    # -----------------------------------------------------------------------

    def cached_node(self, term: Identifier) -> Resource | None:
        return self._node_cache.get(term)

    def cache_node(self, term: Identifier, node: Resource) -> None:
        self._node_cache[term] = node

    def forget_node(self, term: Identifier) -> None:
        self._node_cache.pop(term, None)
        self._captured.pop(term, None)

    def capture(self, child: Resource) -> None:
        """Copy a child's statements into this graph.

        The child is captured by value: for every subject the child's graph
        describes, this graph's previous statements are replaced, so nested
        children are refreshed along with the child. Later changes to the
        child object show up only when it is captured again, which
        ``persist`` does for every child still referenced. Statements in the
        child's graph about this source are left out.
        """
        if child is self or child.graph is self.graph:
            return
        own = self.rdf_subject
        if child.rdf_subject == own:
            return
        statements = [t for t in child.graph if t[0] != own]
        subjects = {s for s, _, _ in statements}
        subjects.add(child.rdf_subject)
        for subject in subjects:
            self.graph.remove((subject, None, None))
        for triple in statements:
            self.graph.add(triple)
        for subject in subjects:
            self._node_cache.pop(subject, None)
        self._captured[child.rdf_subject] = child

    def refresh_captured(self) -> None:
        """Capture again every child this graph still refers to."""
        for term, child in list(self._captured.items()):
            if child.destroyed or (None, None, term) not in self.graph:
                self._captured.pop(term, None)
            else:
                self.capture(child)

    def destroy_child(self, child: Resource) -> None:
        """Remove every statement with ``child`` as subject or object."""
        term = child.rdf_subject
        for triple in list(self.graph.triples((term, None, None))):
            self.graph.remove(triple)
        for triple in list(self.graph.triples((None, None, term))):
            self.graph.remove(triple)
        self.forget_node(term)

    # -----------------------------------------------------------------------
    # Persistence
    # -----------------------------------------------------------------------

    @property
    def parent(self) -> Resource | None:
        return getattr(self.persistence_strategy, "parent", None)

    @property
    def persisted(self) -> bool:
        return self.persistence_strategy.persisted

    @property
    def destroyed(self) -> bool:
        return self.persistence_strategy.destroyed

    def is_mutable(self) -> bool:
        return not isinstance(self.graph, ReadOnlyGraphAggregate)

    def is_valid(self) -> bool:
        """Check declared cardinality; violations are kept in ``errors``."""
        result = validate_resource(self)
        self.errors = list(result.violations)
        return result.conforms

    def persist(self, validate: bool = False) -> bool:
        """Write this source to its backing store.

        Children assigned to properties are captured again first, so their
        current statements are the ones written.

        With ``validate`` an invalid source is not written and ``False`` is
        returned.
        """
        self.refresh_captured()
        if validate and not self.is_valid():
            logger.debug("Not persisting invalid %r: %s", self, self.errors)
            return False
        for callback in type(self)._before_persist:
            if isinstance(callback, str):
                getattr(self, callback)()
            else:
                callback(self)
        return self.persistence_strategy.persist()

    def reload(self) -> bool:
        self._node_cache.clear()
        self._captured.clear()
        return self.persistence_strategy.reload()

    def destroy(self) -> bool:
        self._node_cache.clear()
        self._captured.clear()
        return self.persistence_strategy.destroy()

    # -----------------------------------------------------------------------
    # Graph access
    # -----------------------------------------------------------------------

    def add(self, triple: Triple) -> None:
        self.graph.add(triple)

    def remove(self, triple: tuple[Identifier | None, Identifier | None, Identifier | None]) -> None:
        self.graph.remove(triple)

    def triples(
        self,
        pattern: tuple[Identifier | None, Identifier | None, Identifier | None] = (None, None, None),
    ) -> Iterator[Triple]:
        return self.graph.triples(pattern)

    def clear(self) -> None:
        self.graph.remove((None, None, None))
        self._node_cache.clear()
        self._captured.clear()

    @property
    def is_empty(self) -> bool:
        return len(self.graph) == 0

    def __contains__(self, triple: object) -> bool:
        return triple in self.graph

    def __iter__(self) -> Iterator[Triple]:
        return iter(self.graph)

    def __len__(self) -> int:
        return len(self.graph)

    def __bool__(self) -> bool:
        # an empty source is still a source
        return True

    # -----------------------------------------------------------------------
    # Serialization
    # -----------------------------------------------------------------------

    def attributes(self) -> dict[str, Any]:
        return attributes(self)

    def to_json(self, **kwargs: Any) -> str:
        return to_json(self, **kwargs)

    # -----------------------------------------------------------------------
    # Equality
    # -----------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        if other is self:
            return True
        if self.rdf_subject != other.rdf_subject:
            return False
        mine = set(self.graph.triples((self.rdf_subject, None, None)))
        theirs = set(other.graph.triples((other.rdf_subject, None, None)))
        return mine == theirs

    def __hash__(self) -> int:
        return hash(self.rdf_subject)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rdf_subject.n3()})"


# Every source exposes its rdf:type values as raw terms
install(Resource, "type", Property(RDF.type, cast=False))
