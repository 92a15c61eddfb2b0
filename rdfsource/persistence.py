"""Persistence strategies: where a source's statements are stored.

There are exactly two strategies and they differ only in the backing graph:

  RepositoryStrategy: a named repository from the registry (or a private
                       in-memory graph when the type configures none)
  ParentStrategy:     the graph of the final parent in the source's
                       ancestor chain

Both share the same contract (``persisted``, ``persist``, ``destroy``,
``reload``). Writing is always erase-then-write: every statement about the
subject is removed from the backing graph before the owned graph is
inserted, so values cleared since the last write do not survive. The same
erase covers the children the source holds copies of.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rdflib import Graph

from .ancestors import Ancestors
from .exceptions import UnmutableParentError
from .materializer import reachable_statements
from .repositories import get_repository
from .types import StrategyKind

if TYPE_CHECKING:
    from .resource import Resource

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared contract
# ---------------------------------------------------------------------------

class PersistenceStrategy:
    """Behavior common to both strategies.

    Subclasses supply ``backing_graph()`` and may hook into destruction.
    """

    kind: StrategyKind

    def __init__(self, source: Resource) -> None:
        self.source = source
        self._persisted = False
        self._destroyed = False

    def backing_graph(self) -> Graph:
        raise NotImplementedError

    @property
    def locally_persisted(self) -> bool:
        """This source's own flag, ignoring any ancestors."""
        return self._persisted and not self._destroyed

    @property
    def persisted(self) -> bool:
        return self.locally_persisted

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def persist(self) -> bool:
        """Erase the statements about every subject in the owned graph from
        the backing graph, then write the owned graph.

        The erased subjects are this source and whatever children it holds
        copies of, so stale copies of a child are replaced rather than
        merged with the current ones.

        Returns:
            True once both phases have completed.
        """
        target = self.backing_graph()
        subject = self.source.rdf_subject
        skipped = self._unwritten_subjects()
        statements = [t for t in self.source.graph if t[0] not in skipped]
        subjects = {s for s, _, _ in statements}
        subjects.add(subject)
        for each in subjects:
            target.remove((each, None, None))
        for triple in statements:
            target.add(triple)
        self._persisted = True
        logger.debug(
            "Persisted %s (%d statements about %d subjects, %s)",
            subject.n3(), len(statements), len(subjects), self.kind.value,
        )
        return True

    def _unwritten_subjects(self) -> set:
        return set()

    def destroy(self) -> bool:
        """Empty the owned graph and erase the subject from the backing graph."""
        self.source.graph.remove((None, None, None))
        self._before_destroy()
        self.persist()
        self._destroyed = True
        logger.debug("Destroyed %s", self.source.rdf_subject.n3())
        return True

    def _before_destroy(self) -> None:
        pass

    def reload(self) -> bool:
        """Discard local state and re-read the subject from the backing graph."""
        self.load(self.backing_graph())
        return True

    def load(self, graph: Graph) -> int:
        """Replace the owned graph with the subject's reachable statements
        in ``graph``.

        The source counts as persisted once anything was found.

        Returns:
            The number of statements loaded.
        """
        subject = self.source.rdf_subject
        statements = list(reachable_statements(graph, subject))
        owned = self.source.graph
        owned.remove((None, None, None))
        for triple in statements:
            owned.add(triple)
        if statements:
            self._persisted = True
        logger.debug("Loaded %d statements for %s", len(statements), subject.n3())
        return len(statements)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source!r})"


# ---------------------------------------------------------------------------
# RepositoryStrategy
# ---------------------------------------------------------------------------

class RepositoryStrategy(PersistenceStrategy):
    """Persist to a repository graph shared through the registry."""

    kind = StrategyKind.REPOSITORY

    def __init__(self, source: Resource, repository: Graph | None = None) -> None:
        super().__init__(source)
        self._repository = repository

    @property
    def repository(self) -> Graph:
        """The backing repository, resolved on first use.

        Raises:
            RepositoryNotFoundError: if the configured name is not registered.
        """
        if self._repository is None:
            name = type(self.source).configuration.repository
            if name is None:
                self._repository = Graph()
            else:
                self._repository = get_repository(name)
        return self._repository

    @repository.setter
    def repository(self, repository: Graph) -> None:
        self._repository = repository

    def backing_graph(self) -> Graph:
        return self.repository


# ---------------------------------------------------------------------------
# ParentStrategy
# ---------------------------------------------------------------------------

class ParentStrategy(PersistenceStrategy):
    """Project a source onto the graph of its final parent.

    This lets a source be treated as living within the scope of another
    source: a chapter persisted into its book, and the book into whatever
    the book persists to.
    """

    kind = StrategyKind.PARENT

    def __init__(self, source: Resource, parent: Resource | None = None) -> None:
        super().__init__(source)
        self._parent: Resource | None = None
        if parent is not None:
            self.parent = parent

    @property
    def parent(self) -> Resource | None:
        return self._parent

    @parent.setter
    def parent(self, parent: Resource | None) -> None:
        """Bind the target parent.

        Raises:
            UnmutableParentError: unless ``parent`` is a mutable ``Resource``
                (or ``None`` to unbind).
        """
        if parent is not None:
            from .resource import Resource
            if not isinstance(parent, Resource) or not parent.is_mutable():
                raise UnmutableParentError(
                    f"{parent!r} cannot be a parent; it must be a mutable Resource"
                )
        self._parent = parent

    def ancestors(self) -> Ancestors:
        return Ancestors(self.source)

    def final_parent(self) -> Resource:
        """The last parent in the chain; its graph receives the statements.

        Raises:
            NilParentError: if no parent is bound.
        """
        return self.ancestors().final()

    def backing_graph(self) -> Graph:
        return self.final_parent().graph

    @property
    def persisted(self) -> bool:
        """Persisted only if this source and every ancestor up to the final
        parent are.

        Raises:
            NilParentError: if no parent is bound.
        """
        if not self.locally_persisted:
            return False
        return all(
            ancestor.persistence_strategy.locally_persisted
            for ancestor in self.ancestors()
        )

    def _unwritten_subjects(self) -> set:
        # the parent chain owns its own statements
        own = self.source.rdf_subject
        return {a.rdf_subject for a in self.ancestors() if a.rdf_subject != own}

    def _before_destroy(self) -> None:
        if self._parent is not None:
            self._parent.destroy_child(self.source)
