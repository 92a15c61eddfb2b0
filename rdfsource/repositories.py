"""Named repository registry.

A repository is a shared, mutable rdflib ``Graph`` reachable by a logical
name. Source types select one with ``configure(repository="name")``; the
registry is consulted when a ``RepositoryStrategy`` first needs its store.

The default registry is process-wide state. Its lifecycle is explicit:
repositories are added by configuration code and removed with ``clear``.
It is not safe for uncoordinated concurrent mutation, and must not be
changed while persistence operations on sources bound to it are in flight.
"""

from __future__ import annotations

import logging

from rdflib import Graph

from .exceptions import RepositoryNotFoundError

logger = logging.getLogger(__name__)


class RepositoryRegistry:
    """Maps repository names to graphs."""

    def __init__(self) -> None:
        self._repositories: dict[str, Graph] = {}

    def add(self, name: str, repository: Graph | None = None) -> Graph:
        """Register (or replace) a repository; a new empty graph by default."""
        if repository is None:
            repository = Graph()
        if name in self._repositories:
            logger.debug("Replacing repository %r", name)
        else:
            logger.debug("Registering repository %r", name)
        self._repositories[name] = repository
        return repository

    def get(self, name: str) -> Graph:
        """Return the repository registered under ``name``.

        Raises:
            RepositoryNotFoundError: if nothing is registered under that name.
        """
        try:
            return self._repositories[name]
        except KeyError:
            raise RepositoryNotFoundError(
                f"The class specifies a repository ({name!r}) "
                f"that has not been registered"
            ) from None

    def remove(self, name: str) -> Graph:
        self.get(name)
        logger.debug("Removing repository %r", name)
        return self._repositories.pop(name)

    def clear(self) -> None:
        logger.debug("Clearing %d repositories", len(self._repositories))
        self._repositories.clear()

    def names(self) -> list[str]:
        return list(self._repositories)

    def __contains__(self, name: object) -> bool:
        return name in self._repositories

    def __len__(self) -> int:
        return len(self._repositories)

    def __repr__(self) -> str:
        return f"RepositoryRegistry({', '.join(self._repositories) or 'empty'})"


# ---------------------------------------------------------------------------
# Default registry
# ---------------------------------------------------------------------------

registry = RepositoryRegistry()


def add_repository(name: str, repository: Graph | None = None) -> Graph:
    return registry.add(name, repository)


def get_repository(name: str) -> Graph:
    return registry.get(name)


def clear_repositories() -> None:
    registry.clear()
