"""Ancestor Resolver: walks the parent-projection chain.

For a source persisted through a ``ParentStrategy`` the chain is
``parent, parent.parent, ...``. The last element is the *final parent*: the
source whose graph actually receives the projected statements.

The walk stops at a source with no further parent, at a source whose parent
is itself, and at any source whose parent has already been visited (which
includes the originating source), so cyclic chains terminate. Nothing is
cached: parents can be rebound between walks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

from .exceptions import NilParentError

if TYPE_CHECKING:
    from .resource import Resource


def parent_of(source: Resource) -> Resource | None:
    """The parent bound to a source's strategy, or ``None``."""
    return getattr(source.persistence_strategy, "parent", None)


class Ancestors:
    """An iterable over the ancestors of a source."""

    def __init__(self, source: Resource) -> None:
        self.source = source

    def __iter__(self) -> Iterator[Resource]:
        """Yield each ancestor, nearest first.

        Raises:
            NilParentError: if the source does not persist to a parent.
        """
        current = parent_of(self.source)
        if current is None:
            raise NilParentError(
                f"{self.source!r} has no parent to resolve ancestors from"
            )

        seen = {id(self.source)}
        while True:
            yield current
            seen.add(id(current))
            following = parent_of(current)
            if following is None or following is current or id(following) in seen:
                return
            current = following

    def to_list(self) -> list[Resource]:
        return list(self)

    def final(self) -> Resource:
        """The outermost ancestor."""
        last = None
        for last in self:
            pass
        return last

    def __repr__(self) -> str:
        return f"Ancestors({self.source!r})"
