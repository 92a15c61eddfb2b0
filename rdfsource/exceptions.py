"""Error taxonomy for rdfsource.

Every error is raised synchronously at the point of violation. None of them
are transient: they signal programmer or configuration mistakes, so nothing
in the package retries or swallows them.

Where a builtin exception already names the category (a bad value, a failed
lookup) the error also derives from it, so callers may catch either.
"""

from __future__ import annotations


class RDFSourceError(Exception):
    """Base class for all rdfsource errors."""


class InvalidURIError(RDFSourceError, ValueError):
    """A subject string could not be turned into a valid URI."""


class SubjectAlreadyAssignedError(RDFSourceError):
    """A source's subject is fixed and cannot be rebound."""


class InvalidDeclarationError(RDFSourceError, TypeError):
    """A property or configuration declaration is not allowed.

    Raised for properties declared on the abstract base ``Resource``, for
    target types that are neither a class nor a resolvable class name, and
    for unknown configuration options.
    """


class InvalidValueError(RDFSourceError, ValueError):
    """A value written to a property is not a permitted term kind."""


class UnknownPropertyError(RDFSourceError, KeyError):
    """No property with the requested name is declared."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class RepositoryNotFoundError(RDFSourceError, LookupError):
    """A named repository is not registered."""


class NilParentError(RDFSourceError, RuntimeError):
    """An ancestor walk was requested for a source with no parent."""


class UnmutableParentError(RDFSourceError, TypeError):
    """A parent candidate cannot receive projected statements."""
