"""Identity Manager — subject assignment and cascading graph rewrite.

A source starts out as a blank node (assigned lazily). It may be given a
URI exactly once; the null relative URI ``<>`` counts as provisional and can
be rebound as well. When the subject changes, every statement in the owned
graph that mentions the old term, in subject or object position, is
rewritten to the new one. This keeps self-references and sibling references
intact for graphs built before their final identity was known.
"""

from __future__ import annotations

import logging
from typing import Any

from rdflib import BNode, Graph, URIRef
from rdflib.term import Identifier

from .exceptions import SubjectAlreadyAssignedError
from .terms import is_null_relative, is_subject_term, parse_uri

logger = logging.getLogger(__name__)


def is_reassignable(current: Identifier) -> bool:
    """A subject can be replaced while it is a blank node or ``<>``."""
    return isinstance(current, BNode) or is_null_relative(current)


def resolve_subject(value: Any, base_uri: str | None = None) -> Identifier | None:
    """Turn a subject argument into a term.

    ``None`` and the empty (non-URI) string mean "no change" and give
    ``None``. Terms pass through; anything exposing ``rdf_subject`` gives its
    subject; other values are parsed as URIs.

    Raises:
        InvalidURIError: if a string does not resolve to a valid URI.
    """
    if value is None:
        return None
    if is_subject_term(value):
        return value
    if isinstance(value, str) and value == "":
        return None
    rdf_subject = getattr(value, "rdf_subject", None)
    if is_subject_term(rdf_subject):
        return rdf_subject
    return parse_uri(value, base_uri)


def check_reassignable(current: Identifier) -> None:
    """Raises SubjectAlreadyAssignedError for a fixed subject."""
    if not is_reassignable(current):
        raise SubjectAlreadyAssignedError(
            "Refusing to update URI when one is already assigned!"
        )


def rewrite_subject(graph: Graph, old: Identifier, new: Identifier) -> int:
    """Replace ``old`` with ``new`` wherever it appears as subject or object.

    Returns the number of statements rewritten.
    """
    if old == new:
        return 0

    rewritten = 0
    for s, p, o in list(graph.triples((old, None, None))):
        graph.remove((s, p, o))
        graph.add((new, p, new if o == old else o))
        rewritten += 1
    for s, p, o in list(graph.triples((None, None, old))):
        graph.remove((s, p, o))
        graph.add((s, p, new))
        rewritten += 1

    logger.debug("Rewrote %d statements from %s to %s", rewritten, old.n3(), new.n3())
    return rewritten
