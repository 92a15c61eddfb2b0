"""Term helpers: classification, coercion, and URI parsing.

rdflib supplies the terms themselves (``URIRef``, ``BNode``, ``Literal``).
This module decides which Python values may become terms, how literals are
turned back into native values, and how subject strings become URIs.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from rdflib import BNode, Literal, URIRef
from rdflib.term import Identifier

from .exceptions import InvalidURIError, InvalidValueError


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

# Python values rdflib can map to a typed literal
_NATIVE_LITERAL_TYPES = (bool, int, float, Decimal, date, datetime, time)

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_INVALID_URI_CHARS = set('<>" {}|\\^`\n\r\t')


def is_subject_term(value: Any) -> bool:
    """True for terms that can identify a resource (URI or blank node)."""
    return isinstance(value, (URIRef, BNode))


def is_term(value: Any) -> bool:
    """True for the three concrete RDF term kinds."""
    return isinstance(value, (URIRef, BNode, Literal))


def is_null_relative(value: Any) -> bool:
    """True for the empty-path URI ``<>`` (the document itself)."""
    return isinstance(value, URIRef) and str(value) == ""


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------

def to_object_term(value: Any) -> Identifier:
    """Coerce a value written to a property into an RDF object term.

    Accepts rdflib terms, strings, native literal types, and anything that
    exposes an ``rdf_subject`` (a source). Everything else is rejected.
    """
    if is_term(value):
        return value
    if isinstance(value, str):
        return Literal(value)
    if isinstance(value, _NATIVE_LITERAL_TYPES):
        return Literal(value)
    rdf_subject = getattr(value, "rdf_subject", None)
    if is_subject_term(rdf_subject):
        return rdf_subject
    raise InvalidValueError(
        f"value must be an RDF URI, Node, Literal, Resource, or string; "
        f"got {value!r}"
    )


def native_value(literal: Literal) -> Any:
    """Return the natively typed value of a literal.

    Language-tagged and ill-typed literals come back as their lexical form.
    """
    value = literal.toPython()
    if isinstance(value, Literal):
        return str(literal)
    return value


# ---------------------------------------------------------------------------
# URI parsing
# ---------------------------------------------------------------------------

def has_scheme(value: str) -> bool:
    return bool(_SCHEME.match(value))


def is_valid_uri(value: str) -> bool:
    """A URI is valid when it is absolute and has no forbidden characters."""
    if not has_scheme(value):
        return False
    return not any(ch in _INVALID_URI_CHARS for ch in value)


def join_uri(base_uri: str, identifier: str) -> str:
    """Append a short identifier to a base URI."""
    if base_uri.endswith(("/", "#")):
        return base_uri + identifier
    return f"{base_uri}/{identifier}"


def parse_uri(value: Any, base_uri: str | None = None) -> URIRef:
    """Turn a string (or number) into a URIRef.

    Absolute values are used as they are. Anything else is resolved against
    ``base_uri`` when one is given.

    Raises:
        InvalidURIError: if no valid absolute URI results.
    """
    if isinstance(value, URIRef):
        return value
    text = str(value)
    if not has_scheme(text) and base_uri is not None:
        text = join_uri(str(base_uri), text)
    if not is_valid_uri(text):
        raise InvalidURIError(f"could not make a valid URI from {value}")
    return URIRef(text)
