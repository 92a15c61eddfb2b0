"""Attributes view — a plain-data rendering of a source.

Keys are declared property names (``type`` excluded) and, for statements
about the subject that no declared property covers, the predicate URI as a
string. Values are lists. Child sources are rendered as nested attribute
dicts; a subject already being rendered further up the same traversal is
rendered as ``{"id": ...}`` so cyclic graphs terminate.
"""

from __future__ import annotations

import json
from datetime import date, datetime, time
from typing import TYPE_CHECKING, Any

from rdflib.term import Identifier

if TYPE_CHECKING:
    from .resource import Resource


def attributes(resource: Resource, _rendering: set[Identifier] | None = None) -> dict[str, Any]:
    """Render a source (and its children) as nested dicts and lists."""
    rendering = set() if _rendering is None else _rendering
    rendering.add(resource.rdf_subject)

    attrs: dict[str, Any] = {}
    if not resource.is_node():
        attrs["id"] = str(resource.rdf_subject)
    for name in resource.properties():
        if name == "type":
            continue
        attrs[name] = [_render(v, rendering) for v in resource.get_values(name)]
    for predicate in resource.unregistered_predicates():
        attrs[str(predicate)] = [_render(v, rendering) for v in resource.get_values(predicate)]

    rendering.discard(resource.rdf_subject)
    return attrs


def _render(value: Any, rendering: set[Identifier]) -> Any:
    from .resource import Resource

    if not isinstance(value, Resource):
        return value
    if value.rdf_subject in rendering:
        return {"id": reference(value)}
    return attributes(value, rendering)


def reference(resource: Resource) -> str:
    """A string identifying a source: its URI, or ``_:id`` for blank nodes."""
    if resource.is_node():
        return resource.rdf_subject.n3()
    return str(resource.rdf_subject)


def to_json(resource: Resource, **kwargs: Any) -> str:
    """JSON text of the attributes view."""
    return json.dumps(attributes(resource), default=_json_default, **kwargs)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)
