"""Property Registry — mapping from property names to predicates.

Each concrete ``Resource`` subclass owns the properties it declares; lookups
merge those along the class MRO, so subclasses inherit every entry of their
bases and may redeclare a name to replace it. The abstract base ``Resource``
has no type IRI to scope a property against, so declarations on it fail.

Two declaration forms are supported and are equivalent:

    class Book(Resource):
        title = Property(DCTERMS.title)

    Book.declare("subtitle", EX.subtitle, multivalue=False)

The module also keeps the registry of classes by rdf:type IRI that the
materializer consults to pick the most specific class for a node.
"""

from __future__ import annotations

import importlib
import sys
from typing import TYPE_CHECKING, Any, Iterable

from rdflib import URIRef

from .exceptions import InvalidDeclarationError, UnknownPropertyError
from .types import NodeConfig

if TYPE_CHECKING:
    from .resource import Resource


# ---------------------------------------------------------------------------
# Property descriptor
# ---------------------------------------------------------------------------

class Property:
    """Descriptor projecting an attribute onto a predicate.

    Reading the attribute returns a list of values (or, for single-valued
    properties, the first value or ``None``); assigning replaces them. All
    access goes through the owning resource's ``get_values`` / ``set_value``
    by property name, so the registry entry is always authoritative.
    """

    def __init__(
        self,
        predicate: URIRef | str,
        *,
        target_type: type | str | None = None,
        cast: bool = True,
        multivalue: bool = True,
    ) -> None:
        self.predicate = URIRef(predicate)
        self.target_type = target_type
        self.cast = cast
        self.multivalue = multivalue
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        declare(owner, name, self)

    def __get__(self, instance: Resource | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        config = reflect_on_property(type(instance), self.name)
        values = instance.get_values(self.name)
        if config.multivalue:
            return values
        return values[0] if values else None

    def __set__(self, instance: Resource, value: Any) -> None:
        instance.set_value(self.name, value)

    def __repr__(self) -> str:
        return f"Property({self.name} <{self.predicate}>)"


# ---------------------------------------------------------------------------
# Declaration
# ---------------------------------------------------------------------------

def declare(owner: type, name: str, prop: Property) -> NodeConfig:
    """Register ``prop`` under ``name`` on a concrete source class.

    Raises:
        InvalidDeclarationError: on the abstract base, or for a target type
            that is neither a class nor a class name.
    """
    if owner.__dict__.get("_abstract_source", False):
        raise InvalidDeclarationError(
            f"Properties not definable directly on {owner.__name__}, use a subclass"
        )
    return install(owner, name, prop)


def install(owner: type, name: str, prop: Property) -> NodeConfig:
    """Register a property without the abstract-base check."""
    _check_target_type(name, prop.target_type)
    config = NodeConfig(
        name=name,
        predicate=prop.predicate,
        target_type=prop.target_type,
        cast=prop.cast,
        multivalue=prop.multivalue,
        module=owner.__module__,
    )
    prop.name = name
    if "_own_properties" not in owner.__dict__:
        owner._own_properties = {}
    owner._own_properties[name] = config
    if owner.__dict__.get(name) is not prop:
        setattr(owner, name, prop)
    return config


def _check_target_type(name: str, target: Any) -> None:
    if target is None:
        return
    # URIRef is a str subclass but never names a class
    if isinstance(target, URIRef) or not isinstance(target, (type, str)):
        raise InvalidDeclarationError(
            f"target_type for {name} is a {type(target).__name__}; must be a class"
        )
    if isinstance(target, type):
        from .resource import Resource
        if not issubclass(target, Resource):
            raise InvalidDeclarationError(
                f"target_type for {name} is {target.__name__}; must be a Resource subclass"
            )


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def properties(owner: type) -> dict[str, NodeConfig]:
    """All properties visible on ``owner``, inherited ones included."""
    merged: dict[str, NodeConfig] = {}
    for klass in reversed(owner.__mro__):
        merged.update(klass.__dict__.get("_own_properties", {}))
    return merged


def reflect_on_property(owner: type, name: str) -> NodeConfig:
    """Look up a property by name.

    Raises:
        UnknownPropertyError: if no such property is declared.
    """
    config = properties(owner).get(str(name))
    if config is None:
        raise UnknownPropertyError(f"{owner.__name__} has no property '{name}'")
    return config


def property_for_predicate(owner: type, predicate: URIRef) -> NodeConfig | None:
    """Reverse index: the property projected onto ``predicate``, if any."""
    found = None
    for config in properties(owner).values():
        if config.predicate == predicate:
            found = config
    return found


def resolve_target_type(config: NodeConfig) -> type | None:
    """Resolve a (possibly lazy) target type to a class.

    String names are looked up as a dotted import path, then in the module
    of the declaring class, then among all ``Resource`` subclasses.

    Raises:
        InvalidDeclarationError: if the name does not resolve to exactly one
            ``Resource`` subclass.
    """
    target = config.target_type
    if target is None or isinstance(target, type):
        return target

    from .resource import Resource

    if "." in target:
        module_name, _, attr = target.rpartition(".")
        try:
            candidate = getattr(importlib.import_module(module_name), attr, None)
        except ImportError:
            candidate = None
        if isinstance(candidate, type) and issubclass(candidate, Resource):
            return candidate
        raise InvalidDeclarationError(
            f"target_type for {config.name} is '{target}', which is not importable"
        )

    module = sys.modules.get(config.module or "")
    candidate = getattr(module, target, None)
    if isinstance(candidate, type) and issubclass(candidate, Resource):
        return candidate

    matches = [c for c in _subclasses(Resource) if c.__name__ == target]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise InvalidDeclarationError(
            f"target_type for {config.name} is '{target}'; no such Resource subclass"
        )
    raise InvalidDeclarationError(
        f"target_type for {config.name} is '{target}', which is ambiguous; "
        f"use a dotted path"
    )


def _subclasses(cls: type) -> list[type]:
    found: list[type] = []
    stack = list(cls.__subclasses__())
    while stack:
        sub = stack.pop()
        if sub not in found:
            found.append(sub)
            stack.extend(sub.__subclasses__())
    return found


# ---------------------------------------------------------------------------
# Type registry: classes by rdf:type IRI
# ---------------------------------------------------------------------------

# Classes that configured their own rdf:type IRIs, in registration order
_TYPED_CLASSES: list[type] = []


def register_type(cls: type) -> None:
    if cls not in _TYPED_CLASSES:
        _TYPED_CLASSES.append(cls)


def most_specific_class(types: Iterable[URIRef], base: type | None = None) -> type | None:
    """Pick the registered class best matching a node's rdf:type values.

    A class matches when all of its configured types are present. Among
    matches (restricted to subclasses of ``base`` when given), the class
    with the most types wins, then the deepest one, then the latest
    registered.
    """
    present = set(types)
    best = None
    best_key = None
    for index, cls in enumerate(_TYPED_CLASSES):
        declared = set(cls.configuration.types)
        if not declared or not declared <= present:
            continue
        if base is not None and not issubclass(cls, base):
            continue
        key = (len(declared), len(cls.__mro__), index)
        if best_key is None or key > best_key:
            best, best_key = cls, key
    return best
