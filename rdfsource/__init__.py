"""rdfsource — typed domain objects stored as RDF statements.

A source's state is not kept in ordinary fields but as subject–predicate–
object statements in an rdflib graph. The package implements:

- Property Registry: per-type mapping from property names to predicates
- Relation Accessor: property reads/writes as graph queries and rewrites
- Identity Manager: URI / blank-node subjects with cascading rewrite
- Persistence strategies: repository-backed and parent-projected storage
- Ancestor Resolver: the parent chain behind parent-projected storage
- Resource Materializer: typed, cycle-safe sources from raw statements

Shape validation (single-valued cardinality as SHACL) is delegated to
pySHACL and backs ``Resource.persist(validate=True)``.
"""

import logging

from .configuration import Configuration
from .exceptions import (
    InvalidDeclarationError,
    InvalidURIError,
    InvalidValueError,
    NilParentError,
    RDFSourceError,
    RepositoryNotFoundError,
    SubjectAlreadyAssignedError,
    UnknownPropertyError,
    UnmutableParentError,
)
from .materializer import Materializer, materialize
from .persistence import ParentStrategy, RepositoryStrategy
from .properties import Property
from .repositories import add_repository, clear_repositories, get_repository
from .resource import Resource
from .types import NodeConfig, StrategyKind

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Configuration",
    "InvalidDeclarationError",
    "InvalidURIError",
    "InvalidValueError",
    "Materializer",
    "NilParentError",
    "NodeConfig",
    "ParentStrategy",
    "Property",
    "RDFSourceError",
    "RepositoryNotFoundError",
    "RepositoryStrategy",
    "Resource",
    "StrategyKind",
    "SubjectAlreadyAssignedError",
    "UnknownPropertyError",
    "UnmutableParentError",
    "add_repository",
    "clear_repositories",
    "get_repository",
    "materialize",
]
