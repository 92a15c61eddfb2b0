"""Shape validation — declared cardinality expressed as SHACL.

Single-valued properties are enforced on write by the Relation Accessor, but
statements can also arrive by direct insertion or by loading a graph. This
module translates a source class's declarations into a SHACL shapes graph
and validates a source's own graph against it with pySHACL:

  single-valued property → property shape with sh:maxCount 1
  the source's subject   → sh:targetNode of the class's node shape

Multivalued properties carry no constraint; nothing beyond cardinality is
checked. ``Resource.persist(validate=True)`` consults this through
``Resource.is_valid()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rdflib import BNode, Graph, Literal, Namespace, RDF, RDFS, URIRef
from rdflib.term import Node
from rdflib.namespace import SH

from .properties import properties, property_for_predicate

if TYPE_CHECKING:
    from .resource import Resource


SHAPES = Namespace("urn:rdfsource:shape:")


# ---------------------------------------------------------------------------
# Declarations → SHACL shapes
# ---------------------------------------------------------------------------

def shape_iri(cls: type) -> URIRef:
    return SHAPES[f"{cls.__module__}.{cls.__qualname__}"]


def shapes_for(cls: type) -> Graph:
    """Translate a source class into a SHACL shapes graph.

    The class becomes a sh:NodeShape without targets; callers add the
    focus node. Each single-valued property becomes a property shape with
    sh:maxCount 1.
    """
    sg = Graph()
    sg.bind("sh", SH)

    shape = shape_iri(cls)
    sg.add((shape, RDF.type, SH.NodeShape))
    sg.add((shape, RDFS.label, Literal(f"Shape for {cls.__name__}")))

    for config in properties(cls).values():
        if config.multivalue:
            continue
        prop_shape = BNode()
        sg.add((shape, SH.property, prop_shape))
        sg.add((prop_shape, SH.path, config.predicate))
        sg.add((prop_shape, SH.name, Literal(config.name)))
        sg.add((prop_shape, SH.maxCount, Literal(1)))

    return sg


def has_constraints(cls: type) -> bool:
    return any(not config.multivalue for config in properties(cls).values())


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_resource(resource: Resource) -> ShapeValidationResult:
    """Validate a source's graph against its class's shapes.

    Classes without single-valued properties conform trivially and pySHACL
    is not invoked.
    """
    cls = type(resource)
    shapes_graph = shapes_for(cls)
    if not has_constraints(cls):
        return ShapeValidationResult(
            conforms=True,
            focus_node=resource.rdf_subject,
            shapes_graph=shapes_graph,
        )

    from pyshacl import validate as pyshacl_validate

    shapes_graph.add((shape_iri(cls), SH.targetNode, resource.rdf_subject))

    conforms, results_graph, results_text = pyshacl_validate(
        resource.graph,
        shacl_graph=shapes_graph,
        inference="none",
        abort_on_first=False,
    )

    violations = [
        _violation(results_graph, result, cls)
        for result in results_graph.subjects(RDF.type, SH.ValidationResult)
    ]
    return ShapeValidationResult(
        conforms=conforms,
        focus_node=resource.rdf_subject,
        violations=violations,
        results_text=results_text,
        shapes_graph=shapes_graph,
    )


def _violation(results_graph: Graph, result: Node, cls: type) -> ShapeViolation:
    """Read one sh:ValidationResult, naming the property it was raised on."""
    path = results_graph.value(result, SH.resultPath)
    config = property_for_predicate(cls, path) if path is not None else None
    message = results_graph.value(result, SH.resultMessage)
    return ShapeViolation(
        focus_node=results_graph.value(result, SH.focusNode),
        path=path,
        property_name=config.name if config is not None else None,
        message=str(message) if message is not None else "",
        severity=results_graph.value(result, SH.resultSeverity, default=SH.Violation),
    )


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class ShapeViolation:
    """One failed constraint, kept as graph terms."""
    focus_node: Node | None
    path: URIRef | None
    property_name: str | None
    message: str
    severity: URIRef

    @property
    def label(self) -> str:
        """The declared property name, else the path IRI."""
        if self.property_name is not None:
            return self.property_name
        return self.path.n3() if self.path is not None else "?"

    def __repr__(self) -> str:
        return f"ShapeViolation({self.label}: {self.message})"


@dataclass
class ShapeValidationResult:
    """Outcome of validating one source."""
    conforms: bool
    focus_node: Node | None = None
    violations: list[ShapeViolation] = field(default_factory=list)
    results_text: str = ""
    shapes_graph: Graph | None = None

    def violations_for(self, name: str) -> list[ShapeViolation]:
        return [v for v in self.violations if v.property_name == name]

    def summary(self) -> str:
        """A short report, one line per violated property."""
        subject = self.focus_node.n3() if self.focus_node is not None else "source"
        status = "conforms" if self.conforms else "DOES NOT CONFORM"
        lines = [f"{subject} {status}"]
        by_label: dict[str, list[ShapeViolation]] = {}
        for violation in self.violations:
            by_label.setdefault(violation.label, []).append(violation)
        for label, found in sorted(by_label.items()):
            messages = "; ".join(sorted({v.message for v in found}))
            lines.append(f"  {label} ({len(found)}): {messages}")
        return "\n".join(lines)

    def shapes_as_turtle(self) -> str:
        """The shapes the source was checked against, as Turtle."""
        if self.shapes_graph is None:
            return ""
        return self.shapes_graph.serialize(format="turtle")
