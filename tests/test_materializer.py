"""Tests for the Resource Materializer."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from rdflib import BNode, Graph, Literal, Namespace, RDF, RDFS
from rdflib.namespace import DCTERMS, FOAF

from rdfsource.materializer import Materializer, materialize, reachable_statements
from rdfsource.properties import Property
from rdfsource.repositories import add_repository, clear_repositories
from rdfsource.resource import Resource


EX = Namespace("http://example.org/materializer/")


class Friend(Resource):
    name = Property(FOAF.name)
    knows = Property(FOAF.knows, target_type="Friend")


class Creation(Resource):
    title = Property(DCTERMS.title)
    creator = Property(DCTERMS.creator, target_type=Friend)


class Paper(Creation):
    pages = Property(EX.pages, multivalue=False)


class Volume(Resource):
    title = Property(DCTERMS.title)
    chapters = Property(EX.hasChapter, target_type="Part")
    next_volume = Property(EX.next, target_type="Volume")


class Part(Resource):
    title = Property(DCTERMS.title)


class Link(Resource):
    follows = Property(EX.follows, target_type="Link")


Friend.configure(type=FOAF.Person)
Creation.configure(type=EX.Creation)
Paper.configure(type=EX.Paper)
Volume.configure(type=EX.Volume, repository="library")
Part.configure(type=EX.Part)


LIBRARY = """
@prefix ex: <http://example.org/materializer/> .
@prefix dcterms: <http://purl.org/dc/terms/> .

ex:moomin a ex:Volume ;
    dcterms:title "Comet in Moominland" ;
    ex:hasChapter ex:ch1, ex:ch2 .

ex:ch1 a ex:Part ;
    dcterms:title "The Comet" .

ex:ch2 a ex:Part ;
    dcterms:title "The Observatory" .
"""

NETWORK = """\
<http://example.org/materializer/a> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <http://xmlns.com/foaf/0.1/Person> .
<http://example.org/materializer/a> <http://xmlns.com/foaf/0.1/name> "Alice" .
<http://example.org/materializer/a> <http://xmlns.com/foaf/0.1/knows> <http://example.org/materializer/b> .
<http://example.org/materializer/b> <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <http://xmlns.com/foaf/0.1/Person> .
<http://example.org/materializer/b> <http://xmlns.com/foaf/0.1/name> "Bob" .
<http://example.org/materializer/b> <http://xmlns.com/foaf/0.1/knows> <http://example.org/materializer/a> .
<http://example.org/materializer/b> <http://xmlns.com/foaf/0.1/knows> _:c .
_:c <http://xmlns.com/foaf/0.1/name> "Anonymous" .
_:c <http://xmlns.com/foaf/0.1/knows> <http://example.org/materializer/a> .
"""


@pytest.fixture
def network():
    return Graph().parse(data=NETWORK, format="nt")


@pytest.fixture
def library():
    clear_repositories()
    repo = add_repository("library")
    repo.parse(data=LIBRARY, format="turtle")
    yield repo
    clear_repositories()


class TestCycles:
    def test_mutual_knows_terminates(self, network):
        alice = materialize(network, EX.a)
        assert isinstance(alice, Friend)
        assert alice.name == ["Alice"]

        [bob] = [f for f in alice.knows if f.rdf_subject == EX.b]
        assert bob.name == ["Bob"]

    def test_cycle_returns_same_instance(self, network):
        alice = materialize(network, EX.a)
        [bob] = [f for f in alice.knows if f.rdf_subject == EX.b]
        back = [f for f in bob.knows if f.rdf_subject == EX.a]
        assert back == [alice]
        assert back[0] is alice

    def test_direct_and_indirect_paths_share_instances(self, network):
        materializer = Materializer()
        alice = materializer.materialize(EX.a, network)
        bob = materializer.materialize(EX.b, network)
        assert [f for f in alice.knows if f.rdf_subject == EX.b][0] is bob

    def test_blank_node_in_cycle(self, network):
        alice = materialize(network, EX.a)
        [bob] = [f for f in alice.knows if f.rdf_subject == EX.b]
        [anonymous] = [f for f in bob.knows if f.is_node()]
        assert anonymous.name == ["Anonymous"]
        assert anonymous.knows[0] is alice

    def test_memo_is_per_graph(self, network):
        other = Graph()
        for triple in network:
            other.add(triple)
        materializer = Materializer()
        first = materializer.materialize(EX.a, network)
        second = materializer.materialize(EX.a, other)
        assert first is not second
        assert first == second

    def test_separate_traversals_build_new_instances(self, network):
        assert materialize(network, EX.a) is not materialize(network, EX.a)

    def test_long_chain(self):
        graph = Graph()
        nodes = [EX[f"link{i}"] for i in range(150)]
        for here, there in zip(nodes, nodes[1:]):
            graph.add((here, EX.follows, there))

        head = materialize(graph, nodes[0], target=Link)
        current, depth = head, 0
        while current.follows:
            [current] = current.follows
            depth += 1
        assert depth == 149
        assert current.rdf_subject == nodes[-1]


class TestClassSelection:
    def test_most_specific_declared_type(self):
        graph = Graph()
        graph.add((EX.p1, RDF.type, EX.Creation))
        graph.add((EX.p1, RDF.type, EX.Paper))
        graph.add((EX.p1, EX.pages, Literal(12)))
        paper = materialize(graph, EX.p1)
        assert type(paper) is Paper
        assert paper.pages == 12

    def test_partial_types_pick_base_class(self):
        graph = Graph()
        graph.add((EX.c1, RDF.type, EX.Creation))
        assert type(materialize(graph, EX.c1)) is Creation

    def test_untyped_node_uses_target(self):
        graph = Graph()
        graph.add((EX.f1, FOAF.name, Literal("Fran")))
        friend = materialize(graph, EX.f1, target=Friend)
        assert type(friend) is Friend
        assert friend.name == ["Fran"]

    def test_untyped_node_without_target_is_generic(self):
        graph = Graph()
        graph.add((EX.thing, RDFS.label, Literal("thing")))
        source = materialize(graph, EX.thing)
        assert type(source) is Resource
        assert source.rdf_label() == ["thing"]

    def test_unknown_type_is_generic(self):
        graph = Graph()
        graph.add((EX.thing, RDF.type, EX.Unmapped))
        assert type(materialize(graph, EX.thing)) is Resource

    def test_type_outside_target_is_ignored(self):
        graph = Graph()
        graph.add((EX.p2, RDF.type, EX.Paper))
        graph.add((EX.p2, RDF.type, EX.Creation))
        source = materialize(graph, EX.p2, target=Friend)
        assert type(source) is Friend

    def test_child_types_from_statements(self):
        graph = Graph()
        graph.add((EX.c2, RDF.type, EX.Creation))
        graph.add((EX.c2, DCTERMS.creator, EX.author))
        graph.add((EX.author, FOAF.name, Literal("Tove")))
        creation = materialize(graph, EX.c2)
        [author] = creation.creator
        assert type(author) is Friend
        assert author.name == ["Tove"]

    def test_children_are_projected_onto_root(self):
        graph = Graph()
        graph.add((EX.c3, DCTERMS.creator, EX.author))
        creation = materialize(graph, EX.c3, target=Creation)
        [author] = creation.creator
        assert author.parent is creation


class TestLoading:
    def test_root_statements_loaded(self, network):
        alice = materialize(network, EX.a)
        assert (EX.a, FOAF.name, Literal("Alice")) in alice.graph

    def test_reachable_statements_loaded(self, network):
        alice = materialize(network, EX.a)
        assert (EX.b, FOAF.name, Literal("Bob")) in alice.graph

    def test_class_statements_not_followed(self):
        graph = Graph()
        graph.add((EX.x, RDF.type, EX.Creation))
        graph.add((EX.Creation, RDFS.label, Literal("Creation")))
        statements = set(reachable_statements(graph, EX.x))
        assert statements == {(EX.x, RDF.type, EX.Creation)}

    def test_materialized_root_is_persisted(self, network):
        assert materialize(network, EX.a).persisted

    def test_parent_argument(self, network):
        holder = Friend(EX.holder)
        alice = materialize(network, EX.a, parent=holder)
        assert alice.parent is holder

    def test_remember_seeds_memo(self, network):
        alice = Friend(EX.a, graph=network)
        materializer = Materializer()
        materializer.remember(alice)
        assert materializer.materialize(EX.a, network) is alice

    def test_bnode_root(self):
        graph = Graph()
        node = BNode()
        graph.add((node, FOAF.name, Literal("Nameless")))
        source = materialize(graph, node, target=Friend)
        assert source.rdf_subject == node
        assert source.name == ["Nameless"]


class TestRepositoryScenarios:
    def test_volume_and_chapters(self, library):
        volume = Volume(EX.moomin)
        assert volume.title == ["Comet in Moominland"]
        chapters = volume.chapters
        assert all(isinstance(c, Part) for c in chapters)
        assert sorted(c.title[0] for c in chapters) == ["The Comet", "The Observatory"]

    def test_chapter_reads_are_stable(self, library):
        volume = Volume(EX.moomin)
        first = {c.rdf_subject: c for c in volume.chapters}
        second = {c.rdf_subject: c for c in volume.chapters}
        assert all(first[k] is second[k] for k in first)

    def test_reference_survives_persist_and_reload(self, library):
        x = Volume(EX.x)
        y = Volume(EX.y)
        y.title = "Tales from Moominvalley"
        x.next_volume = y
        x.persist()

        y.title = "changed after persist"

        fresh = Volume(EX.x)
        [linked] = fresh.next_volume
        assert linked.rdf_subject == EX.y
        assert linked.title == ["Tales from Moominvalley"]
        assert isinstance(linked, Volume)

    def test_stale_child_copy_is_replaced(self, library):
        x = Volume(EX.x3)
        y = Volume(EX.y3)
        y.title = "A"
        x.next_volume = y
        y.title = "B"
        y.persist()
        x.persist()
        assert Volume(EX.y3).title == ["B"]
        assert list(library.objects(EX.y3, DCTERMS.title)) == [Literal("B")]

    def test_repeated_persist_does_not_accumulate_child_values(self, library):
        x = Volume(EX.x4)
        y = Volume(EX.y4)
        y.title = "first"
        x.next_volume = y
        x.persist()
        y.title = "second"
        x.persist()
        assert list(library.objects(EX.y4, DCTERMS.title)) == [Literal("second")]

    def test_unpersisted_reference_target(self, library):
        x = Volume(EX.x2)
        x.next_volume = EX.y2
        x.persist()
        [linked] = Volume(EX.x2).next_volume
        assert linked.rdf_subject == EX.y2
        assert linked.title == []
