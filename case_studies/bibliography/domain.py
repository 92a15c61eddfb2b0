"""Bibliography — source types for a small library catalogue.

Three types share one repository:
- Book: title, single-valued ISBN, authors, chapters
- Chapter: title, projected into its book through a ParentStrategy
- Author: name, co-authors (cyclic by nature)
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from rdflib import Graph, Namespace
from rdflib.namespace import DCTERMS, FOAF

from rdfsource.properties import Property
from rdfsource.repositories import add_repository
from rdfsource.resource import Resource


BIB = Namespace("http://example.org/bibliography/")

REPOSITORY = "bibliography"


class Author(Resource):
    name = Property(FOAF.name)
    co_authors = Property(BIB.coAuthor, target_type="Author")


class Chapter(Resource):
    title = Property(DCTERMS.title)
    position = Property(BIB.position, multivalue=False)


class Book(Resource):
    title = Property(DCTERMS.title)
    isbn = Property(BIB.isbn, multivalue=False)
    authors = Property(DCTERMS.creator, target_type=Author)
    chapters = Property(BIB.hasChapter, target_type=Chapter)
    modified = Property(DCTERMS.modified, multivalue=False)

    def touch(self):
        self.modified = "catalogued"


Author.configure(
    type=BIB.Author,
    base_uri="http://example.org/bibliography/authors/",
    repository=REPOSITORY,
    rdf_label=FOAF.name,
)
Chapter.configure(type=BIB.Chapter)
Book.configure(
    type=BIB.Book,
    base_uri="http://example.org/bibliography/books/",
    repository=REPOSITORY,
)
Book.before_persist("touch")


CATALOGUE = """
@prefix bib: <http://example.org/bibliography/> .
@prefix dcterms: <http://purl.org/dc/terms/> .
@prefix foaf: <http://xmlns.com/foaf/0.1/> .

<http://example.org/bibliography/books/comet>
    a bib:Book ;
    dcterms:title "Comet in Moominland" ;
    bib:isbn "978-0-14-030150-4" ;
    dcterms:creator <http://example.org/bibliography/authors/tove> ;
    bib:hasChapter <http://example.org/bibliography/books/comet#ch1> .

<http://example.org/bibliography/books/comet#ch1>
    a bib:Chapter ;
    dcterms:title "In which Moomintroll and Sniff set out" ;
    bib:position 1 .

<http://example.org/bibliography/authors/tove>
    a bib:Author ;
    foaf:name "Tove Jansson" ;
    bib:coAuthor <http://example.org/bibliography/authors/lars> .

<http://example.org/bibliography/authors/lars>
    a bib:Author ;
    foaf:name "Lars Jansson" ;
    bib:coAuthor <http://example.org/bibliography/authors/tove> .
"""


def build_library(seed: bool = True) -> Graph:
    """Register the bibliography repository, optionally seeded with the catalogue."""
    repository = add_repository(REPOSITORY)
    if seed:
        repository.parse(data=CATALOGUE, format="turtle")
    return repository


def new_book(identifier: str, title: str, chapter_titles: list[str]) -> Book:
    """A book with chapters projected into it, persisted to the repository."""
    book = Book(identifier)
    book.title = title
    chapters = []
    for position, chapter_title in enumerate(chapter_titles, start=1):
        chapter = Chapter(f"{book.rdf_subject}#ch{position}", parent=book)
        chapter.title = chapter_title
        chapter.position = position
        chapter.persist()
        chapters.append(chapter.rdf_subject)
    book.chapters = chapters
    book.persist()
    return book
