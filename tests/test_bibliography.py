"""End-to-end tests for the bibliography case study."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from rdflib import Literal

from rdfsource.repositories import clear_repositories
from rdfsource.validation import validate_resource

from case_studies.bibliography.domain import (
    BIB,
    Author,
    Book,
    Chapter,
    build_library,
    new_book,
)


@pytest.fixture
def library():
    clear_repositories()
    repository = build_library()
    yield repository
    clear_repositories()


class TestCatalogue:
    def test_book_loaded(self, library):
        book = Book("comet")
        assert book.persisted
        assert book.title == ["Comet in Moominland"]
        assert book.isbn == "978-0-14-030150-4"

    def test_chapters_typed(self, library):
        [chapter] = Book("comet").chapters
        assert isinstance(chapter, Chapter)
        assert chapter.position == 1

    def test_co_author_cycle(self, library):
        [tove] = Book("comet").authors
        [lars] = tove.co_authors
        assert lars.name == ["Lars Jansson"]
        assert lars.co_authors[0] is tove

    def test_author_label(self, library):
        assert Author("tove").rdf_label() == ["Tove Jansson"]


class TestNewBook:
    def test_round_trip(self, library):
        new_book("summer", "Moominsummer Madness", ["The Volcano", "The Floating Theatre"])
        fresh = Book("summer")
        assert fresh.title == ["Moominsummer Madness"]
        assert sorted(c.title[0] for c in fresh.chapters) == [
            "The Floating Theatre", "The Volcano",
        ]

    def test_callback_stamps(self, library):
        new_book("summer", "Moominsummer Madness", [])
        assert (Book.uri_for("summer"), Book.reflect_on_property("modified").predicate,
                Literal("catalogued")) in library

    def test_chapters_persisted_with_book(self, library):
        book = new_book("summer", "Moominsummer Madness", ["The Volcano"])
        chapter = Chapter(f"{book.rdf_subject}#ch1", parent=book)
        assert chapter.persisted

    def test_id_persisted(self, library):
        assert not Book.id_persisted("summer")
        new_book("summer", "Moominsummer Madness", [])
        assert Book.id_persisted("summer")


class TestValidation:
    def test_second_isbn_rejected(self, library):
        book = Book("comet")
        book.add((book.rdf_subject, BIB.isbn, Literal("978-0-00-000000-0")))
        assert book.persist(validate=True) is False
        assert len(list(library.objects(book.rdf_subject, BIB.isbn))) == 1

    def test_summary_names_the_property(self, library):
        book = Book("comet")
        book.add((book.rdf_subject, BIB.isbn, Literal("978-0-00-000000-0")))
        result = validate_resource(book)
        assert [v.property_name for v in result.violations] == ["isbn"]
        assert "isbn (1)" in result.summary()


class TestDestruction:
    def test_chapter_removed_from_book(self, library):
        book = new_book("summer", "Moominsummer Madness", ["The Volcano", "The Floating Theatre"])
        chapter = Chapter(f"{book.rdf_subject}#ch1", parent=book)
        chapter.destroy()
        assert [c.title[0] for c in book.chapters] == ["The Floating Theatre"]
        book.persist()
        assert [c.title[0] for c in Book("summer").chapters] == ["The Floating Theatre"]


class TestRun:
    def test_main_runs(self, capsys):
        from case_studies.bibliography.run import main

        main()
        out = capsys.readouterr().out
        assert "Bibliography Complete" in out
        assert "Written: False" in out
        assert "DOES NOT CONFORM" in out
        assert "isbn (1)" in out
        assert "sh:maxCount 1" in out
        clear_repositories()
