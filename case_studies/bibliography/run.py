"""Bibliography — end-to-end demonstration of RDF-backed sources.

Walks through the components on a small library catalogue:

  STEP 1 — Reading: typed sources materialized from a seeded repository,
           including a cyclic co-author relation
  STEP 2 — Writing: a new book with chapters projected into it,
           persisted erase-then-write and read back fresh
  STEP 3 — Identity: a blank-node draft given its URI after the fact
  STEP 4 — Validation: a validating persist rejecting a second ISBN, with
           the violation report and the shapes it was checked against
  STEP 5 — Destruction: a chapter removed from its book

Run with ``python -m case_studies.bibliography.run``.
"""

import logging
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from rdflib import Literal

from rdfsource.repositories import clear_repositories
from rdfsource.validation import validate_resource

from .domain import BIB, Book, Chapter, build_library, new_book


def print_header(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


def print_step(number: int, name: str) -> None:
    print(f"\n{'─' * 60}")
    print(f"  STEP {number}: {name}")
    print(f"{'─' * 60}")


def run_reading():
    print_step(1, "Reading from the repository")
    book = Book("comet")
    print(f"\n  {book!r}")
    print(f"  Title: {book.title}")
    print(f"  ISBN:  {book.isbn}")
    for chapter in book.chapters:
        print(f"  Chapter {chapter.position}: {chapter.title[0]}")

    [tove] = book.authors
    [lars] = tove.co_authors
    print(f"\n  Author: {tove.rdf_label()[0]}")
    print(f"  Co-author: {lars.rdf_label()[0]}")
    print(f"  Co-author's co-author is the same object: {lars.co_authors[0] is tove}")
    return book


def run_writing():
    print_step(2, "Writing a new book")
    book = new_book(
        "summer",
        "Moominsummer Madness",
        ["The Volcano", "The Floating Theatre"],
    )
    print(f"\n  Persisted {book!r}: {book.persisted}")

    fresh = Book("summer")
    print(f"  Re-read title: {fresh.title}")
    print(f"  Re-read chapters: {sorted(c.title[0] for c in fresh.chapters)}")
    print(f"  Stamped by callback: {fresh.modified}")
    return fresh


def run_identity():
    print_step(3, "Assigning identity after the fact")
    draft = Book()
    draft.title = "Untitled draft"
    print(f"\n  Draft subject: {draft.rdf_subject.n3()}")
    draft.set_subject("winter")
    print(f"  Assigned:      {draft.rdf_subject.n3()}")
    print(f"  Title kept:    {draft.title}")
    return draft


def run_validation():
    print_step(4, "Validating persist")
    book = Book("comet")
    # a second ISBN, inserted around the single-valued accessor
    book.add((book.rdf_subject, BIB.isbn, Literal("978-0-00-000000-0")))
    written = book.persist(validate=True)
    print(f"\n  Written: {written}")

    result = validate_resource(book)
    print()
    for line in result.summary().splitlines():
        print(f"  {line}")
    print("\n  Checked against:")
    for line in result.shapes_as_turtle().strip().splitlines():
        print(f"    {line}")
    return written


def run_destruction(book: Book):
    print_step(5, "Destroying a chapter")
    [first, *_] = sorted(book.chapters, key=lambda c: c.position)
    chapter = Chapter(first.rdf_subject, parent=book)
    chapter.destroy()
    print(f"\n  Destroyed {chapter!r}: {chapter.destroyed}")
    print(f"  Chapters left: {[c.title[0] for c in book.chapters]}")


def main():
    logging.basicConfig(level=logging.WARNING)
    print_header("Bibliography: RDF-backed sources")

    clear_repositories()
    build_library()

    run_reading()
    book = run_writing()
    run_identity()
    run_validation()
    run_destruction(book)

    print(f"\n{'=' * 60}")
    print("  Bibliography Complete")
    print(f"{'=' * 60}")


if __name__ == "__main__":
    main()
