import sqlite3
from unittest.mock import MagicMock

import pytest

from book import Book
from database import StorageError
from library import Library


def test_add_list_and_find(lib):
    assert lib.list_books() == []

    book = lib.add_book(Book("Ulysses", 9780199535675, "James Joyce", 1922))

    assert book.id is not None
    assert lib.find_book(book.id) == book
    assert len(lib.list_books()) == 1
    assert lib.list_books()[0].title == "Ulysses"


def test_add_ignores_client_id(lib):
    book = lib.add_book(Book("Sapiens", 9780099590088, "Yuval Noah Harari", 2011, id=999))
    assert book.id != 999
    assert lib.find_book(999) is None


def test_ids_are_unique(lib):
    first = lib.add_book(Book("A", 1, "X", 2000))
    second = lib.add_book(Book("B", 2, "Y", 2001))
    assert first.id != second.id


def test_persistence(database):
    Library(database).add_book(Book("Sapiens", 9780099590088, "Yuval Noah Harari", 2011))

    # A second instance reads straight from the store
    books = Library(database).list_books()
    assert len(books) == 1
    assert books[0].title == "Sapiens"


def test_update_book(lib):
    book = lib.add_book(Book("Old Title", 1112223334, "Old Author", 1990))

    updated = lib.update_book(book.id, Book("New Title", 1112223335, "New Author", 1991))
    assert updated.id == book.id
    assert updated.title == "New Title"

    found = lib.find_book(book.id)
    assert found == Book("New Title", 1112223335, "New Author", 1991, id=book.id)


def test_update_book_not_found(lib):
    updated = lib.update_book(4242, Book("Ghost", 1, "Nobody", 1))
    assert updated.id == 4242
    assert lib.find_book(4242) is None


def test_remove(lib):
    book = lib.add_book(Book("Test", 123, "Author", 2000))
    lib.remove_book(book.id)
    assert lib.find_book(book.id) is None
    # Removing again is not an error
    lib.remove_book(book.id)


def test_storage_errors_are_wrapped(lib, monkeypatch):
    broken = MagicMock()
    broken.connection.side_effect = sqlite3.OperationalError("disk I/O error")
    monkeypatch.setattr(lib.database, "handle", lambda: broken)

    with pytest.raises(StorageError):
        lib.list_books()
    with pytest.raises(StorageError):
        lib.find_book(1)
    with pytest.raises(StorageError):
        lib.add_book(Book("A", 1, "B", 2))
    with pytest.raises(StorageError):
        lib.update_book(1, Book("A", 1, "B", 2))
    with pytest.raises(StorageError):
        lib.remove_book(1)


def test_missing_table_is_storage_error(lib):
    with lib.database.handle().connection() as conn:
        conn.execute("DROP TABLE books")
        conn.commit()
    with pytest.raises(StorageError):
        lib.list_books()
