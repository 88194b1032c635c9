import logging
import sqlite3
from typing import List, Optional

from book import Book
from database import Database, StorageError

logger = logging.getLogger(__name__)

BOOK_COLUMNS = "id, title, isbn, author, release"


class Library:
    """Runs the book statements against the shared connection pool.

    Every method issues exactly one SQL statement. Failures surface as
    ``StorageError``; nothing is retried.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    # ------------------------- Core operations ------------------------- #
    def list_books(self) -> List[Book]:
        """Return every book in the store's natural scan order."""
        try:
            with self.database.handle().connection() as conn:
                cursor = conn.execute(f"SELECT {BOOK_COLUMNS} FROM books")
                return [Book.from_dict(dict(row)) for row in cursor]
        except sqlite3.Error as e:
            raise StorageError("Could not list books") from e

    def find_book(self, book_id: int) -> Optional[Book]:
        try:
            with self.database.handle().connection() as conn:
                row = conn.execute(f"SELECT {BOOK_COLUMNS} FROM books WHERE id = ?", (book_id,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Could not fetch book {book_id}") from e
        if row is None:
            return None
        return Book.from_dict(dict(row))

    def add_book(self, book: Book) -> Book:
        """Insert a book and return it with the id assigned by the store. Any id on ``book`` is ignored."""
        try:
            with self.database.handle().connection() as conn:
                cursor = conn.execute(
                    "INSERT INTO books (title, isbn, author, release) VALUES (?, ?, ?, ?)",
                    (book.title, book.isbn, book.author, book.release)
                )
                conn.commit()
                new_id = cursor.lastrowid
        except sqlite3.Error as e:
            raise StorageError("Could not insert book") from e
        if new_id is None:
            raise StorageError("Insert did not report a row id")
        return Book(id=new_id, title=book.title, isbn=book.isbn, author=book.author, release=book.release)

    def update_book(self, book_id: int, book: Book) -> Book:
        """Replace every field of the book with ``book_id``.

        A missing id affects zero rows and is still reported as success.
        """
        try:
            with self.database.handle().connection() as conn:
                cursor = conn.execute(
                    "UPDATE books SET title = ?, isbn = ?, author = ?, release = ? WHERE id = ?",
                    (book.title, book.isbn, book.author, book.release, book_id)
                )
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Could not update book {book_id}") from e
        if cursor.rowcount == 0:
            logger.info("Update of book %s matched no rows", book_id)
        return Book(id=book_id, title=book.title, isbn=book.isbn, author=book.author, release=book.release)

    def remove_book(self, book_id: int) -> None:
        try:
            with self.database.handle().connection() as conn:
                cursor = conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Could not delete book {book_id}") from e
        if cursor.rowcount == 0:
            logger.info("Delete of book %s matched no rows", book_id)
