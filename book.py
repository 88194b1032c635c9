from __future__ import annotations


class Book:
    """Represents a single row of the books table."""

    def __init__(self, title: str, isbn: int, author: str, release: int, id: int | None = None) -> None:
        self.id = id
        self.title = title
        self.isbn = isbn
        self.author = author
        self.release = release

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.release}, ISBN: {self.isbn})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "isbn": self.isbn,
            "author": self.author,
            "release": self.release,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(
            id=data.get("id"),
            title=data["title"],
            isbn=data["isbn"],
            author=data["author"],
            release=data["release"],
        )
