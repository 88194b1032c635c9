import logging
import re
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from book import Book
from config import settings
from database import Database, StorageError
from library import Library

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Base-10 signed integer, nothing else (no whitespace, no underscores)
_ID_PATTERN = re.compile(r"[+-]?[0-9]+")

INVALID_REQUEST = "Invalid request."
INVALID_BOOK_ID = "Invalid book ID."
BOOK_NOT_FOUND = "Book not found."
DATABASE_ERROR = "Database error."


# --- Models ---
class BookModel(BaseModel):
    """Wire shape of a book, used for request and response bodies."""
    model_config = ConfigDict(strict=True)

    id: Optional[int] = Field(default=None, ge=INT64_MIN, le=INT64_MAX)
    title: str
    isbn: int = Field(ge=INT64_MIN, le=INT64_MAX)
    author: str
    release: int = Field(ge=INT64_MIN, le=INT64_MAX)

    def to_book(self) -> Book:
        return Book(id=self.id, title=self.title, isbn=self.isbn, author=self.author, release=self.release)


class MessageModel(BaseModel):
    message: str


# --- Helpers ---
def parse_book_id(raw: str) -> Optional[int]:
    """Parse a path id as a signed 64-bit integer. Returns None when it is not one."""
    if not _ID_PATTERN.fullmatch(raw):
        return None
    value = int(raw)
    if value < INT64_MIN or value > INT64_MAX:
        return None
    return value


def get_library(request: Request) -> Library:
    """Dependency handing each request a Library over the injected database."""
    return Library(request.app.state.database)


def _database_error(e: StorageError) -> HTTPException:
    logger.exception("Storage operation failed: %s", e)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=DATABASE_ERROR)


def _update(library: Library, book_id: int, payload: BookModel) -> BookModel:
    try:
        book = library.update_book(book_id, payload.to_book())
    except StorageError as e:
        raise _database_error(e)
    return BookModel(**book.to_dict())


# --- Application factory ---
def create_app(database: Database) -> FastAPI:
    """Build the books API around an already initialized ``database``."""
    app = FastAPI(title=settings.app_name)
    app.state.database = database

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": INVALID_REQUEST})

    @app.get("/books", response_model=List[BookModel])
    def get_books(library: Library = Depends(get_library)):
        """List every book."""
        try:
            books = library.list_books()
        except StorageError as e:
            raise _database_error(e)
        return [BookModel(**b.to_dict()) for b in books]

    @app.get("/books/{book_id}", response_model=BookModel)
    def get_book(book_id: str, library: Library = Depends(get_library)):
        """Get a single book by id. Bad ids, missing rows and lookup failures all read as not found."""
        parsed = parse_book_id(book_id)
        if parsed is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BOOK_NOT_FOUND)
        try:
            book = library.find_book(parsed)
        except StorageError as e:
            logger.warning("Lookup of book %s failed: %s", parsed, e)
            book = None
        if book is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BOOK_NOT_FOUND)
        return BookModel(**book.to_dict())

    @app.post("/books", response_model=BookModel, status_code=status.HTTP_201_CREATED)
    def add_book(payload: BookModel, library: Library = Depends(get_library)):
        """Add a new book; the store assigns its id."""
        try:
            book = library.add_book(payload.to_book())
        except StorageError as e:
            raise _database_error(e)
        return BookModel(**book.to_dict())

    @app.put("/books/{book_id}", response_model=BookModel)
    def update_book_by_id(book_id: str, payload: BookModel, library: Library = Depends(get_library)):
        """Replace a book's fields. The path id wins over any id in the body."""
        parsed = parse_book_id(book_id)
        if parsed is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_BOOK_ID)
        return _update(library, parsed, payload)

    @app.put("/books", response_model=BookModel)
    def update_book(payload: BookModel, library: Library = Depends(get_library)):
        """Replace a book's fields, taking the id from the body."""
        if payload.id is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_REQUEST)
        return _update(library, payload.id, payload)

    @app.delete("/books/{book_id}", response_model=MessageModel)
    def delete_book(book_id: str, library: Library = Depends(get_library)):
        """Delete a book by id. Deleting a missing id still succeeds."""
        parsed = parse_book_id(book_id)
        if parsed is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_BOOK_ID)
        try:
            library.remove_book(parsed)
        except StorageError as e:
            raise _database_error(e)
        return MessageModel(message="Book deleted.")

    return app
