"""Book persistence gateway.

``BookRepository`` is the capability the use-case layer depends on.
``SqlBookRepository`` is the production implementation; it is the only code
that issues SQL against the ``books`` table and it translates every storage
failure into a ``BookError``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Protocol

from loguru import logger
from sqlalchemy import delete, insert, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from src.bookshelf.core.errors import BookError, BookErrorKind
from src.bookshelf.entities._base import utcnow
from src.bookshelf.entities.book.entity import Book
from src.bookshelf.entities.book.table import BookTable

Clock = Callable[[], datetime]


class BookRepository(Protocol):
    """Storage operations for books."""

    def create(self, book: Book) -> Book:
        """Insert a new book and return it with its stored timestamps.

        Raises:
            BookError: DATABASE_ERROR on any storage failure.
        """
        ...

    def get(self, book_id: str) -> Book:
        """Return the book with the given id.

        Raises:
            BookError: BOOK_NOT_FOUND when no row matches, DATABASE_ERROR on
                any other storage failure.
        """
        ...

    def list_all(self) -> list[Book]:
        """Return every book, most recently created first."""
        ...

    def update(self, book_id: str, title: str, author: str, year: int) -> Book:
        """Replace the mutable fields of a book and refresh ``updated_at``.

        Raises:
            BookError: BOOK_NOT_FOUND when no row matches.
        """
        ...

    def delete(self, book_id: str) -> None:
        """Hard-delete a book.

        Raises:
            BookError: BOOK_NOT_FOUND when no row matches.
        """
        ...


_COLUMNS = tuple(BookTable.__table__.columns)


class SqlBookRepository:
    """Data-access layer for books backed by a SQLModel session.

    Each write is a single statement followed by a commit. Timestamps come
    from ``clock`` so that ``created_at`` and ``updated_at`` of a new row are
    identical.
    """

    def __init__(self, session: Session, clock: Clock = utcnow) -> None:
        self._session = session
        self._clock = clock

    @contextmanager
    def _storage_errors(self, operation: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.bind(operation=operation, error_type=type(exc).__name__, **context).opt(
                exception=exc
            ).error("book.storage_error")
            raise BookError(BookErrorKind.DATABASE_ERROR) from exc

    @staticmethod
    def _to_book(row: Mapping[str, Any] | BookTable) -> Book:
        if isinstance(row, BookTable):
            return Book.model_validate(row, from_attributes=True)
        return Book.model_validate(dict(row))

    def create(self, book: Book) -> Book:
        now = self._clock()
        statement = (
            insert(BookTable)
            .values(
                id=book.id,
                title=book.title,
                author=book.author,
                year=book.year,
                created_at=now,
                updated_at=now,
            )
            .returning(*_COLUMNS)
        )
        with self._storage_errors("create", book_id=book.id):
            row = self._session.connection().execute(statement).mappings().one()
            self._session.commit()
        return self._to_book(row)

    def get(self, book_id: str) -> Book:
        with self._storage_errors("get", book_id=book_id):
            row = self._session.get(BookTable, book_id, populate_existing=True)
        if row is None:
            raise BookError(BookErrorKind.BOOK_NOT_FOUND)
        return self._to_book(row)

    def list_all(self) -> list[Book]:
        statement = (
            select(BookTable)
            .order_by(BookTable.created_at.desc(), BookTable.id.desc())
            .execution_options(populate_existing=True)
        )
        with self._storage_errors("list"):
            rows = self._session.exec(statement).all()
        return [self._to_book(row) for row in rows]

    def update(self, book_id: str, title: str, author: str, year: int) -> Book:
        statement = (
            update(BookTable)
            .where(BookTable.id == book_id)
            .values(title=title, author=author, year=year, updated_at=self._clock())
            .returning(*_COLUMNS)
        )
        with self._storage_errors("update", book_id=book_id):
            row = self._session.connection().execute(statement).mappings().one_or_none()
            self._session.commit()
        if row is None:
            raise BookError(BookErrorKind.BOOK_NOT_FOUND)
        return self._to_book(row)

    def delete(self, book_id: str) -> None:
        statement = delete(BookTable).where(BookTable.id == book_id)
        with self._storage_errors("delete", book_id=book_id):
            result = self._session.connection().execute(statement)
            self._session.commit()
        if result.rowcount == 0:
            raise BookError(BookErrorKind.BOOK_NOT_FOUND)
