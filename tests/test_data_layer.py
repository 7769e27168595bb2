"""Data layer tests for the SQL book gateway.

Uses in-memory SQLite for fast, real database testing of:
- the single-statement writes and their timestamps
- ordering of listings
- translation of missing rows and storage failures into BookError
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from src.bookshelf.core.errors import BookError, BookErrorKind
from src.bookshelf.entities.book import Book, BookTable, SqlBookRepository
from src.bookshelf.entities._base import new_id


def _book(title: str = "Clean Code", author: str = "Robert Martin", year: int = 2008) -> Book:
    return Book(title=title, author=author, year=year)


class TestBookTable:
    def test_table_name_and_columns(self):
        columns = set(BookTable.__table__.columns.keys())

        assert BookTable.__tablename__ == "books"
        assert columns == {"id", "title", "author", "year", "created_at", "updated_at"}

    def test_rows_inserted_outside_gateway_get_timestamps(self, session: Session):
        session.add(BookTable(title="Dune", author="Frank Herbert", year=1965))
        session.commit()

        row = session.exec(select(BookTable)).one()

        assert row.created_at is not None
        assert row.updated_at is not None


class TestSqlBookRepositoryCreate:
    def test_create_returns_stored_book(self, sql_repository: SqlBookRepository):
        book = _book()

        created = sql_repository.create(book)

        assert created == book
        assert created.created_at is not None
        assert created.created_at == created.updated_at

    def test_created_book_is_readable(self, sql_repository: SqlBookRepository):
        created = sql_repository.create(_book())

        fetched = sql_repository.get(created.id)

        assert fetched == created
        assert fetched.created_at == created.created_at

    def test_duplicate_id_is_database_error(self, sql_repository: SqlBookRepository):
        book = _book()
        sql_repository.create(book)

        with pytest.raises(BookError) as exc_info:
            sql_repository.create(book)

        assert exc_info.value.kind is BookErrorKind.DATABASE_ERROR

    def test_session_usable_after_database_error(self, sql_repository: SqlBookRepository):
        book = _book()
        sql_repository.create(book)
        with pytest.raises(BookError):
            sql_repository.create(book)

        assert sql_repository.get(book.id) == book


class TestSqlBookRepositoryRead:
    def test_get_missing_book(self, sql_repository: SqlBookRepository):
        with pytest.raises(BookError) as exc_info:
            sql_repository.get(new_id())

        assert exc_info.value.kind is BookErrorKind.BOOK_NOT_FOUND

    def test_list_empty(self, sql_repository: SqlBookRepository):
        assert sql_repository.list_all() == []

    def test_list_newest_first(self, sql_repository: SqlBookRepository):
        first = sql_repository.create(_book(title="First"))
        second = sql_repository.create(_book(title="Second"))
        third = sql_repository.create(_book(title="Third"))

        books = sql_repository.list_all()

        assert [book.id for book in books] == [third.id, second.id, first.id]

    def test_list_breaks_timestamp_ties_by_id(self, session: Session, clock):
        frozen = clock()
        repository = SqlBookRepository(session, clock=lambda: frozen)
        ids = ["00000000-0000-4000-8000-000000000001", "00000000-0000-4000-8000-000000000002"]
        for book_id in ids:
            repository.create(Book(id=book_id, title="T", author="A", year=2000))

        assert [book.id for book in repository.list_all()] == list(reversed(ids))

    def test_storage_failure_is_database_error(self, session: Session):
        repository = SqlBookRepository(session)

        with patch.object(
            session, "exec", side_effect=OperationalError("SELECT", {}, Exception("down"))
        ):
            with pytest.raises(BookError) as exc_info:
                repository.list_all()

        assert exc_info.value.kind is BookErrorKind.DATABASE_ERROR


class TestSqlBookRepositoryUpdate:
    def test_update_replaces_fields_and_refreshes_timestamp(
        self, sql_repository: SqlBookRepository
    ):
        created = sql_repository.create(_book())

        updated = sql_repository.update(created.id, "Clean Coder", "Bob Martin", 2011)

        assert updated.id == created.id
        assert (updated.title, updated.author, updated.year) == ("Clean Coder", "Bob Martin", 2011)
        assert updated.created_at == created.created_at
        assert updated.updated_at > created.updated_at

    def test_update_visible_to_subsequent_reads(self, sql_repository: SqlBookRepository):
        created = sql_repository.create(_book())
        sql_repository.get(created.id)  # load into the identity map

        sql_repository.update(created.id, "Refactoring", "Martin Fowler", 1999)

        fetched = sql_repository.get(created.id)
        assert fetched.title == "Refactoring"
        assert [book.title for book in sql_repository.list_all()] == ["Refactoring"]

    def test_update_missing_book(self, sql_repository: SqlBookRepository):
        with pytest.raises(BookError) as exc_info:
            sql_repository.update(new_id(), "T", "A", 2000)

        assert exc_info.value.kind is BookErrorKind.BOOK_NOT_FOUND

    def test_update_uses_clock(self, session: Session, clock):
        repository = SqlBookRepository(session, clock=clock)
        created = repository.create(_book())

        updated = repository.update(created.id, "T", "A", 2000)

        assert updated.updated_at - created.updated_at == timedelta(seconds=1)


class TestSqlBookRepositoryDelete:
    def test_delete_removes_row(self, sql_repository: SqlBookRepository):
        created = sql_repository.create(_book())

        sql_repository.delete(created.id)

        with pytest.raises(BookError) as exc_info:
            sql_repository.get(created.id)
        assert exc_info.value.kind is BookErrorKind.BOOK_NOT_FOUND

    def test_delete_twice(self, sql_repository: SqlBookRepository):
        created = sql_repository.create(_book())
        sql_repository.delete(created.id)

        with pytest.raises(BookError) as exc_info:
            sql_repository.delete(created.id)

        assert exc_info.value.kind is BookErrorKind.BOOK_NOT_FOUND

    def test_delete_leaves_other_rows(self, sql_repository: SqlBookRepository):
        keep = sql_repository.create(_book(title="Keep"))
        drop = sql_repository.create(_book(title="Drop"))

        sql_repository.delete(drop.id)

        assert sql_repository.list_all() == [keep]
