"""Book use cases.

``BookService`` is the only component that calls both request validation and
the persistence gateway. Invalid requests never reach storage.
"""

from loguru import logger

from src.bookshelf.core.errors import BookError
from src.bookshelf.entities.book import (
    Book,
    BookCreate,
    BookRepository,
    BookUpdate,
    to_entity,
    validate_book_request,
)


class BookService:
    def __init__(self, repository: BookRepository) -> None:
        self._repository = repository

    def create_book(self, request: BookCreate) -> Book:
        """Validate the request and persist a new book."""
        try:
            validate_book_request(request)
        except BookError as exc:
            logger.bind(error_kind=exc.kind.value).warning("book.create.invalid")
            raise

        try:
            created = self._repository.create(to_entity(request))
        except BookError as exc:
            logger.bind(error_kind=exc.kind.value).error("book.create.failed")
            raise

        logger.bind(book_id=created.id).info("book.created")
        return created

    def get_book(self, book_id: str) -> Book:
        try:
            return self._repository.get(book_id)
        except BookError as exc:
            logger.bind(book_id=book_id, error_kind=exc.kind.value).warning(
                "book.get.failed"
            )
            raise

    def list_books(self) -> list[Book]:
        """Return all books, most recently created first."""
        try:
            books = self._repository.list_all()
        except BookError as exc:
            logger.bind(error_kind=exc.kind.value).error("book.list.failed")
            raise

        logger.bind(count=len(books)).info("book.listed")
        return books

    def update_book(self, book_id: str, request: BookUpdate) -> Book:
        """Validate the request and replace title, author and year of a book."""
        try:
            validate_book_request(request)
        except BookError as exc:
            logger.bind(book_id=book_id, error_kind=exc.kind.value).warning(
                "book.update.invalid"
            )
            raise

        try:
            updated = self._repository.update(book_id, **request.normalized())
        except BookError as exc:
            logger.bind(book_id=book_id, error_kind=exc.kind.value).warning(
                "book.update.failed"
            )
            raise

        logger.bind(book_id=updated.id).info("book.updated")
        return updated

    def delete_book(self, book_id: str) -> None:
        try:
            self._repository.delete(book_id)
        except BookError as exc:
            logger.bind(book_id=book_id, error_kind=exc.kind.value).warning(
                "book.delete.failed"
            )
            raise

        logger.bind(book_id=book_id).info("book.deleted")
