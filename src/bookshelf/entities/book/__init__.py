"""Entity package: Book."""

from .entity import (
    MAX_YEAR,
    MIN_YEAR,
    Book,
    BookCreate,
    BookUpdate,
    to_entity,
    validate_book_request,
)
from .repository import BookRepository, SqlBookRepository
from .table import BookTable

__all__ = [
    "MAX_YEAR",
    "MIN_YEAR",
    "Book",
    "BookCreate",
    "BookUpdate",
    "BookRepository",
    "BookTable",
    "SqlBookRepository",
    "to_entity",
    "validate_book_request",
]
