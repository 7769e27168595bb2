"""Domain error taxonomy for the book service.

Every failure the use-case layer or the persistence gateway can report is one
of the ``BookErrorKind`` members. Callers branch on ``error.kind``; the HTTP
layer is the only place that turns a kind into a status code.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class BookErrorKind(str, Enum):
    """Closed set of book error kinds."""

    INVALID_TITLE = "InvalidTitle"
    INVALID_AUTHOR = "InvalidAuthor"
    INVALID_YEAR = "InvalidYear"
    INVALID_IDENTIFIER = "InvalidIdentifier"
    BOOK_NOT_FOUND = "BookNotFound"
    DATABASE_ERROR = "DatabaseError"

    @property
    def is_validation(self) -> bool:
        """True for kinds raised before any storage access."""
        return self in _VALIDATION_KINDS

    @property
    def default_message(self) -> str:
        return _DEFAULT_MESSAGES[self]


_VALIDATION_KINDS = frozenset(
    {
        BookErrorKind.INVALID_TITLE,
        BookErrorKind.INVALID_AUTHOR,
        BookErrorKind.INVALID_YEAR,
        BookErrorKind.INVALID_IDENTIFIER,
    }
)

_DEFAULT_MESSAGES = {
    BookErrorKind.INVALID_TITLE: "Book title is required and cannot be empty",
    BookErrorKind.INVALID_AUTHOR: "Book author is required and cannot be empty",
    BookErrorKind.INVALID_YEAR: "Publication year must be between 1000 and 2034",
    BookErrorKind.INVALID_IDENTIFIER: "Invalid UUID format provided",
    BookErrorKind.BOOK_NOT_FOUND: "The requested book could not be found",
    BookErrorKind.DATABASE_ERROR: "A database error occurred. Please try again later",
}


class BookError(Exception):
    """Exception carrying a ``BookErrorKind``.

    Two errors compare equal when their kinds are equal, so tests and callers
    can write ``assert exc == BookError(BookErrorKind.BOOK_NOT_FOUND)``.
    """

    def __init__(self, kind: BookErrorKind, message: str | None = None) -> None:
        self.kind = kind
        self.message = message or kind.default_message
        super().__init__(self.message)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, BookError):
            return NotImplemented
        return self.kind is other.kind

    def __hash__(self) -> int:
        return hash(self.kind)

    def __repr__(self) -> str:
        return f"BookError({self.kind.value!r}, {self.message!r})"
