"""Entity: Book."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.bookshelf.core.errors import BookError, BookErrorKind
from src.bookshelf.entities._base import Entity, new_id

MIN_YEAR = 1000
MAX_YEAR = 2034


class Book(Entity):
    """Book entity representing a bibliographic record.

    This is the domain model returned by every book operation. It inherits
    from Entity to get auto-generated UUID identifiers.
    """

    title: str = Field(description="Title")
    author: str = Field(description="Author")
    year: int = Field(description="Publication year")

    def __eq__(self, other: Any) -> bool:
        """Compare books by business attributes, ignoring timestamps."""
        if not isinstance(other, Book):
            return False

        return (
            self.id == other.id
            and self.title == other.title
            and self.author == other.author
            and self.year == other.year
        )

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash((
            self.id,
            self.title,
            self.author,
            self.year,
        ))


class BookRequest(BaseModel):
    """Mutable book fields as supplied by a caller.

    Missing fields default to empty values so that they are rejected by
    ``validate_book_request`` with the matching error kind.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = Field(default="", description="Title")
    author: str = Field(default="", description="Author")
    year: int = Field(default=0, strict=True, description="Publication year")

    def normalized(self) -> dict[str, Any]:
        """Return the mutable fields with title and author trimmed."""
        return {
            "title": self.title.strip(),
            "author": self.author.strip(),
            "year": self.year,
        }


class BookCreate(BookRequest):
    """Payload for creating a book."""


class BookUpdate(BookRequest):
    """Payload replacing all mutable fields of an existing book."""


def validate_book_request(request: BookRequest) -> None:
    """Check a creation or update request.

    Title, author and year are checked in that order and the first failure
    is raised.

    Raises:
        BookError: with kind INVALID_TITLE, INVALID_AUTHOR or INVALID_YEAR.
    """
    if not request.title.strip():
        raise BookError(BookErrorKind.INVALID_TITLE)
    if not request.author.strip():
        raise BookError(BookErrorKind.INVALID_AUTHOR)
    if request.year < MIN_YEAR or request.year > MAX_YEAR:
        raise BookError(BookErrorKind.INVALID_YEAR)


def to_entity(request: BookCreate) -> Book:
    """Build a new, not yet persisted Book from a creation request."""
    return Book(id=new_id(), **request.normalized())
