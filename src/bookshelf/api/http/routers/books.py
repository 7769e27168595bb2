"""Book API router with CRUD operations."""

from fastapi import APIRouter, Depends, status

from src.bookshelf.api.http.deps import (
    enforce_rate_limit,
    get_book_service,
    parse_book_id,
    require_api_key,
    require_json_body,
)
from src.bookshelf.core.services import BookService
from src.bookshelf.entities.book import Book, BookCreate, BookUpdate

router = APIRouter(
    tags=["books"],
    dependencies=[Depends(require_api_key), Depends(enforce_rate_limit)],
)


@router.get("", response_model=list[Book])
def list_books(service: BookService = Depends(get_book_service)) -> list[Book]:
    """List all books, most recently created first."""
    return service.list_books()


@router.post(
    "",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_json_body)],
)
def create_book(
    book: BookCreate,
    service: BookService = Depends(get_book_service),
) -> Book:
    """Create a new book."""
    return service.create_book(book)


@router.get("/{book_id}", response_model=Book)
def get_book(
    book_id: str = Depends(parse_book_id),
    service: BookService = Depends(get_book_service),
) -> Book:
    """Get a book by ID."""
    return service.get_book(book_id)


@router.put(
    "/{book_id}",
    response_model=Book,
    dependencies=[Depends(require_json_body)],
)
def update_book(
    book_update: BookUpdate,
    book_id: str = Depends(parse_book_id),
    service: BookService = Depends(get_book_service),
) -> Book:
    """Replace the title, author and year of a book."""
    return service.update_book(book_id, book_update)


@router.delete("/{book_id}")
def delete_book(
    book_id: str = Depends(parse_book_id),
    service: BookService = Depends(get_book_service),
) -> dict[str, str]:
    """Delete a book."""
    service.delete_book(book_id)
    return {"message": "Book deleted successfully"}
