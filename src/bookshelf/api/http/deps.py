"""FastAPI dependency implementations."""

from __future__ import annotations

import uuid
from collections.abc import Iterator

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from src.bookshelf.api.http.app_data import ApplicationDependencies
from src.bookshelf.core.errors import BookError, BookErrorKind
from src.bookshelf.core.services import BookService
from src.bookshelf.entities.book import BookRepository, SqlBookRepository
from src.bookshelf.runtime.config.config_data import ConfigData


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    """Get the dependencies built at application startup."""
    return request.app.state.app_dependencies


def get_app_config(request: Request) -> ConfigData:
    """Get the configuration the application was created with."""
    return get_app_dependencies(request).config


def get_db_session(request: Request) -> Iterator[Session]:
    """Open a database session for the duration of one request."""
    session = get_app_dependencies(request).database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_book_repository(db: Session = Depends(get_db_session)) -> BookRepository:
    return SqlBookRepository(db)


def get_book_service(
    repository: BookRepository = Depends(get_book_repository),
) -> BookService:
    return BookService(repository)


def parse_book_id(book_id: str) -> str:
    """Accept only canonical UUID strings as book identifiers.

    Raises:
        BookError: INVALID_IDENTIFIER when ``book_id`` is not a UUID in its
            ``8-4-4-4-12`` hexadecimal form.
    """
    try:
        parsed = uuid.UUID(book_id)
    except ValueError as exc:
        raise BookError(BookErrorKind.INVALID_IDENTIFIER) from exc

    if str(parsed) != book_id.lower():
        raise BookError(BookErrorKind.INVALID_IDENTIFIER)
    return str(parsed)


async def require_json_body(request: Request) -> None:
    """Reject write requests that are not JSON or exceed the size limit."""
    max_size = get_app_config(request).security.max_request_size

    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type != "application/json":
        raise HTTPException(
            status_code=415, detail="Content-Type must be application/json"
        )

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_size:
        raise HTTPException(status_code=413, detail="Request body too large")

    body = await request.body()
    if len(body) > max_size:
        raise HTTPException(status_code=413, detail="Request body too large")


async def require_api_key(request: Request) -> None:
    await get_app_dependencies(request).api_key_guard(request)


async def enforce_rate_limit(request: Request) -> None:
    limiter = get_app_dependencies(request).rate_limiter
    if limiter is None:
        return
    await limiter(request)
