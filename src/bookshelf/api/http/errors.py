"""Exception handlers translating failures into the JSON error body.

Every error response has the shape
``{"error": <type>, "message": <text>, "request_id": <id>, "code": <status>}``.
This module is the only place where a ``BookErrorKind`` becomes a status code.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.bookshelf.core.errors import BookError, BookErrorKind

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later"
INVALID_BODY_MESSAGE = "Invalid request body"

_HTTP_ERROR_TYPES = {
    401: "UNAUTHORIZED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "PAYLOAD_TOO_LARGE",
    415: "UNSUPPORTED_MEDIA_TYPE",
    429: "RATE_LIMIT_EXCEEDED",
}


def book_error_status(kind: BookErrorKind) -> tuple[int, str]:
    """Return the HTTP status and error type for a domain error kind."""
    if kind.is_validation:
        return status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR"
    if kind is BookErrorKind.BOOK_NOT_FOUND:
        return status.HTTP_404_NOT_FOUND, "NOT_FOUND"
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR"


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error_type,
            "message": message,
            "request_id": get_request_id(request),
            "code": status_code,
        },
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers on the FastAPI app."""

    @app.exception_handler(BookError)
    async def book_error_handler(request: Request, exc: BookError) -> JSONResponse:
        status_code, error_type = book_error_status(exc.kind)
        log = logger.bind(
            status_code=status_code,
            error_type=error_type,
            error_kind=exc.kind.value,
            path=request.url.path,
            method=request.method,
        )
        if status_code >= 500:
            log.error("request.book_error")
        else:
            log.info("request.book_error")
        return error_response(request, status_code, error_type, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.bind(
            path=request.url.path,
            method=request.method,
            errors=[
                {"loc": ".".join(str(part) for part in err["loc"]), "type": err["type"]}
                for err in exc.errors()
            ],
        ).info("request.invalid_body")
        return error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            "VALIDATION_ERROR",
            INVALID_BODY_MESSAGE,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        error_type = _HTTP_ERROR_TYPES.get(exc.status_code, "HTTP_ERROR")
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return error_response(
            request, exc.status_code, error_type, message, headers=exc.headers
        )
