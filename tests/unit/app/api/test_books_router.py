"""HTTP tests for the book routes."""

import uuid

import pytest
from fastapi.testclient import TestClient

from src.bookshelf.api.http.app import create_app
from src.bookshelf.api.http.deps import get_book_repository, get_book_service
from src.bookshelf.runtime.config.config_data import ConfigData, SecurityConfig
from tests.fixtures.dummies import FailingBookRepository, InMemoryBookRepository

BOOK_PATHS = ["/books", "/api/v1/books"]


def _assert_error(response, status_code: int, error: str, message: str | None = None):
    assert response.status_code == status_code
    body = response.json()
    assert set(body) == {"error", "message", "request_id", "code"}
    assert body["error"] == error
    assert body["code"] == status_code
    assert body["request_id"] == response.headers["X-Request-ID"]
    if message is not None:
        assert body["message"] == message


class TestCreateBook:
    @pytest.mark.parametrize("path", BOOK_PATHS)
    def test_create_book(self, memory_client: TestClient, valid_book_payload, path):
        response = memory_client.post(path, json=valid_book_payload)

        assert response.status_code == 201
        body = response.json()
        assert uuid.UUID(body["id"])
        assert body["title"] == "Clean Code"
        assert body["author"] == "Robert Martin"
        assert body["year"] == 2008
        assert body["created_at"] == body["updated_at"]

    def test_create_trims_title_and_author(self, memory_client: TestClient):
        response = memory_client.post(
            "/books", json={"title": "  Dune ", "author": " Frank Herbert ", "year": 1965}
        )

        assert response.status_code == 201
        assert response.json()["title"] == "Dune"
        assert response.json()["author"] == "Frank Herbert"

    def test_client_supplied_id_ignored(self, memory_client: TestClient, valid_book_payload):
        forced = str(uuid.uuid4())

        response = memory_client.post("/books", json={**valid_book_payload, "id": forced})

        assert response.status_code == 201
        assert response.json()["id"] != forced

    @pytest.mark.parametrize(
        ("payload", "message"),
        [
            (
                {"title": "", "author": "A", "year": 2000},
                "Book title is required and cannot be empty",
            ),
            (
                {"title": "T", "author": "   ", "year": 2000},
                "Book author is required and cannot be empty",
            ),
            (
                {"title": "T", "author": "A", "year": 2035},
                "Publication year must be between 1000 and 2034",
            ),
            ({}, "Book title is required and cannot be empty"),
            ({"title": "T", "author": "A"}, "Publication year must be between 1000 and 2034"),
        ],
    )
    def test_invalid_fields(
        self,
        memory_client: TestClient,
        memory_repository: InMemoryBookRepository,
        payload,
        message,
    ):
        response = memory_client.post("/books", json=payload)

        _assert_error(response, 400, "VALIDATION_ERROR", message)
        assert len(memory_repository) == 0

    def test_malformed_json(self, memory_client: TestClient):
        response = memory_client.post(
            "/books",
            content=b'{"title": "T", ',
            headers={"Content-Type": "application/json"},
        )

        _assert_error(response, 400, "VALIDATION_ERROR", "Invalid request body")

    @pytest.mark.parametrize(
        "payload",
        [
            {"title": "T", "author": "A", "year": "2000"},
            {"title": 5, "author": "A", "year": 2000},
            ["not", "an", "object"],
        ],
    )
    def test_wrong_field_types(self, memory_client: TestClient, payload):
        response = memory_client.post("/books", json=payload)

        _assert_error(response, 400, "VALIDATION_ERROR", "Invalid request body")

    def test_requires_json_content_type(self, memory_client: TestClient):
        response = memory_client.post(
            "/books", content=b"title=T", headers={"Content-Type": "text/plain"}
        )

        _assert_error(response, 415, "UNSUPPORTED_MEDIA_TYPE")

    def test_rejects_oversized_body(
        self, test_config: ConfigData, memory_repository: InMemoryBookRepository
    ):
        config = test_config.model_copy(
            update={"security": SecurityConfig(max_request_size=64)}
        )
        app = create_app(config)
        app.dependency_overrides[get_book_repository] = lambda: memory_repository

        with TestClient(app) as client:
            response = client.post(
                "/books", json={"title": "T" * 200, "author": "A", "year": 2000}
            )

        _assert_error(response, 413, "PAYLOAD_TOO_LARGE")
        assert len(memory_repository) == 0


class TestReadBooks:
    def test_list_empty(self, memory_client: TestClient):
        response = memory_client.get("/books")

        assert response.status_code == 200
        assert response.json() == []

    def test_list_newest_first(self, memory_client: TestClient):
        for title in ["First", "Second", "Third"]:
            memory_client.post("/books", json={"title": title, "author": "A", "year": 2000})

        response = memory_client.get("/api/v1/books")

        assert [book["title"] for book in response.json()] == ["Third", "Second", "First"]

    def test_get_book(self, memory_client: TestClient, valid_book_payload):
        created = memory_client.post("/books", json=valid_book_payload).json()

        response = memory_client.get(f"/books/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_get_missing_book(self, memory_client: TestClient):
        response = memory_client.get(f"/books/{uuid.uuid4()}")

        _assert_error(response, 404, "NOT_FOUND", "The requested book could not be found")

    @pytest.mark.parametrize(
        "book_id",
        ["not-a-uuid", "1234", "123e4567e89b12d3a456426614174000"],
    )
    def test_malformed_id(self, memory_client: TestClient, book_id):
        response = memory_client.get(f"/books/{book_id}")

        _assert_error(response, 400, "VALIDATION_ERROR", "Invalid UUID format provided")


class TestUpdateBook:
    def test_update_book(self, memory_client: TestClient, valid_book_payload):
        created = memory_client.post("/books", json=valid_book_payload).json()

        response = memory_client.put(
            f"/books/{created['id']}",
            json={"title": "Clean Coder", "author": "Robert Martin", "year": 2011},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == created["id"]
        assert body["title"] == "Clean Coder"
        assert body["year"] == 2011
        assert body["created_at"] == created["created_at"]
        assert body["updated_at"] > created["updated_at"]

    def test_update_missing_book(self, memory_client: TestClient, valid_book_payload):
        response = memory_client.put(f"/books/{uuid.uuid4()}", json=valid_book_payload)

        _assert_error(response, 404, "NOT_FOUND")

    def test_update_invalid_year(self, memory_client: TestClient, valid_book_payload):
        created = memory_client.post("/books", json=valid_book_payload).json()

        response = memory_client.put(
            f"/books/{created['id']}", json={**valid_book_payload, "year": 999}
        )

        _assert_error(response, 400, "VALIDATION_ERROR")
        assert memory_client.get(f"/books/{created['id']}").json()["year"] == 2008

    def test_update_malformed_id(self, memory_client: TestClient, valid_book_payload):
        response = memory_client.put("/books/abc", json=valid_book_payload)

        _assert_error(response, 400, "VALIDATION_ERROR", "Invalid UUID format provided")


class TestDeleteBook:
    def test_delete_book(self, memory_client: TestClient, valid_book_payload):
        created = memory_client.post("/books", json=valid_book_payload).json()

        response = memory_client.delete(f"/books/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Book deleted successfully"}
        assert memory_client.get(f"/books/{created['id']}").status_code == 404

    def test_delete_missing_book(self, memory_client: TestClient):
        response = memory_client.delete(f"/books/{uuid.uuid4()}")

        _assert_error(response, 404, "NOT_FOUND")


class TestErrorResponses:
    def test_database_error_is_generic_500(self, test_config: ConfigData):
        app = create_app(test_config)
        app.dependency_overrides[get_book_repository] = FailingBookRepository

        with TestClient(app) as client:
            response = client.get("/books")

        _assert_error(
            response,
            500,
            "INTERNAL_ERROR",
            "A database error occurred. Please try again later",
        )

    def test_unhandled_exception_is_500(self, test_config: ConfigData):
        def broken_service():
            raise RuntimeError("boom")

        app = create_app(test_config)
        app.dependency_overrides[get_book_service] = broken_service

        with TestClient(app) as client:
            response = client.get(
                "/books",
                headers={"X-Request-ID": "req-500", "Origin": "http://localhost:3000"},
            )

        _assert_error(response, 500, "INTERNAL_ERROR")
        assert response.json()["request_id"] == "req-500"
        assert response.headers["X-Request-ID"] == "req-500"
        assert "boom" not in response.text
        # Outer middleware still decorates the converted 500
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert response.headers["x-content-type-options"] == "nosniff"

    def test_unknown_route(self, memory_client: TestClient):
        _assert_error(memory_client.get("/nope"), 404, "NOT_FOUND")

    def test_method_not_allowed(self, memory_client: TestClient):
        _assert_error(memory_client.patch("/books"), 405, "METHOD_NOT_ALLOWED")


class TestRequestId:
    def test_request_id_echoed(self, memory_client: TestClient):
        response = memory_client.get("/books", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    def test_request_id_generated(self, memory_client: TestClient):
        first = memory_client.get("/books").headers["X-Request-ID"]
        second = memory_client.get("/books").headers["X-Request-ID"]

        assert uuid.UUID(first)
        assert first != second

    def test_request_id_in_error_body(self, memory_client: TestClient):
        response = memory_client.get("/books/bad", headers={"X-Request-ID": "trace-1"})

        assert response.json()["request_id"] == "trace-1"


class TestSqlBackedRoutes:
    """Full stack against in-memory SQLite."""

    def test_crud_round_trip(self, client: TestClient, valid_book_payload):
        created = client.post("/api/v1/books", json=valid_book_payload)
        assert created.status_code == 201
        book_id = created.json()["id"]

        assert client.get(f"/books/{book_id}").json()["title"] == "Clean Code"

        updated = client.put(
            f"/api/v1/books/{book_id}",
            json={"title": "Clean Code 2", "author": "Robert Martin", "year": 2009},
        )
        assert updated.status_code == 200
        assert updated.json()["title"] == "Clean Code 2"

        listed = client.get("/books").json()
        assert [book["id"] for book in listed] == [book_id]
        assert listed[0]["year"] == 2009

        assert client.delete(f"/books/{book_id}").status_code == 200
        assert client.get(f"/books/{book_id}").status_code == 404
        assert client.get("/books").json() == []
