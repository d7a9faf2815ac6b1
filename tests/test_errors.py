from fastapi import status
from sqlalchemy.exc import OperationalError

from app.core.exceptions import (
    AuthenticationError, ConflictError, DatabaseError, NotFoundError, ValidationError,
    format_validation_errors
)


def test_root_returns_plain_text(test_client):
    response = test_client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "Moodly API running..."


def test_health_check(test_client):
    response = test_client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "healthy"
    assert "database" in data["components"]


def test_unknown_route_uses_error_envelope(test_client):
    response = test_client.get("/api/v1/nao-existe")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    data = response.json()
    assert data["success"] is False
    assert "message" in data


def test_non_numeric_entry_id(test_client, auth_headers):
    response = test_client.delete("/api/v1/moods/abc", headers=auth_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {
        "success": False,
        "error": "NOT_FOUND",
        "message": "Mood entry not found with id abc"
    }


def test_malformed_json_body(test_client):
    response = test_client.post(
        "/api/v1/auth/login",
        content="{not json",
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["success"] is False


def test_store_failure_returns_generic_500(test_client, test_db, auth_headers, monkeypatch):
    """Erros do banco nunca chegam ao cliente."""
    def failing_query(*args, **kwargs):
        raise OperationalError("SELECT ...", {}, Exception("disk I/O error"))

    monkeypatch.setattr(test_db, "query", failing_query)

    response = test_client.get("/api/v1/moods", headers=auth_headers)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    data = response.json()
    assert data == {"success": False, "error": "DATABASE_ERROR", "message": "Server error"}
    assert "disk I/O" not in response.text


def test_request_id_header(test_client):
    response = test_client.get("/")

    assert len(response.headers["X-Request-ID"]) == 8


class TestExceptionHierarchy:

    def test_status_codes(self):
        assert ValidationError("x").status_code == 400
        assert ConflictError("User", "email").status_code == 400
        assert AuthenticationError().status_code == 401
        assert NotFoundError("Mood entry", 1).status_code == 404
        assert DatabaseError("boom").status_code == 500

    def test_database_error_hides_detail(self):
        error = DatabaseError("Falha ao listar registros: connection refused")

        assert error.to_dict()["message"] == "Server error"
        assert "connection refused" in str(error)

    def test_format_validation_errors(self):
        errors = [{"loc": ("body", "password"), "msg": "String should have at least 6 characters"}]

        assert format_validation_errors(errors) == "password: String should have at least 6 characters"
        assert format_validation_errors([{"loc": ("body",), "msg": "Value error, No fields to update"}]) \
            == "No fields to update"
        assert format_validation_errors([]) == "Invalid request"
