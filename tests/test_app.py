# tests/test_app.py

from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from app.database import get_db
from app.main import app
from app.services import courses as course_service


class UnreachableDatabase:
    def command(self, *args, **kwargs):
        raise ServerSelectionTimeoutError("no servers available")


# === health ===


def test_health_reports_connected(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "connected"}


def test_health_reports_unreachable_database(client):
    app.dependency_overrides[get_db] = UnreachableDatabase

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["database"] == "unavailable"


# === database failures ===


def test_database_error_becomes_server_error(client, monkeypatch, teacher, caplog):
    def fail(*args, **kwargs):
        raise PyMongoError("connection reset")

    monkeypatch.setattr(course_service, "list_courses", fail)

    response = client.get("/api/courses", headers=teacher["headers"])

    assert response.status_code == 500
    assert response.json() == {"message": "Server error"}
    assert "connection reset" not in response.text
    assert any(record.exc_info and isinstance(record.exc_info[1], PyMongoError) for record in caplog.records)
