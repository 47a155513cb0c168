# tests/conftest.py

import mongomock
import pytest
from fastapi.testclient import TestClient

from app.database import ensure_indexes, get_db
from app.main import app

PASSWORD = "secret123"


def _register(client, first_name, last_name, email, role):
    response = client.post(
        "/api/auth/register",
        json={
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "password": PASSWORD,
            "role": role,
        },
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return {
        "id": body["user"]["id"],
        "email": email,
        "token": body["token"],
        "headers": {"x-auth-token": body["token"]},
    }


@pytest.fixture
def db():
    database = mongomock.MongoClient()["student_success_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def teacher(client):
    return _register(client, "Grace", "Hopper", "ghopper@school.edu", "teacher")


@pytest.fixture
def other_teacher(client):
    return _register(client, "Alan", "Turing", "aturing@school.edu", "teacher")


@pytest.fixture
def student(client):
    return _register(client, "Ada", "Lovelace", "alovelace@school.edu", "student")


@pytest.fixture
def second_student(client):
    return _register(client, "Charles", "Babbage", "cbabbage@school.edu", "student")


@pytest.fixture
def course_payload():
    return {
        "courseCode": "CS101",
        "title": "Intro to Computer Science",
        "description": "Programs, data and machines",
        "credits": 3,
        "semester": 1,
        "capacity": 30,
        "schedule": {"day": "Monday", "startTime": "09:00", "endTime": "10:30", "room": "B-12"},
    }


@pytest.fixture
def create_course(client, teacher, course_payload):
    def _create(headers=None, **overrides):
        payload = {**course_payload, **overrides}
        response = client.post("/api/courses", json=payload, headers=headers or teacher["headers"])
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def sample_course(create_course):
    return create_course()


@pytest.fixture
def student_profile_payload():
    return {
        "studentId": "S-0001",
        "dateOfBirth": "2005-04-12",
        "gender": "female",
        "contactNumber": "555-0101",
        "address": {"city": "London", "country": "UK"},
    }


@pytest.fixture
def student_profile(client, student, student_profile_payload):
    response = client.post("/api/students", json=student_profile_payload, headers=student["headers"])
    assert response.status_code == 201, response.text
    return response.json()
