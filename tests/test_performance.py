# tests/test_performance.py

from bson import ObjectId


def _snapshot(client, teacher, student, **overrides):
    body = {"subjects": ["Math", "Physics"], "grades": ["A", "B"], "comments": "Solid term", **overrides}
    return client.post(f"/api/performance/student/{student['id']}", json=body, headers=teacher["headers"])


def test_teacher_records_snapshot(client, teacher, student):
    response = _snapshot(client, teacher, student)

    assert response.status_code == 201
    body = response.json()
    assert body["student"] == student["id"]
    assert body["teacher"] == teacher["id"]
    assert body["semester"] == "Current"
    assert body["subjects"] == ["Math", "Physics"]


def test_student_cannot_record_snapshot(client, db, student):
    response = _snapshot(client, student, student)

    assert response.status_code == 403
    assert db.performance.count_documents({}) == 0


def test_snapshot_for_unknown_student(client, teacher):
    response = _snapshot(client, teacher, {"id": str(ObjectId())})

    assert response.status_code == 404


def test_snapshot_requires_comments(client, teacher, student):
    response = _snapshot(client, teacher, student, comments="")

    assert response.status_code == 400


def test_get_latest_snapshot(client, teacher, student):
    _snapshot(client, teacher, student, comments="First")
    _snapshot(client, teacher, student, comments="Second", semester="Fall 2026")

    response = client.get(f"/api/performance/student/{student['id']}", headers=teacher["headers"])

    assert response.status_code == 200
    body = response.json()
    assert body["comments"] == "Second"
    assert body["semester"] == "Fall 2026"
    assert body["teacher"]["email"] == teacher["email"]
    assert body["student"]["email"] == student["email"]


def test_get_missing_snapshot(client, teacher, student):
    response = client.get(f"/api/performance/student/{student['id']}", headers=teacher["headers"])

    assert response.status_code == 404
    assert response.json() == {"message": "Performance data not found"}


def test_update_keeps_unsent_fields(client, teacher, student):
    _snapshot(client, teacher, student)

    response = client.put(
        f"/api/performance/student/{student['id']}",
        json={"grades": ["A", "A"], "comments": ""},
        headers=teacher["headers"],
    )

    assert response.status_code == 200
    body = response.json()
    assert body["grades"] == ["A", "A"]
    assert body["subjects"] == ["Math", "Physics"]
    assert body["comments"] == "Solid term"
    assert body["teacher"]["email"] == teacher["email"]
    assert body["student"]["email"] == student["email"]


def test_update_without_snapshot(client, teacher, student):
    response = client.put(
        f"/api/performance/student/{student['id']}",
        json={"comments": "Late"},
        headers=teacher["headers"],
    )

    assert response.status_code == 404


def test_history_is_newest_first(client, teacher, other_teacher, student):
    _snapshot(client, teacher, student, comments="Older")
    _snapshot(client, other_teacher, student, comments="Newer")

    response = client.get(f"/api/performance/history/{student['id']}", headers=student["headers"])

    assert response.status_code == 200
    history = response.json()
    assert [h["comments"] for h in history] == ["Newer", "Older"]
    assert history[0]["teacher"]["email"] == other_teacher["email"]


def test_students_only_read_their_own(client, teacher, student, second_student):
    _snapshot(client, teacher, student)

    own = client.get(f"/api/performance/student/{student['id']}", headers=student["headers"])
    other = client.get(f"/api/performance/student/{student['id']}", headers=second_student["headers"])
    other_history = client.get(f"/api/performance/history/{student['id']}", headers=second_student["headers"])

    assert own.status_code == 200
    assert other.status_code == 403
    assert other_history.status_code == 403
