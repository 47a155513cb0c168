# tests/test_client.py

import httpx
import pytest

from app.client.api import ApiClient, Result
from app.client.context import ClientContext
from app.client.state import StateContainer


@pytest.fixture
def connect(client):
    def _connect(token=None):
        return ClientContext.connect(base_url="http://testserver/api", token=token, http=client)

    return _connect


# === container transitions ===


def test_run_sets_loading_while_issued(client):
    container = StateContainer(ApiClient(http=client))
    seen = []

    def call():
        seen.append((container.loading, container.error))
        return Result(ok=True, data={"value": 1})

    container.error = "stale"
    result = container.run(call, container.data.update)

    assert result.ok
    assert seen == [(True, None)]
    assert container.loading is False
    assert container.data == {"value": 1}


def test_run_records_failure(client):
    container = StateContainer(ApiClient(http=client))

    container.run(lambda: Result(ok=False, error="Course is full", status_code=400))

    assert container.loading is False
    assert container.error == "Course is full"
    assert container.data == {}

    container.clear_error()
    assert container.error is None


def test_network_error_becomes_result():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = ApiClient(base_url="http://api.invalid/api", http=httpx.Client(transport=httpx.MockTransport(refuse)))

    result = api.get("/courses")

    assert result.ok is False
    assert result.error == "connection refused"
    assert result.status_code is None


# === auth ===


def test_register_and_load_user(connect):
    ctx = connect()

    registered = ctx.auth.register("Ada", "Lovelace", "alovelace@school.edu", "secret123")
    loaded = ctx.auth.load_user()

    assert registered.status_code == 201
    assert loaded.ok
    assert ctx.auth.data["is_authenticated"] is True
    assert ctx.api.token == ctx.auth.data["token"]
    assert ctx.auth.data["user"]["email"] == "alovelace@school.edu"


def test_login_failure_surfaces_message(connect, student):
    ctx = connect()

    result = ctx.auth.login(student["email"], "wrong-password")

    assert result.ok is False
    assert result.status_code == 401
    assert ctx.auth.error == "Invalid credentials"
    assert ctx.auth.data["is_authenticated"] is False
    assert ctx.auth.loading is False


def test_logout_clears_token(connect, student):
    ctx = connect(token=student["token"])
    ctx.auth.load_user()

    ctx.auth.logout()

    assert ctx.api.token is None
    assert ctx.auth.data == {"token": None, "user": None, "is_authenticated": False}
    assert ctx.auth.load_user().status_code == 401


# === courses ===


def test_course_flow(connect, teacher, student, second_student, course_payload):
    teacher_ctx = connect(token=teacher["token"])
    student_ctx = connect(token=student["token"])
    late_ctx = connect(token=second_student["token"])

    created = teacher_ctx.course.create_course({**course_payload, "capacity": 1})
    course_id = created.data["id"]
    assert [c["courseCode"] for c in teacher_ctx.course.data["courses"]] == ["CS101"]

    student_ctx.course.enroll(course_id)
    assert student_ctx.course.data["current"]["enrolledStudents"] == [student["id"]]

    late_ctx.course.enroll(course_id)
    assert late_ctx.course.error == "Course is full"
    assert late_ctx.course.data["current"] is None

    student_ctx.course.get_courses()
    assert len(student_ctx.course.data["courses"]) == 1


def test_grading_flow(connect, teacher, student, sample_course):
    ctx = connect(token=teacher["token"])
    course_id = sample_course["id"]

    ctx.course.add_student(course_id, student["id"])
    ctx.course.update_grade(course_id, student["id"], 84)
    ctx.course.add_comment(course_id, student["id"], "Good work")
    comment_id = ctx.course.data["current"]["comments"][0]["id"]
    ctx.course.update_comment(course_id, student["id"], comment_id, "Great work")
    ctx.course.get_performance(course_id, student["id"])

    assert ctx.course.error is None
    performance = ctx.course.data["performance"]
    assert [g["grade"] for g in performance["grades"]] == [84]
    assert [c["text"] for c in performance["comments"]] == ["Great work"]

    ctx.course.clear_performance()
    assert ctx.course.data["performance"] is None


# === students & teachers ===


def test_student_profile_container(connect, student, student_profile):
    ctx = connect(token=student["token"])

    ctx.student.get_profile()
    ctx.student.update_profile({"major": "Mathematics"})
    ctx.student.get_courses()

    assert ctx.student.error is None
    assert ctx.student.data["profile"]["major"] == "Mathematics"
    assert ctx.student.data["courses"] == []


def test_teacher_container(connect, teacher, sample_course):
    ctx = connect(token=teacher["token"])

    ctx.teacher.get_profile()
    ctx.teacher.update_profile({"department": "Computer Science"})
    ctx.teacher.get_courses()

    assert ctx.teacher.error is None
    assert ctx.teacher.data["profile"]["user"]["email"] == teacher["email"]
    assert ctx.teacher.data["profile"]["profile"]["department"] == "Computer Science"
    assert [c["courseCode"] for c in ctx.teacher.data["courses"]] == ["CS101"]


def test_teacher_container_rejects_students(connect, student):
    ctx = connect(token=student["token"])

    result = ctx.teacher.get_profile()

    assert result.status_code == 403
    assert ctx.teacher.error == "Not authorized"


# === container failures ===


def test_run_clears_loading_when_call_raises(client):
    container = StateContainer(ApiClient(http=client))

    def call():
        raise httpx.InvalidURL("bad url")

    with pytest.raises(httpx.InvalidURL):
        container.run(call)

    assert container.loading is False


def test_run_clears_loading_when_success_handler_raises(client):
    container = StateContainer(ApiClient(http=client))

    def on_success(data):
        raise KeyError("token")

    with pytest.raises(KeyError):
        container.run(lambda: Result(ok=True, data={}), on_success)

    assert container.loading is False
