"""
State containers for the client side of the API.

Each container holds `data`, `loading` and `error` and moves through three
transitions per call: issued (loading, error cleared), succeeded (data merged,
not loading) and failed (error set, not loading). There is no retry, no
optimistic update and no request de-duplication.
"""

from typing import Any, Callable, Dict, Optional

from app.client.api import ApiClient, Result


class StateContainer:
    def __init__(self, api: ApiClient):
        self.api = api
        self.data: Dict[str, Any] = self.initial_data()
        self.loading = False
        self.error: Optional[str] = None

    def initial_data(self) -> Dict[str, Any]:
        return {}

    def run(self, call: Callable[[], Result], on_success: Optional[Callable[[Any], None]] = None) -> Result:
        self.loading = True
        self.error = None
        try:
            result = call()
            if result.ok:
                if on_success:
                    on_success(result.data)
            else:
                self.error = result.error
        finally:
            self.loading = False
        return result

    def clear_error(self):
        self.error = None


class AuthState(StateContainer):
    def initial_data(self):
        return {"token": None, "user": None, "is_authenticated": False}

    def _signed_in(self, payload: dict):
        self.api.token = payload["token"]
        self.data.update(token=payload["token"], user=payload["user"], is_authenticated=True)

    def register(self, first_name: str, last_name: str, email: str, password: str, role: str = "student") -> Result:
        body = {"firstName": first_name, "lastName": last_name, "email": email, "password": password, "role": role}
        return self.run(lambda: self.api.post("/auth/register", body), self._signed_in)

    def login(self, email: str, password: str) -> Result:
        body = {"email": email, "password": password}
        return self.run(lambda: self.api.post("/auth/login", body), self._signed_in)

    def load_user(self) -> Result:
        def loaded(user):
            self.data.update(user=user, is_authenticated=True)

        return self.run(lambda: self.api.get("/auth/me"), loaded)

    def logout(self):
        self.api.token = None
        self.data = self.initial_data()
        self.error = None


class StudentState(StateContainer):
    def initial_data(self):
        return {"profile": None, "courses": []}

    def get_profile(self) -> Result:
        return self.run(lambda: self.api.get("/students/profile"), lambda p: self.data.update(profile=p))

    def update_profile(self, changes: dict) -> Result:
        return self.run(lambda: self.api.put("/students/profile", changes), lambda p: self.data.update(profile=p))

    def get_courses(self) -> Result:
        return self.run(lambda: self.api.get("/students/courses"), lambda c: self.data.update(courses=c))


class CourseState(StateContainer):
    def initial_data(self):
        return {"courses": [], "current": None, "performance": None}

    def _set_current(self, course: dict):
        self.data["current"] = course

    def get_courses(self) -> Result:
        return self.run(lambda: self.api.get("/courses"), lambda c: self.data.update(courses=c))

    def get_course(self, course_id: str) -> Result:
        return self.run(lambda: self.api.get(f"/courses/{course_id}"), self._set_current)

    def create_course(self, course: dict) -> Result:
        return self.run(lambda: self.api.post("/courses", course), self.data["courses"].append)

    def enroll(self, course_id: str, student_id: Optional[str] = None) -> Result:
        body = {"studentId": student_id} if student_id else {}
        return self.run(lambda: self.api.post(f"/courses/{course_id}/enroll", body), self._set_current)

    def add_student(self, course_id: str, student_id: str) -> Result:
        body = {"studentId": student_id}
        return self.run(lambda: self.api.post(f"/courses/{course_id}/students", body), self._set_current)

    def update_grade(self, course_id: str, student_id: str, grade: Optional[float]) -> Result:
        path = f"/courses/{course_id}/students/{student_id}/grade"
        return self.run(lambda: self.api.put(path, {"grade": grade}), self._set_current)

    def add_comment(self, course_id: str, student_id: str, text: str) -> Result:
        path = f"/courses/{course_id}/students/{student_id}/comments"
        return self.run(lambda: self.api.post(path, {"text": text}), self._set_current)

    def update_comment(self, course_id: str, student_id: str, comment_id: str, text: str) -> Result:
        path = f"/courses/{course_id}/students/{student_id}/comments/{comment_id}"
        return self.run(lambda: self.api.put(path, {"text": text}), self._set_current)

    def get_performance(self, course_id: str, student_id: str) -> Result:
        path = f"/courses/{course_id}/students/{student_id}/performance"
        return self.run(lambda: self.api.get(path), lambda p: self.data.update(performance=p))

    def clear_current(self):
        self.data["current"] = None

    def clear_performance(self):
        self.data["performance"] = None


class TeacherState(StateContainer):
    def initial_data(self):
        return {"profile": None, "courses": []}

    def get_profile(self) -> Result:
        return self.run(lambda: self.api.get("/teachers/profile"), lambda p: self.data.update(profile=p))

    def update_profile(self, changes: dict) -> Result:
        def updated(profile):
            self.data["profile"] = {**(self.data["profile"] or {}), "profile": profile}

        return self.run(lambda: self.api.put("/teachers/profile", changes), updated)

    def get_courses(self) -> Result:
        return self.run(lambda: self.api.get("/teachers/courses"), lambda c: self.data.update(courses=c))
