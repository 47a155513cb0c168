from typing import Optional

import httpx

from app.client.api import ApiClient
from app.client.state import AuthState, CourseState, StudentState, TeacherState


class ClientContext:
    """One API client plus the four state containers that share it. Create one per session."""

    def __init__(self, api: ApiClient):
        self.api = api
        self.auth = AuthState(api)
        self.student = StudentState(api)
        self.course = CourseState(api)
        self.teacher = TeacherState(api)

    @classmethod
    def connect(cls, base_url: Optional[str] = None, token: Optional[str] = None,
                http: Optional[httpx.Client] = None) -> "ClientContext":
        return cls(ApiClient(base_url=base_url, token=token, http=http))

    def close(self):
        self.api.close()
