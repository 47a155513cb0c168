from dataclasses import dataclass
from typing import Any, Optional
import httpx
import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api"


@dataclass
class Result:
    """Outcome of one API call: either `data` or an `error` message, never both."""

    ok: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None


class ApiClient:
    """Thin httpx wrapper that signs requests with `x-auth-token` and never raises for HTTP errors."""

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 http: Optional[httpx.Client] = None, timeout: float = 10.0):
        self.base_url = (base_url or os.getenv("STUDENT_SUCCESS_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.token = token
        self._http = http or httpx.Client(timeout=timeout)

    def _headers(self) -> dict:
        return {"x-auth-token": self.token} if self.token else {}

    def request(self, method: str, path: str, json: Any = None, params: Optional[dict] = None) -> Result:
        url = f"{self.base_url}{path}"
        try:
            response = self._http.request(method, url, json=json, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            return Result(ok=False, error=str(e) or "Network error")

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_success:
            return Result(ok=True, data=body, status_code=response.status_code)

        message = body.get("message") if isinstance(body, dict) else None
        return Result(ok=False, error=message or response.reason_phrase, status_code=response.status_code)

    def get(self, path: str, params: Optional[dict] = None) -> Result:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Result:
        return self.request("POST", path, json=json if json is not None else {})

    def put(self, path: str, json: Any = None) -> Result:
        return self.request("PUT", path, json=json if json is not None else {})

    def delete(self, path: str) -> Result:
        return self.request("DELETE", path)

    def close(self):
        self._http.close()
