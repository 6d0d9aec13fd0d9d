import requests
from typing import Any, Callable, Optional

from auth_context import AuthContext
from logger import setup_logger
from settings_schema import DEFAULT_API_BASE_URL

logger = setup_logger(__name__)

LOGIN_PATH = "/login"


class ApiError(Exception):
    """Non-successful response from the workout API."""

    def __init__(
        self, status_code: int, description: str, code: Optional[str] = None
    ) -> None:
        super().__init__(description)
        self.status_code = status_code
        self.description = description
        self.code = code


class UnauthorizedError(ApiError):
    pass


class ApiClient:
    """REST client for the workout API.

    Every request carries the bearer token of ``auth``. A 401 from any
    endpoint clears the stored credentials and calls ``on_unauthorized``
    with the login path before raising :class:`UnauthorizedError`.
    """

    def __init__(
        self,
        auth: AuthContext,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        on_unauthorized: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.auth = auth
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.on_unauthorized = on_unauthorized

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Any = None,
    ) -> Any:
        headers = {"Content-Type": "application/json", **self.auth.headers()}
        logger.debug("%s %s params=%s", method, path, params)
        try:
            resp = self.session.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("%s %s could not reach the server: %s", method, path, e)
            raise ApiError(0, f"Could not reach {self.base_url}") from e
        if resp.status_code == 401:
            logger.warning("%s %s rejected as unauthorized", method, path)
            self.auth.clear()
            if self.on_unauthorized is not None:
                self.on_unauthorized(LOGIN_PATH)
            code, description = _error_body(resp)
            raise UnauthorizedError(401, description or "Not authenticated", code)
        if not resp.ok:
            code, description = _error_body(resp)
            description = description or resp.reason or f"HTTP {resp.status_code}"
            logger.warning("%s %s failed with %s: %s", method, path, resp.status_code, description)
            raise ApiError(resp.status_code, description, code)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


def _error_body(resp: requests.Response) -> tuple[Optional[str], Optional[str]]:
    """Extract ``code`` and ``description`` from an ErrorMessageResponse body."""
    try:
        body = resp.json()
    except ValueError:
        return None, None
    if not isinstance(body, dict):
        return None, None
    description = body.get("description") or body.get("message")
    return body.get("code"), str(description) if description else None
