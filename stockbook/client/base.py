import logging
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
FALLBACK_MESSAGE = "Something went wrong. Please try again."


class ApiError(Exception):
    """Error de la API: `status` es None cuando ni siquiera hubo respuesta."""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class ApiSession:
    """
    Cliente HTTP de la API de Stockbook.
    Adjunta `Authorization: Bearer <token>` en cada llamada cuando hay token.
    `session` puede ser cualquier objeto con un `request()` compatible
    (requests.Session, o el TestClient de FastAPI en las pruebas).
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, token: Optional[str] = None, session=None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _headers(self) -> dict:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def request(self, method: str, path: str, params=None, json=None, files=None, raw: bool = False):
        # Los filtros vacíos no se envían
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ""}

        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                params=params or None,
                json=json,
                files=files,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(None, FALLBACK_MESSAGE)

        if response.status_code >= 400:
            raise ApiError(response.status_code, _error_message(response))

        if raw:
            return response.content
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            logger.warning("%s %s returned a non-JSON body", method, path)
            raise ApiError(response.status_code, FALLBACK_MESSAGE)

    def get(self, path: str, **kwargs):
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs):
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs):
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs):
        return self.request("DELETE", path, **kwargs)


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return FALLBACK_MESSAGE
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or FALLBACK_MESSAGE
    return FALLBACK_MESSAGE


class Store:
    """Estado compartido de los stores: `loading`, `error` y la llamada protegida."""

    def __init__(self, api: ApiSession):
        self.api = api
        self.loading = False
        self.error: Optional[str] = None

    def _run(self, action: str, func: Callable[[], Any], failed=None):
        self.loading = True
        try:
            result = func()
        except ApiError as e:
            self.error = e.message
            logger.warning("%s failed: %s", action, e.message)
            return failed
        finally:
            self.loading = False
        self.error = None
        return result
