"""
Backend API Client.

Thin wrapper around ``requests.Session`` for the travel agency REST API.
Every endpoint answers with an envelope ``{"success": bool, "data": ...}``;
failures carry a human-readable ``message`` which is surfaced verbatim
through :class:`~travel_desk.errors.ApiError`.
"""

from __future__ import annotations

from typing import IO, Optional, Union

import requests

from travel_desk.errors import ApiError
from travel_desk.logger import StructuredLogger
from travel_desk.utils.string_helpers import JsonValue

# (filename, file object, content type) as accepted by ``requests``.
FileSpec = tuple[str, Union[IO[bytes], bytes], str]


def _error_message(response: requests.Response) -> str:
    """Extract the backend's ``message`` from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        nested = body.get("data")
        if isinstance(nested, dict) and nested.get("message"):
            return str(nested["message"])
        if body.get("message"):
            return str(body["message"])
        if body.get("error"):
            return str(body["error"])
    return f"HTTP {response.status_code}"


class ApiClient:
    """Synchronous JSON client for the backend.

    Args:
        base_url: Server root, e.g. ``http://localhost:5000``.
        logger: Structured logger for request diagnostics.
        token: Bearer token sent in the ``Authorization`` header when set.
        timeout: Per-request timeout in seconds.
        session: Optional pre-built session (tests inject a mock here).
    """

    def __init__(
        self,
        base_url: str,
        logger: StructuredLogger,
        token: Optional[str] = None,
        timeout: float = 120.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._logger = logger
        self._token = token or None
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Union[str, int, bool]]] = None,
        json_body: Optional[JsonValue] = None,
        files: Optional[dict[str, FileSpec]] = None,
        data: Optional[dict[str, str]] = None,
    ) -> JsonValue:
        """Perform a request and return the envelope's ``data`` member.

        Raises:
            ApiError: On transport failure, a non-2xx status, or an
                envelope with ``success: false``.
        """
        url = f"{self._base_url}{path}"
        self._logger.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                json=json_body if files is None else None,
                files=files,
                data=data,
                headers=self._headers(),
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = _error_message(exc.response) if exc.response is not None else str(exc)
            self._logger.error("API request failed (%s %s, %s): %s", method, path, status, message)
            raise ApiError(message, status_code=status) from exc
        except requests.RequestException as exc:
            self._logger.error("API request error (%s %s): %s", method, path, exc)
            raise ApiError(str(exc)) from exc

        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError as exc:
            raise ApiError(
                f"Invalid JSON response from {path}", status_code=response.status_code
            ) from exc

        if isinstance(body, dict):
            if body.get("success") is False:
                message = str(body.get("message") or body.get("error") or "Request failed")
                self._logger.error("API request rejected (%s %s): %s", method, path, message)
                raise ApiError(message, status_code=response.status_code)
            if "data" in body:
                return body["data"]
        return body

    def get(
        self, path: str, params: Optional[dict[str, Union[str, int, bool]]] = None
    ) -> JsonValue:
        return self.request("GET", path, params=params)

    def post(self, path: str, json_body: Optional[JsonValue] = None) -> JsonValue:
        return self.request("POST", path, json_body=json_body)

    def post_multipart(
        self, path: str, files: dict[str, FileSpec], data: Optional[dict[str, str]] = None
    ) -> JsonValue:
        return self.request("POST", path, files=files, data=data)

    def close(self) -> None:
        self._session.close()
