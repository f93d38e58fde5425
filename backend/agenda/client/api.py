"""HTTP client for the agenda API."""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Optional

import requests

from ..errors import AgendaError

API_BASE_URL = os.getenv("AGENDA_API_URL", "http://localhost:8000")
DEFAULT_TIMEOUT = float(os.getenv("AGENDA_API_TIMEOUT", "30"))
FALLBACK_MESSAGE = "Erro ao acessar o servidor"

logger = logging.getLogger(__name__)


class ApiError(AgendaError):
    """Non-2xx answer from the API; `message` is what the user should see."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def error_message(body: str) -> str:
    """The JSON `error` field when present, otherwise the raw body."""
    message = body
    try:
        data = json.loads(body)
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        message = str(data["error"])
    return message or FALLBACK_MESSAGE


class ApiClient:
    """
    Thin JSON wrapper around a requests-compatible session.

    Any object with `request(method, url, json=..., params=..., headers=...,
    timeout=...)` returning a response with `status_code`, `text` and
    `json()` works, which lets tests pass a FastAPI TestClient.
    """

    def __init__(self, base_url: str = API_BASE_URL, session: Any = None, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def request(self, method: str, path: str, payload: Any = None, params: Optional[dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.info("%s %s", method.upper(), url)
        if payload is not None:
            logger.debug("Payload: %s", payload)

        try:
            response = self.session.request(
                method.upper(),
                url,
                json=payload,
                params=params,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method.upper(), url, exc)
            raise ApiError(str(exc) or FALLBACK_MESSAGE) from exc

        if not 200 <= response.status_code < 300:
            message = error_message(response.text)
            logger.warning("%s %s -> %s: %s", method.upper(), url, response.status_code, message)
            raise ApiError(message, response.status_code)

        if response.status_code == 204 or not response.text:
            return None
        return response.json()

    def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return self.request("get", path, params=params)

    def post(self, path: str, payload: Any) -> Any:
        return self.request("post", path, payload)

    def put(self, path: str, payload: Any) -> Any:
        return self.request("put", path, payload)

    def delete(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return self.request("delete", path, params=params)
