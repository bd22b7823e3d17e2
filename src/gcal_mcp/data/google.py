from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..config.settings import GoogleSettings

CALENDAR_API_BASE_URL = "https://www.googleapis.com/calendar/v3"
GMAIL_API_BASE_URL = "https://gmail.googleapis.com/gmail/v1"


class GoogleNotConfiguredError(RuntimeError):
    """Raised when a Google API call is attempted without an access token."""


class GoogleTransportError(RuntimeError):
    """Raised when the HTTP request to a Google API could not be completed."""


class GoogleRequestError(RuntimeError):
    """Raised when a Google API answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Google API request failed ({status_code}): {message}")
        self.status_code = status_code
        self.message = message

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500 and self.status_code not in (401, 403, 408, 429)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return " ".join(error["message"].split())[:200]
        if isinstance(error, str) and error.strip():
            return " ".join(error.split())[:200]
    text = response.text.strip()
    return " ".join(text.split())[:200] if text else "Request failed without an error payload"


@dataclass
class GoogleGateway:
    """Thin wrapper around ``httpx.AsyncClient`` with bearer-token awareness."""

    settings: GoogleSettings
    _client: Optional[httpx.AsyncClient] = None

    def ensure_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        self._client = httpx.AsyncClient(timeout=self.settings.timeout_seconds)
        return self._client

    def is_ready(self) -> bool:
        return self.settings.is_configured

    def _headers(self) -> Dict[str, str]:
        if not self.settings.is_configured:
            missing = ", ".join(self.settings.missing_env_vars)
            raise GoogleNotConfiguredError(f"Google API credentials are missing: {missing}")
        return {"Authorization": f"Bearer {self.settings.access_token}", "Accept": "application/json"}

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        headers = self._headers()
        try:
            response = await self.ensure_client().request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise GoogleTransportError(f"{method} {url} failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise GoogleRequestError(response.status_code, _error_message(response))
        if response.status_code == 204 or not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise GoogleRequestError(response.status_code, "invalid JSON in response") from exc
        if not isinstance(payload, dict):
            raise GoogleRequestError(response.status_code, "unexpected JSON payload shape")
        return payload

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
