"""
flaskbase - HTTP transport.

Single entry point for talking to the Flask API. Every call resolves to a
Result; network failures and non-2xx responses are folded into Result.error.

Cookies set by the API (the session) live in the shared httpx client's
cookie jar, so every request carries them.
"""

import json
import logging
from typing import Any

import httpx

from flaskbase.errors import TransportError
from flaskbase.models import Result

logger = logging.getLogger(__name__)

# Marker for "no request body" (None is a valid JSON body)
NO_BODY: Any = object()


def _is_json(response: httpx.Response) -> bool:
    return "application/json" in response.headers.get("content-type", "")


def _read_body(response: httpx.Response) -> Any:
    """Parse JSON responses, fall back to raw text for everything else."""
    if _is_json(response):
        try:
            return response.json()
        except ValueError:
            logger.debug(f"Undecodable JSON body from {response.request.url}")
    return response.text


def error_from_body(body: Any, reason: str) -> Any:
    """
    Pick the error value of a failed response.

    Order: body["error"], then the whole body, then the status reason phrase.
    """
    if body:
        if isinstance(body, dict) and body.get("error"):
            return body["error"]
        return body
    return reason


class ApiTransport:
    """
    Thin async wrapper around httpx for the Flask API.

    Stateless per call; safe to share between builders and the auth façade.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}".rstrip("/")

    async def request(
        self,
        path: str,
        *,
        method: str = "GET",
        params: list[tuple[str, str]] | None = None,
        body: Any = NO_BODY,
        files: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
    ) -> Result:
        """
        Issue one request and normalize the outcome.

        Args:
            path: API path, e.g. "/db/chats" or "/auth/session"
            method: HTTP method
            params: Query string pairs (order preserved)
            body: JSON-encoded request body, omitted when NO_BODY
            files: Multipart file fields (switches off the JSON content type)
            data: Multipart form fields

        Returns:
            Result with parsed data, or the error value on failure
        """
        url = self.url_for(path)
        headers: dict[str, str] = {}
        content: str | None = None

        if files is None:
            headers["Content-Type"] = "application/json"
        if body is not NO_BODY:
            content = json.dumps(body)

        try:
            response = await self._client.request(
                method,
                url,
                params=params or None,
                headers=headers,
                content=content,
                files=files,
                data=data,
            )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            error = TransportError(str(e) or type(e).__name__, method=method, url=url)
            error.__cause__ = e
            return Result(data=None, error=error)

        payload = _read_body(response)

        if not response.is_success:
            error = error_from_body(payload, response.reason_phrase)
            logger.debug(f"{method} {url} -> {response.status_code}: {error}")
            return Result(data=None, error=error)

        return Result(data=payload, error=None)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
