"""Async HTTP adapter for the Bitbucket Server REST API (``/rest/api/1.0``).

The tool layer only needs ``request()``: send one call, get the decoded
payload back, or a :class:`BitbucketAPIError` when the server answered with
an error status or the request never completed.  No retries.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from bitbucket_mcp.config import BearerAuth, BitbucketConfig

logger = logging.getLogger(__name__)


class BitbucketAPIError(Exception):
    """An upstream failure: HTTP error status or transport error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str | None:
    """Pull the human-readable message out of a Bitbucket error payload.

    Bitbucket Server answers ``{"errors": [{"message": ...}]}``; some proxies
    and older endpoints use a top-level ``message``.
    """
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    message = payload.get("message")
    if isinstance(message, str) and message:
        return message
    errors = payload.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        first = errors[0].get("message")
        if isinstance(first, str) and first:
            return first
    return None


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    if "json" in response.headers.get("content-type", ""):
        return response.json()
    return response.text


class BitbucketClient:
    """Thin wrapper over ``httpx.AsyncClient`` bound to one Bitbucket instance.

    *transport* lets tests substitute ``httpx.MockTransport``.
    """

    def __init__(self, config: BitbucketConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        headers = {"Accept": "application/json"}
        auth: httpx.Auth | None = None
        if isinstance(config.credential, BearerAuth):
            headers["Authorization"] = f"Bearer {config.credential.token}"
        else:
            auth = httpx.BasicAuth(config.credential.username, config.credential.password)
        self._client = httpx.AsyncClient(
            base_url=config.api_url,
            headers=headers,
            auth=auth,
            timeout=config.timeout,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, params=params, headers=headers, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            message = _error_message(exc.response) or f"{status} {exc.response.reason_phrase}".strip()
            logger.debug("Bitbucket %s %s failed with %s", method, path, status)
            raise BitbucketAPIError(message, status_code=status) from exc
        except httpx.HTTPError as exc:
            logger.debug("Bitbucket %s %s failed in transport", method, path, exc_info=True)
            raise BitbucketAPIError(str(exc) or type(exc).__name__) from exc
        return _decode(response)

    async def get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        return await self.request("GET", path, params=params, headers=headers)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> BitbucketClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
