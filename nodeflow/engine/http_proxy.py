"""HTTP proxy collaborator - performs outbound requests for httpRequest nodes."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..core.exceptions import HttpProxyError

logger = logging.getLogger(__name__)

USER_AGENT = "Nodeflow/0.1"


class HttpProxy:
    """Makes the actual network call and normalizes the response."""

    def __init__(
        self,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._client = client

    async def request(
        self,
        url: str,
        method: str = "GET",
        headers: str | dict[str, Any] | None = "{}",
        body: str | None = None,
    ) -> dict[str, Any]:
        """
        Perform a request.

        Returns:
            dict with status, statusText, headers and data (parsed JSON when
            the response declares it, otherwise text)

        Raises:
            HttpProxyError: If the URL is missing or the request fails
        """
        if not url or not isinstance(url, str):
            raise HttpProxyError("URL is required")

        valid_url = url.strip()
        if not valid_url.startswith(("http://", "https://")):
            valid_url = "https://" + valid_url

        method = (method or "GET").upper()
        request_headers: dict[str, str] = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        request_headers.update(self._parse_headers(headers))

        content: str | None = None
        if method != "GET" and body:
            try:
                content = json.dumps(json.loads(body))
            except (json.JSONDecodeError, TypeError):
                content = body

        async def send(client: httpx.AsyncClient) -> httpx.Response:
            return await client.request(
                method=method,
                url=valid_url,
                headers=request_headers,
                content=content,
            )

        try:
            if self._client is not None:
                response = await send(self._client)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await send(client)
        except httpx.HTTPError as e:
            logger.warning("HTTP proxy error for %s %s: %s", method, valid_url, e)
            raise HttpProxyError(str(e) or "HTTP request failed", url=valid_url) from e

        return {
            "status": response.status_code,
            "statusText": response.reason_phrase,
            "headers": dict(response.headers),
            "data": self._parse_body(response),
        }

    def _parse_headers(self, headers: str | dict[str, Any] | None) -> dict[str, str]:
        """Parse headers given as JSON text; invalid JSON is ignored."""
        if isinstance(headers, dict):
            parsed: Any = headers
        else:
            try:
                parsed = json.loads(headers or "{}")
            except (json.JSONDecodeError, TypeError):
                return {}
        if not isinstance(parsed, dict):
            return {}
        return {str(k): str(v) for k, v in parsed.items()}

    def _parse_body(self, response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text
