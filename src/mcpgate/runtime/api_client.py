"""ApiClient — JSON client for the downstream API.

Raises :class:`TransientError` for responses worth retrying (5xx, 408, 429)
and :class:`ApiError` for every other non-success status, so the resilience
pipeline can tell backpressure from hard failures.  Transport failures
(connect errors, read timeouts) surface as ``httpx.TransportError``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mcpgate.runtime.errors import ApiError, TransientError
from mcpgate.runtime.resilience.transient import is_transient_status

logger = logging.getLogger(__name__)


class ApiClient:
    """Async context manager wrapping an ``httpx.AsyncClient``.

    Usage::

        async with ApiClient("https://api.example.com", api_key="...") as api:
            customer = await api.get("customers/12345")
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def get(self, endpoint: str) -> Any:
        """GET *endpoint* and return the decoded JSON body."""
        return self._decode(await self._request("GET", endpoint))

    async def post(self, endpoint: str, data: Any) -> Any:
        """POST *data* as JSON and return the decoded JSON body."""
        return self._decode(await self._request("POST", endpoint, json=data))

    async def put(self, endpoint: str, data: Any) -> Any:
        """PUT *data* as JSON and return the decoded JSON body."""
        return self._decode(await self._request("PUT", endpoint, json=data))

    async def delete(self, endpoint: str) -> bool:
        """DELETE *endpoint*; ``True`` on success, ``False`` if it did not exist."""
        try:
            await self._request("DELETE", endpoint)
        except ApiError as exc:
            if exc.status_code == 404 and not isinstance(exc, TransientError):
                return False
            raise
        return True

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, endpoint)
        response = await self._client.request(method, endpoint, **kwargs)
        if response.is_success:
            return response

        detail = response.text[:500]
        if is_transient_status(response.status_code):
            raise TransientError(response.status_code, detail)
        raise ApiError(response.status_code, detail)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        return response.json()
