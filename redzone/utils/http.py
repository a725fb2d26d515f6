"""Shared plumbing for the read-only upstream JSON APIs."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import httpx
from pydantic import ValidationError

from redzone.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UpstreamError(Exception):
    """An upstream API was unreachable or answered with a non-2xx status."""

    def __init__(
        self,
        endpoint: str,
        status_code: Optional[int] = None,
        reason: str = "",
        message: Optional[str] = None,
    ) -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        self.reason = reason
        if message is None and status_code is not None:
            message = f"{endpoint} API error: {status_code}"
        elif message is None:
            message = f"{endpoint} API unreachable: {reason or 'unknown error'}"
        super().__init__(message)


class UnexpectedPayloadError(UpstreamError):
    """A 2xx response whose JSON does not have the expected shape."""

    def __init__(self, endpoint: str, detail: str = "") -> None:
        super().__init__(
            endpoint,
            reason="unexpected payload",
            message=f"{endpoint} API returned an unexpected payload",
        )
        self.detail = detail


async def gather_or_cancel(*aws: Awaitable[Any]) -> List[Any]:
    """Run ``aws`` concurrently; on the first failure cancel and drain the rest."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class JsonGateway:
    """Thin async GET-JSON client around :class:`httpx.AsyncClient`.

    The gateway owns its client unless one is injected (tests pass a client
    backed by ``httpx.MockTransport``).
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout or settings.http_timeout_seconds,
            follow_redirects=True,
        )

    async def _get_json(self, url: str, endpoint: str) -> Any:
        """GET ``url`` and decode JSON, raising :class:`UpstreamError` on failure.

        Args:
            url: Absolute URL to fetch
            endpoint: Human-readable endpoint name used in error messages

        Returns:
            Decoded JSON body
        """
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as err:
            logger.error("Error fetching %s: %s", endpoint, err)
            raise UpstreamError(endpoint, reason=str(err)) from err

        if response.status_code < 200 or response.status_code >= 300:
            logger.error("%s returned HTTP %s", endpoint, response.status_code)
            raise UpstreamError(endpoint, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as err:
            logger.error("Invalid JSON from %s: %s", endpoint, err)
            raise UpstreamError(endpoint, reason="invalid JSON body") from err

    async def _get_parsed(
        self, url: str, endpoint: str, parse: Callable[[Any], T]
    ) -> T:
        """GET ``url`` and convert the body with ``parse``.

        A pydantic ``ValidationError`` from ``parse`` becomes an
        :class:`UnexpectedPayloadError`, so callers only handle
        :class:`UpstreamError`.
        """
        data = await self._get_json(url, endpoint)
        try:
            return parse(data)
        except ValidationError as err:
            logger.error("Unexpected payload from %s: %s", endpoint, err)
            raise UnexpectedPayloadError(endpoint, detail=str(err)) from err

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False
