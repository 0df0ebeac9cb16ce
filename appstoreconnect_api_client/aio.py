"""
Asynchronous App Store Connect client built on aiohttp.

:class:`AsyncAppStoreConnectClient` mirrors :class:`AppStoreConnectClient`
method for method; every endpoint method returns an awaitable.  A call
suspends only while aiohttp connects, writes the request and reads the
response.  Signing a token is synchronous and contains no ``await``, so
the check-and-refresh step is never interleaved with another task on
the same event loop.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Any, Optional, Type, TypeVar

import aiohttp
from pydantic import BaseModel
from yarl import URL

from .auth import Clock, Credentials, TokenCache
from .client import resolve_credentials, validate_timeout
from .endpoints import EndpointsMixin
from .exceptions import TransportError
from .models import PageResponse
from .request import (
    API_BASE_URL,
    QueryInput,
    Request,
    build_headers,
    build_url,
    decode_response,
    log_target,
)

logger = logging.getLogger(__name__)

PageT = TypeVar("PageT", bound=PageResponse)


class AsyncAppStoreConnectClient(EndpointsMixin):
    """Asynchronous App Store Connect API client.

    Accepts the same arguments as :class:`AppStoreConnectClient`, except
    that ``session`` is an :class:`aiohttp.ClientSession`.  A session
    created by the client is opened on first use and closed by
    :meth:`close` (or on leaving ``async with``).
    """

    def __init__(
        self,
        *,
        credentials: Optional[Credentials] = None,
        issuer_id: Optional[str] = None,
        key_id: Optional[str] = None,
        private_key: Optional[bytes] = None,
        base_url: str = API_BASE_URL,
        timeout: Optional[float] = 60.0,
        session: Optional[aiohttp.ClientSession] = None,
        clock: Optional[Clock] = None,
        refresh_margin: timedelta = timedelta(seconds=60),
    ) -> None:
        if not base_url:
            raise ValueError("base_url must be provided")
        self.credentials = resolve_credentials(credentials, issuer_id, key_id, private_key)
        self.base_url = base_url.rstrip("/")
        self.timeout = validate_timeout(timeout)
        self.tokens = TokenCache(self.credentials, clock=clock, refresh_margin=refresh_margin)

        self._owns_session = session is None
        self._session: Optional[aiohttp.ClientSession] = session

    def _get_session(self) -> aiohttp.ClientSession:
        # aiohttp sessions must be created inside a running event loop
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "AsyncAppStoreConnectClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def send(self, request: Request) -> Any:
        """Perform ``request`` and decode the response.

        Behaves like :meth:`AppStoreConnectClient.send`.
        """
        url = build_url(self.base_url, request.path, request.query)
        token = self.tokens.get_token()
        payload = request.payload()
        headers = build_headers(token.value, payload is not None)
        session = self._get_session()

        logger.debug("%s %s", request.method, log_target(url))
        try:
            # The URL is already percent-encoded; stop yarl from requoting it
            async with session.request(
                request.method,
                URL(url, encoded=True),
                data=payload,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                status = resp.status
                text = await resp.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(f"Failed to connect to {url}: {exc}") from exc
        logger.debug("%s %s returned %s", request.method, log_target(url), status)

        return decode_response(status, text, request.result)

    async def request(
        self,
        method: str,
        path: str,
        *,
        query: QueryInput = None,
        json: Optional[Any] = None,
        result: Optional[Type[BaseModel]] = None,
    ) -> Any:
        return await self.send(Request(method, path, query=query, body=json, result=result))

    async def next_page(self, page: PageT) -> Optional[PageT]:
        """Fetch the page after ``page``, or return None on the last page."""
        if not page.next_url:
            return None
        return await self.send(Request("GET", page.next_url, result=type(page)))

    async def get(
        self,
        path: str,
        *,
        query: QueryInput = None,
        result: Optional[Type[BaseModel]] = None,
    ) -> Any:
        return await self.request("GET", path, query=query, result=result)

    async def post(
        self,
        path: str,
        *,
        json: Optional[Any] = None,
        result: Optional[Type[BaseModel]] = None,
    ) -> Any:
        return await self.request("POST", path, json=json, result=result)

    async def patch(
        self,
        path: str,
        *,
        json: Optional[Any] = None,
        result: Optional[Type[BaseModel]] = None,
    ) -> Any:
        return await self.request("PATCH", path, json=json, result=result)

    async def delete(self, path: str, *, query: QueryInput = None) -> Any:
        return await self.request("DELETE", path, query=query)
