"""
Client implementation for the App Store Connect REST API.

This module defines the :class:`AppStoreConnectClient` class which
authenticates against App Store Connect with a self-signed ES256 JSON
Web Token and performs HTTP requests against the API endpoints.  The
client caches the token for its lifetime (at most twenty minutes) and
signs a new one when it is about to expire.

Usage
-----

.. code-block:: python

    from appstoreconnect_api_client import (
        AppStoreConnectClient,
        Credentials,
        DeviceQuery,
    )

    credentials = Credentials.from_p8(
        issuer_id="57246542-96fe-1a63-e053-0824d011072a",
        key_id="2X9R4HXF34",
        path="AuthKey_2X9R4HXF34.p8",
    )
    with AppStoreConnectClient(credentials=credentials) as client:
        page = client.list_devices(DeviceQuery(filter_name="mini", limit=10))
        for device in page.data:
            print(device.attributes.name)

Every call performs exactly one HTTP request.  Failures are raised
immediately; the client never retries.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, Optional, Type, TypeVar

import requests
from pydantic import BaseModel

from .auth import Clock, Credentials, TokenCache
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


def resolve_credentials(
    credentials: Optional[Credentials],
    issuer_id: Optional[str],
    key_id: Optional[str],
    private_key: Optional[bytes],
) -> Credentials:
    """Accept either a :class:`Credentials` or its three fields."""
    if credentials is not None:
        if issuer_id or key_id or private_key:
            raise ValueError(
                "pass either credentials or issuer_id/key_id/private_key, not both"
            )
        return credentials
    return Credentials(
        issuer_id=issuer_id or "",
        key_id=key_id or "",
        private_key=private_key or b"",
    )


def validate_timeout(timeout: Optional[float]) -> Optional[float]:
    if timeout is not None and timeout <= 0:
        raise ValueError("timeout must be a positive number of seconds, got %r" % timeout)
    return timeout


class AppStoreConnectClient(EndpointsMixin):
    """A client for the App Store Connect REST API.

    Parameters
    ----------
    credentials : Credentials, optional
        The API key credentials.  Alternatively pass ``issuer_id``,
        ``key_id`` and ``private_key`` directly.
    issuer_id : str, optional
        The issuer id shown on the App Store Connect "Keys" page.
    key_id : str, optional
        The identifier of the API key.
    private_key : bytes, optional
        The DER encoded private key (PEM is accepted as well).
    base_url : str, optional
        Override the API base URL.
    timeout : float, optional
        Timeout in seconds for each HTTP request.  ``None`` disables it.
    session : requests.Session, optional
        The session used for HTTP requests.  When omitted, the client
        creates one and closes it in :meth:`close`.
    clock : callable, optional
        Returns the current time; used when signing tokens.
    refresh_margin : timedelta, optional
        How long before expiry a cached token is replaced.

    Notes
    -----
    The token cache is guarded by a lock, so a client may be shared
    between threads; only one thread signs a replacement token when the
    current one expires.
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
        session: Optional[requests.Session] = None,
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
        self.session = session if session is not None else requests.Session()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close(self) -> None:
        """Close the HTTP session if the client created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "AppStoreConnectClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def send(self, request: Request) -> Any:
        """Perform ``request`` and decode the response.

        Parameters
        ----------
        request : Request
            The call to perform, usually built by a function of
            :mod:`appstoreconnect_api_client.endpoints`.

        Returns
        -------
        Any
            An instance of ``request.result`` when it is set; otherwise
            the decoded JSON body, or None for an empty body.

        Raises
        ------
        InvalidKeyError, SigningError
            If a new token is needed and cannot be signed.
        TransportError
            If the request could not be completed.
        ApiError
            If the API answered with a non-2xx status.
        DecodeError
            If the response body does not have the expected shape.
        """
        url = build_url(self.base_url, request.path, request.query)
        token = self.tokens.get_token()
        payload = request.payload()
        headers = build_headers(token.value, payload is not None)

        logger.debug("%s %s", request.method, log_target(url))
        try:
            response = self.session.request(
                method=request.method,
                url=url,
                data=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"Failed to connect to {url}: {exc}") from exc
        logger.debug(
            "%s %s returned %s", request.method, log_target(url), response.status_code
        )

        return decode_response(response.status_code, response.text, request.result)

    def request(
        self,
        method: str,
        path: str,
        *,
        query: QueryInput = None,
        json: Optional[Any] = None,
        result: Optional[Type[BaseModel]] = None,
    ) -> Any:
        """Perform an arbitrary API call.

        See :meth:`send` for the return value and errors.
        """
        return self.send(Request(method, path, query=query, body=json, result=result))

    def next_page(self, page: PageT) -> Optional[PageT]:
        """Fetch the page after ``page``, or return None on the last page."""
        if not page.next_url:
            return None
        return self.send(Request("GET", page.next_url, result=type(page)))

    # ------------------------------------------------------------------
    # Public convenience methods
    # ------------------------------------------------------------------
    def get(
        self,
        path: str,
        *,
        query: QueryInput = None,
        result: Optional[Type[BaseModel]] = None,
    ) -> Any:
        """Perform a GET request.

        See :meth:`send` for full documentation.
        """
        return self.request("GET", path, query=query, result=result)

    def post(
        self,
        path: str,
        *,
        json: Optional[Any] = None,
        result: Optional[Type[BaseModel]] = None,
    ) -> Any:
        return self.request("POST", path, json=json, result=result)

    def patch(
        self,
        path: str,
        *,
        json: Optional[Any] = None,
        result: Optional[Type[BaseModel]] = None,
    ) -> Any:
        return self.request("PATCH", path, json=json, result=result)

    def delete(self, path: str, *, query: QueryInput = None) -> Any:
        return self.request("DELETE", path, query=query)

    def headers(self) -> Dict[str, str]:
        """Headers for a body-less request, e.g. to download a report by hand."""
        return build_headers(self.tokens.get_token().value, has_body=False)
