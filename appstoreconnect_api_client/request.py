"""
Request descriptors and the transport-independent half of dispatching.

Both the synchronous and the asynchronous client go through the same
steps around the network call:

1. :class:`Request` captures the method, path, ordered query, body and
   the model the response should be decoded into.
2. :func:`build_url` and :func:`build_headers` turn a request and a
   bearer token into what goes on the wire.
3. :func:`decode_response` turns the status code and body text into a
   model, or raises :class:`ApiError` / :class:`DecodeError`.

Only the network call itself differs between the two clients.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Type, Union
from urllib.parse import quote, urlencode, urlsplit

from pydantic import BaseModel, ValidationError

from .exceptions import ApiError, DecodeError
from .models import ApiModel, ErrorResponse, Query, format_query_value

API_BASE_URL = "https://api.appstoreconnect.apple.com"

METHODS = frozenset({"GET", "POST", "PATCH", "PUT", "DELETE"})

QueryPairs = Tuple[Tuple[str, str], ...]
QueryInput = Union[None, Query, Mapping[str, Any], Sequence[Tuple[str, Any]]]


def normalize_query(query: QueryInput) -> QueryPairs:
    """Return ``query`` as ordered ``(key, value)`` string pairs.

    Accepts a :class:`Query` builder, a mapping or a sequence of pairs.
    Order is preserved.  A key given twice raises ``ValueError``.
    """
    if query is None:
        return ()
    if isinstance(query, Query):
        pairs: Sequence[Tuple[str, Any]] = query.to_query()
    elif isinstance(query, Mapping):
        pairs = list(query.items())
    else:
        pairs = list(query)

    seen = set()
    result = []
    for key, value in pairs:
        key = str(key)
        if key in seen:
            raise ValueError(f"duplicate query parameter {key!r}")
        seen.add(key)
        result.append((key, format_query_value(value)))
    return tuple(result)


def encode_query(pairs: QueryPairs) -> str:
    # quote_plus with no safe characters: "filter[name]" -> "filter%5Bname%5D"
    return urlencode(pairs)


def quote_segment(value: Any) -> str:
    """Percent-encode one path parameter."""
    text = str(value) if value is not None else ""
    if not text:
        raise ValueError("path parameter must not be empty")
    return quote(text, safe="")


@dataclass(frozen=True)
class Request:
    """Everything needed to perform one API call.

    Parameters
    ----------
    method : str
        HTTP verb.
    path : str
        Path relative to the API host, with path parameters already
        substituted, or an absolute URL on the API host (pagination links).
    query : optional
        Query parameters, see :func:`normalize_query`.
    body : optional
        A request model or a JSON-serialisable object.
    result : type, optional
        The model to decode a successful response into.  When omitted the
        decoded JSON is returned as-is (or None for an empty body).
    """

    method: str
    path: str
    query: QueryPairs = ()
    body: Optional[Any] = None
    result: Optional[Type[BaseModel]] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        method = self.method.upper()
        if method not in METHODS:
            raise ValueError(f"unsupported HTTP method {self.method!r}")
        if not self.path:
            raise ValueError("path must not be empty")
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "query", normalize_query(self.query))
        if isinstance(self.body, ApiModel):
            object.__setattr__(self, "body", self.body.to_body())

    def payload(self) -> Optional[bytes]:
        """The JSON encoded body, or None when the request has no body."""
        if self.body is None:
            return None
        return json.dumps(self.body, separators=(",", ":")).encode("utf-8")


def build_url(base_url: str, path: str, query: QueryPairs = ()) -> str:
    """Join ``path`` onto ``base_url`` and append ``query`` in order.

    Absolute URLs are accepted only when they share the scheme and host
    of ``base_url``, so the bearer token is never sent to another host.
    """
    if path.startswith("http://") or path.startswith("https://"):
        target, base = urlsplit(path), urlsplit(base_url)
        if (target.scheme, target.netloc) != (base.scheme, base.netloc):
            raise ValueError(f"refusing to send credentials to {target.netloc}")
        url = path
    else:
        url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
    if query:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}{encode_query(query)}"
    return url


def log_target(url: str) -> str:
    """``url`` without its query string, for log records."""
    return urlsplit(url).path


def build_headers(token: str, has_body: bool) -> Dict[str, str]:
    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": "application/json",
    }
    if has_body:
        headers["Content-Type"] = "application/json"
    return headers


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def decode_response(status: int, text: str, result: Optional[Type[BaseModel]] = None) -> Any:
    """Decode a response body or raise the matching error.

    Raises
    ------
    ApiError
        For a non-2xx status with a well-formed ``errors`` envelope.
    DecodeError
        When either a success or an error body does not have the
        expected shape.
    """
    if 200 <= status < 300:
        if result is None:
            if not text.strip():
                return None
            try:
                return json.loads(text)
            except ValueError as exc:
                raise DecodeError(status, text, "body is not valid JSON") from exc
        try:
            return result.model_validate_json(text)
        except ValidationError as exc:
            raise DecodeError(status, text, _first_error(exc)) from exc

    try:
        envelope = ErrorResponse.model_validate_json(text)
    except ValidationError as exc:
        raise DecodeError(status, text, _first_error(exc)) from exc
    raise ApiError(status, envelope.errors)
