"""In-memory stand-ins for ``requests`` and ``aiohttp`` sessions.

Each fake records the calls it receives and answers from a queue of
canned responses, so tests can assert on the exact URL, headers and
body that would have gone over the wire.
"""

from __future__ import annotations

import json
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Union

Reply = Union["FakeResponse", BaseException]


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None) -> None:
        self.status_code = status_code
        if body is None:
            self.content = b""
        elif isinstance(body, bytes):
            self.content = body
        elif isinstance(body, str):
            self.content = body.encode("utf-8")
        else:
            self.content = json.dumps(body).encode("utf-8")

    @property
    def text(self) -> str:
        # requests replaces undecodable bytes
        return self.content.decode("utf-8", errors="replace")


class FakeSession:
    """Mimics ``requests.Session.request``."""

    def __init__(self, *replies: Reply) -> None:
        self.replies: Deque[Reply] = deque(replies)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def queue(self, reply: Reply) -> None:
        self.replies.append(reply)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        reply = self.replies.popleft()
        if isinstance(reply, BaseException):
            raise reply
        return reply

    def close(self) -> None:
        self.closed = True


class _FakeAioResponse:
    def __init__(self, reply: FakeResponse) -> None:
        self.status = reply.status_code
        self._content = reply.content

    async def read(self) -> bytes:
        return self._content

    async def text(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        return self._content.decode(encoding, errors=errors)

    async def __aenter__(self) -> "_FakeAioResponse":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None


class FakeAioSession:
    """Mimics ``aiohttp.ClientSession.request`` used as a context manager."""

    def __init__(self, *replies: Reply) -> None:
        self.replies: Deque[Reply] = deque(replies)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: Any, **kwargs: Any) -> _FakeAioResponse:
        self.calls.append({"method": method, "url": str(url), **kwargs})
        reply = self.replies.popleft()
        if isinstance(reply, BaseException):
            raise reply
        return _FakeAioResponse(reply)

    async def close(self) -> None:
        self.closed = True


def header(call: Dict[str, Any], name: str) -> Optional[str]:
    return call["headers"].get(name)
