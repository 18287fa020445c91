"""Transport abstraction for the HTTP client."""

from typing import Protocol, runtime_checkable

import httpx


@runtime_checkable
class HTTPClient(Protocol):
    """Anything that can send a request and return a response.

    `httpx.AsyncClient` satisfies it; tests usually wrap an
    `httpx.MockTransport` in one. Transport failures are raised as
    `httpx.HTTPError`.
    """

    async def send(self, request: httpx.Request) -> httpx.Response: ...
