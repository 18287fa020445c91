"""
Outbound HTTP client.

Builds requests that carry the bearer token and the correlation headers,
sends them through an injected transport and turns non-2xx statuses into
StatusFailure. The client never retries and never logs; both are left to
the caller.
"""

import re
from collections.abc import AsyncIterable, Iterable, Mapping, Set
from typing import BinaryIO

import httpx

from monitor.client.headers import (
    CONTENT_TYPE_HEADER,
    apply_standard_headers,
    correlation_from_settings,
)
from monitor.client.transport import HTTPClient
from monitor.core.config import MonitorSettings
from monitor.core.http import create_http_client
from monitor.domain.exceptions import ConstructionError, StatusFailure, TransportFailure
from monitor.domain.models import CorrelationContext, MultipartFile, RawResponse

RequestBody = bytes | str | Iterable[bytes] | AsyncIterable[bytes] | BinaryIO | None

# RFC 9110 token
_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


class Client:
    """HTTP client bound to one transport, token and correlation context.

    Instances are immutable; use `with_token` / `with_correlation` to get a
    client with different values.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        token: str = "",
        correlation: CorrelationContext | None = None,
    ):
        self._http_client = http_client
        self._token = token
        self._correlation = correlation or CorrelationContext()

    @classmethod
    def from_settings(
        cls,
        http_client: HTTPClient | None = None,
        token: str = "",
        settings: MonitorSettings | None = None,
    ) -> "Client":
        """Client carrying the process-wide `FLOW` / `traceparent` values."""
        return cls(
            http_client or create_http_client(),
            token,
            correlation_from_settings(settings),
        )

    @property
    def token(self) -> str:
        return self._token

    @property
    def correlation(self) -> CorrelationContext:
        return self._correlation

    def with_token(self, token: str) -> "Client":
        return Client(self._http_client, token, self._correlation)

    def with_correlation(self, correlation: CorrelationContext) -> "Client":
        return Client(self._http_client, self._token, correlation)

    # -------------------------------------------------------------------------
    # Request building
    # -------------------------------------------------------------------------

    def build_request(
        self,
        method: str,
        url: str,
        body: RequestBody = None,
        *,
        headers: Mapping[str, str] | None = None,
        content_type: str | None = None,
        correlation: CorrelationContext | None = None,
    ) -> httpx.Request:
        """Build a request with the standard headers set.

        `headers` are applied last and overwrite any standard header of the
        same name. Raises ConstructionError for an invalid method, URL or
        body.
        """
        _check_method(method)
        if isinstance(body, (Mapping, Set)):
            raise ConstructionError(
                f"unsupported body type {type(body).__name__}",
                details={"method": method, "url": str(url)},
            )
        try:
            if hasattr(body, "read"):
                body = body.read()
            elif isinstance(body, Iterable) and not isinstance(body, (bytes, str)):
                # AsyncClient cannot stream a sync iterator
                body = b"".join(body)
            request = httpx.Request(method, url, content=body)
        except (httpx.InvalidURL, TypeError, OSError) as e:
            raise ConstructionError(
                f"failed to build request: {e}",
                details={"method": method, "url": str(url)},
            ) from e

        apply_standard_headers(request.headers, self._token, correlation or self._correlation)
        if content_type:
            request.headers[CONTENT_TYPE_HEADER] = content_type
        if headers:
            for name, value in headers.items():
                request.headers[name] = value

        return request

    def build_multipart_request(
        self,
        method: str,
        url: str,
        fields: Mapping[str, str],
        file: MultipartFile,
        *,
        correlation: CorrelationContext | None = None,
    ) -> httpx.Request:
        """Build a multipart/form-data request: `fields` first, then `file`.

        The body is encoded once and buffered in the request, so a field or
        file stream that fails surfaces here as ConstructionError.
        """
        _check_method(method)
        try:
            request = httpx.Request(
                method,
                url,
                data=dict(fields),
                files={file.field_name: (file.file_name, file.reader)},
            )
            request.read()
        except Exception as e:
            raise ConstructionError(
                f"failed to build multipart request: {e}",
                details={"method": method, "url": str(url), "file_name": file.file_name},
            ) from e

        # The body is buffered now, so its length is known
        request.headers.pop("Transfer-Encoding", None)
        request.headers["Content-Length"] = str(len(request.content))

        apply_standard_headers(request.headers, self._token, correlation or self._correlation)
        return request

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def execute(self, request: httpx.Request) -> bytes:
        """Send `request` and return the body of a 2xx response.

        Raises TransportFailure when sending or reading fails and
        StatusFailure (status and body) for any other status.
        """
        response = await self._send(request)
        if not response.is_success:
            raise StatusFailure(response.status_code, response.body)
        return response.body

    async def execute_raw(self, request: httpx.Request) -> RawResponse:
        """Send `request` and return status and body whatever the status."""
        return await self._send(request)

    async def do_request(
        self,
        method: str,
        url: str,
        body: RequestBody = None,
        *,
        headers: Mapping[str, str] | None = None,
        content_type: str | None = None,
        correlation: CorrelationContext | None = None,
    ) -> bytes:
        request = self.build_request(
            method,
            url,
            body,
            headers=headers,
            content_type=content_type,
            correlation=correlation,
        )
        return await self.execute(request)

    async def _send(self, request: httpx.Request) -> RawResponse:
        try:
            response = await self._http_client.send(request)
        except httpx.HTTPError as e:
            raise TransportFailure(str(e), cause=e) from e

        try:
            body = await response.aread()
        except httpx.HTTPError as e:
            raise TransportFailure(str(e), cause=e) from e
        finally:
            await response.aclose()

        return RawResponse(
            status_code=response.status_code,
            body=body,
            headers=dict(response.headers),
        )


def _check_method(method: str) -> None:
    if not isinstance(method, str) or not _METHOD_RE.fullmatch(method):
        raise ConstructionError(f"invalid method {method!r}", details={"method": method})
