"""
Request transport for the media service

The session and cache layers never touch HTTP directly. They describe a call
as an ApiRequest and hand it to a RequestTransport, which either returns the
decoded JSON envelope of a successful response or raises TransportError.

The service answers every call with a JSON envelope:

    {"success": true, "message": "...", "data": ..., "auth_token": "..."}

`data` and `auth_token` are present only on the calls that return them. On
failure the envelope's `message` is the text shown to the user.

AiohttpTransport is the production implementation. It owns one
aiohttp.ClientSession, created lazily inside the running event loop and
released by `close()` or by leaving `async with`.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Protocol

from aiohttp import ClientResponse, ClientSession, ClientTimeout, client_exceptions

from gogomedia.core.exceptions import TransportError
from gogomedia.core.logger import get_logger


@dataclass(frozen=True)
class ApiRequest:
    """
    One call to the media service

    Attributes:
        method: HTTP verb ("GET", "POST", "PUT", "DELETE").
        path: Path below the service's base URL, starting with "/".
        headers: Request headers.
        body: JSON-serializable body, or None for no body.
    """
    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None


class RequestTransport(Protocol):
    """Executes ApiRequests against the media service."""

    async def send(self, request: ApiRequest) -> dict[str, Any]:
        """
        Execute `request` and return the decoded response envelope.

        Raises:
            TransportError: On any non-2xx status or network failure.
        """


def _envelope_message(payload: dict[str, Any]) -> str | None:
    message = payload.get('message')
    return str(message) if message else None


class AiohttpTransport:
    """
    RequestTransport over aiohttp

    Attributes:
        base_url: Root URL the request paths are joined to
        timeout: Total seconds allowed per request
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        session: ClientSession | None = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.logger = get_logger(__name__)
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=ClientTimeout(total=self.timeout))
            self._owns_session = True
        return self._session

    async def _read_payload(self, response: ClientResponse) -> dict[str, Any]:
        """Decode the JSON envelope; an empty or non-JSON body decodes to {}."""
        try:
            data = await response.json(content_type=None)
        except ValueError:
            return {}
        if data is None:
            return {}
        if not isinstance(data, dict):
            # A bare JSON value is treated as the envelope's data member
            return {'data': data}
        return data

    async def send(self, request: ApiRequest) -> dict[str, Any]:
        url = f"{self.base_url}{request.path}"
        kwargs: dict[str, Any] = {'headers': request.headers}
        if request.body is not None:
            kwargs['json'] = request.body

        self.logger.debug(f"{request.method} {url}")
        try:
            async with self._get_session().request(request.method, url, **kwargs) as response:
                payload = await self._read_payload(response)
                if response.status >= 400:
                    raise TransportError(
                        response.status,
                        _envelope_message(payload) or response.reason or f"HTTP {response.status}",
                        details={"method": request.method, "url": url}
                    )
                return payload
        except asyncio.TimeoutError as e:
            raise TransportError(
                0,
                f"Request timed out after {self.timeout}s",
                details={"method": request.method, "url": url}
            ) from e
        except client_exceptions.ClientError as e:
            raise TransportError(
                0,
                str(e) or type(e).__name__,
                details={"method": request.method, "url": url}
            ) from e

    async def close(self) -> None:
        """Release the HTTP session if this transport created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> 'AiohttpTransport':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
