"""Transport boundary: request descriptions and the aiohttp transport."""

from gogomedia.api.transport import AiohttpTransport, ApiRequest, RequestTransport

__all__ = [
    "ApiRequest",
    "RequestTransport",
    "AiohttpTransport",
]
