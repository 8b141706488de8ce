"""Test the aiohttp transport and request construction"""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from gogomedia.api import requests as api
from gogomedia.api.transport import AiohttpTransport, ApiRequest
from gogomedia.core.exceptions import TransportError
from gogomedia.models import MediaRecord


class TestRequests:
    """Test request shapes"""

    def test_login_request(self):
        request = api.login_request("alice", "pw")

        assert request.method == "POST"
        assert request.path == "/login"
        assert request.body == {"username": "alice", "password": "pw"}
        assert "Authorization" not in request.headers

    def test_logout_request_carries_token(self):
        request = api.logout_request("T1")

        assert request.method == "GET"
        assert request.headers == {"Authorization": "JWT T1"}
        assert request.body is None

    def test_custom_auth_scheme(self):
        request = api.fetch_media_request("alice", "T1", scheme="Bearer")

        assert request.headers["Authorization"] == "Bearer T1"

    def test_media_path_is_quoted(self):
        assert api.media_path("al ice/x") == "/user/al%20ice%2Fx/media"

    def test_delete_request_body_is_the_record(self):
        record = MediaRecord(id=4, name="Song D", extra={"type": "song"})

        request = api.delete_media_request("alice", "T1", record)

        assert request.method == "DELETE"
        assert request.path == "/user/alice/media"
        assert request.body == {"id": 4, "name": "Song D", "type": "song"}


async def echo(request):
    body = await request.json() if request.can_read_body else None
    return web.json_response({
        "success": True,
        "data": {
            "method": request.method,
            "authorization": request.headers.get("Authorization"),
            "body": body,
        },
    })


async def rejected(request):
    return web.json_response({"success": False, "message": "token expired"}, status=401)


async def plain_error(request):
    return web.Response(status=500, text="<html>oops</html>")


async def empty(request):
    return web.Response(status=200)


async def bare_list(request):
    return web.json_response([1, 2])


async def slow(request):
    await asyncio.sleep(1)
    return web.json_response({"success": True})


@pytest_asyncio.fixture
async def base_url():
    app = web.Application()
    app.router.add_route('*', '/echo', echo)
    app.router.add_get('/rejected', rejected)
    app.router.add_get('/plain-error', plain_error)
    app.router.add_get('/empty', empty)
    app.router.add_get('/bare-list', bare_list)
    app.router.add_get('/slow', slow)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url('/'))
    finally:
        await server.close()


class TestAiohttpTransport:

    @pytest.mark.asyncio
    async def test_sends_json_body_and_headers(self, base_url):
        async with AiohttpTransport(base_url) as transport:
            payload = await transport.send(ApiRequest(
                "PUT", "/echo",
                headers=api.auth_headers("T1", json_body=True),
                body={"name": "Song A"},
            ))

        assert payload["success"] is True
        assert payload["data"] == {
            "method": "PUT",
            "authorization": "JWT T1",
            "body": {"name": "Song A"},
        }

    @pytest.mark.asyncio
    async def test_error_status_uses_envelope_message(self, base_url):
        """Test that the server's message becomes the error text"""
        async with AiohttpTransport(base_url) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.send(ApiRequest("GET", "/rejected"))

        assert exc_info.value.status == 401
        assert exc_info.value.message == "token expired"
        assert exc_info.value.is_unauthorized

    @pytest.mark.asyncio
    async def test_error_without_json_uses_reason(self, base_url):
        async with AiohttpTransport(base_url) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.send(ApiRequest("GET", "/plain-error"))

        assert exc_info.value.status == 500
        assert exc_info.value.message == "Internal Server Error"
        assert not exc_info.value.is_unauthorized

    @pytest.mark.asyncio
    async def test_missing_route(self, base_url):
        async with AiohttpTransport(base_url) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.send(ApiRequest("GET", "/nowhere"))

        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_empty_body_decodes_to_empty_envelope(self, base_url):
        async with AiohttpTransport(base_url) as transport:
            assert await transport.send(ApiRequest("GET", "/empty")) == {}

    @pytest.mark.asyncio
    async def test_bare_json_value_becomes_data(self, base_url):
        async with AiohttpTransport(base_url) as transport:
            assert await transport.send(ApiRequest("GET", "/bare-list")) == {"data": [1, 2]}

    @pytest.mark.asyncio
    async def test_timeout_has_status_zero(self, base_url):
        """Test request timeout"""
        async with AiohttpTransport(base_url, timeout=0.1) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.send(ApiRequest("GET", "/slow"))

        assert exc_info.value.status == 0
        assert "timed out" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_failure_has_status_zero(self, unused_tcp_port):
        async with AiohttpTransport(f"http://127.0.0.1:{unused_tcp_port}") as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.send(ApiRequest("GET", "/echo"))

        assert exc_info.value.status == 0
        assert exc_info.value.details["url"].endswith("/echo")

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, base_url):
        transport = AiohttpTransport(base_url)
        await transport.send(ApiRequest("GET", "/empty"))

        await transport.close()
        await transport.close()

        assert transport._session is None
