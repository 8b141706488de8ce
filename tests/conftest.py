"""Test configuration and fixtures"""

import asyncio
import json
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from gogomedia.api.transport import ApiRequest
from gogomedia.client import MediaClient
from gogomedia.core.exceptions import CredentialStoreError, TransportError
from gogomedia.models import MediaRecord
from gogomedia.storage.credentials import TOKEN_KEY, USERNAME_KEY, MemoryCredentialStore


class FakeTransport:
    """
    Scripted RequestTransport

    Responses are registered per (method, path). Each call consumes the next
    scripted response; once the script runs out the last consumed response
    keeps answering. A response may be gated on an asyncio.Event to control
    the order in which replies arrive.
    """

    def __init__(self):
        self.requests: list[ApiRequest] = []
        self._script: dict[tuple[str, str], list[tuple]] = {}
        self._last: dict[tuple[str, str], tuple] = {}
        self.closed = False

    def respond(self, method, path, payload=None, error=None, gate=None):
        self._script.setdefault((method, path), []).append((payload, error, gate))
        return self

    def fail(self, method, path, status, message, gate=None):
        return self.respond(method, path, error=TransportError(status, message), gate=gate)

    def calls(self, method=None, path=None):
        return [
            request for request in self.requests
            if (method is None or request.method == method)
            and (path is None or request.path == path)
        ]

    async def send(self, request: ApiRequest):
        self.requests.append(request)
        key = (request.method, request.path)
        script = self._script.get(key)
        if script:
            self._last[key] = script.pop(0)
        elif key not in self._last:
            raise AssertionError(f"Unexpected request: {request.method} {request.path}")
        payload, error, gate = self._last[key]
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if error is not None:
            raise error
        return payload if payload is not None else {"success": True}

    async def close(self):
        self.closed = True


class FailingCredentialStore(MemoryCredentialStore):
    """Memory store whose writes to the chosen keys fail"""

    def __init__(self, initial=None, set_fails=(), remove_fails=()):
        super().__init__(initial)
        self.set_fails = set(set_fails)
        self.remove_fails = set(remove_fails)

    def set(self, key, value):
        if key in self.set_fails:
            raise CredentialStoreError("Failed to write credential file: disk full")
        super().set(key, value)

    def remove(self, key):
        if key in self.remove_fails:
            raise CredentialStoreError("Failed to write credential file: disk full")
        super().remove(key)


MEDIA_PATH = "/user/alice/media"


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def logged_in_store():
    """Credential store holding a session for alice"""
    return MemoryCredentialStore({TOKEN_KEY: "T1", USERNAME_KEY: "alice"})


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport, store):
    """Client with no stored session"""
    return MediaClient(transport, store)


@pytest.fixture
def alice(transport, logged_in_store):
    """Client resuming alice's stored session"""
    return MediaClient(transport, logged_in_store)


@pytest.fixture
def song_a():
    return MediaRecord(id=1, name="Song A", extra={"type": "song"})


@pytest.fixture
def song_b():
    return MediaRecord(id=2, name="Song B", extra={"type": "song"})


@pytest.fixture
def movie_c():
    return MediaRecord(id=3, name="Movie C", extra={"type": "movie", "watched": False})


class MediaServer:
    """
    In-memory GoGoMedia-compatible service on aiohttp.web

    Tokens are issued as "T1", "T2", ... and media ids count up from 1.
    """

    def __init__(self):
        self.users: dict[str, str] = {}
        self.tokens: dict[str, str] = {}
        self.media: dict[str, list[dict]] = {}
        self.next_id = 1
        self.issued = 0

        self.app = web.Application()
        self.app.router.add_post('/register', self.register)
        self.app.router.add_post('/login', self.login)
        self.app.router.add_get('/logout', self.logout)
        self.app.router.add_get('/user/{name}/media', self.get_media)
        self.app.router.add_put('/user/{name}/media', self.put_media)
        self.app.router.add_delete('/user/{name}/media', self.delete_media)

    @staticmethod
    def reply(status=200, message=None, **extra):
        body = {"success": status < 400, **extra}
        if message:
            body["message"] = message
        return web.json_response(body, status=status)

    def caller(self, request):
        scheme, _, token = request.headers.get('Authorization', '').partition(' ')
        if scheme != 'JWT' or token not in self.tokens:
            raise web.HTTPUnauthorized(
                text=json.dumps({"success": False, "message": "token expired"}),
                content_type='application/json',
            )
        return self.tokens[token]

    def owner(self, request):
        name = self.caller(request)
        if request.match_info['name'] != name:
            raise web.HTTPForbidden(
                text=json.dumps({"success": False, "message": "forbidden"}),
                content_type='application/json',
            )
        return self.media.setdefault(name, [])

    async def register(self, request):
        body = await request.json()
        if body['username'] in self.users:
            return self.reply(409, "user already exists")
        self.users[body['username']] = body['password']
        return self.reply(message="registered")

    async def login(self, request):
        body = await request.json()
        if self.users.get(body['username']) != body['password']:
            return self.reply(403, "bad credentials")
        self.issued += 1
        token = f"T{self.issued}"
        self.tokens[token] = body['username']
        return self.reply(auth_token=token)

    async def logout(self, request):
        self.caller(request)
        token = request.headers['Authorization'].partition(' ')[2]
        del self.tokens[token]
        return self.reply(message="logged out")

    async def get_media(self, request):
        return self.reply(data=self.owner(request))

    def _store(self, records, item):
        if 'id' not in item:
            created = {**item, 'id': self.next_id}
            self.next_id += 1
            records.insert(0, created)
            return created
        for index, existing in enumerate(records):
            if existing['id'] == item['id']:
                records[index] = item
        return item

    async def put_media(self, request):
        records = self.owner(request)
        body = await request.json()
        if isinstance(body, list):
            return self.reply(data=[self._store(records, item) for item in body])
        return self.reply(data=self._store(records, body))

    async def delete_media(self, request):
        records = self.owner(request)
        body = await request.json()
        records[:] = [item for item in records if item['id'] != body.get('id')]
        return self.reply(message="deleted")


@pytest_asyncio.fixture
async def media_server():
    """Running MediaServer; yields (server, base_url)"""
    server = MediaServer()
    test_server = test_utils.TestServer(server.app)
    await test_server.start_server()
    try:
        yield server, str(test_server.make_url('/'))
    finally:
        await test_server.close()
