"""
Request shapes understood by a GoGoMedia-compatible server

    POST   /register             {username, password}
    POST   /login                {username, password}   -> {auth_token}
    GET    /logout               Authorization header
    GET    /user/{name}/media                           -> {data: [records]}
    PUT    /user/{name}/media    record or [records]    -> {data: record | [records]}
    DELETE /user/{name}/media    record

Add and update share the PUT endpoint; the server tells them apart by the
payload (a record without an id is created).
"""

from typing import Sequence
from urllib.parse import quote

from gogomedia.api.transport import ApiRequest
from gogomedia.models import MediaRecord, serialize_records

JSON_HEADERS = {'Content-Type': 'application/json'}


def auth_headers(token: str, scheme: str = "JWT", json_body: bool = False) -> dict[str, str]:
    headers = {'Authorization': f"{scheme} {token}"}
    if json_body:
        headers.update(JSON_HEADERS)
    return headers


def media_path(username: str) -> str:
    return f"/user/{quote(username, safe='')}/media"


def register_request(username: str, password: str) -> ApiRequest:
    return ApiRequest(
        'POST', '/register',
        headers=dict(JSON_HEADERS),
        body={'username': username, 'password': password},
    )


def login_request(username: str, password: str) -> ApiRequest:
    return ApiRequest(
        'POST', '/login',
        headers=dict(JSON_HEADERS),
        body={'username': username, 'password': password},
    )


def logout_request(token: str, scheme: str = "JWT") -> ApiRequest:
    return ApiRequest('GET', '/logout', headers=auth_headers(token, scheme))


def fetch_media_request(username: str, token: str, scheme: str = "JWT") -> ApiRequest:
    return ApiRequest('GET', media_path(username), headers=auth_headers(token, scheme))


def put_media_request(
    username: str,
    token: str,
    records: MediaRecord | Sequence[MediaRecord],
    scheme: str = "JWT",
) -> ApiRequest:
    """Create or update one or many records."""
    return ApiRequest(
        'PUT', media_path(username),
        headers=auth_headers(token, scheme, json_body=True),
        body=serialize_records(records),
    )


def delete_media_request(
    username: str,
    token: str,
    record: MediaRecord,
    scheme: str = "JWT",
) -> ApiRequest:
    # The record identity travels in the body, not the URL
    return ApiRequest(
        'DELETE', media_path(username),
        headers=auth_headers(token, scheme, json_body=True),
        body=record.to_api_data(),
    )
