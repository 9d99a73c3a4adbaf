"""Shared fixtures: isolated credential storage and a scripted HTTP transport"""

import json
import time
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs

import httpx
import pytest

from utils.storage import TokenStorage

CLIENT_ID = "test-client-id"
REDIRECT_URI = "http://127.0.0.1:8081/callback"
TOKEN_PATH = "/api/token"

Handler = Callable[[httpx.Request], httpx.Response]


def now_ms() -> int:
    return int(time.time() * 1000)


def form_of(request: httpx.Request) -> Dict[str, str]:
    """Decode a form-encoded request body into a flat dict"""
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


def json_of(request: httpx.Request):
    return json.loads(request.content.decode())


class FakeSpotify:
    """Routes requests by (method, path) and records every call

    Routes map to a Response, or to a callable taking the request.
    Unknown routes answer 404 with a Spotify-style error body.
    """

    def __init__(self, routes: Optional[Dict[Tuple[str, str], object]] = None):
        self.routes = dict(routes or {})
        self.calls: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": {"status": 404, "message": "Not found"}})
        if callable(route):
            return route(request)
        return route

    def calls_to(self, path: str) -> List[httpx.Request]:
        return [call for call in self.calls if call.url.path == path]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def storage(tmp_path) -> TokenStorage:
    return TokenStorage(
        token_file=str(tmp_path / "auth.json"),
        pkce_file=str(tmp_path / "pkce_verifier.json"),
    )


@pytest.fixture
def fake_spotify() -> FakeSpotify:
    return FakeSpotify()


def stored_auth(access_token="stored-token", refresh_token="stored-refresh", expires_in_ms=3_600_000):
    """Serialized StoredAuth as it lives on disk"""
    data = {"accessToken": access_token, "expiresAt": now_ms() + expires_in_ms}
    if refresh_token:
        data["refreshToken"] = refresh_token
    return data


def token_response(access_token="new-token", refresh_token="new-refresh", expires_in=3600):
    body = {"access_token": access_token, "token_type": "Bearer", "expires_in": expires_in}
    if refresh_token:
        body["refresh_token"] = refresh_token
    return httpx.Response(200, json=body)


def profile_response(user_id="user-1", display_name="Test User"):
    return httpx.Response(200, json={"id": user_id, "display_name": display_name, "country": "NL"})
