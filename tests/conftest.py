"""Pytest configuration and fixtures."""

import logging
import urllib.parse
from dataclasses import dataclass

import httpx
import pytest

from learnworlds.auth.oauth2 import OAuth2Client
from learnworlds.clients.learnworlds_client import LearnWorldsClient
from learnworlds.config import LearnWorldsConfig

TOKEN_PATH = "/oauth2/token"
REVOKE_PATH = "/oauth2/revoke"


@dataclass
class RecordedRequest:
    """Copy of a request as it looked when it reached the server."""

    method: str
    host: str
    path: str
    params: dict
    headers: dict
    content: bytes = b""

    @property
    def form(self) -> dict:
        return dict(urllib.parse.parse_qsl(self.content.decode()))

    @property
    def text(self) -> str:
        return self.content.decode()


class MockServer:
    """Scripted fake server behind an httpx.MockTransport.

    Responses are queued per (method, path). Each queued item is a
    (status, body) tuple, or a callable taking the request (which may
    raise). The last item of a queue is reused once the others are used.
    """

    def __init__(self):
        self.requests: list[RecordedRequest] = []
        self._routes: dict[tuple[str, str], list] = {}

    def add(self, method: str, path: str, *responses) -> None:
        self._routes.setdefault((method, path), []).extend(responses)

    def calls(self, method: str, path: str) -> list[RecordedRequest]:
        return [r for r in self.requests if r.method == method and r.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(
            RecordedRequest(
                method=request.method,
                host=request.url.host,
                path=request.url.path,
                params=dict(request.url.params),
                headers=dict(request.headers),
                content=request.content,
            )
        )

        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "No route"})

        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(item):
            return item(request)

        status, body = item
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def token_body(access_token="new-access", refresh_token=None, expires_in=3600, **extra):
    """Token endpoint response body."""
    body = {
        "access_token": access_token,
        "token_type": "Bearer",
        "expires_in": expires_in,
    }
    if refresh_token is not None:
        body["refresh_token"] = refresh_token
    body.update(extra)
    return body


def envelope(data=None, success=True, **extra):
    """API response envelope."""
    return {"success": success, "data": data, **extra}


@pytest.fixture
def server():
    """Fresh scripted server."""
    return MockServer()


@pytest.fixture
def config():
    """Configuration for a test school."""
    return LearnWorldsConfig(
        school_domain="testschool",
        api_host="api.testschool.learnworlds.com",
        client_id="cid",
        client_secret="secret",
        redirect_uri="https://app.com/cb",
    )


@pytest.fixture
def oauth(config, server):
    """OAuth2 client talking to the scripted server."""
    return OAuth2Client(config, transport=server.transport)


@pytest.fixture
def client(config, server):
    """LearnWorlds client talking to the scripted server."""
    return LearnWorldsClient(config, transport=server.transport)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo setup_logging() changes made by a test."""
    package_logger = logging.getLogger("learnworlds")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate
