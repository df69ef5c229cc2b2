import json

import httpx
import pytest

from alexandria_client.client import AlexandriaClient


class StubServer:
    """In-memory Alexandria server answering from a (method, path) route table."""

    def __init__(self) -> None:
        self.routes = {}
        self.requests = []

    def add(self, method: str, path: str, json_body=None, status: int = 200, content: bytes | None = None) -> None:
        if content is None:
            content = json.dumps(json_body).encode("utf-8")
        self.routes[(method.upper(), path)] = (status, content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, content = self.routes.get((request.method, request.url.path), (404, b""))
        return httpx.Response(status, content=content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def stub_server():
    return StubServer()


@pytest.fixture
def client(stub_server):
    return AlexandriaClient("alexandria.test", transport=stub_server.transport)


@pytest.fixture
def authed(stub_server, client):
    stub_server.add("GET", "/auth", None)
    session = client.authenticate("librarian", "hunter2")
    stub_server.requests.clear()
    return session


@pytest.fixture
def sample_book_data():
    return {
        "isbn": "9780199535675",
        "title": "Ulysses",
        "author": "James Joyce",
        "description": None,
        "cover_url": None,
        "count": 3,
        "available": 2,
    }
