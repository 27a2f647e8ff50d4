"""
Pytest fixtures for ranging broker tests.

The directory service is replaced by an httpx.MockTransport and the ranging
capability by an in-memory fake.
"""

import base64
import json
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from ranging_broker.capability.base import CapabilityDelegate
from ranging_broker.core.coordinator import SessionCoordinator
from ranging_broker.directory.client import TokenDirectoryClient
from ranging_broker.protocol.tokens import DiscoveryToken

BASE_URL = "https://directory.test"


class FakeCapability:
    """In-memory ranging capability recording every call."""

    def __init__(self, supported: bool = True, token: bytes | None = b"local-token"):
        self.supported = supported
        self.token = DiscoveryToken(token) if token else None
        self.delegate: CapabilityDelegate | None = None
        self.started_with: list[DiscoveryToken] = []
        self.invalidate_calls = 0

    def is_supported(self) -> bool:
        return self.supported

    def local_token(self) -> DiscoveryToken | None:
        return self.token

    def set_delegate(self, delegate: CapabilityDelegate | None) -> None:
        self.delegate = delegate

    def start(self, peer_token: DiscoveryToken) -> None:
        self.started_with.append(peer_token)

    def invalidate(self) -> None:
        self.invalidate_calls += 1


class DirectoryStub:
    """
    Minimal key-value directory behind httpx.MockTransport.

    Set ``override`` to an httpx.Response (or an async callable taking the
    request) to answer the next requests differently.
    """

    def __init__(self, first_id: int = 42):
        self.entries: dict[int, str] = {}
        self.requests: list[httpx.Request] = []
        self.override = None
        self._next_id = first_id

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.override is not None:
            if isinstance(self.override, httpx.Response):
                return self.override
            return await self.override(request)

        if request.method == "POST":
            token = json.loads(request.content)["token"]
            token_id = self._next_id
            self._next_id += 1
            self.entries[token_id] = token
            return httpx.Response(
                200,
                json={"id": token_id, "token": token, "success": True},
            )

        token_id = int(request.url.path.strip("/"))
        if token_id not in self.entries:
            return httpx.Response(200, json={"success": False})
        return httpx.Response(
            200,
            json={"id": token_id, "token": self.entries[token_id], "success": True},
        )

    def put(self, token_id: int, data: bytes) -> None:
        self.entries[token_id] = base64.b64encode(data).decode("ascii")


@pytest.fixture
def directory_stub():
    """Fresh directory contents per test."""
    return DirectoryStub()


@pytest_asyncio.fixture
async def directory(directory_stub) -> AsyncGenerator[TokenDirectoryClient, None]:
    """Directory client wired to the stub."""
    client = TokenDirectoryClient(
        base_url=BASE_URL,
        transport=httpx.MockTransport(directory_stub),
    )
    yield client
    await client.close()


@pytest.fixture
def capability():
    return FakeCapability()


@pytest_asyncio.fixture
async def coordinator(capability, directory) -> AsyncGenerator[SessionCoordinator, None]:
    """Prepared coordinator on the fake capability."""
    coord = SessionCoordinator(capability, directory)
    coord.prepare()
    yield coord
    coord.invalidate()
