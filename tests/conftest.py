"""Shared fixtures: a scriptable chat client and an in-process HTTP client."""

import contextlib
from collections import defaultdict

import pytest
from aiohttp.test_utils import TestClient, TestServer

from wa_bridge.session_manager.manager import SessionManager, create_app
from wa_bridge.session_manager.mirror import SessionMirror


def fake_encode(code: str) -> str:
    return f"data:image/png;base64,encoded-{code}"


class FakeChatClient:
    """Implements the chat client contract without a browser."""

    def __init__(self, chats=None):
        self.handlers = defaultdict(list)
        self.chats = chats or []
        self.chats_error = None
        self.initialize_error = None
        self.destroy_error = None
        self.initialize_calls = 0
        self.destroy_calls = 0

    def on(self, event, handler):
        self.handlers[event].append(handler)

    async def emit(self, event, *args):
        for handler in self.handlers[event]:
            await handler(*args)

    async def initialize(self):
        self.initialize_calls += 1
        if self.initialize_error is not None:
            raise self.initialize_error

    async def destroy(self):
        self.destroy_calls += 1
        if self.destroy_error is not None:
            raise self.destroy_error

    async def get_chats(self):
        if self.chats_error is not None:
            raise self.chats_error
        return self.chats


@pytest.fixture
def fake_client():
    return FakeChatClient()


@pytest.fixture
def manager(fake_client):
    return SessionManager(
        fake_client,
        mirror=SessionMirror(encoder=fake_encode),
        reconnect_delay=0.05,
    )


@contextlib.asynccontextmanager
async def bridge_client(manager, public_dir=None):
    app = create_app(manager, public_dir=public_dir)
    async with TestClient(TestServer(app)) as client:
        yield client
