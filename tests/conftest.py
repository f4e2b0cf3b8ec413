"""Pytest configuration and shared fixtures."""

from typing import Callable

import pytest
from fastapi.testclient import TestClient

from roomrelay.app import create_app
from roomrelay.client import Client
from roomrelay.config import Settings
from roomrelay.registry import ClientRegistry
from roomrelay.relay import MessageRouter
from roomrelay.room import RoomManager

from .helpers import FakeConnection


@pytest.fixture
def make_client() -> Callable[..., Client]:
    """Factory for clients backed by a :class:`FakeConnection`."""

    def _make(identity: str, fail: bool = False) -> Client:
        return Client(identity, FakeConnection(fail=fail))

    return _make


@pytest.fixture
def registry() -> ClientRegistry:
    return ClientRegistry()


@pytest.fixture
def message_router(registry: ClientRegistry) -> MessageRouter:
    return MessageRouter(registry)


@pytest.fixture
def rooms() -> RoomManager:
    return RoomManager()


@pytest.fixture
def test_client():
    """TestClient with the lifespan running so ``app.state.relay`` exists."""
    app = create_app(Settings(host="127.0.0.1", port=0, log_level="DEBUG", cors_origins=["*"]))
    with TestClient(app) as client:
        yield client
