"""Shared test fixtures and configuration for pytest."""

import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

import pytest
from mcp.shared.memory import create_connected_server_and_client_session

# Set test environment variables before importing app modules
os.environ["LOG_LEVEL"] = "ERROR"

from config.settings import Settings
from mcp_client.client import SendRequestMCPClient
from mcp_server.capabilities import CapabilityServer
from mcp_server.send_request_server import create_server


# ==================== Server Fixtures ====================


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a short outbound timeout."""
    return Settings(_env_file=None, request_timeout_seconds=2.0)


@pytest.fixture
def capability_server(test_settings) -> CapabilityServer:
    """Fully registered server, not yet connected to any transport."""
    return create_server(test_settings)


@pytest.fixture
def connected_client(capability_server):
    """Factory for a client wired to ``capability_server`` through in-memory streams.

    The session must be opened inside the test body so that the SDK task group
    enters and exits in the same task.
    """

    @asynccontextmanager
    async def _connect() -> AsyncIterator[SendRequestMCPClient]:
        async with create_connected_server_and_client_session(capability_server.server) as session:
            yield SendRequestMCPClient.from_session(session)

    return _connect


# ==================== Environment Fixtures ====================


@pytest.fixture(autouse=True)
def test_env():
    """Ensure test environment variables are set for all tests."""
    original_env = os.environ.copy()

    os.environ.update({
        "LOG_LEVEL": "ERROR",  # Reduce noise in tests
    })

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def temp_env(monkeypatch):
    """Fixture for temporarily modifying environment variables."""
    def set_env(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key, value)

    return set_env


# ==================== Data Fixtures ====================


@pytest.fixture
def sample_payload() -> dict:
    """Typical JSON body returned by a wrapped API."""
    return {
        "code": 0,
        "data": {"id": 1, "name": "示例", "tags": ["a", "b"]},
    }
