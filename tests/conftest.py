"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - mock_session_id: Consistent session ID for tests
    - client_config: Config pointing at a fake backend
    - fake_backend: Scriptable MockTransport handler
    - conversation_api: ConversationApi wired to fake_backend
"""

from collections.abc import AsyncGenerator

import httpx
import pytest

from formchat.client.config import ClientConfig
from formchat.client.conversation import ConversationApi
from formchat.client.http import ApiClient
from tests.helpers import FakeBackend


@pytest.fixture
def mock_session_id() -> str:
    """Generate consistent session ID for testing.

    Returns:
        Predictable session ID for test assertions.
    """
    return "test-session-12345"


@pytest.fixture
def client_config() -> ClientConfig:
    """Return config for an authenticated client against the fake backend."""
    return ClientConfig(api_url="http://test/api", api_token="tok-123")


@pytest.fixture
def fake_backend(mock_session_id: str) -> FakeBackend:
    return FakeBackend(mock_session_id)


@pytest.fixture
async def conversation_api(
    fake_backend: FakeBackend, client_config: ClientConfig
) -> AsyncGenerator[ConversationApi]:
    """Create a ConversationApi whose HTTP traffic goes to fake_backend.

    Yields:
        ConversationApi backed by an httpx MockTransport.
    """
    transport = httpx.MockTransport(fake_backend.handler)
    async with httpx.AsyncClient(transport=transport) as http_client:
        yield ConversationApi(ApiClient(client_config, client=http_client))
