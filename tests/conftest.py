"""Pytest configuration and fixtures for memorystack-openclaw tests."""

import pytest

from memorystack_openclaw import MemoryStackClient


@pytest.fixture
def base_url() -> str:
    """Test base URL."""
    return "http://test.memorystack.app"


@pytest.fixture
def api_url(base_url: str) -> str:
    """Base URL of the versioned API."""
    return f"{base_url}/api/v1"


@pytest.fixture
def api_key() -> str:
    """Test API key."""
    return "test_api_key"


@pytest.fixture
def client(base_url: str, api_key: str) -> MemoryStackClient:
    """Create test client (not yet connected)."""
    return MemoryStackClient(api_key=api_key, base_url=base_url)


@pytest.fixture
def turn_context() -> dict:
    """Normalized context of a subagent turn in a group chat."""
    return {
        "sessionKey": "agent:research:subagent:Sub-42",
        "agentId": "research",
        "subagentId": "Sub-42",
        "userId": "user_7",
        "teamId": "group_1",
        "conversationId": "channel_9",
        "Provider": "anthropic",
        "Model": "claude",
        "SenderName": "Ada",
    }
