"""
Pytest configuration and fixtures
"""
import io

import pytest

from quotes_cli.api.output import ConsoleOutput
from quotes_cli.llm.provider_config import ProviderSettings
from tests.fakes import MemoryStore


@pytest.fixture
def console():
    """Uncolored console writing to an in-memory stream."""
    return ConsoleOutput(stream=io.StringIO(), color=False)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def openai_settings():
    return ProviderSettings(
        name="openai",
        url="https://api.openai.com/v1/chat/completions",
        api_key="sk-test",
        model="gpt-4",
        max_words=10,
        rate_limit_headers=("x-ratelimit-remaining-requests", "retry-after"),
    )


@pytest.fixture
def anthropic_settings():
    return ProviderSettings(
        name="anthropic",
        url="https://api.anthropic.com/v1/messages",
        api_key="ak-test",
        model="claude-3-haiku-20240307",
        max_words=5,
        max_tokens=100,
        rate_limit_headers=("x-ratelimit-remaining", "retry-after"),
    )
