"""
Shared test fixtures and configuration.
"""

import asyncio
import os

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-key")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("SESSION_CLEANUP_INTERVAL_SECONDS", "3600")

from chat_proxy.llm.base import LLMProvider, LLMResult  # noqa: E402


class FakeClock:
    """Manually advanced epoch-seconds clock."""

    def __init__(self, now: float = 1_700_000_000):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLLMProvider(LLMProvider):
    """In-memory provider that echoes the user text unless told otherwise."""

    def __init__(self, delay: float = 0.0):
        super().__init__(api_key="test", model="fake-model")
        self.delay = delay
        self.calls = []
        self.results = []
        self.error = None
        self.closed = False

    async def send(self, history, new_user_text, model=None, max_tokens=None, temperature=None):
        self.calls.append({
            "history": tuple(history),
            "text": new_user_text,
            "model": model,
            "temperature": temperature,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.results:
            return self.results.pop(0)
        return LLMResult.success(f"echo: {new_user_text}", model="fake-model")

    async def aclose(self):
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_provider():
    return FakeLLMProvider()

