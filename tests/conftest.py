"""Shared fixtures: a scripted ``AsyncOpenAI`` fake and credential isolation."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from speaking_api.config.settings import settings  # noqa: E402
from speaking_api.services import openai_client  # noqa: E402
from tests.fakes import FakeAsyncOpenAI, FakeOpenAIBackend  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_credentials(monkeypatch: pytest.MonkeyPatch):
    """Keep keys from the developer's shell or .env out of the tests."""

    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(settings.openai, "api_key", None)
    openai_client.get_client_registry().reset()
    yield
    openai_client.get_client_registry().reset()


@pytest.fixture
def fake_openai(monkeypatch: pytest.MonkeyPatch) -> FakeOpenAIBackend:
    backend = FakeOpenAIBackend()

    def factory(**kwargs: Any) -> FakeAsyncOpenAI:
        return FakeAsyncOpenAI(backend, **kwargs)

    monkeypatch.setattr(openai_client, "AsyncOpenAI", factory)
    return backend


@pytest.fixture
def api_key(monkeypatch: pytest.MonkeyPatch) -> str:
    key = "sk-test-key"
    monkeypatch.setenv("OPENAI_API_KEY", key)
    return key
