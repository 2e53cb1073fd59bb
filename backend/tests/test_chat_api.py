"""API tests for /api/chat with the Anthropic client replaced by fakes."""

from types import SimpleNamespace

import anthropic
import httpx
import pytest
from fastapi.testclient import TestClient

from flowquest.main import create_app
from flowquest.middleware.rate_limit import limiter
from flowquest.services import ai_client

MESSAGES = [
    {"role": "system", "content": "You are a barista."},
    {"role": "user", "content": "Hi!"},
]


@pytest.fixture
def configured_client(settings):
    app = create_app(settings.model_copy(update={"ANTHROPIC_API_KEY": "test-key"}))
    with TestClient(app) as c:
        yield c


def fake_anthropic(monkeypatch, create):
    """Swap anthropic.AsyncAnthropic for a client whose messages.create is ``create``."""
    calls = []

    class FakeAsyncAnthropic:
        def __init__(self, api_key):
            self.messages = SimpleNamespace(create=self._create)

        async def _create(self, **kwargs):
            calls.append(kwargs)
            return await create(**kwargs)

        async def close(self):
            pass

    monkeypatch.setattr(ai_client.anthropic, "AsyncAnthropic", FakeAsyncAnthropic)
    return calls


def status_error(cls, status):
    response = httpx.Response(status, request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))
    return cls("provider said no", response=response, body=None)


class TestChatProxy:

    def test_reply_is_returned(self, configured_client, monkeypatch):
        async def create(**kwargs):
            return SimpleNamespace(content=[SimpleNamespace(type="text", text="Hello! What can I get you?")])

        calls = fake_anthropic(monkeypatch, create)
        res = configured_client.post("/api/chat", json={"messages": MESSAGES, "max_tokens": 50})

        assert res.status_code == 200
        assert res.json()["data"]["message"] == "Hello! What can I get you?"
        assert calls[0]["system"] == "You are a barista."
        assert calls[0]["messages"] == [{"role": "user", "content": "Hi!"}]
        assert calls[0]["max_tokens"] == 50
        assert calls[0]["temperature"] == 0.7

    def test_missing_credential(self, client):
        res = client.post("/api/chat", json={"messages": MESSAGES})
        assert res.status_code == 500
        assert res.json()["error"] == "Chat completion provider is not configured"

    @pytest.mark.parametrize("body", [{}, {"messages": []}])
    def test_missing_messages(self, configured_client, body):
        res = configured_client.post("/api/chat", json=body)
        assert res.status_code == 400
        assert res.json()["success"] is False

    def test_temperature_out_of_range(self, configured_client):
        res = configured_client.post("/api/chat", json={"messages": MESSAGES, "temperature": 1.5})
        assert res.status_code == 400

    def test_get_not_allowed(self, client):
        res = client.get("/api/chat")
        assert res.status_code == 405
        assert res.json()["success"] is False

    @pytest.mark.parametrize("error_cls,status", [
        (anthropic.RateLimitError, 429),
        (anthropic.AuthenticationError, 401),
        (anthropic.InternalServerError, 500),
    ])
    def test_provider_errors_are_mapped(self, configured_client, monkeypatch, error_cls, status):
        async def create(**kwargs):
            raise status_error(error_cls, status)

        fake_anthropic(monkeypatch, create)
        res = configured_client.post("/api/chat", json={"messages": MESSAGES})
        assert res.status_code == status
        assert "provider said no" not in res.text

    def test_empty_reply(self, configured_client, monkeypatch):
        async def create(**kwargs):
            return SimpleNamespace(content=[])

        fake_anthropic(monkeypatch, create)
        res = configured_client.post("/api/chat", json={"messages": MESSAGES})
        assert res.status_code == 500


class TestChatRateLimit:

    @pytest.fixture
    def limited_client(self, settings):
        limiter.reset()
        app = create_app(settings.model_copy(update={"CHAT_RATE_LIMIT": "2/minute"}))
        with TestClient(app) as c:
            yield c
        limiter.reset()

    def test_limit_comes_from_app_settings(self, limited_client):
        statuses = [limited_client.post("/api/chat", json={"messages": MESSAGES}).status_code for _ in range(3)]
        assert statuses == [500, 500, 429]
        assert limited_client.post("/api/chat", json={"messages": MESSAGES}).json()["error"] == "Too many requests"
