"""
Pytest configuration and fixtures
"""
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from clean_sheets.app import create_app, get_llm_factory
from clean_sheets.config import AppConfig
from clean_sheets.llm_client import LLMClient


def completion_payload(content):
    """Build a chat completion body as OpenRouter returns it."""
    return {
        "id": "gen-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "openai/gpt-4o-mini",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class FakeUpstream:
    """Stands in for the completion API at the HTTP transport level."""

    def __init__(self):
        self.content = "[]"
        self.status_code = 200
        self.error_body = {"error": {"message": "upstream unavailable", "code": 503}}
        self.requests = []

    def set_issues(self, issues, fenced=False):
        text = json.dumps(issues)
        self.content = f"```json\n{text}\n```" if fenced else text

    def handler(self, request):
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json=self.error_body)
        return httpx.Response(200, json=completion_payload(self.content))

    @property
    def last_body(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def app(upstream):
    application = create_app(AppConfig())

    def factory(conf, api_key):
        transport = httpx.MockTransport(upstream.handler)
        return LLMClient(conf, api_key, http_client=httpx.AsyncClient(transport=transport))

    application.dependency_overrides[get_llm_factory] = lambda: factory
    return application


@pytest.fixture
def client(app, monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "test-key")
    with TestClient(app) as test_client:
        yield test_client
