"""Shared fixtures for all tests."""

import json

import httpx
import pytest
from langchain_core.messages import AIMessage

from relay.core.automation import AutomationClient
from relay.core.database import init_db
from relay.core.results import CallResult


class ScriptedLLM:
    """Stands in for LLMAdapter: replays a fixed list of completion outcomes."""

    def __init__(self, outcomes: list[CallResult], healthy: bool = True):
        self.outcomes = list(outcomes)
        self.healthy = healthy
        self.calls: list[dict] = []

    def is_healthy(self) -> bool:
        return self.healthy

    def complete(self, messages, tools=None) -> CallResult:
        self.calls.append({"messages": list(messages), "tools": tools})
        return self.outcomes.pop(0)


class RecordingBackend:
    """httpx.MockTransport handler that records requests and answers per path suffix."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, tuple[int, dict]] = {}

    def respond(self, path_suffix: str, status_code: int, **kwargs) -> None:
        self.routes[path_suffix] = (status_code, kwargs)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for suffix, (status_code, kwargs) in self.routes.items():
            if request.url.path.endswith(suffix):
                return httpx.Response(status_code, **kwargs)
        return httpx.Response(404, text="not found")

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


def tool_call_reply(name: str, args: dict, call_id: str = "call_1") -> AIMessage:
    return AIMessage(content="", tool_calls=[{"name": name, "args": args, "id": call_id}])


@pytest.fixture
def db():
    """Fresh in-memory database for each test."""
    init_db("sqlite:///:memory:")
    yield


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def automation(backend) -> AutomationClient:
    client = httpx.Client(transport=httpx.MockTransport(backend))
    return AutomationClient(
        webhook_url="https://n8n.example/webhook",
        api_key="secret",
        client=client,
    )


@pytest.fixture
def make_llm():
    """Factory for a ScriptedLLM replaying the given outcomes."""
    return ScriptedLLM


@pytest.fixture
def tool_call():
    """Builds an AIMessage carrying a single tool call."""
    return tool_call_reply
