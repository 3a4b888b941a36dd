"""
Shared pytest configuration.

Puts the project root on sys.path and replaces `requests.post` with a fake
transport, so no test talks to the network.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest
import requests

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from openai_chat.endpoint.openai_settings import OpenAISettings  # noqa: E402

API_URL = "https://api.test/v1/chat/completions"
PLACEHOLDER = "<your-openai-api-key-here>"


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, malformed: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._malformed = malformed

    def json(self):
        if self._malformed:
            raise requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
        return self._payload

    def raise_for_status(self):
        if not 200 <= self.status_code < 300:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error", response=self)


def completion_payload(*contents: str, model: str = "gpt-4") -> Dict[str, Any]:
    return {
        "id": "x",
        "object": "y",
        "created": 0,
        "model": model,
        "usage": {},
        "choices": [
            {"message": {"role": "assistant", "content": c}, "index": i}
            for i, c in enumerate(contents)
        ],
    }


class FakeTransport:
    """Records every POST and answers from a queue (the last answer repeats)."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.responses: List[Any] = []

    def queue(self, *responses: Any) -> "FakeTransport":
        self.responses.extend(responses)
        return self

    def __call__(self, url=None, headers=None, json=None, timeout=None, **kwargs):
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if not self.responses:
            raise AssertionError("no fake response queued")
        answer = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(answer, BaseException):
            raise answer
        return answer


@pytest.fixture
def settings() -> OpenAISettings:
    return OpenAISettings(
        api_url=API_URL,
        request_timeout_seconds=5,
        placeholder_api_key=PLACEHOLDER,
    )


@pytest.fixture
def transport(monkeypatch) -> FakeTransport:
    fake = FakeTransport()
    monkeypatch.setattr(requests, "post", fake)
    return fake
