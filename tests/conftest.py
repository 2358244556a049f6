"""Shared pytest fixtures for the llm_summarize test suite."""

import json
import logging
from pathlib import Path

import httpx
import pytest

from llm_summarize.llm import LlamaServerClient, create_client
from llm_summarize.models import Config


# ---------------------------------------------------------------------------
# Logger isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Clear the llm_summarize and SDK loggers between tests.

    Tests that call a CLI ``main()`` trigger ``setup_logging()``, which
    attaches handlers and sets ``propagate=False``.  Without this fixture the
    state leaks into subsequent tests and breaks ``caplog`` capture.
    """
    loggers = [logging.getLogger(name) for name in ("llm_summarize", "openai", "httpx")]

    def _clear():
        for logger in loggers:
            for h in logger.handlers[:]:
                h.close()
                logger.removeHandler(h)
            logger.propagate = True
            logger.setLevel(logging.NOTSET)

    _clear()
    yield
    _clear()


# ---------------------------------------------------------------------------
# Fake inference server
# ---------------------------------------------------------------------------


def chat_body(content) -> dict:
    """A minimal llama-server style chat-completion body."""
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "model": "test-model",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


class FakeServer:
    """Scripted stand-in for the local server, served via ``httpx.MockTransport``.

    Queue ``httpx.Response`` objects (or exceptions to raise) with ``reply``;
    every request the client sends is recorded in ``requests``.  When the
    queue is empty the server answers 500.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._replies: list = []

    def reply(self, *items) -> "FakeServer":
        self._replies.extend(items)
        return self

    def reply_summary(self, content: str) -> "FakeServer":
        return self.reply(httpx.Response(200, json=chat_body(content)))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._replies:
            return httpx.Response(500, text="no reply scripted")
        item = self._replies.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def client(self, config: Config | None = None) -> LlamaServerClient:
        transport = httpx.MockTransport(self.handler)
        return create_client(config or Config(), http_client=httpx.Client(transport=transport))

    def json_bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


# ---------------------------------------------------------------------------
# Input files
# ---------------------------------------------------------------------------


@pytest.fixture
def notes_file(tmp_path: Path) -> Path:
    path = tmp_path / "notes.txt"
    path.write_text("Meeting notes\n- ship the release\n", encoding="utf-8")
    return path


@pytest.fixture
def two_files(tmp_path: Path) -> list[Path]:
    first = tmp_path / "alpha.md"
    second = tmp_path / "beta.txt"
    first.write_text("Alpha content", encoding="utf-8")
    second.write_text("Beta content", encoding="utf-8")
    return [first, second]
