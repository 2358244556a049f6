"""LLM server client and response parsing — wraps the openai SDK.

Targets any OpenAI-compatible local server (llama-server, Ollama, LM Studio).
Requests go through ``with_raw_response`` so the undecoded body is always
available: the summary is validated here against ``ChatCompletionResponse``
rather than trusted to the SDK's lenient parsing, and a malformed body is
attached to the ``ResponseFormatError`` for diagnosis.

The SDK's automatic retries are disabled.  A failed call is reported once;
retrying is the caller's decision.
"""

import json
import logging
import time
from typing import Callable

import openai as _openai
from pydantic import ValidationError

from llm_summarize.models import (
    DEFAULT_TIMEOUT_S,
    ChatCompletionResponse,
    Config,
    ModelInfo,
    ModelList,
    NetworkError,
    ResponseFormatError,
    SummaryResult,
)

logger = logging.getLogger(__name__)

# Local servers ignore the key, but the SDK refuses to start without one.
_PLACEHOLDER_API_KEY = "llama-server"


# ---------------------------------------------------------------------------
# Client wrapper
# ---------------------------------------------------------------------------


class LlamaServerClient:
    """OpenAI-compatible client for a local inference server.

    Wraps ``openai.OpenAI`` and returns raw response bodies; parsing is left
    to ``parse_summary_response`` / ``list_models``.

    Attributes:
        base_url:  API root, e.g. ``http://localhost:11434/v1``.
        timeout_s: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        http_client=None,
    ) -> None:
        self.base_url = base_url
        self.timeout_s = timeout_s
        self._client = _openai.OpenAI(
            base_url=base_url,
            api_key=_PLACEHOLDER_API_KEY,
            timeout=timeout_s,
            max_retries=0,
            http_client=http_client,
        )

    def complete(self, model: str, prompt: str) -> str:
        """POST one single-message chat completion; return the raw body."""
        return self._raw_body(
            lambda: self._client.chat.completions.with_raw_response.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                timeout=self.timeout_s,
            )
        )

    def fetch_models(self) -> str:
        """GET the server's model list; return the raw body."""
        return self._raw_body(lambda: self._client.models.with_raw_response.list())

    def _raw_body(self, send: Callable) -> str:
        try:
            raw = send()
        except _openai.APITimeoutError as e:
            raise NetworkError(
                f"Request to {self.base_url} timed out after {self.timeout_s:g}s"
            ) from e
        except _openai.APIConnectionError as e:
            detail = f"{e} ({e.__cause__})" if e.__cause__ else str(e)
            raise NetworkError(
                f"Cannot reach LLM server at {self.base_url}: {detail}"
            ) from e
        except _openai.APIStatusError as e:
            raise NetworkError(
                f"LLM server returned HTTP {e.status_code}", raw_body=e.response.text
            ) from e
        return raw.http_response.text


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def create_client(config: Config, http_client=None) -> LlamaServerClient:
    """Create a client for the server described by ``config``.

    ``http_client`` (an ``httpx.Client``) is handed to the SDK unchanged;
    tests use it to inject a mock transport.
    """
    return LlamaServerClient(
        base_url=config.base_url,
        timeout_s=config.timeout_s,
        http_client=http_client,
    )


def call_llm(client: LlamaServerClient, model: str, prompt: str) -> SummaryResult:
    """Send a prompt to the LLM and return the validated summary.

    Raises:
        NetworkError: if the request is not delivered or is refused.
        ResponseFormatError: if the reply is not a chat-completion body.
    """
    logger.info("Calling LLM  model=%s  backend=%s", model, client.base_url)
    logger.info("Awaiting response...")
    t0 = time.monotonic()
    body = client.complete(model, prompt)
    elapsed = time.monotonic() - t0
    logger.info("Response received (%.1fs, %s chars)", elapsed, f"{len(body):,}")
    return parse_summary_response(body)


def list_models(client: LlamaServerClient) -> list[ModelInfo]:
    """Return the models the server offers, in the server's order.

    Raises:
        NetworkError: if the server cannot be reached.
        ResponseFormatError: if the body is not a ``{"data": [...]}`` list.
    """
    body = client.fetch_models()
    models = _validate(ModelList, body, what="model list").data
    logger.debug("Server lists %d model(s)", len(models))
    return models


def parse_summary_response(body: str) -> SummaryResult:
    """Extract ``choices[0].message.content`` from a response body.

    Raises:
        ResponseFormatError: if ``body`` is not JSON, or lacks a non-empty
            ``choices`` list whose first entry has a string
            ``message.content``.  The error carries ``body`` unchanged.
    """
    response = _validate(ChatCompletionResponse, body, what="chat completion")
    return SummaryResult(markdown=response.choices[0].message.content)


def _validate(model_cls, body: str, what: str):
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ResponseFormatError(
            f"Unexpected API response: {what} is not valid JSON ({e})", raw_body=body
        ) from e
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(_compact_validation_errors(e))
        raise ResponseFormatError(
            f"Unexpected API response: malformed {what} ({problems})", raw_body=body
        ) from e


def _compact_validation_errors(exc: ValidationError) -> list[str]:
    """Convert pydantic errors into concise 'path: message' strings."""
    compact: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
        msg = err.get("msg", "validation error")
        compact.append(f"{loc}: {msg}")
    return compact
