"""Pydantic models, dataclass Config, and exceptions for llm-summarize.

This module only defines the *schema* of the data that flows through the
tool: the validated summary request, the subset of the chat-completion and
model-list responses the client consumes, the immutable summary result, and
runtime configuration.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

# ---------------------------------------------------------------------------
# Request / result
# ---------------------------------------------------------------------------


class SummaryRequest(BaseModel):
    """One "summarise these files with this model" request.

    ``file_paths`` keeps the caller's order; it decides the order in which
    file contents appear in the prompt.
    """

    model_config = ConfigDict(frozen=True)

    model_id: str = Field(min_length=1)
    file_paths: tuple[Path, ...] = Field(min_length=1)

    @field_validator("model_id")
    @classmethod
    def _model_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("model_id must not be blank")
        return value


class SummaryResult(BaseModel):
    """The Markdown summary returned by the model.  Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    markdown: str


# ---------------------------------------------------------------------------
# Chat-completion response (only the consumed fields)
# ---------------------------------------------------------------------------


class ChatMessage(BaseModel):
    content: StrictStr


class ChatChoice(BaseModel):
    message: ChatMessage


class ChatCompletionResponse(BaseModel):
    """Shape required of a ``/v1/chat/completions`` response body.

    Everything other than ``choices[0].message.content`` is ignored, later
    choices included.  A missing or empty ``choices`` list, or a non-string
    ``content``, fails validation; no default is ever substituted.
    """

    choices: list[ChatChoice] = Field(min_length=1)

    @field_validator("choices", mode="before")
    @classmethod
    def _first_choice_only(cls, value: Any) -> Any:
        if isinstance(value, list):
            return value[:1]
        return value


# ---------------------------------------------------------------------------
# Model list (GET /v1/models)
# ---------------------------------------------------------------------------


class ModelStatus(BaseModel):
    value: str | None = None


class ModelInfo(BaseModel):
    """One entry of the server's model list.

    llama-server reports ``status.value == "loaded"`` for models currently
    held in memory.  Servers that omit ``status`` report every model as not
    loaded.
    """

    id: str
    status: ModelStatus | None = None

    @property
    def loaded(self) -> bool:
        return self.status is not None and self.status.value == "loaded"


class ModelList(BaseModel):
    data: list[ModelInfo]


# ---------------------------------------------------------------------------
# Config (dataclass — not pydantic; holds runtime settings)
# ---------------------------------------------------------------------------

#: Local models on CPU can take minutes for long inputs.  The HTTP call is
#: bounded so a hung server cannot block the tool forever.
DEFAULT_TIMEOUT_S = 300

DEFAULT_PORT = 11434


@dataclass
class Config:
    """Runtime configuration for the summarize and model-selection tools.

    All fields correspond to CLI flags.

    Attributes:
        host:      Host name of the local inference server.
        port:      TCP port of the inference server (llama-server / Ollama
                   default: 11434).
        timeout_s: Seconds before a request to the server is abandoned.
                   Applies to the whole request, including generation time.
        dark_mode: Start the terminal display with the dark theme.
        verbose:   Enable DEBUG-level logging.
    """

    host: str = "localhost"
    port: int = DEFAULT_PORT
    timeout_s: float = DEFAULT_TIMEOUT_S
    dark_mode: bool = False
    verbose: bool = False

    @property
    def base_url(self) -> str:
        """OpenAI-compatible API root, e.g. ``http://localhost:11434/v1``."""
        return f"http://{self.host}:{self.port}/v1"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SummarizeError(Exception):
    """Base class for every error raised by llm-summarize."""


class InputFileError(SummarizeError):
    """Raised when an input file cannot be read as UTF-8 text.

    Attributes:
        path: The file that could not be read.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot read {path}: {reason}")


class NetworkError(SummarizeError):
    """Raised when the request cannot be delivered, times out, or is refused.

    Attributes:
        raw_body: Response body for HTTP status failures, else ``None``.
    """

    def __init__(self, message: str, raw_body: str | None = None) -> None:
        self.raw_body = raw_body
        super().__init__(message)


class ResponseFormatError(SummarizeError):
    """Raised when the response body is not JSON of the expected shape.

    Attributes:
        raw_body: The undecoded response body, for diagnosis.
    """

    def __init__(self, message: str, raw_body: str) -> None:
        self.raw_body = raw_body
        super().__init__(message)


class OutputWriteError(SummarizeError):
    """Raised when saving the summary to disk fails.

    Attributes:
        path: The destination that could not be written.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot write {path}: {reason}")


class ClipboardError(SummarizeError):
    """Raised when the platform clipboard command exits with an error."""


class FolderError(SummarizeError):
    """Raised when the new-folder prompt cannot create its folder."""
