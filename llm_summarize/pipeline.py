"""Summary orchestration — files in, validated Markdown summary out.

``summarize`` is the whole request/response cycle: read the files, build the
prompt, make one chat-completion call, validate the reply.  It performs no
retries and keeps no state between calls.

``SummarySession`` holds what one summarize-and-display cycle needs (the
request, the latest result, the theme) so that save/copy/retry handlers
receive it explicitly instead of reaching for module-level globals.
"""

import logging
from pathlib import Path
from typing import Sequence

from llm_summarize.llm import LlamaServerClient, call_llm, create_client
from llm_summarize.models import (
    Config,
    OutputWriteError,
    SummarizeError,
    SummaryRequest,
    SummaryResult,
)
from llm_summarize.prompts import (
    build_combined_input,
    build_summary_prompt,
    read_input_files,
)

logger = logging.getLogger(__name__)

APP_TITLE = "LLMSummarize"


def summarize(
    model_id: str,
    file_paths: Sequence[str | Path],
    config: Config | None = None,
    client: LlamaServerClient | None = None,
) -> SummaryResult:
    """Summarise ``file_paths`` with ``model_id`` and return the Markdown.

    Steps
    -----
    1. Read every file as UTF-8, in order (fails before any network I/O).
    2. Combine the contents and wrap them in the summarisation instruction.
    3. POST one chat completion to the configured server.
    4. Validate the reply and return ``choices[0].message.content``.

    Raises:
        pydantic.ValidationError: if ``model_id`` is blank or ``file_paths``
            is empty (a ``ValueError`` subclass).
        InputFileError: if a file cannot be read.
        NetworkError: if the server cannot be reached or refuses the request.
        ResponseFormatError: if the reply is not a chat-completion body.
    """
    request = SummaryRequest(model_id=model_id, file_paths=tuple(file_paths))
    return run_request(request, config or Config(), client)


def run_request(
    request: SummaryRequest,
    config: Config,
    client: LlamaServerClient | None = None,
) -> SummaryResult:
    """Execute an already validated ``SummaryRequest``; see ``summarize``."""
    contents = read_input_files(request.file_paths)
    combined = build_combined_input(contents)
    prompt = build_summary_prompt(combined, file_count=len(contents))
    logger.info(
        "Processing %d file(s): %s",
        len(contents),
        ", ".join(path.name for path, _ in contents),
    )
    logger.debug(
        "Prompt size: %s chars (~%s tokens)",
        f"{len(prompt):,}",
        f"{len(prompt) // 4:,}",
    )

    if client is None:
        client = create_client(config)
    result = call_llm(client, request.model_id, prompt)
    logger.info("Got markdown content (%s chars)", f"{len(result.markdown):,}")
    return result


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def save_markdown(markdown: str, path: Path) -> Path:
    """Write ``markdown`` to ``path`` verbatim as UTF-8 and return ``path``.

    Raises:
        OutputWriteError: wrapping the ``OSError`` from the write.
    """
    try:
        path.write_text(markdown, encoding="utf-8", newline="")
    except OSError as e:
        raise OutputWriteError(path, e.strerror or str(e)) from e
    logger.info("Written: %s", path)
    return path


def default_save_path(file_paths: Sequence[Path]) -> Path:
    """Suggest where to save a summary of ``file_paths``.

    The directory of the first input is used.  One input gives
    ``<stem>_summary.md``; several give ``combined_summary.md``.
    """
    first = file_paths[0]
    if len(file_paths) == 1:
        return first.parent / f"{first.stem}_summary.md"
    return first.parent / "combined_summary.md"


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class SummarySession:
    """State for one summarize-and-display cycle.

    Attributes:
        request:   The request replayed by ``run`` and ``retry``.
        config:    Server and display settings.
        result:    Latest successful result, or ``None`` before the first.
        dark_mode: Current display theme.
    """

    def __init__(
        self,
        request: SummaryRequest,
        config: Config,
        client: LlamaServerClient | None = None,
    ) -> None:
        self.request = request
        self.config = config
        self.result: SummaryResult | None = None
        self.dark_mode = config.dark_mode
        self._client = client

    @property
    def markdown(self) -> str:
        return self.result.markdown if self.result is not None else ""

    @property
    def title(self) -> str:
        count = len(self.request.file_paths)
        files = "1 file" if count == 1 else f"{count} files"
        return f"{APP_TITLE} ({files})"

    def run(self) -> SummaryResult:
        """Summarise the request's files; keep the previous result on failure."""
        result = run_request(self.request, self.config, self._client)
        self.result = result
        return result

    def retry(self) -> SummaryResult:
        logger.info("Retrying summary with model %s", self.request.model_id)
        return self.run()

    def default_save_path(self) -> Path:
        return default_save_path(self.request.file_paths)

    def save(self, path: Path | None = None) -> Path:
        """Write the current summary to ``path`` (default: ``default_save_path``).

        Raises:
            SummarizeError: if there is no summary yet.
            OutputWriteError: if the write fails; ``result`` is unaffected.
        """
        if self.result is None:
            raise SummarizeError("No summary to save yet")
        return save_markdown(self.result.markdown, path or self.default_save_path())

    def toggle_theme(self) -> bool:
        self.dark_mode = not self.dark_mode
        return self.dark_mode
