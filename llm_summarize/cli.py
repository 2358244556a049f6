"""Command-line interface for the file summarizer.

Entry point: ``llm-summarize`` (configured in ``pyproject.toml``).

Usage:
    llm-summarize MODEL FILE [FILE ...] [options]

Key options:
    --host, --port, --timeout, --dark, --output, --print,
    --verbose/--no-verbose, --log-file.

By default the summary is shown in the terminal with save/copy/retry/theme
commands.  ``--output FILE`` saves it and exits; ``--print`` (implied when
stdout is not a terminal) writes the raw Markdown to stdout and exits.

Environment defaults (``.env`` is loaded first): ``LLM_SERVER_HOST``,
``LLM_SERVER_PORT``, ``LLM_TIMEOUT``.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console

from llm_summarize.log import emit_result, setup_logging
from llm_summarize.models import (
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_S,
    Config,
    NetworkError,
    ResponseFormatError,
    SummarizeError,
    SummaryRequest,
)
from llm_summarize.pipeline import SummarySession
from llm_summarize.presenter import TerminalPresenter

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    parsed = int(value)
    if parsed < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return parsed


def positive_float(value: str) -> float:
    parsed = float(value)
    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return parsed


def add_server_arguments(parser: argparse.ArgumentParser) -> None:
    """Add ``--host``/``--port``/``--timeout`` with environment defaults."""
    parser.add_argument(
        "--host",
        metavar="HOST",
        default=os.environ.get("LLM_SERVER_HOST", "localhost"),
        help="Inference server host (default: LLM_SERVER_HOST or localhost).",
    )
    parser.add_argument(
        "--port",
        metavar="N",
        type=positive_int,
        default=os.environ.get("LLM_SERVER_PORT", str(DEFAULT_PORT)),
        help=f"Inference server port (default: LLM_SERVER_PORT or {DEFAULT_PORT}).",
    )
    parser.add_argument(
        "--timeout",
        metavar="S",
        type=positive_float,
        default=os.environ.get("LLM_TIMEOUT", str(DEFAULT_TIMEOUT_S)),
        help=(
            f"Request timeout in seconds (default: LLM_TIMEOUT or {DEFAULT_TIMEOUT_S}). "
            "Use higher values for slow local models."
        ),
    )
    parser.add_argument(
        "--verbose",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Enable DEBUG-level logging (default: off).",
    )
    parser.add_argument(
        "--log-file",
        metavar="FILE",
        default=None,
        help="Also write log output to FILE.",
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Parse CLI arguments, summarise the files, and present the result."""
    load_dotenv()

    parser = _build_parser()
    args = parser.parse_args()

    setup_logging(
        verbose=args.verbose,
        log_file=Path(args.log_file) if args.log_file else None,
    )

    config = Config(
        host=args.host,
        port=args.port,
        timeout_s=args.timeout,
        dark_mode=args.dark,
        verbose=args.verbose,
    )

    try:
        request = SummaryRequest(
            model_id=args.model, file_paths=tuple(Path(f) for f in args.files)
        )
    except ValidationError as exc:
        parser.error(str(exc))

    session = SummarySession(request, config)
    try:
        session.run()
    except SummarizeError as exc:
        _report_failure(exc)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Cancelled.")
        sys.exit(130)

    if args.output:
        try:
            session.save(Path(args.output))
        except SummarizeError as exc:
            logger.error("%s", exc)
            sys.exit(1)
        return

    if args.print or not sys.stdout.isatty():
        emit_result(session.markdown)
        return

    TerminalPresenter(session, Console()).run()


def _report_failure(exc: SummarizeError) -> None:
    logger.error("%s", exc)
    raw_body = None
    if isinstance(exc, (ResponseFormatError, NetworkError)):
        raw_body = exc.raw_body
    if raw_body is not None:
        logger.error("Raw response:\n%s", raw_body or "(empty body)")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llm-summarize",
        description=(
            "Summarise text files in Markdown using a local LLM server "
            "(llama-server, Ollama, or any OpenAI-compatible endpoint)."
        ),
    )
    parser.add_argument("model", metavar="MODEL", help="Model identifier to use.")
    parser.add_argument(
        "files",
        metavar="FILE",
        nargs="+",
        help="Text files to summarise, in prompt order.",
    )

    add_server_arguments(parser)

    parser.add_argument(
        "--dark",
        action="store_true",
        default=False,
        help="Start with the dark display theme.",
    )
    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument(
        "--output",
        metavar="FILE",
        default=None,
        help="Save the summary to FILE instead of displaying it.",
    )
    output_group.add_argument(
        "--print",
        action="store_true",
        default=False,
        help="Write the raw Markdown to stdout instead of displaying it.",
    )

    return parser


if __name__ == "__main__":
    main()
