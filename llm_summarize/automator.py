"""Interactive prompts run from Terminal by the Automator workflow.

Entry points (configured in ``pyproject.toml``):

``llm-select-model``
    Lists the models offered by the local server and lets the user pick
    one.  The choice is printed as ``SELECTED:<id>`` on stdout and written to
    ``$LLM_RESULT_FILE`` when that variable is set.  Cancelling prints
    ``CANCELLED`` and leaves the result file empty.

``llm-new-folder``
    Asks for a folder name and creates it in ``$NEW_FOLDER_BASE`` (when set
    to an absolute path) or ``~/Desktop``.

Prompts and status lines go to stderr; stdout carries only the result line
the workflow parses.
"""

import argparse
import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from llm_summarize.cli import add_server_arguments
from llm_summarize.llm import create_client, list_models
from llm_summarize.log import emit_result, setup_logging
from llm_summarize.models import Config, FolderError, ModelInfo, SummarizeError

logger = logging.getLogger(__name__)

RESULT_FILE_ENV = "LLM_RESULT_FILE"
FOLDER_BASE_ENV = "NEW_FOLDER_BASE"

_INVALID_FOLDER_CHARS = re.compile(r'[/:\\*?"<>|]')


def _print_banner(console: Console, title: str, subtitle: str) -> None:
    body = Text.assemble(Text(title, style="bold cyan"), "\n", Text(subtitle, style="dim"))
    console.print(Panel(body, border_style="cyan", padding=(0, 2)))


# ---------------------------------------------------------------------------
# Model selection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModelOption:
    model_id: str
    hint: str


def build_model_options(models: Sequence[ModelInfo]) -> list[ModelOption]:
    """Turn the server's model list into menu entries.

    Each model is hinted ``Loaded`` or ``Not loaded``.  When a model is
    already loaded, the first such model is repeated at the top of the menu
    as ``Pre-Loaded`` so the default choice needs no model swap.
    """
    options = [
        ModelOption(m.id, "Loaded" if m.loaded else "Not loaded") for m in models
    ]
    preloaded = next((m for m in models if m.loaded), None)
    if preloaded is not None:
        options.insert(0, ModelOption(preloaded.id, "Pre-Loaded"))
    return options


def prompt_model_choice(console: Console, options: Sequence[ModelOption]) -> str:
    """Show ``options`` as a numbered table and return the chosen model id.

    Raises:
        KeyboardInterrupt, EOFError: when the user cancels.
    """
    table = Table(title="Available models")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Model", style="white")
    table.add_column("Status", style="dim")
    for number, option in enumerate(options, start=1):
        table.add_row(str(number), option.model_id, option.hint)
    console.print(table)

    answer = Prompt.ask(
        "Select model (Ctrl+C to cancel)",
        choices=[str(n) for n in range(1, len(options) + 1)],
        default="1",
        show_choices=False,
        console=console,
    )
    return options[int(answer) - 1].model_id


def write_result_file(value: str, environ: Mapping[str, str] | None = None) -> None:
    """Write ``value`` to ``$LLM_RESULT_FILE`` if set; log failures only."""
    environ = os.environ if environ is None else environ
    result_file = environ.get(RESULT_FILE_ENV)
    if not result_file:
        return
    try:
        Path(result_file).write_text(value, encoding="utf-8")
    except OSError as exc:
        logger.error("Error writing result file %s: %s", result_file, exc)


def select_model_main() -> None:
    """Entry point for ``llm-select-model``."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="llm-select-model",
        description="Choose a model offered by the local LLM server.",
    )
    add_server_arguments(parser)
    args = parser.parse_args()

    setup_logging(
        verbose=args.verbose,
        log_file=Path(args.log_file) if args.log_file else None,
    )
    config = Config(host=args.host, port=args.port, timeout_s=args.timeout)
    console = Console(stderr=True)

    try:
        models = list_models(create_client(config))
    except SummarizeError as exc:
        logger.error("Error getting models: %s", exc)
        sys.exit(1)
    if not models:
        logger.error("Server at %s lists no models", config.base_url)
        sys.exit(1)

    _print_banner(
        console,
        "LLAMA-SERVER models",
        "Choose a model to use for summarization.",
    )
    try:
        selected = prompt_model_choice(console, build_model_options(models))
    except (KeyboardInterrupt, EOFError):
        console.print("\nExiting...", style="yellow")
        emit_result("CANCELLED")
        write_result_file("")
        return

    console.print(Text.assemble(Text("Selected: ", style="green"), selected))
    emit_result(f"SELECTED:{selected}")
    write_result_file(selected)


# ---------------------------------------------------------------------------
# Folder creation
# ---------------------------------------------------------------------------


def resolve_base_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Return the directory new folders are created in.

    Raises:
        FolderError: if ``NEW_FOLDER_BASE`` is unusable and ``HOME`` is unset.
    """
    environ = os.environ if environ is None else environ
    base = environ.get(FOLDER_BASE_ENV)
    if base and Path(base).is_absolute():
        return Path(base)
    home = environ.get("HOME")
    if not home:
        raise FolderError("HOME not set")
    return Path(home) / "Desktop"


def validate_folder_name(value: str | None) -> str | None:
    """Return an error message for an unusable name, or ``None`` if valid."""
    if value is None or not value.strip():
        return "Please enter a folder name."
    name = value.strip()
    if _INVALID_FOLDER_CHARS.search(name):
        return 'Name cannot contain / \\ : * ? " < > |'
    if name == ".":
        return "Name cannot be just a dot."
    return None


def prompt_folder_name(console: Console) -> str:
    """Ask until a valid folder name is entered and return it stripped.

    Raises:
        KeyboardInterrupt, EOFError: when the user cancels.
    """
    while True:
        answer = Prompt.ask("Folder name [dim](e.g. Project Alpha)[/dim]", console=console)
        error = validate_folder_name(answer)
        if error is None:
            return answer.strip()
        console.print(error, style="red")


def create_folder(base_dir: Path, name: str) -> Path:
    """Create ``base_dir / name`` (the parent must already exist).

    Raises:
        FolderError: if the folder exists or cannot be created.
    """
    path = base_dir / name
    if path.exists():
        raise FolderError(f"Already exists: {path}")
    try:
        path.mkdir(parents=False)
    except OSError as exc:
        raise FolderError(f"Cannot create {path}: {exc.strerror or exc}") from exc
    logger.debug("Created folder %s", path)
    return path


def new_folder_main() -> None:
    """Entry point for ``llm-new-folder``."""
    load_dotenv()
    setup_logging()
    console = Console(stderr=True)

    try:
        base_dir = resolve_base_dir()
    except FolderError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    _print_banner(
        console,
        "New folder",
        f"Enter a name and it will be created in {base_dir}.",
    )
    try:
        name = prompt_folder_name(console)
    except (KeyboardInterrupt, EOFError):
        console.print("\nNo folder created.", style="yellow")
        return

    try:
        path = create_folder(base_dir, name)
    except FolderError as exc:
        console.print(f"Error: {exc}", style="red")
        sys.exit(1)
    console.print(Text.assemble(Text("Created: ", style="green"), str(path)))
    emit_result(str(path))
