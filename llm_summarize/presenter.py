"""Presenters — the user-facing actions available on a displayed summary.

``Presenter`` is the capability interface a UI implements once (save, copy,
retry, toggle theme).  ``TerminalPresenter`` is the Rich implementation used
by ``llm-summarize``: it draws the summary panel and reads single-letter
commands until the user quits.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from rich.console import Console
from rich.prompt import Confirm, Prompt

from llm_summarize.clipboard import copy_to_clipboard
from llm_summarize.models import NetworkError, ResponseFormatError, SummarizeError
from llm_summarize.pipeline import SummarySession
from llm_summarize.renderer import build_error_panel, render_summary

logger = logging.getLogger(__name__)


class Presenter(ABC):
    """Actions offered alongside a displayed summary."""

    def __init__(self, session: SummarySession) -> None:
        self.session = session

    @abstractmethod
    def on_save(self) -> None: ...

    @abstractmethod
    def on_copy(self) -> None: ...

    @abstractmethod
    def on_retry(self) -> None: ...

    @abstractmethod
    def on_toggle_theme(self) -> None: ...


_COMMANDS = {
    "s": "save",
    "c": "copy",
    "r": "retry",
    "t": "theme",
    "q": "quit",
}


class TerminalPresenter(Presenter):
    """Rich-based presenter: summary panel plus a command prompt loop."""

    def __init__(self, session: SummarySession, console: Console | None = None) -> None:
        super().__init__(session)
        self.console = console or Console()

    # -- display -----------------------------------------------------------

    def show(self) -> None:
        render_summary(
            self.console,
            self.session.markdown,
            title=self.session.title,
            dark=self.session.dark_mode,
        )

    def show_error(self, exc: SummarizeError) -> None:
        raw_body = None
        if isinstance(exc, (ResponseFormatError, NetworkError)):
            raw_body = exc.raw_body
        self.console.print(build_error_panel(str(exc), raw_body))

    # -- actions -----------------------------------------------------------

    def on_save(self) -> None:
        default = self.session.default_save_path()
        answer = Prompt.ask(
            "Save summary as Markdown", default=str(default), console=self.console
        )
        path = Path(answer).expanduser()
        if path.exists() and not Confirm.ask(
            f"{path} exists. Overwrite?", default=False, console=self.console
        ):
            self.console.print("Not saved.", style="yellow")
            return
        written = self.session.save(path)
        self.console.print(f"Saved: {written}", style="green")

    def on_copy(self) -> None:
        if copy_to_clipboard(self.session.markdown):
            self.console.print("Copied Markdown to clipboard.", style="green")
        else:
            self.console.print(
                "No clipboard tool available; nothing copied.", style="yellow"
            )

    def on_retry(self) -> None:
        with self.console.status("Waiting for the model..."):
            self.session.retry()
        self.show()

    def on_toggle_theme(self) -> None:
        self.session.toggle_theme()
        self.show()

    # -- loop --------------------------------------------------------------

    def run(self) -> None:
        """Show the summary and dispatch commands until ``q``, EOF or Ctrl+C.

        Failed actions are reported in an error panel and Ctrl+C inside an
        action cancels just that action; either way the loop continues with
        the summary that was on screen before.
        """
        self.show()
        handlers = {
            "s": self.on_save,
            "c": self.on_copy,
            "r": self.on_retry,
            "t": self.on_toggle_theme,
        }
        menu = "  ".join(f"[bold]{key}[/bold] {name}" for key, name in _COMMANDS.items())
        while True:
            try:
                choice = Prompt.ask(
                    menu,
                    choices=list(_COMMANDS),
                    show_choices=False,
                    console=self.console,
                )
            except (EOFError, KeyboardInterrupt):
                self.console.print()
                return
            if choice == "q":
                return
            try:
                handlers[choice]()
            except KeyboardInterrupt:
                self.console.print("\nCancelled.", style="yellow")
            except SummarizeError as exc:
                logger.error("%s failed: %s", _COMMANDS[choice].capitalize(), exc)
                self.show_error(exc)
