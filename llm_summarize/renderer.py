"""Render Markdown summaries and API errors for the terminal (Rich).

Markdown is converted to styled text by ``rich.markdown.Markdown`` and framed
in a ``Panel`` whose colours follow the light or dark theme.  No file I/O is
performed here; callers own the ``Console``.
"""

from dataclasses import dataclass

from rich.console import Console, RenderableType
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text


@dataclass(frozen=True)
class Theme:
    name: str
    panel_style: str
    border_style: str
    code_theme: str


LIGHT_THEME = Theme(
    name="light",
    panel_style="black on grey93",
    border_style="blue",
    code_theme="friendly",
)
DARK_THEME = Theme(
    name="dark",
    panel_style="grey93 on grey11",
    border_style="cyan",
    code_theme="monokai",
)


def theme_for(dark: bool) -> Theme:
    return DARK_THEME if dark else LIGHT_THEME


def build_summary_panel(markdown: str, title: str, dark: bool = False) -> Panel:
    """Frame the rendered ``markdown`` in a themed panel.

    An empty summary is shown as a dim placeholder line rather than an
    empty box.
    """
    theme = theme_for(dark)
    body: RenderableType
    if markdown.strip():
        body = Markdown(markdown, code_theme=theme.code_theme)
    else:
        body = Text("(The model returned an empty summary.)", style="dim italic")
    return Panel(
        body,
        title=Text(title, style="bold"),
        subtitle=Text(f"{theme.name} mode", style="dim"),
        style=theme.panel_style,
        border_style=theme.border_style,
        padding=(1, 2),
    )


def render_summary(
    console: Console, markdown: str, title: str, dark: bool = False
) -> None:
    console.print(build_summary_panel(markdown, title, dark=dark))


def build_error_panel(message: str, raw_body: str | None = None) -> Panel:
    """Panel describing a failed request, with the raw server reply if any."""
    body = Text()
    body.append(message.strip() + "\n", style="bold")
    if raw_body is not None:
        body.append("\nRaw response:\n", style="bold")
        body.append(raw_body if raw_body else "(empty body)")
    return Panel(body, title=Text("API Error", style="bold red"), border_style="red")
