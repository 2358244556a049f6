"""Copy text to the system clipboard through the platform's CLI tool.

macOS uses ``pbcopy`` and Windows ``clip``.  Elsewhere the first available
of ``wl-copy``, ``xclip`` and ``xsel`` is used.
"""

import logging
import shutil
import subprocess
import sys

from llm_summarize.models import ClipboardError

logger = logging.getLogger(__name__)

_PLATFORM_COMMANDS: dict[str, list[list[str]]] = {
    "darwin": [["pbcopy"]],
    "win32": [["clip"]],
}
_UNIX_COMMANDS = [
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
]


def clipboard_command(platform: str | None = None) -> list[str] | None:
    """Return the clipboard command for ``platform``, or ``None`` if absent."""
    platform = platform or sys.platform
    for command in _PLATFORM_COMMANDS.get(platform, _UNIX_COMMANDS):
        if shutil.which(command[0]):
            return command
    return None


def copy_to_clipboard(text: str) -> bool:
    """Place ``text`` on the clipboard.

    Returns:
        ``False`` if no clipboard tool is installed, ``True`` on success.

    Raises:
        ClipboardError: if the tool cannot be started or exits non-zero.
    """
    command = clipboard_command()
    if command is None:
        logger.warning("No clipboard tool found (pbcopy, clip, wl-copy, xclip, xsel)")
        return False

    # clip.exe reads the console code page unless given a UTF-16 BOM.
    encoding = "utf-16" if command[0] == "clip" else "utf-8"
    try:
        # wl-copy and xclip fork a server that keeps inherited pipes open, so
        # nothing is captured.
        subprocess.run(
            command,
            input=text.encode(encoding),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise ClipboardError(f"{command[0]} failed: {e}") from e
    logger.debug("Copied %s chars with %s", f"{len(text):,}", command[0])
    return True
