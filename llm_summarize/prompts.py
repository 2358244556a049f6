"""Input file loading and LLM prompt builder.

``read_input_files`` reads every input as UTF-8 text, ``build_combined_input``
joins the contents into one block of text, and ``build_summary_prompt`` wraps
that block in the summarisation instruction.  Every call is stateless.
"""

import logging
from pathlib import Path
from typing import Sequence

from llm_summarize.models import InputFileError

logger = logging.getLogger(__name__)

FILE_SEPARATOR = "\n\n--- File: {name} ---\n\n"


def read_input_files(file_paths: Sequence[Path]) -> list[tuple[Path, str]]:
    """Read each path in order and return ``(path, text)`` pairs.

    Raises:
        InputFileError: for the first path that is missing, unreadable, or
            not valid UTF-8.  Nothing is returned for the other files.
    """
    contents: list[tuple[Path, str]] = []
    for path in file_paths:
        try:
            # Bytes, not read_text: line endings must reach the model as written.
            text = path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise InputFileError(path, f"not valid UTF-8 text ({e.reason})") from e
        except OSError as e:
            raise InputFileError(path, e.strerror or str(e)) from e
        logger.debug("Read %s (%s chars)", path.name, f"{len(text):,}")
        contents.append((path, text))
    return contents


def build_combined_input(contents: Sequence[tuple[Path, str]]) -> str:
    """Join file contents into the text sent to the model.

    A single file is passed through unchanged.  With several files, each
    file's content is preceded by a ``--- File: <basename> ---`` separator so
    the model can tell them apart.
    """
    if len(contents) == 1:
        return contents[0][1]
    return "".join(
        FILE_SEPARATOR.format(name=path.name) + text for path, text in contents
    )


def build_summary_prompt(combined_input: str, file_count: int) -> str:
    """Wrap the combined input in the summarisation instruction.

    Args:
        combined_input: Output of ``build_combined_input``.
        file_count:     Number of files in ``combined_input``; only changes
                        the wording of the instruction.
    """
    subject = "this file" if file_count == 1 else f"these {file_count} files"
    return f"Summarize {subject} concisely in Markdown:\n\n{combined_input}"
