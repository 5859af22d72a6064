"""File name utilities.

Inputs are staged into the engine's working storage under a sanitized
name, so every argument that refers to an input uses that name rather
than the original path.
"""

from __future__ import annotations

import re
from pathlib import Path

# Characters that break ffmpeg argument parsing or are unsafe on common
# filesystems. Replaced with an underscore.
_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')

DEFAULT_FILE_NAME = "input"


def sanitize_file_name(name: str) -> str:
    """Make a file name safe for the engine's working storage.

    Args:
        name: Original file name (not a full path).

    Returns:
        Name with unsafe characters replaced. Leading dots and dashes are
        stripped so the name is never hidden or parsed as an option.
    """
    cleaned = _UNSAFE_CHARS.sub("_", name).strip()
    cleaned = cleaned.lstrip(".-")
    return cleaned or DEFAULT_FILE_NAME


def file_extension(name: str | Path) -> str:
    """Return the text after the last dot of a file name.

    A name without a dot is returned whole, so callers always get a
    non-empty token they can use as an extension.
    """
    text = str(name)
    return text[text.rfind(".") + 1 :]


def output_file_name(input_path: str | Path, extension: str | None = None) -> str:
    """Suggest an output file name for an input.

    Args:
        input_path: Path of the (first) input file.
        extension: Replacement extension, or None to keep the input's.

    Returns:
        Sanitized file name, with ``extension`` swapped in if provided.
    """
    name = sanitize_file_name(Path(input_path).name)
    if extension is None:
        return name
    stem = name[: name.rfind(".")] if "." in name else name
    return f"{stem}.{extension}"
