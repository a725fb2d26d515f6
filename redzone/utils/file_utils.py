"""File utilities for safe file operations."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Union


def atomic_write(file_path: Union[str, Path], content: str) -> None:
    """Write content to a file atomically to prevent corruption from concurrent writes.

    The content goes to a temporary file in the same directory first and is
    then renamed over the target, so readers never observe a partial file.

    Args:
        file_path: Path to the target file
        content: Content to write to the file
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Same directory keeps the rename on one filesystem
    fd, temp_path = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(temp_path, file_path)
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def read_json(file_path: Union[str, Path]) -> Any:
    """Load a JSON document, raising ``json.JSONDecodeError``/``OSError`` on failure."""
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json(file_path: Union[str, Path], data: Any) -> None:
    """Serialize ``data`` to JSON and write it atomically."""
    atomic_write(file_path, json.dumps(data, indent=2))
