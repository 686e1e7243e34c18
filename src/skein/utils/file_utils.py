"""File writing utilities."""

import os
import tempfile
from pathlib import Path


def write_file(file_path: Path, data: bytes) -> None:
    """Write bytes to a file, creating parent directories as needed.

    Any previous content is fully replaced.

    :param file_path: Destination path
    :param data: Content to write
    :raises OSError: If the directory or the file cannot be written
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(data)


def atomic_write_text(file_path: Path, text: str) -> None:
    """Replace a text file atomically.

    The content goes to a temporary file in the same directory which is then
    renamed over the destination, so readers see either the old or the new file.

    :param file_path: Destination path
    :param text: Content to write (UTF-8)
    :raises OSError: If the file cannot be written
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(
                mode='w',
                encoding='utf-8',
                prefix=f".{file_path.name}.",
                suffix='.tmp',
                dir=file_path.parent,
                delete=False
        ) as temp_file:
            temp_path = Path(temp_file.name)
            temp_file.write(text)
            temp_file.flush()
            os.fsync(temp_file.fileno())

        temp_path.replace(file_path)
        temp_path = None  # Prevent cleanup
    finally:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
