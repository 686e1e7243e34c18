"""Hash utilities for plugin integrity records."""

import hashlib
from pathlib import Path


def make_hash(*parts: bytes | str) -> str:
    """Calculate the SHA-512 digest of the concatenated parts.

    Strings are encoded as UTF-8 before hashing. The result is what gets stored
    in the ``checksum`` field of a plugin record.

    Args:
        *parts: Byte buffers or strings to hash, in order

    Returns:
        SHA-512 hash as hexadecimal string
    """
    hash_sha512 = hashlib.sha512()
    for part in parts:
        if isinstance(part, str):
            part = part.encode('utf-8')
        hash_sha512.update(part)
    return hash_sha512.hexdigest()


def calculate_file_hash(file_path: Path, chunk_size: int = 65536) -> str:
    """Calculate the SHA-512 digest of file content.

    Memory efficient with chunk-based reading for large files. The digest equals
    ``make_hash(file_path.read_bytes())``.

    Args:
        file_path: Path to the file to hash
        chunk_size: Size of chunks to read (64KB default)

    Returns:
        SHA-512 hash as hexadecimal string

    Raises:
        FileNotFoundError: If file doesn't exist
        IOError: If file cannot be read
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hash_sha512 = hashlib.sha512()

    try:
        with open(file_path, 'rb') as f:
            while chunk := f.read(chunk_size):
                hash_sha512.update(chunk)
    except IOError as e:
        raise IOError(f"Error reading file {file_path}: {e}")

    return hash_sha512.hexdigest()


def is_valid_hash(value: str) -> bool:
    """Check that a stored checksum looks like a SHA-512 hex digest."""
    return len(value) == 128 and all(c in '0123456789abcdef' for c in value.lower())
