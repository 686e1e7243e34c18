import hashlib

import pytest

from skein.utils.hash_utils import make_hash, calculate_file_hash, is_valid_hash


def test_make_hash_is_sha512_hex():
    data = b"exports.name = 'exec'\n"
    assert make_hash(data) == hashlib.sha512(data).hexdigest()
    assert is_valid_hash(make_hash(data))


def test_make_hash_concatenates_parts():
    assert make_hash(b"ab", "cd") == make_hash(b"abcd")


def test_file_hash_matches_buffer_hash(tmp_path):
    data = bytes(range(256)) * 1000
    path = tmp_path / "plugin.cjs"
    path.write_bytes(data)

    assert calculate_file_hash(path, chunk_size=1024) == make_hash(data)


def test_file_hash_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        calculate_file_hash(tmp_path / "missing.cjs")


@pytest.mark.parametrize("value", ["", "abc", "z" * 128, "a" * 127])
def test_invalid_hash_values(value):
    assert not is_valid_hash(value)
