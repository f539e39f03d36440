"""Tests for file digests."""

import io
from pathlib import Path

import pytest

from vtapi.exceptions import InvalidResourceError
from vtapi.hashing import resource_for, resource_from_file, sha256_hex

_EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
_ABC_SHA256 = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


class TestSha256Hex:
    def test_known_digests(self) -> None:
        assert sha256_hex(b"") == _EMPTY_SHA256
        assert sha256_hex(b"abc") == _ABC_SHA256

    def test_lowercase_hex_of_64_chars(self) -> None:
        digest = sha256_hex(b"\x00" * 1000)
        assert len(digest) == 64
        assert digest == digest.lower()


class TestResourceFromFile:
    def test_bytes(self) -> None:
        assert resource_from_file(b"abc") == _ABC_SHA256

    def test_bytearray_and_memoryview(self) -> None:
        assert resource_from_file(bytearray(b"abc")) == _ABC_SHA256
        assert resource_from_file(memoryview(b"abc")) == _ABC_SHA256

    def test_path(self, tmp_path: Path) -> None:
        sample = tmp_path / "sample.bin"
        sample.write_bytes(b"abc")
        assert resource_from_file(sample) == _ABC_SHA256

    def test_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            resource_from_file(tmp_path / "missing.bin")

    def test_handle(self) -> None:
        assert resource_from_file(io.BytesIO(b"abc")) == _ABC_SHA256

    def test_large_handle_read_in_chunks(self) -> None:
        data = b"x" * (200 * 1024 + 7)
        assert resource_from_file(io.BytesIO(data)) == sha256_hex(data)

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError):
            resource_from_file(12345)  # type: ignore[arg-type]


class TestResourceFor:
    def test_string_is_validated_not_hashed(self) -> None:
        md5 = "99017f6eebbac24f351415dd410d522d"
        assert resource_for(md5) == md5

    def test_invalid_string_rejected(self) -> None:
        with pytest.raises(InvalidResourceError):
            resource_for("abc")

    def test_bytes_are_hashed(self) -> None:
        assert resource_for(b"abc") == _ABC_SHA256
