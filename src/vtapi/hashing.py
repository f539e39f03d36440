"""SHA-256 digests used in place of file content.

Reports, rescans, comments and links only ever send the digest of a file.
Only ``file/scan`` uploads the content itself.
"""

from __future__ import annotations

import hashlib
import os
from typing import IO, Union

from vtapi.validation import validate_resource

_CHUNK_SIZE = 64 * 1024

FileLike = Union[bytes, bytearray, memoryview, os.PathLike, IO[bytes]]


def sha256_hex(data: bytes | bytearray | memoryview) -> str:
    """Return the lowercase hex SHA-256 digest of ``data``."""
    return hashlib.sha256(data).hexdigest()


def _sha256_stream(handle: IO[bytes]) -> str:
    digest = hashlib.sha256()
    for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
        digest.update(chunk)
    return digest.hexdigest()


def resource_from_file(file: FileLike) -> str:
    """Hash raw bytes, a path on disk or an open binary handle.

    Raises:
        FileNotFoundError: If a path is given and does not exist.
        TypeError: If ``file`` is none of the supported kinds.
    """
    if isinstance(file, (bytes, bytearray, memoryview)):
        return sha256_hex(file)
    if isinstance(file, os.PathLike):
        with open(file, "rb") as handle:
            return _sha256_stream(handle)
    if hasattr(file, "read"):
        return _sha256_stream(file)
    msg = f"Cannot hash object of type {type(file).__name__}"
    raise TypeError(msg)


def resource_for(item: str | FileLike) -> str:
    """Turn a resource or a file into a resource identifier.

    Strings are taken as MD5/SHA1/SHA256/scan ids and validated. Anything
    else is treated as a file and replaced by its SHA-256 digest.
    """
    if isinstance(item, str):
        return validate_resource(item)
    return resource_from_file(item)
