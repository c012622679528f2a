"""Random payloads for synthetic upload workloads."""

from __future__ import annotations

import logging
import os
import tempfile

from s3vu.errors import InvalidRequestError
from s3vu.logging_setup import get_logger

DEFAULT_CHUNK_SIZE = 1024 * 1024


def random_data(
    size: int,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> bytes:
    """Generate ``size`` cryptographically random bytes.

    Args:
        size: Number of bytes to generate.
        logger: Optional logger for diagnostics.

    Returns:
        Random bytes, or ``b""`` if the entropy source failed. An empty
        result for a non-zero ``size`` must be treated as a failure.

    Raises:
        InvalidRequestError: If ``size`` is negative.
    """
    if size < 0:
        raise InvalidRequestError(
            f"random_data: size must be >= 0, got {size}",
            operation="random_data",
        )
    try:
        return os.urandom(size)
    except (OSError, NotImplementedError) as exc:
        (logger or get_logger()).error(
            f"Unable to generate random byte buffer: {exc}",
            extra={"op_type": "random_data"},
        )
        return b""


def write_random_file(
    path: str,
    size: int,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> bool:
    """Write an uncompressible file of ``size`` random bytes.

    The file is written to a temporary name in the same directory and
    linked into place, so concurrent writers never expose a partial
    file. An existing file of the right size is left untouched.

    Args:
        path: Destination file path.
        size: File size in bytes.
        chunk_size: Bytes generated per write.

    Returns:
        True if the file was created, False if it already existed.

    Raises:
        OSError: If the file exists with a different size or cannot
            be written.
    """
    if os.path.exists(path):
        actual = os.path.getsize(path)
        if actual != size:
            raise OSError(
                f"{path} exists but has incorrect size "
                f"({actual} != {size})"
            )
        return False

    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    temp_fd, temp_path = tempfile.mkstemp(
        dir=directory, prefix=".tmp-", suffix=".bin",
    )
    try:
        written = 0
        with os.fdopen(temp_fd, "wb") as f:
            while written < size:
                n = min(chunk_size, size - written)
                f.write(os.urandom(n))
                written += n
        try:
            os.link(temp_path, path)
        except FileExistsError:
            # Another writer won the race
            if os.path.getsize(path) != size:
                raise
            return False
        return True
    finally:
        os.unlink(temp_path)
