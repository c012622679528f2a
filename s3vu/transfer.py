"""Transfer operations — whole-file, multipart and in-memory uploads.

Usage::

    from s3vu.transfer import upload, upload_large_file, upload_data

    upload(handle, "bucket", "key", "/data/file.bin")
    upload_large_file(handle, "bucket", "big", "/data/big.bin", 8 * 1024**2, 4)
    upload_data(handle, "bucket", "key", payload)

None of these retry on their own: a failure is logged and raised as an
:class:`~s3vu.errors.S3ModuleError` subclass, and the caller decides
what to do next. Payloads are sent unsigned unless the handle was
created with ``unsigned_payload=False``.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, NoReturn

from boto3.s3.transfer import TransferConfig

from s3vu.client import ClientHandle
from s3vu.config import DEFAULT_CONCURRENCY, DEFAULT_PART_SIZE, MIN_PART_SIZE
from s3vu.errors import InvalidRequestError, LocalIOError, classify
from s3vu.logging_setup import get_logger

__all__ = [
    "upload",
    "upload_large_file",
    "upload_data",
    "multipart_config",
]

_Logger = logging.Logger | logging.LoggerAdapter


def _open_source(
    file_path: str,
    *,
    operation: str,
    bucket: str,
    key: str,
    logger: _Logger,
) -> BinaryIO:
    try:
        return open(file_path, "rb")
    except OSError as exc:
        logger.error(
            f"Unable to open file {file_path} to upload: {exc}",
            extra={"op_type": operation, "bucket": bucket, "key": key},
        )
        raise LocalIOError(
            f"{operation} {bucket}/{key}: cannot open {file_path}: {exc}",
            operation=operation, bucket=bucket, key=key,
        ) from exc


def _fail(
    exc: Exception,
    *,
    operation: str,
    bucket: str,
    key: str,
    source: str,
    logger: _Logger,
) -> NoReturn:
    error = classify(exc, operation=operation, bucket=bucket, key=key)
    logger.error(
        f"Unable to upload {source} to {bucket}/{key}: {exc}",
        extra={"op_type": operation, "bucket": bucket, "key": key},
    )
    if error is exc:
        raise error
    raise error from exc


def multipart_config(part_size: int, concurrency: int) -> TransferConfig:
    """Build the transfer configuration for a multipart upload.

    Args:
        part_size: Bytes per part. ``0`` selects ``DEFAULT_PART_SIZE``.
        concurrency: Parts in flight at once. ``0`` selects
            ``DEFAULT_CONCURRENCY``.

    Returns:
        A ``TransferConfig`` for ``upload_fileobj``.

    Raises:
        InvalidRequestError: If the part size is below the protocol
            minimum or concurrency is negative.
    """
    if part_size == 0:
        part_size = DEFAULT_PART_SIZE
    if part_size < MIN_PART_SIZE:
        raise InvalidRequestError(
            f"part size must be at least {MIN_PART_SIZE} bytes, "
            f"got {part_size}",
            operation="upload_large_file",
        )
    if concurrency == 0:
        concurrency = DEFAULT_CONCURRENCY
    if concurrency < 0:
        raise InvalidRequestError(
            f"concurrency must be >= 0, got {concurrency}",
            operation="upload_large_file",
        )
    # Objects no larger than one part go out as a single PUT
    return TransferConfig(
        multipart_threshold=part_size + 1,
        multipart_chunksize=part_size,
        max_concurrency=concurrency,
        use_threads=True,
        preferred_transfer_client="classic",
    )


def upload(
    client: ClientHandle,
    bucket: str,
    key: str,
    file_path: str,
    logger: _Logger | None = None,
) -> None:
    """Upload a file as one object with a single PUT.

    Args:
        client: Client handle from :func:`s3vu.client.create`.
        bucket: Target bucket.
        key: Target object key.
        file_path: Local file to upload.
        logger: Optional logger for diagnostics.

    Raises:
        LocalIOError: If the file cannot be opened (no request is sent).
        TransportError: On network failure.
        RemoteRejectionError: If the store rejects the request.
    """
    log = logger or get_logger()
    with _open_source(
        file_path, operation="upload", bucket=bucket, key=key, logger=log,
    ) as f:
        try:
            client.client.put_object(Bucket=bucket, Key=key, Body=f)
        except Exception as exc:
            _fail(
                exc, operation="upload", bucket=bucket, key=key,
                source=f"file {file_path}", logger=log,
            )


def upload_large_file(
    client: ClientHandle,
    bucket: str,
    key: str,
    file_path: str,
    part_size: int,
    concurrency: int,
    logger: _Logger | None = None,
) -> None:
    """Upload a file with a concurrent multipart upload.

    The file is split into ``part_size`` parts, at most ``concurrency``
    of which are in flight at once. The object only appears once every
    part has been stored and the upload has been completed. If a part
    fails, the transfer manager aborts the multipart upload.

    Args:
        client: Client handle from :func:`s3vu.client.create`.
        bucket: Target bucket.
        key: Target object key.
        file_path: Local file to upload.
        part_size: Bytes per part (0 for the default, min 5 MiB).
        concurrency: Parts uploaded in parallel (0 for the default).
        logger: Optional logger for diagnostics.

    Raises:
        InvalidRequestError: If part size or concurrency is invalid.
        LocalIOError: If the file cannot be opened.
        TransportError: On network failure.
        RemoteRejectionError: If the store rejects a part or the
            completion request.
    """
    log = logger or get_logger()
    try:
        config = multipart_config(part_size, concurrency)
    except InvalidRequestError as exc:
        exc.bucket, exc.key = bucket, key
        log.error(
            f"Unable to upload large file {file_path} to {bucket}/{key}: {exc}",
            extra={"op_type": "upload_large_file", "bucket": bucket, "key": key},
        )
        raise
    with _open_source(
        file_path, operation="upload_large_file", bucket=bucket, key=key,
        logger=log,
    ) as f:
        try:
            client.client.upload_fileobj(f, bucket, key, Config=config)
        except Exception as exc:
            _fail(
                exc, operation="upload_large_file", bucket=bucket, key=key,
                source=f"large file {file_path}", logger=log,
            )


def upload_data(
    client: ClientHandle,
    bucket: str,
    key: str,
    data: bytes | bytearray | memoryview,
    logger: _Logger | None = None,
) -> None:
    """Upload an in-memory buffer as one object.

    Args:
        client: Client handle from :func:`s3vu.client.create`.
        bucket: Target bucket.
        key: Target object key.
        data: Object body.
        logger: Optional logger for diagnostics.

    Raises:
        InvalidRequestError: If ``data`` is not a bytes-like buffer.
        TransportError: On network failure.
        RemoteRejectionError: If the store rejects the request.
    """
    log = logger or get_logger()
    if not isinstance(data, (bytes, bytearray, memoryview)):
        log.error(
            f"Unable to upload bytes to {bucket}/{key}: "
            f"expected a bytes-like buffer, got {type(data).__name__}",
            extra={"op_type": "upload_data", "bucket": bucket, "key": key},
        )
        raise InvalidRequestError(
            f"upload_data {bucket}/{key}: expected a bytes-like buffer, "
            f"got {type(data).__name__}",
            operation="upload_data", bucket=bucket, key=key,
        )
    try:
        client.client.put_object(
            Bucket=bucket, Key=key, Body=memoryview(data).tobytes(),
        )
    except Exception as exc:
        _fail(
            exc, operation="upload_data", bucket=bucket, key=key,
            source="bytes", logger=log,
        )
