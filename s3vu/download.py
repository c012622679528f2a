"""Range reads — fetch a byte slice of a stored object into memory."""

from __future__ import annotations

import logging

from s3vu.client import ClientHandle
from s3vu.errors import TransportError, classify
from s3vu.logging_setup import get_logger

__all__ = ["download_data_range", "format_range"]


def format_range(begin: int, end: int) -> str:
    """Format an inclusive ``[begin, end]`` pair as an HTTP Range value.

    No normalisation is applied; what the store does with an inverted
    or out-of-bounds range is up to the store.
    """
    return f"bytes={begin}-{end}"


def download_data_range(
    client: ClientHandle,
    bucket: str,
    key: str,
    begin: int,
    end: int,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> bytes:
    """Download bytes ``begin`` through ``end`` (inclusive) of an object.

    The whole response body is read before returning. If reading the
    body fails part-way, the partial data is discarded.

    Args:
        client: Client handle from :func:`s3vu.client.create`.
        bucket: Source bucket.
        key: Source object key.
        begin: First byte offset.
        end: Last byte offset (inclusive).
        logger: Optional logger for diagnostics.

    Returns:
        The requested bytes.

    Raises:
        TransportError: On network failure or an interrupted body read.
        RemoteRejectionError: If the bucket/key is missing or the store
            rejects the range.
    """
    log = logger or get_logger()
    extra = {"op_type": "download_data_range", "bucket": bucket, "key": key}

    try:
        response = client.client.get_object(
            Bucket=bucket, Key=key, Range=format_range(begin, end),
        )
    except Exception as exc:
        log.error(
            f"Unable to download bytes from {bucket}/{key}: {exc}",
            extra=extra,
        )
        raise classify(
            exc, operation="download_data_range", bucket=bucket, key=key,
        ) from exc

    body = response["Body"]
    try:
        return body.read()
    except Exception as exc:
        log.error(
            f"Unable to read bytes from {bucket}/{key}: {exc}",
            extra=extra,
        )
        # Whatever broke mid-body, the read is a transport failure
        raise TransportError(
            f"download_data_range {bucket}/{key}: {exc}",
            operation="download_data_range", bucket=bucket, key=key,
        ) from exc
    finally:
        body.close()
