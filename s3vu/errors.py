"""Error taxonomy for S3 operations.

Every failure raised by :mod:`s3vu` is an :class:`S3ModuleError`
carrying the operation name, the bucket/key it targeted and a
human-readable diagnostic. The underlying boto3/botocore exception is
kept as ``__cause__``.
"""

from __future__ import annotations

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError
from urllib3.exceptions import HTTPError as Urllib3HTTPError

_NOT_FOUND_CODES = ("NoSuchKey", "NoSuchBucket", "404", "NotFound")


class S3ModuleError(Exception):
    """Base class for all s3vu failures."""

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        bucket: str | None = None,
        key: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.bucket = bucket
        self.key = key


class ConfigurationError(S3ModuleError):
    """Client construction failed; the handle must not be used."""


class InvalidRequestError(S3ModuleError, ValueError):
    """Arguments rejected locally before any request was made."""


class LocalIOError(S3ModuleError):
    """Source file missing or unreadable; nothing was uploaded."""


class TransportError(S3ModuleError):
    """Network failure, timeout or malformed response."""


class RemoteRejectionError(S3ModuleError):
    """The object store answered with a protocol-level error."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        status: int = 0,
        **kwargs: str | None,
    ) -> None:
        super().__init__(message, **kwargs)
        self.code = code
        self.status = status


def _client_error_details(exc: ClientError) -> tuple[str, int]:
    code = exc.response.get("Error", {}).get("Code", "")
    status = exc.response.get(
        "ResponseMetadata", {},
    ).get("HTTPStatusCode", 0)
    return str(code), int(status or 0)


def classify(
    exc: BaseException,
    *,
    operation: str,
    bucket: str | None = None,
    key: str | None = None,
) -> S3ModuleError:
    """Map an exception raised by boto3/botocore to the taxonomy.

    Args:
        exc: The exception to classify.
        operation: Name of the failing operation.
        bucket: Target bucket.
        key: Target object key.

    Returns:
        An :class:`S3ModuleError` subclass instance (not raised).
    """
    if isinstance(exc, S3ModuleError):
        return exc

    target = f"{bucket}/{key}" if key is not None else str(bucket)
    message = f"{operation} {target}: {exc}"

    if isinstance(exc, ClientError):
        code, status = _client_error_details(exc)
        return RemoteRejectionError(
            message, code=code, status=status,
            operation=operation, bucket=bucket, key=key,
        )
    if isinstance(exc, S3UploadFailedError):
        # Wraps the ClientError of the failing part or completion call
        cause = exc.__cause__ or exc.__context__
        code, status = (
            _client_error_details(cause)
            if isinstance(cause, ClientError) else ("", 0)
        )
        return RemoteRejectionError(
            message, code=code, status=status,
            operation=operation, bucket=bucket, key=key,
        )
    if isinstance(exc, (
        BotoCoreError, Urllib3HTTPError, ConnectionError, TimeoutError,
    )):
        return TransportError(
            message, operation=operation, bucket=bucket, key=key,
        )
    if isinstance(exc, OSError):
        return LocalIOError(
            message, operation=operation, bucket=bucket, key=key,
        )
    return S3ModuleError(
        message, operation=operation, bucket=bucket, key=key,
    )


def is_not_found_error(exc: BaseException) -> bool:
    """Check if an error means the bucket or object does not exist.

    Args:
        exc: Exception to check.

    Returns:
        True if the error indicates the object was not found.
    """
    if isinstance(exc, RemoteRejectionError):
        return exc.code in _NOT_FOUND_CODES or exc.status == 404
    if isinstance(exc, ClientError):
        code, status = _client_error_details(exc)
        return code in _NOT_FOUND_CODES or status == 404
    return False
