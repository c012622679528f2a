"""Endpoint configuration — builds ready-to-use client handles.

Usage::

    from s3vu.client import create

    handle = create("ACCESS_KEY", "SECRET_KEY", "http://10.0.0.5:9000", "us-east-1")
    handle.client.put_object(Bucket="bucket", Key="key", Body=b"...")

Every handle targets the given endpoint (region-derived endpoints are
never used) with path-style addressing, so bucket names travel in the
URL path. This is what self-hosted S3-compatible stores expect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import boto3
import urllib3
from botocore.config import Config
from botocore.exceptions import BotoCoreError

from s3vu.config import (
    S3_CONNECT_TIMEOUT,
    S3_MAX_ATTEMPTS,
    S3_READ_TIMEOUT,
    S3_UNSIGNED_PAYLOAD,
    S3_VERIFY_SSL,
)
from s3vu.errors import ConfigurationError
from s3vu.logging_setup import get_logger


@dataclass(frozen=True)
class ClientHandle:
    """Immutable handle around a configured boto3 S3 client.

    boto3 clients are thread-safe, so one handle may be shared by any
    number of concurrent operations.

    Attributes:
        endpoint: Endpoint URL every request is sent to.
        region: Region used for request signing.
        access_key: Access key ID of the static credentials.
        path_style: Bucket name is part of the URL path.
        unsigned_payload: Request bodies are not hashed for signing.
        client: The underlying boto3 S3 client.
    """

    endpoint: str
    region: str
    access_key: str
    path_style: bool
    unsigned_payload: bool
    client: Any = field(repr=False, compare=False)


def _build_config(
    *,
    unsigned_payload: bool,
    max_attempts: int | None,
    connect_timeout: float,
    read_timeout: float,
) -> Config:
    s3_options: dict[str, Any] = {
        "addressing_style": "path",
        "payload_signing_enabled": not unsigned_payload,
    }
    options: dict[str, Any] = {
        "s3": s3_options,
        "connect_timeout": connect_timeout,
        "read_timeout": read_timeout,
    }
    if unsigned_payload:
        # No CRC/MD5 over the body either unless the operation demands it
        options["request_checksum_calculation"] = "when_required"
        options["response_checksum_validation"] = "when_required"
    if max_attempts is not None:
        options["retries"] = {"total_max_attempts": max_attempts}
    return Config(**options)


def create(
    access_key: str,
    secret_key: str,
    endpoint: str,
    region: str,
    *,
    unsigned_payload: bool | None = None,
    verify_ssl: bool | None = None,
    max_attempts: int | None = None,
    connect_timeout: float | None = None,
    read_timeout: float | None = None,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> ClientHandle:
    """Create a client handle for an S3-compatible endpoint.

    Only local configuration is assembled; no request is sent.

    Args:
        access_key: Static access key ID.
        secret_key: Static secret access key.
        endpoint: Endpoint URL, e.g. ``http://10.0.0.5:9000``.
        region: Signing region.
        unsigned_payload: Skip payload hashing (``UNSIGNED-PAYLOAD``).
            Defaults to ``S3_UNSIGNED_PAYLOAD``.
        verify_ssl: Verify TLS certificates. Defaults to
            ``S3_VERIFY_SSL``.
        max_attempts: Total attempts per request including the first.
            ``None`` keeps botocore's retry defaults.
        connect_timeout: Socket connect timeout in seconds.
        read_timeout: Socket read timeout in seconds.
        logger: Optional logger for diagnostics.

    Returns:
        A ready-to-use :class:`ClientHandle`.

    Raises:
        ConfigurationError: If the client cannot be configured.
    """
    log = logger or get_logger()
    if unsigned_payload is None:
        unsigned_payload = S3_UNSIGNED_PAYLOAD
    if verify_ssl is None:
        verify_ssl = S3_VERIFY_SSL
    if max_attempts is None:
        max_attempts = S3_MAX_ATTEMPTS

    if not verify_ssl:
        # Self-signed certificates are the norm on test clusters
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    try:
        config = _build_config(
            unsigned_payload=unsigned_payload,
            max_attempts=max_attempts,
            connect_timeout=(
                S3_CONNECT_TIMEOUT if connect_timeout is None
                else connect_timeout
            ),
            read_timeout=(
                S3_READ_TIMEOUT if read_timeout is None
                else read_timeout
            ),
        )
        # A private session keeps the shared credential chain out
        session = boto3.session.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            aws_session_token=None,
            region_name=region,
        )
        client = session.client(
            "s3",
            endpoint_url=endpoint,
            verify=verify_ssl,
            config=config,
        )
    except (BotoCoreError, ValueError, TypeError) as exc:
        log.error(
            f"Unable to load config for {endpoint} ({region}): {exc}",
            extra={"op_type": "create"},
        )
        raise ConfigurationError(
            f"create {endpoint}: {exc}", operation="create",
        ) from exc

    return ClientHandle(
        endpoint=endpoint,
        region=region,
        access_key=access_key,
        path_style=True,
        unsigned_payload=unsigned_payload,
        client=client,
    )
