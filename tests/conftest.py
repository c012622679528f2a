"""Shared fixtures: an in-memory object store behind real botocore clients.

Requests never leave the process: :class:`FakeS3` answers botocore's
``before-send`` event, so serialization, signing, response parsing and
s3transfer's multipart machinery all run for real.
"""

from __future__ import annotations

import hashlib
import io
import itertools
import time
import xml.etree.ElementTree as ET
from threading import Lock
from typing import Any
from unittest.mock import MagicMock
from urllib.parse import parse_qs, unquote, urlsplit

import pytest
from botocore.awsrequest import AWSResponse

from s3vu.client import create

ENDPOINT = "http://localhost:9000"
BUCKET = "bucket"
ACCESS_KEY = "AKIDTEST"
SECRET_KEY = "secret-key"


class _RawBody:
    """Minimal urllib3-style response body."""

    def __init__(self, data: bytes) -> None:
        self._buf = io.BytesIO(data)

    def read(self, amt: int | None = None, **kwargs: Any) -> bytes:
        return self._buf.read(amt)

    def stream(self, amt: int = 65536, **kwargs: Any):
        while True:
            chunk = self._buf.read(amt)
            if not chunk:
                break
            yield chunk

    def close(self) -> None:
        pass


def _read_body(body: Any) -> bytes:
    if body is None:
        return b""
    if hasattr(body, "read"):
        return body.read()
    return bytes(body)


def _strip_ns(tag: str) -> str:
    return tag.split("}", 1)[-1]


class FakeS3:
    """Thread-safe in-memory S3 speaking just enough REST-XML."""

    def __init__(self, buckets: set[str] | None = None) -> None:
        self.buckets = buckets if buckets is not None else {BUCKET}
        self.objects: dict[tuple[str, str], bytes] = {}
        self.uploads: dict[str, dict[int, bytes]] = {}
        self.aborted: list[str] = []
        self.requests: list[Any] = []
        self.fail_part: int | None = None
        self.send_error: Exception | None = None
        self.truncate_body = False
        self.part_delay = 0.0
        self.peak_parts_in_flight = 0
        self._parts_in_flight = 0
        self._ids = itertools.count(1)
        self._lock = Lock()

    # -- helpers -----------------------------------------------------------

    def operations(self) -> list[str]:
        """Method and query of every request, e.g. ``"PUT ?partNumber"``."""
        ops = []
        for request in self.requests:
            query = parse_qs(
                urlsplit(request.url).query, keep_blank_values=True,
            )
            ops.append(
                f"{request.method} ?{'&'.join(sorted(query))}"
                if query else request.method
            )
        return ops

    @staticmethod
    def header(request: Any, name: str) -> str | None:
        """Header value as text; signed headers may arrive as bytes."""
        value = request.headers.get(name)
        if isinstance(value, bytes):
            return value.decode()
        return value

    @staticmethod
    def _response(
        request: Any,
        status: int,
        body: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> AWSResponse:
        hdrs = {"Content-Length": str(len(body))}
        hdrs.update(headers or {})
        return AWSResponse(request.url, status, hdrs, _RawBody(body))

    def _error(
        self, request: Any, status: int, code: str, message: str,
    ) -> AWSResponse:
        body = (
            '<?xml version="1.0" encoding="UTF-8"?>'
            f"<Error><Code>{code}</Code><Message>{message}</Message></Error>"
        ).encode()
        return self._response(
            request, status, body, {"Content-Type": "application/xml"},
        )

    # -- request handling ----------------------------------------------------

    def handle(self, request: Any, **kwargs: Any) -> AWSResponse:
        with self._lock:
            self.requests.append(request)
        if self.send_error is not None:
            raise self.send_error

        parts = urlsplit(request.url)
        bucket, _, key = unquote(parts.path).lstrip("/").partition("/")
        query = parse_qs(parts.query, keep_blank_values=True)

        if bucket not in self.buckets:
            return self._error(
                request, 404, "NoSuchBucket",
                "The specified bucket does not exist",
            )

        if request.method == "PUT" and "partNumber" in query:
            return self._upload_part(request, query)
        if request.method == "PUT":
            data = _read_body(request.body)
            with self._lock:
                self.objects[(bucket, key)] = data
            etag = hashlib.md5(data).hexdigest()
            return self._response(request, 200, headers={"ETag": f'"{etag}"'})
        if request.method == "POST" and "uploads" in query:
            return self._create_upload(request, bucket, key)
        if request.method == "POST" and "uploadId" in query:
            return self._complete_upload(request, bucket, key, query)
        if request.method == "DELETE" and "uploadId" in query:
            with self._lock:
                upload_id = query["uploadId"][0]
                self.uploads.pop(upload_id, None)
                self.aborted.append(upload_id)
            return self._response(request, 204)
        if request.method == "GET":
            return self._get(request, bucket, key)
        return self._error(request, 501, "NotImplemented", request.method)

    def _create_upload(self, request: Any, bucket: str, key: str) -> AWSResponse:
        with self._lock:
            upload_id = f"upload-{next(self._ids)}"
            self.uploads[upload_id] = {}
        body = (
            "<InitiateMultipartUploadResult>"
            f"<Bucket>{bucket}</Bucket><Key>{key}</Key>"
            f"<UploadId>{upload_id}</UploadId>"
            "</InitiateMultipartUploadResult>"
        ).encode()
        return self._response(request, 200, body)

    def _upload_part(self, request: Any, query: dict) -> AWSResponse:
        number = int(query["partNumber"][0])
        upload_id = query["uploadId"][0]
        data = _read_body(request.body)
        with self._lock:
            self._parts_in_flight += 1
            self.peak_parts_in_flight = max(
                self.peak_parts_in_flight, self._parts_in_flight,
            )
        try:
            if self.part_delay:
                time.sleep(self.part_delay)
            if number == self.fail_part:
                return self._error(request, 403, "AccessDenied", "Access Denied")
            with self._lock:
                if upload_id not in self.uploads:
                    return self._error(
                        request, 404, "NoSuchUpload", "Upload does not exist",
                    )
                self.uploads[upload_id][number] = data
        finally:
            with self._lock:
                self._parts_in_flight -= 1
        etag = hashlib.md5(data).hexdigest()
        return self._response(request, 200, headers={"ETag": f'"{etag}"'})

    def _complete_upload(
        self, request: Any, bucket: str, key: str, query: dict,
    ) -> AWSResponse:
        upload_id = query["uploadId"][0]
        manifest = ET.fromstring(_read_body(request.body))
        numbers = [
            int(child.text or "0")
            for part in manifest
            for child in part
            if _strip_ns(child.tag) == "PartNumber"
        ]
        with self._lock:
            stored = self.uploads.pop(upload_id, None)
            if stored is None:
                return self._error(
                    request, 404, "NoSuchUpload", "Upload does not exist",
                )
            self.objects[(bucket, key)] = b"".join(stored[n] for n in numbers)
        body = (
            "<CompleteMultipartUploadResult>"
            f"<Bucket>{bucket}</Bucket><Key>{key}</Key>"
            '<ETag>"complete"</ETag>'
            "</CompleteMultipartUploadResult>"
        ).encode()
        return self._response(request, 200, body)

    def _get(self, request: Any, bucket: str, key: str) -> AWSResponse:
        with self._lock:
            data = self.objects.get((bucket, key))
        if data is None:
            return self._error(
                request, 404, "NoSuchKey", "The specified key does not exist.",
            )
        range_header = self.header(request, "Range")
        status = 200
        headers: dict[str, str] = {}
        if range_header:
            begin_s, _, end_s = range_header.removeprefix("bytes=").partition("-")
            begin, end = int(begin_s), int(end_s)
            if begin >= len(data) or begin > end:
                return self._error(
                    request, 416, "InvalidRange",
                    "The requested range is not satisfiable",
                )
            end = min(end, len(data) - 1)
            headers["Content-Range"] = f"bytes {begin}-{end}/{len(data)}"
            data = data[begin:end + 1]
            status = 206
        response = self._response(request, status, data, headers)
        if self.truncate_body:
            response.raw = _RawBody(data[: len(data) // 2])
        return response


@pytest.fixture
def fake_s3() -> FakeS3:
    return FakeS3()


@pytest.fixture
def handle(fake_s3: FakeS3):
    """Client handle whose requests are answered by ``fake_s3``."""
    client_handle = create(
        ACCESS_KEY, SECRET_KEY, ENDPOINT, "us-east-1", max_attempts=1,
    )
    client_handle.client.meta.events.register(
        "before-send.s3", fake_s3.handle,
    )
    return client_handle


@pytest.fixture
def signed_handle(fake_s3: FakeS3):
    """Like ``handle`` but with payload signing turned on."""
    client_handle = create(
        ACCESS_KEY, SECRET_KEY, ENDPOINT, "us-east-1",
        unsigned_payload=False, max_attempts=1,
    )
    client_handle.client.meta.events.register(
        "before-send.s3", fake_s3.handle,
    )
    return client_handle


@pytest.fixture
def logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def make_file(tmp_path):
    """Write ``data`` to a temp file and return its path."""

    def _make(data: bytes, name: str = "source.bin") -> str:
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)

    return _make
