"""Data scenario: upload a random payload, then read it back.

Each iteration generates a fresh payload, uploads it from memory and
downloads the full range to check it arrived intact.
"""

from __future__ import annotations

from s3vu.client import ClientHandle
from s3vu.config import PAYLOAD_SIZE
from s3vu.module import S3
from s3vu.runner import VUContext
from s3vu.scenarios.base import Scenario


class DataIntegrityError(Exception):
    """Read-back bytes differ from what was uploaded."""


class DataScenario(Scenario):
    """In-memory upload followed by a verifying range read."""

    name = "data"

    def __init__(self, *, payload_size: int | None = None, **kwargs: str) -> None:
        super().__init__(**kwargs)
        self.payload_size = PAYLOAD_SIZE if payload_size is None else payload_size

    def iteration(self, s3: S3, client: ClientHandle, vu: VUContext) -> int:
        payload = s3.random_data(self.payload_size)
        if self.payload_size and not payload:
            raise RuntimeError("random payload generation failed")

        key = self.new_key(vu)
        s3.upload_data(client, self.bucket, key, payload)
        if not payload:
            return 0

        echoed = s3.download_data_range(
            client, self.bucket, key, 0, len(payload) - 1,
        )
        if echoed != payload:
            raise DataIntegrityError(
                f"{self.bucket}/{key}: read back {len(echoed)} bytes, "
                f"expected {len(payload)} matching bytes"
            )
        return len(payload) * 2
