"""Base class for scenarios.

A scenario is the benchmarking script a VU runs: ``setup`` once to
obtain a client handle, then ``iteration`` over and over. Connection
settings default to :mod:`s3vu.config`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from s3vu.client import ClientHandle
from s3vu.config import (
    S3_ACCESS_KEY_ID,
    S3_BUCKET,
    S3_ENDPOINT,
    S3_REGION,
    S3_SECRET_ACCESS_KEY,
)
from s3vu.module import S3
from s3vu.utils import object_key

if TYPE_CHECKING:
    from s3vu.runner import VUContext


class Scenario:
    """Base class for scenarios."""

    name = "base"

    def __init__(
        self,
        *,
        bucket: str | None = None,
        endpoint: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        region: str | None = None,
    ) -> None:
        self.bucket = bucket or S3_BUCKET
        self.endpoint = endpoint or S3_ENDPOINT
        self.access_key = S3_ACCESS_KEY_ID if access_key is None else access_key
        self.secret_key = (
            S3_SECRET_ACCESS_KEY if secret_key is None else secret_key
        )
        self.region = region or S3_REGION

    def setup(self, s3: S3) -> ClientHandle:
        """Create the VU's client handle. Runs once per VU."""
        return s3.create(
            self.access_key, self.secret_key, self.endpoint, self.region,
        )

    def new_key(self, vu: VUContext) -> str:
        return object_key(self.name, vu.vu_id)

    def iteration(self, s3: S3, client: ClientHandle, vu: VUContext) -> int:
        """Run one iteration and return the number of bytes moved."""
        raise NotImplementedError("Subclasses must implement iteration()")
