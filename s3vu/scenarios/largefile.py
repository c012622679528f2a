"""Large file scenario: multipart upload of a generated file.

The source file is created on first use under ``DATA_DIR``; part size
and part concurrency come from ``S3VU_PART_SIZE`` and
``S3VU_PART_CONCURRENCY``.
"""

from __future__ import annotations

import os

from s3vu.client import ClientHandle
from s3vu.config import DATA_DIR, LARGE_FILE_SIZE, PART_CONCURRENCY, PART_SIZE
from s3vu.module import S3
from s3vu.payload import write_random_file
from s3vu.runner import VUContext
from s3vu.scenarios.base import Scenario


class LargeFileScenario(Scenario):
    """Concurrent multipart upload per iteration."""

    name = "largefile"

    def __init__(
        self,
        *,
        file_path: str | None = None,
        file_size: int | None = None,
        part_size: int | None = None,
        concurrency: int | None = None,
        **kwargs: str,
    ) -> None:
        super().__init__(**kwargs)
        self.file_size = LARGE_FILE_SIZE if file_size is None else file_size
        self.file_path = file_path or os.path.join(
            DATA_DIR, f"large-{self.file_size}.bin",
        )
        self.part_size = PART_SIZE if part_size is None else part_size
        self.concurrency = (
            PART_CONCURRENCY if concurrency is None else concurrency
        )

    def setup(self, s3: S3) -> ClientHandle:
        if write_random_file(self.file_path, self.file_size):
            s3.logger.info(f"Created source file {self.file_path}")
        return super().setup(s3)

    def iteration(self, s3: S3, client: ClientHandle, vu: VUContext) -> int:
        s3.upload_large_file(
            client, self.bucket, self.new_key(vu), self.file_path,
            self.part_size, self.concurrency,
        )
        return self.file_size
