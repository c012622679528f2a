"""Upload scenario: PUT a pre-generated file, once per iteration.

Needs the data files from ``s3vu init-data``.
"""

from __future__ import annotations

import os

from s3vu.client import ClientHandle
from s3vu.config import DATA_FILE_SIZES, UPLOAD_FILE_SIZE
from s3vu.module import S3
from s3vu.runner import VUContext
from s3vu.scenarios.base import Scenario
from s3vu.utils import data_file_path


class UploadScenario(Scenario):
    """Whole-file upload of one data file per iteration."""

    name = "upload"

    def __init__(self, *, file_path: str | None = None, **kwargs: str) -> None:
        super().__init__(**kwargs)
        if file_path is None:
            file_path = data_file_path(
                DATA_FILE_SIZES[UPLOAD_FILE_SIZE], UPLOAD_FILE_SIZE,
            )
        self.file_path = file_path

    def iteration(self, s3: S3, client: ClientHandle, vu: VUContext) -> int:
        s3.upload(client, self.bucket, self.new_key(vu), self.file_path)
        return os.path.getsize(self.file_path)
