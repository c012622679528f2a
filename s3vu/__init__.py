from __future__ import annotations

# s3vu - Per-VU S3 load-test helper
"""
Usage:
    from s3vu import RootModule

    s3 = RootModule().new_module_instance(vu_id=0)
    client = s3.create(access_key, secret_key, "http://10.0.0.5:9000", "us-east-1")
    s3.upload_data(client, "bucket", "key", s3.random_data(1024))
"""

__version__ = "1.0.0"

from s3vu.client import ClientHandle, create
from s3vu.download import download_data_range
from s3vu.errors import (
    ConfigurationError,
    InvalidRequestError,
    LocalIOError,
    RemoteRejectionError,
    S3ModuleError,
    TransportError,
)
from s3vu.module import S3, RootModule
from s3vu.payload import random_data
from s3vu.transfer import upload, upload_data, upload_large_file

__all__ = [
    "ClientHandle",
    "ConfigurationError",
    "InvalidRequestError",
    "LocalIOError",
    "RemoteRejectionError",
    "RootModule",
    "S3",
    "S3ModuleError",
    "TransportError",
    "create",
    "download_data_range",
    "random_data",
    "upload",
    "upload_data",
    "upload_large_file",
]
