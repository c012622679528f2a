"""Module facade — the per-VU access point to every operation.

The host runtime owns one :class:`RootModule` and asks it for one
:class:`S3` instance per virtual user, then hands that instance to the
VU's script. Nothing is registered globally.

Usage::

    root = RootModule()
    s3 = root.new_module_instance(vu_id=0, scenario="upload")

    client = s3.create("ACCESS_KEY", "SECRET_KEY", "http://10.0.0.5:9000", "us-east-1")
    s3.upload(client, "bucket", "key", "/data/file.bin")
"""

from __future__ import annotations

from s3vu import download, payload, transfer
from s3vu.client import ClientHandle, create
from s3vu.logging_setup import get_logger


class S3:
    """Operations exposed to one virtual user's script.

    Stateless apart from the logging context: all connection state
    lives in the :class:`~s3vu.client.ClientHandle` the script passes
    in, so a handle may be reused across any number of calls.
    """

    def __init__(
        self,
        vu_id: int | None = None,
        scenario: str | None = None,
    ) -> None:
        self.vu_id = vu_id
        self.scenario = scenario
        self.logger = get_logger(scenario=scenario, vu_id=vu_id)

    def create(
        self,
        access_key: str,
        secret_key: str,
        endpoint: str,
        region: str,
        **options: object,
    ) -> ClientHandle:
        """Create a client handle. See :func:`s3vu.client.create`.

        Logs go to the VU logger unless ``logger`` is passed explicitly.
        """
        options.setdefault("logger", self.logger)
        return create(access_key, secret_key, endpoint, region, **options)

    def random_data(self, size: int) -> bytes:
        """Generate random bytes. See :func:`s3vu.payload.random_data`."""
        return payload.random_data(size, self.logger)

    def upload(
        self,
        client: ClientHandle,
        bucket: str,
        key: str,
        file_path: str,
    ) -> None:
        """Upload a file with one PUT."""
        transfer.upload(client, bucket, key, file_path, self.logger)

    def upload_large_file(
        self,
        client: ClientHandle,
        bucket: str,
        key: str,
        file_path: str,
        part_size: int,
        concurrency: int,
    ) -> None:
        """Upload a file with a concurrent multipart upload."""
        transfer.upload_large_file(
            client, bucket, key, file_path, part_size, concurrency,
            self.logger,
        )

    def upload_data(
        self,
        client: ClientHandle,
        bucket: str,
        key: str,
        data: bytes | bytearray | memoryview,
    ) -> None:
        """Upload an in-memory buffer with one PUT."""
        transfer.upload_data(client, bucket, key, data, self.logger)

    def download_data_range(
        self,
        client: ClientHandle,
        bucket: str,
        key: str,
        begin: int,
        end: int,
    ) -> bytes:
        """Download an inclusive byte range of an object."""
        return download.download_data_range(
            client, bucket, key, begin, end, self.logger,
        )


class RootModule:
    """Factory the host runtime uses to build per-VU facades."""

    def new_module_instance(
        self,
        vu_id: int,
        scenario: str | None = None,
    ) -> S3:
        """Return a fresh :class:`S3` facade for one virtual user."""
        return S3(vu_id=vu_id, scenario=scenario)
