"""Init data command — create the random source files scenarios upload."""

from __future__ import annotations

from argparse import Namespace

from s3vu.config import DATA_DIR, DATA_FILE_SIZES
from s3vu.payload import write_random_file
from s3vu.utils import data_file_path, format_bytes


def cmd_init_data(args: Namespace) -> int:
    """Create uncompressible data files under ``DATA_DIR``.

    Files are created atomically, so several VU hosts sharing one
    directory can run this at the same time.
    """
    print("s3vu Data Initialization")
    print("=" * 60)
    print(f"Data directory: {DATA_DIR}")
    print()

    created_count = 0
    existing_count = 0
    total_size = 0

    for size_name, size_bytes in DATA_FILE_SIZES.items():
        path = data_file_path(size_bytes, size_name)
        try:
            created = write_random_file(path, size_bytes)
        except OSError as e:
            print(f"FAIL {path}: {e}")
            return 1
        if created:
            print(f"OK Created {path} ({format_bytes(size_bytes)})")
            created_count += 1
        else:
            print(f"OK {path} already exists ({format_bytes(size_bytes)})")
            existing_count += 1
        total_size += size_bytes

    print()
    print("=" * 60)
    print("Summary:")
    print(f"  Created: {created_count}")
    print(f"  Already existed: {existing_count}")
    print(f"  Total size: {format_bytes(total_size)}")
    return 0
