"""Utility functions — key naming, data file paths, formatting."""

from __future__ import annotations

import hashlib
import os
import random
import string
import time

from s3vu.config import DATA_DIR, OBJECT_PREFIX


def generate_random_suffix(length: int = 16) -> str:
    """Generate random suffix with S3-safe characters.

    Args:
        length: Length of suffix to generate.

    Returns:
        Random alphanumeric string safe for S3 keys.
    """
    safe_chars = (
        string.ascii_lowercase
        + string.ascii_uppercase
        + string.digits
        + "-_."
    )
    return "".join(
        random.choice(safe_chars) for _ in range(length)
    )


def object_key(scenario: str, vu_id: int) -> str:
    """Build a unique object key for one VU iteration.

    Keys look like ``{prefix}{scenario}/vu{id}/{micros}-{suffix}``.
    """
    return (
        f"{OBJECT_PREFIX}{scenario}/vu{vu_id}/"
        f"{int(time.time() * 1_000_000)}-{generate_random_suffix()}"
    )


def get_deterministic_filename(
    size_bytes: int,
    size_name: str,
) -> str:
    """Generate deterministic filename for pre-generated data.

    Args:
        size_bytes: File size in bytes.
        size_name: Human-readable size name.

    Returns:
        Deterministic filename string.
    """
    hash_input = f"s3vu-data-{size_bytes}".encode("utf-8")
    hash_digest = hashlib.md5(hash_input).hexdigest()[:8]
    return f"data-{size_name}-{hash_digest}.bin"


def data_file_path(size_bytes: int, size_name: str) -> str:
    """Absolute path of a pre-generated data file under ``DATA_DIR``."""
    return os.path.join(
        DATA_DIR, get_deterministic_filename(size_bytes, size_name),
    )


def parse_duration(duration_str: str) -> int:
    """Parse duration string to seconds.

    Args:
        duration_str: Duration like '30s', '5m', '1h', '2d', '1w', or
            a plain number of seconds.

    Returns:
        Duration in seconds.

    Raises:
        ValueError: If format is invalid.
    """
    duration_str = duration_str.strip().lower()

    if not duration_str:
        raise ValueError("Duration cannot be empty")

    if duration_str.isdigit():
        value = int(duration_str)
        unit = "s"
    elif duration_str[-1] in ("s", "m", "h", "d", "w"):
        try:
            value = int(duration_str[:-1])
            unit = duration_str[-1]
        except ValueError:
            raise ValueError(
                f"Invalid duration format: {duration_str}"
            )
    else:
        raise ValueError(
            f"Invalid duration format: {duration_str}. "
            f"Must end with s/m/h/d/w"
        )

    if value <= 0:
        raise ValueError(
            f"Duration must be positive: {duration_str}"
        )

    multipliers = {
        "s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800,
    }
    return value * multipliers[unit]


def format_duration(seconds: int) -> str:
    """Format seconds into human-readable duration.

    Args:
        seconds: Duration in seconds.

    Returns:
        Human-readable duration string.
    """
    if seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        return f"{seconds // 60}m"
    elif seconds < 86400:
        return f"{seconds // 3600}h"
    elif seconds < 604800:
        return f"{seconds // 86400}d"
    else:
        return f"{seconds // 604800}w"


def format_bytes(size: float) -> str:
    """Format bytes as human-readable string.

    Args:
        size: Size in bytes.

    Returns:
        Human-readable size string.
    """
    if size < 1024:
        return f"{size}B"
    elif size < 1024**2:
        return f"{size / 1024:.1f}KB"
    elif size < 1024**3:
        return f"{size / 1024**2:.1f}MB"
    else:
        return f"{size / 1024**3:.1f}GB"
