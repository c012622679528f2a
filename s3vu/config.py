"""Configuration — All tunables in one place.

Configuration is loaded from these sources (in priority order):
    1. Environment variables (highest priority)
    2. ``.env`` file in current working directory
    3. ``.env`` file in ``~/.s3vu/``
    4. Built-in defaults
"""

from __future__ import annotations

import os
from pathlib import Path


# ---------------------------------------------------------------------------
# Stdlib .env file loader (no external dependency)
# ---------------------------------------------------------------------------

def _load_dotenv() -> None:
    """Load KEY=VALUE pairs from a .env file into ``os.environ``.

    Searches the current working directory first, then ``~/.s3vu/``.
    Only sets variables that are not already present in the
    environment (env vars take priority).
    """
    candidates = [
        Path.cwd() / ".env",
        Path.home() / ".s3vu" / ".env",
    ]
    for env_path in candidates:
        if env_path.is_file():
            _parse_env_file(env_path)
            return


def _parse_env_file(path: Path) -> None:
    """Parse a .env file and inject into ``os.environ``."""
    try:
        with open(path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                # Strip surrounding quotes
                if (
                    len(value) >= 2
                    and value[0] == value[-1]
                    and value[0] in ('"', "'")
                ):
                    value = value[1:-1]
                if key not in os.environ:
                    os.environ[key] = value
    except OSError:
        pass


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("true", "1", "yes", "on")


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return float(raw)


# Load .env before reading any configuration
_load_dotenv()


# ---------------------------------------------------------------------------
# Logging Configuration
# ---------------------------------------------------------------------------
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_STATS_INTERVAL = 30

# ---------------------------------------------------------------------------
# S3 Connection
# ---------------------------------------------------------------------------
S3_ENDPOINT = os.environ.get("S3_ENDPOINT", "http://localhost:9000")
S3_ACCESS_KEY_ID = os.environ.get("AWS_ACCESS_KEY_ID", "")
S3_SECRET_ACCESS_KEY = os.environ.get("AWS_SECRET_ACCESS_KEY", "")
S3_BUCKET = os.environ.get("S3_BUCKET", "")
S3_REGION = os.environ.get("AWS_REGION", "us-east-1")

# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------
# Skip client-side body hashing (UNSIGNED-PAYLOAD). Trades payload
# integrity in the signature for upload throughput.
S3_UNSIGNED_PAYLOAD = _env_flag("S3_UNSIGNED_PAYLOAD", True)
S3_VERIFY_SSL = _env_flag("S3_VERIFY_SSL", False)
# None keeps botocore's own retry defaults.
S3_MAX_ATTEMPTS = _env_int("S3_MAX_ATTEMPTS", None)
S3_CONNECT_TIMEOUT = _env_float("S3_CONNECT_TIMEOUT", 10)
S3_READ_TIMEOUT = _env_float("S3_READ_TIMEOUT", 300)

# ---------------------------------------------------------------------------
# Multipart Upload
# ---------------------------------------------------------------------------
MIN_PART_SIZE = 5 * 1024 * 1024
DEFAULT_PART_SIZE = MIN_PART_SIZE
DEFAULT_CONCURRENCY = 5

# ---------------------------------------------------------------------------
# Path Configuration
# ---------------------------------------------------------------------------
DATA_DIR = os.environ.get(
    "S3VU_DATA_DIR", str(Path.cwd() / "data")
)

# ---------------------------------------------------------------------------
# Scenario Configuration
# ---------------------------------------------------------------------------
OBJECT_PREFIX = os.environ.get("S3VU_OBJECT_PREFIX", "s3vu/")
PAYLOAD_SIZE = _env_int("S3VU_PAYLOAD_SIZE", 64 * 1024)
LARGE_FILE_SIZE = _env_int("S3VU_LARGE_FILE_SIZE", 64 * 1024 * 1024)
PART_SIZE = _env_int("S3VU_PART_SIZE", DEFAULT_PART_SIZE)
PART_CONCURRENCY = _env_int("S3VU_PART_CONCURRENCY", DEFAULT_CONCURRENCY)

# Source files created by ``s3vu init-data``
DATA_FILE_SIZES: dict[str, int] = {
    "1kb": 1024,
    "64kb": 64 * 1024,
    "1mb": 1024 * 1024,
    "16mb": 16 * 1024 * 1024,
}
# Which of the above the ``upload`` scenario sends
UPLOAD_FILE_SIZE = os.environ.get("S3VU_UPLOAD_SIZE", "64kb")
