import time
from pathlib import PurePosixPath

_FALLBACK_NAME = "file"


def base_filename(filename: str) -> str:
    """Strip every directory component, treating ``\\`` as a separator too."""
    name = PurePosixPath(filename.replace("\\", "/")).name
    if name in ("", ".", ".."):
        return _FALLBACK_NAME
    return name


def current_timestamp_ms() -> int:
    return time.time_ns() // 1_000_000


def generate_storage_key(filename: str, timestamp_ms: int) -> str:
    """Build ``<timestamp_ms>-<basename>``.

    Uniqueness comes from the millisecond timestamp plus the name; two uploads
    of the same name within one millisecond map to the same key and the later
    PUT overwrites the earlier object.
    """
    return f"{timestamp_ms}-{base_filename(filename)}"
