"""
JSON File Storage Implementation

Each key is stored as its own file under a data directory, so a user's
expense collection lives in `<data_dir>/<prefix>_expenses_<user_id>.json`.

TRADEOFFS:
- Whole-file rewrites (fine for one person's manual entries)
- No locking between processes (one process owns the directory)

Writes go to a temporary file first and are moved into place with
os.replace, so readers see either the old value or the new one.
"""

import errno
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_tracker.services.storage.interface import (
    KeyValueStore,
    QuotaExceededError,
    StorageError,
)


_NO_SPACE_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


class JsonFileKeyValueStore(KeyValueStore):
    """File-per-key substrate rooted at a data directory."""

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        """Map a key to its file, refusing keys that escape the directory."""
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {key!r}: {e}")

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write(self, path: Path, value: str) -> None:
        """Write through a temp file in the same directory, then swap it in."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self._write(path, value)
        except OSError as e:
            if e.errno in _NO_SPACE_ERRNOS:
                raise QuotaExceededError(f"No space left to store {key!r}: {e}")
            raise StorageError(f"Failed to write {key!r}: {e}")

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {key!r}: {e}")
