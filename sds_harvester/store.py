"""Filesystem-backed store for cache entries and downloaded files."""

import logging
import threading
from pathlib import Path

from .config import DIR_MODE
from .errors import AlreadyExistsError, NotFoundError, StoreError

logger = logging.getLogger(__name__)


class ResourceStore:
    """Key to blob persistence over a directory of plain files.

    Paths are used as given; callers join them onto the directory they own.
    Every failure surfaces as a StoreError so the caller can decide whether
    to keep going.
    """

    def __init__(self):
        self._locks: dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def lock_for(self, path: Path) -> threading.Lock:
        """Return the mutex serialising check-then-write on one path."""
        key = Path(path)
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def exists(self, path: Path) -> bool:
        """True if a regular file is stored at path."""
        return Path(path).is_file()

    def read(self, path: Path) -> bytes:
        """Read an entry in full."""
        try:
            return Path(path).read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(f"No entry at {path}", path) from e
        except OSError as e:
            raise StoreError(f"Failed to read {path}: {e}", path) from e

    def write_once_append(self, path: Path, data: bytes) -> None:
        """Append data to path, creating the file if missing."""
        try:
            with open(path, "ab") as f:
                f.write(data)
        except OSError as e:
            raise StoreError(f"Failed to write {path}: {e}", path) from e

    def create_exclusive(self, path: Path, data: bytes) -> int:
        """Create path and write data, failing if the file already exists.

        The create is atomic, so it is the only existence check that holds
        under concurrent writers. If the write fails after creation the
        partial file is left for the caller to inspect; an interrupt during
        the write removes it.
        """
        path = Path(path)
        try:
            f = open(path, "xb")
        except FileExistsError as e:
            raise AlreadyExistsError(f"{path} already exists", path) from e
        except OSError as e:
            raise StoreError(f"Failed to create {path}: {e}", path) from e

        try:
            with f:
                written = f.write(data)
        except OSError as e:
            raise StoreError(f"Failed to write {path}: {e}", path) from e
        except BaseException:
            logger.warning("Interrupted while writing %s; removing partial file", path)
            path.unlink(missing_ok=True)
            raise
        return written

    def create_if_absent(self, directory: Path, mode: int = DIR_MODE) -> None:
        """Create a directory (and its parents) unless it exists."""
        directory = Path(directory)
        if directory.is_dir():
            return
        try:
            directory.mkdir(mode=mode, parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Failed to create directory {directory}: {e}", directory) from e
        logger.info("Created directory %s", directory)
