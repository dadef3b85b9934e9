import logging
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

from ffmonitor import file_utils

log = logging.getLogger(__name__)


class ManagedFileLock:
    """
    Inter-process lock guarding one file on disk.

    Readers and writers of the target go through the same ``<target><suffix>`` lock
    file, so a load never overlaps a save of the same snapshot. The lock file itself
    is left in place after release.
    """

    def __init__(self, target_path: Path, timeout: float, lock_suffix: str = ".lock"):
        self.target_path = target_path
        self.timeout = timeout
        self.lock_file_path = file_utils.append_suffix(target_path, lock_suffix)
        self._lock: Optional[FileLock] = None

    def acquire(self) -> None:
        self._lock = FileLock(self.lock_file_path, timeout=self.timeout)
        try:
            self._lock.acquire()
        except Timeout:
            log.error(f"Failed to lock {self.target_path} within {self.timeout}s")
            log.error("|-Lock file: %s", self.lock_file_path)
            raise

        log.debug(f"Locked {self.target_path} (lock file: {self.lock_file_path})")

    def release(self) -> None:
        if self._lock is not None and self._lock.is_locked:
            self._lock.release()
            log.debug(f"Released lock on {self.target_path}")

    def is_locked(self) -> bool:
        return self._lock is not None and self._lock.is_locked

    def __enter__(self) -> "ManagedFileLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False
