import logging
from pathlib import Path
from typing import Optional

from ffmonitor.config.lock_config import LockConfig
from ffmonitor.locking.file_lock import ManagedFileLock

log = logging.getLogger(__name__)


class LockManager:
    @staticmethod
    def acquire_snapshot_lock(snapshot_path: Path, timeout: Optional[float] = None) -> ManagedFileLock:
        """
        Lock a session snapshot for loading or saving.

        Usage:
            with LockManager.acquire_snapshot_lock(path):
                data = path.read_bytes()
        """
        if timeout is None:
            timeout = LockConfig.DEFAULT_TIMEOUT

        log.debug(f"Acquiring lock for snapshot file {snapshot_path.name}")
        return ManagedFileLock(snapshot_path, timeout, LockConfig.SNAPSHOT_LOCK_SUFFIX)
