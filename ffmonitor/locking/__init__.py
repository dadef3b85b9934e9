from ffmonitor.locking.lock_manager import LockManager
from ffmonitor.locking.file_lock import ManagedFileLock

__all__ = ["LockManager", "ManagedFileLock"]
