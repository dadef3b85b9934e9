class LockConfig:
    DEFAULT_TIMEOUT = 5.0
    SNAPSHOT_LOCK_SUFFIX = ".lock"
