from typing import Optional


class MonitorError(Exception):
    pass


class TranscoderLaunchError(MonitorError):
    pass


class TranscoderExitError(MonitorError):
    def __init__(self, returncode: int, stderr: str):
        message = stderr.strip() or f"ffmpeg exited with status {returncode}"
        super().__init__(message)
        self.returncode: int = returncode
        self.stderr: str = stderr


class ProgressParseError(MonitorError):
    def __init__(self, key: str, value: str, reason: Optional[str] = None):
        message = f"Invalid value for progress key '{key}': '{value}'"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.key: str = key
        self.value: str = value


class ProbeError(MonitorError):
    pass


class SnapshotIOError(MonitorError):
    pass


class SnapshotEncodeError(MonitorError):
    pass


class SnapshotDecodeError(MonitorError):
    pass


class SessionFinalizedError(MonitorError):
    pass


class MonitorCancelledError(MonitorError):
    pass
