from datetime import timedelta

from pydantic import BaseModel, ConfigDict


class ProgressRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    frame: int = 0
    fps: float = 0.0
    bitrate: int = 0  # bits per second
    total_size: int = 0  # bytes
    out_time_us: int = 0
    out_time_ms: int = 0
    out_time: timedelta = timedelta(0)
    dup_frames: int = 0
    drop_frames: int = 0
    speed: float = 0.0
