from datetime import timedelta
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict


class SparklineSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    current: float
    max: int
    data: List[int]


class ChartSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    current: float
    data: List[Tuple[float, float]]
    baseline: List[Tuple[float, float]]
    x_bounds: Tuple[float, float]
    y_bounds: Tuple[float, float]
    x_labels: List[str]
    y_labels: List[str]


class MonitorTick(BaseModel):
    """Everything a rendering layer needs to draw one refresh of the live screen."""

    model_config = ConfigDict(frozen=True)

    frame: int
    total_size: str
    dup_frames: int
    drop_frames: int
    run_time: timedelta
    out_time: timedelta
    progress_ratio: float
    fps: SparklineSnapshot
    speed: SparklineSnapshot
    bitrate: ChartSnapshot
