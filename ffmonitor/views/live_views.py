from datetime import timedelta
from typing import Optional

from ffmonitor.model.import_metadata import ImportMetadata
from ffmonitor.model.monitor_tick import MonitorTick
from ffmonitor.model.progress_record import ProgressRecord
from ffmonitor.views.chart_values import ChartValues, CHART_CAPACITY
from ffmonitor.views.labels import format_bitrate, format_fps, format_size, format_speed, progress_ratio
from ffmonitor.views.sparkline_values import SparklineValues, SPARKLINE_CAPACITY, BORDER_WIDTH


class LiveViews:
    def __init__(
            self,
            import_metadata: ImportMetadata,
            sparkline_capacity: int = SPARKLINE_CAPACITY,
            chart_capacity: int = CHART_CAPACITY
    ):
        self._import_metadata = import_metadata
        self._sparkline_capacity = sparkline_capacity
        self.fps = SparklineValues(format_fps, sparkline_capacity)
        self.speed = SparklineValues(format_speed, sparkline_capacity)
        self.bitrate = ChartValues(float(import_metadata.bit_rate), format_bitrate, chart_capacity)

    def update(self, record: ProgressRecord) -> None:
        self.fps.update(record.fps)
        self.bitrate.update(float(record.bitrate))
        self.speed.update(record.speed)

    def tick(self, record: ProgressRecord, run_time: timedelta, width: Optional[int] = None) -> MonitorTick:
        if width is None:
            width = self._sparkline_capacity + BORDER_WIDTH

        return MonitorTick(
            frame=record.frame,
            total_size=format_size(record.total_size),
            dup_frames=record.dup_frames,
            drop_frames=record.drop_frames,
            run_time=run_time,
            out_time=record.out_time,
            progress_ratio=progress_ratio(record.out_time, self._import_metadata.duration),
            fps=self.fps.snapshot(width),
            speed=self.speed.snapshot(width),
            bitrate=self.bitrate.snapshot()
        )
