import logging
from datetime import timedelta
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ffmonitor.model.session import Session
from ffmonitor.views.chart_values import FLOAT_MAX, BASELINE_LOWER_MARGIN, BASELINE_UPPER_MARGIN, quartile_ticks
from ffmonitor.views.labels import format_duration

log = logging.getLogger(__name__)

Point = Tuple[float, float]


class HistoryStats:
    """
    Whole-session series of one metric for the statistics screen.

    Unlike the live views nothing is windowed here: x is the elapsed run time in
    seconds and the bounds cover the complete history. With a baseline the
    y range is widened to keep the reference line comfortably inside the chart.
    """

    def __init__(
            self,
            history: Iterable[Point],
            labeler: Callable[[float], str],
            baseline: Optional[float] = None
    ):
        self.x_max = 0.0
        self.y_min = FLOAT_MAX
        self.y_max = 0.0
        self.data: List[Point] = []

        for x, y in history:
            self.x_max = max(self.x_max, x)
            self.y_min = min(self.y_min, y)
            self.y_max = max(self.y_max, y)
            self.data.append((x, y))

        self.baseline_data: List[Point] = []
        if baseline is not None:
            self.baseline_data = [(0.0, baseline), (self.x_max, baseline)]
            self.y_min = max(0.0, min(self.y_min, baseline * BASELINE_LOWER_MARGIN))
            self.y_max = max(self.y_max, baseline * BASELINE_UPPER_MARGIN)

        self.x_labels = [format_duration(timedelta(seconds=tick)) for tick in quartile_ticks(0.0, self.x_max)]
        self.y_labels = [labeler(tick) for tick in quartile_ticks(self.y_min, self.y_max)]

    @property
    def x_bounds(self) -> Tuple[float, float]:
        return 0.0, self.x_max

    @property
    def y_bounds(self) -> Tuple[float, float]:
        return self.y_min, self.y_max


def build_replay_stats(session: Session) -> Dict[str, HistoryStats]:
    history = session.history
    log.debug("Building replay statistics from %d history entries.", len(history))

    return {
        "bitrate": HistoryStats(
            ((elapsed.total_seconds(), float(record.bitrate)) for elapsed, record in history),
            lambda value: f"{value / 1000.0:.1f} kbits/s",
            baseline=float(session.import_metadata.bit_rate)
        ),
        "fps": HistoryStats(
            ((elapsed.total_seconds(), record.fps) for elapsed, record in history),
            lambda value: f"{value:.1f}"
        ),
        "speed": HistoryStats(
            ((elapsed.total_seconds(), record.speed) for elapsed, record in history),
            lambda value: f"{value:.2f}x"
        ),
    }
