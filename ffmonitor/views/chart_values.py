import sys
from typing import Callable, List, Tuple

import numpy as np

from ffmonitor.model.monitor_tick import ChartSnapshot
from ffmonitor.ring_buffer import BoundedRingBuffer

CHART_CAPACITY = 1000
TICK_COUNT = 5
BASELINE_LOWER_MARGIN = 0.9
BASELINE_UPPER_MARGIN = 1.1
FLOAT_MAX = sys.float_info.max

Point = Tuple[float, float]


def format_kilo_tick(value: float) -> str:
    return f"{value / 1000.0:.1f}"


def format_index_tick(value: float) -> str:
    return f"{value:.0f}"


def quartile_ticks(lower: float, upper: float) -> List[float]:
    with np.errstate(invalid="ignore", over="ignore"):
        return np.linspace(lower, upper, TICK_COUNT).tolist()


class ChartValues:
    """
    Rolling window of (x, y) points drawn against a constant reference line.

    x is a synthetic sample index, one unit per update. The baseline spans exactly
    the x range of the retained points, so it is always drawn under the whole
    visible series and never beyond it.
    """

    def __init__(
            self,
            baseline: float,
            labeler: Callable[[float], str],
            capacity: int = CHART_CAPACITY,
            tick_formatter: Callable[[float], str] = format_kilo_tick
    ):
        self._history: BoundedRingBuffer[Point] = BoundedRingBuffer(capacity, default=(0.0, 0.0))
        self._labeler = labeler
        self._tick_formatter = tick_formatter
        self.baseline: List[Point] = [(0.0, baseline), (0.0, baseline)]
        self.current = 0.0
        self.min = 0.0
        self.max = 0.0

    @property
    def label(self) -> str:
        return self._labeler(self.current)

    @property
    def baseline_value(self) -> float:
        return self.baseline[0][1]

    def update(self, value: float) -> None:
        self.current = value

        self._history.push((self._history.last()[0] + 1.0, value))

        reference = self.baseline_value
        self.baseline = [(self._history.first()[0], reference), (self._history.last()[0], reference)]

        # eviction may have dropped the previous extreme
        ys = np.fromiter((y for _, y in self._history.as_sequence()), dtype=float)
        ys = ys[~np.isnan(ys)]

        self.min = min(FLOAT_MAX, float(ys.min())) if ys.size else FLOAT_MAX
        self.max = max(0.0, float(ys.max())) if ys.size else 0.0

    def data(self) -> List[Point]:
        return self._history.as_sequence()

    @property
    def x_bounds(self) -> Tuple[float, float]:
        return self.baseline[0][0], self.baseline[1][0]

    @property
    def x_extent(self) -> float:
        return self.baseline[1][0] - self.baseline[0][0]

    @property
    def y_bounds(self) -> Tuple[float, float]:
        reference = self.baseline_value
        y_min = max(0.0, min(self.min, reference * BASELINE_LOWER_MARGIN))
        y_max = max(self.max, reference * BASELINE_UPPER_MARGIN)
        return y_min, y_max

    def y_labels(self) -> List[str]:
        return [self._tick_formatter(tick) for tick in quartile_ticks(self.min, self.max)]

    def x_labels(self) -> List[str]:
        return [format_index_tick(tick) for tick in quartile_ticks(0.0, self.x_extent)]

    def snapshot(self) -> ChartSnapshot:
        return ChartSnapshot(
            label=self.label,
            current=self.current,
            data=self.data(),
            baseline=list(self.baseline),
            x_bounds=self.x_bounds,
            y_bounds=self.y_bounds,
            x_labels=self.x_labels(),
            y_labels=self.y_labels()
        )
