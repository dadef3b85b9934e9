import math
from typing import Callable, List

from ffmonitor.model.monitor_tick import SparklineSnapshot
from ffmonitor.ring_buffer import BoundedRingBuffer

SPARKLINE_CAPACITY = 500
SPARKLINE_SCALE = 100.0
BORDER_WIDTH = 2
U64_MAX = 2 ** 64 - 1


def to_fixed_point(value: float) -> int:
    scaled = value * SPARKLINE_SCALE
    if math.isnan(scaled) or scaled <= 0:
        return 0
    if scaled >= U64_MAX:
        return U64_MAX
    return math.floor(scaled + 0.5)


class SparklineValues:
    """
    Rolling window of a single metric, kept as integers with two decimals of precision.

    ``max`` covers every value seen so far, not only the retained window, so the
    sparkline keeps its scale when a spike scrolls out of view.
    """

    def __init__(self, labeler: Callable[[float], str], capacity: int = SPARKLINE_CAPACITY):
        self._history: BoundedRingBuffer[int] = BoundedRingBuffer(capacity, default=0)
        self._labeler = labeler
        self.max = 0
        self.current = 0.0

    @property
    def label(self) -> str:
        return self._labeler(self.current)

    def update(self, value: float) -> None:
        self.current = value

        fixed = to_fixed_point(value)
        self._history.push(fixed)
        self.max = max(self.max, fixed)

    def history(self) -> List[int]:
        return self._history.as_sequence()

    def window(self, width: int) -> List[int]:
        data = self._history.as_sequence()
        visible = max(0, width - BORDER_WIDTH)
        return data[max(0, len(data) - visible):]

    def snapshot(self, width: int) -> SparklineSnapshot:
        return SparklineSnapshot(label=self.label, current=self.current, max=self.max, data=self.window(width))
