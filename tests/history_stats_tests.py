import math
from datetime import timedelta

from ffmonitor.model.progress_record import ProgressRecord
from ffmonitor.model.session import Session
from ffmonitor.views.chart_values import FLOAT_MAX
from ffmonitor.views.history_stats import HistoryStats, build_replay_stats


def test_bounds_cover_whole_history():
    stats = HistoryStats([(0.5, 20.0), (1.0, 30.0), (2.0, 10.0)], lambda value: f"{value:.0f}")

    assert stats.x_bounds == (0.0, 2.0)
    assert stats.y_bounds == (10.0, 30.0)
    assert stats.y_labels == ["10", "15", "20", "25", "30"]
    assert stats.x_labels == ["00:00:00", "00:00:00", "00:00:01", "00:00:01", "00:00:02"]
    assert stats.baseline_data == []


def test_baseline_widens_y_range():
    stats = HistoryStats([(4.0, 1000.0)], str, baseline=2000.0)

    y_min, y_max = stats.y_bounds
    assert y_min == 1000.0
    assert math.isclose(y_max, 2200.0)
    assert stats.baseline_data == [(0.0, 2000.0), (4.0, 2000.0)]


def test_empty_history():
    stats = HistoryStats([], str)

    assert stats.x_max == 0.0
    assert stats.y_min == FLOAT_MAX
    assert stats.y_max == 0.0
    assert len(stats.x_labels) == 5


def test_replay_stats_for_session(import_metadata):
    session = Session(import_metadata=import_metadata)
    session.append(timedelta(seconds=1), ProgressRecord(fps=24.0, bitrate=800_000, speed=1.0))
    session.append(timedelta(seconds=2), ProgressRecord(fps=25.0, bitrate=1_200_000, speed=1.5))

    stats = build_replay_stats(session.finalize())

    assert set(stats) == {"bitrate", "fps", "speed"}
    assert stats["bitrate"].baseline_data == [(0.0, 1_000_000.0), (2.0, 1_000_000.0)]
    assert stats["fps"].y_bounds == (24.0, 25.0)
    assert stats["speed"].y_labels[-1] == "1.50x"
    assert stats["bitrate"].y_labels[0] == "800.0 kbits/s"
