import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from ffmonitor.config.app_config import AppConfig, ConfigManager
from ffmonitor.exceptions import MonitorError
from ffmonitor.extractor import import_metadata_extractor
from ffmonitor.model.monitor_tick import MonitorTick
from ffmonitor.model.session import Session
from ffmonitor.monitor import monitor
from ffmonitor.snapshot import session_snapshot
from ffmonitor.snapshot.snapshot_version import SnapshotVersion
from ffmonitor.transcoder import progress_stream
from ffmonitor.views.history_stats import build_replay_stats
from ffmonitor.views.labels import format_duration

log = logging.getLogger()


def configure_logging(app_config: AppConfig) -> None:
    level = logging.getLevelName(app_config.log_level)
    log.setLevel(level)

    if log.hasHandlers():
        log.handlers.clear()

    logs_formatter = logging.Formatter('[%(asctime)s][%(levelname)s]: %(message)s')

    all_logs_handler = logging.FileHandler(app_config.logs_dir / "full.log", mode='a', encoding='utf-8')
    all_logs_handler.setLevel(level)
    all_logs_handler.setFormatter(logs_formatter)
    log.addHandler(all_logs_handler)

    error_logs_handler = logging.FileHandler(app_config.logs_dir / "errors.log", mode='a', encoding='utf-8')
    error_logs_handler.setLevel(logging.ERROR)
    error_logs_handler.setFormatter(logs_formatter)
    log.addHandler(error_logs_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logs_formatter)
    log.addHandler(console_handler)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ffmonitor",
        description="Run ffmpeg and monitor its progress. Arguments after '--' are passed to ffmpeg."
    )
    parser.add_argument("--input", type=Path, required=True, help="Input media file.")
    parser.add_argument("-y", "--overwrite", action="store_true", help="Overwrite output files without asking.")
    parser.add_argument("-s", "--load-stats", action="store_true",
                        help="Load the saved statistics of the input instead of transcoding.")
    parser.add_argument("--show-stats", action="store_true", help="Show the statistics once the run ends.")
    parser.add_argument("--save-stats", action="store_true", help="Save the statistics next to the input.")
    parser.add_argument("ffmpeg_args", nargs=argparse.REMAINDER, help="Output options and file for ffmpeg.")

    args = parser.parse_args(argv)
    if args.ffmpeg_args and args.ffmpeg_args[0] == "--":
        args.ffmpeg_args = args.ffmpeg_args[1:]
    if not args.load_stats and not args.ffmpeg_args:
        parser.error("ffmpeg output arguments are required after '--'.")
    return args


def compose_ffmpeg_args(input_path: Path, ffmpeg_args: Sequence[str]) -> List[str]:
    return ['-i', str(input_path), *ffmpeg_args]


class TickReporter:
    def __init__(self, interval: int):
        self._interval = interval
        self._ticks = 0

    def __call__(self, tick: MonitorTick) -> None:
        self._ticks += 1
        if self._ticks % self._interval != 0:
            return

        log.info(
            "Frame: %d | Size: %s | Time: %s / run %s | %.1f%% | %s | %s | %s | dup %d drop %d",
            tick.frame,
            tick.total_size,
            format_duration(tick.out_time),
            format_duration(tick.run_time),
            tick.progress_ratio * 100.0,
            tick.fps.label,
            tick.speed.label,
            tick.bitrate.label,
            tick.dup_frames,
            tick.drop_frames
        )


def show_stats(session: Session) -> None:
    stats = build_replay_stats(session)

    log.info("Session statistics: %s", session.import_metadata.filename)
    log.info("|-History entries: %d", len(session.history))
    if session.history:
        elapsed, record = session.history[-1]
        log.info("|-Run time: %s", format_duration(elapsed))
        log.info("|-Frames: %d", record.frame)
        log.info("|-Output time: %s", format_duration(record.out_time))

    for name, metric in stats.items():
        log.info("|-%s", name)
        log.info("  |-Range: %s .. %s", metric.y_labels[0], metric.y_labels[-1])
        log.info("  |-Time axis: %s", " ".join(metric.x_labels))


def run(args: argparse.Namespace) -> int:
    app_config = ConfigManager.get_config()

    if args.load_stats:
        session = session_snapshot.load(args.input)
        show_stats(session)
        return 0

    import_metadata = import_metadata_extractor.extract(args.input)
    stream = progress_stream.spawn(compose_ffmpeg_args(args.input, args.ffmpeg_args), args.overwrite)

    result = monitor(import_metadata, stream, on_tick=TickReporter(app_config.report_interval_ticks))

    if args.save_stats:
        version = SnapshotVersion(app_config.snapshot_format_version)
        try:
            session_snapshot.save(result.session, args.input, version)
        except MonitorError as e:
            if result.error is None:
                raise
            log.error("Statistics of the failed run were not saved.")
            log.error("|-Details: %s", e)
    if args.show_stats:
        show_stats(result.session)

    if result.error is not None:
        raise result.error
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    app_config = ConfigManager.get_config()
    configure_logging(app_config)

    log.info("%s v.%s", app_config.app_name, app_config.app_version)
    log.info("Current datetime: %s", datetime.now(timezone.utc))

    try:
        return run(args)
    except MonitorError as e:
        log.error("Run finished with an error.")
        log.error("|-Error name: %s", type(e).__name__)
        log.error("|-Details: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
