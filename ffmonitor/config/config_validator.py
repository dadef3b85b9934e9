import logging

from ffmonitor import file_utils
from ffmonitor.config.app_config import AppConfig
from ffmonitor.os_resources.os_resources_utils import PROCESS_PRIORITIES
from ffmonitor.snapshot.snapshot_version import SnapshotVersion

log = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
FFMPEG_LOG_LEVELS = ["quiet", "panic", "fatal", "error", "warning", "info", "verbose", "debug", "trace"]


class ConfigValidator:
    @staticmethod
    def validate(config: AppConfig) -> None:
        if not config.ffmpeg_binary:
            raise ValueError("FFmpeg binary is not configured.")
        if not config.ffprobe_binary:
            raise ValueError("FFprobe binary is not configured.")
        if config.stats_period_seconds <= 0:
            raise ValueError("Invalid stats period in configuration. Expected: stats_period_seconds > 0.")
        if config.stats_period_seconds < 0.1:
            log.warning("Stats period is lower than safe. Setting to 0.1 seconds.")
            config.stats_period_seconds = 0.1
        if config.ffmpeg_loglevel not in FFMPEG_LOG_LEVELS:
            raise ValueError(f"Invalid FFmpeg log level in configuration: {config.ffmpeg_loglevel}")
        if config.transcoder_process_priority not in PROCESS_PRIORITIES:
            raise ValueError("Invalid transcoder process priority in configuration.")
        if config.termination_timeout_seconds <= 0:
            log.warning("Termination timeout is not positive. Setting to default value of 5 seconds.")
            config.termination_timeout_seconds = 5.0
        if config.sparkline_capacity <= 0:
            raise ValueError("Invalid sparkline capacity in configuration. Expected: sparkline_capacity > 0.")
        if config.chart_capacity <= 0:
            raise ValueError("Invalid chart capacity in configuration. Expected: chart_capacity > 0.")
        if config.report_interval_ticks <= 0:
            raise ValueError("Invalid report interval in configuration. Expected: report_interval_ticks > 0.")
        if config.snapshot_format_version not in [version.value for version in SnapshotVersion]:
            raise ValueError(f"Unknown snapshot format version in configuration: {config.snapshot_format_version}")
        if config.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level in configuration: {config.log_level}")
        config.log_level = config.log_level.upper()
        if not file_utils.check_directory_exists(config.logs_dir):
            log.warning(f"Logs directory does not exist: {config.logs_dir}. Will create it.")
            config.logs_dir.mkdir(parents=True, exist_ok=True)
