import logging
import threading
import tomllib
from importlib import metadata
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel

from ffmonitor import file_utils

log = logging.getLogger(__name__)

PACKAGE_NAME = "ffmonitor"
CONFIG_FILE_NAME = "app_config.toml"
SOURCE_DIR = Path(__file__).resolve().parent.parent.parent


# Default values can be overridden in app_config.toml
class AppConfig(BaseModel):
    app_name: str
    app_version: str

    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"
    stats_period_seconds: float = 0.5
    ffmpeg_loglevel: str = "warning"
    transcoder_process_priority: str = "normal"
    termination_timeout_seconds: float = 5.0

    sparkline_capacity: int = 500
    chart_capacity: int = 1000
    snapshot_format_version: int = 1

    logs_dir: Path = Path("logs")
    log_level: str = "INFO"
    report_interval_ticks: int = 10


class ConfigManager:
    _instance: Optional[AppConfig] = None
    _lock = threading.Lock()

    def __init__(self):
        raise RuntimeError("Constructor is not allowed. Use get_config() method.")

    @classmethod
    def get_config(cls) -> AppConfig:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    from ffmonitor.config.config_validator import ConfigValidator

                    config = ConfigManager.load_config()
                    ConfigValidator.validate(config)
                    cls._instance = config
        return cls._instance

    @staticmethod
    def load_config(search_dirs: Optional[Tuple[Path, ...]] = None) -> AppConfig:
        """
        The first app_config.toml found in ``search_dirs`` (working directory, then the
        source checkout) supplies the parameters. A relative logs_dir is resolved
        against the directory of that file, or the working directory without one.
        """
        if search_dirs is None:
            search_dirs = (Path.cwd(), SOURCE_DIR)

        app_name, app_version = ConfigManager.read_project_info()

        parameters = {}
        base_dir = Path.cwd()
        config_file = next(
            (d / CONFIG_FILE_NAME for d in search_dirs if file_utils.check_file_exists(d / CONFIG_FILE_NAME)),
            None
        )

        if config_file is not None:
            with config_file.open("rb") as f:
                conf_data = tomllib.load(f)
            parameters = conf_data.get("params", {})
            base_dir = config_file.parent
            log.debug("Loaded parameters from %s", config_file)
        else:
            log.warning("%s not found. Using default parameters.", CONFIG_FILE_NAME)

        config = AppConfig(app_name=app_name, app_version=app_version, **parameters)

        if not config.logs_dir.is_absolute():
            config.logs_dir = base_dir / config.logs_dir

        return config

    @staticmethod
    def read_project_info() -> Tuple[str, str]:
        pyproject_file = SOURCE_DIR / "pyproject.toml"

        if file_utils.check_file_exists(pyproject_file):
            with pyproject_file.open("rb") as f:
                project = tomllib.load(f).get("project", {})
            if project.get("name") == PACKAGE_NAME:
                return project["name"], project["version"]

        try:
            return PACKAGE_NAME, metadata.version(PACKAGE_NAME)
        except metadata.PackageNotFoundError:
            log.warning("Package metadata for %s not found. Version is unknown.", PACKAGE_NAME)
            return PACKAGE_NAME, "unknown"
