import stat
import tomllib
from datetime import timedelta
from pathlib import Path

import pytest

from ffmonitor import file_utils
from ffmonitor.config.app_config import AppConfig, ConfigManager
from ffmonitor.model.import_metadata import ImportMetadata

BASE_DIR = Path(__file__).resolve().parent.parent


@pytest.fixture
def mock_app_config(monkeypatch, tmp_path) -> AppConfig:
    test_logs_dir = tmp_path / "test_logs_dir"
    test_logs_dir.mkdir()

    pyproject_file = BASE_DIR / "pyproject.toml"

    if not file_utils.check_file_exists(pyproject_file):
        raise FileNotFoundError("pyproject.toml not found. Expected location: {}".format(pyproject_file))

    with pyproject_file.open("rb") as f:
        pyproject_data = tomllib.load(f)

    project = pyproject_data.get("project")

    test_app_config = AppConfig(
        app_name=project.get("name"),
        app_version=project.get("version"),

        ffmpeg_binary="ffmpeg",
        ffprobe_binary="ffprobe",
        stats_period_seconds=0.5,
        ffmpeg_loglevel="warning",
        transcoder_process_priority="normal",
        termination_timeout_seconds=2.0,
        sparkline_capacity=8,
        chart_capacity=8,
        snapshot_format_version=1,
        logs_dir=test_logs_dir,
        log_level="INFO",
        report_interval_ticks=1
    )

    monkeypatch.setattr(ConfigManager, "get_config", lambda: test_app_config)

    return test_app_config


@pytest.fixture
def fake_ffmpeg(mock_app_config, tmp_path):
    """
    Install a POSIX shell script as the configured ffmpeg binary.

    The returned function takes the script body; the script receives the composed
    ffmpeg arguments and is expected to write progress lines to stdout.
    """
    def install(body: str) -> Path:
        script = tmp_path / "fake_ffmpeg.sh"
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        mock_app_config.ffmpeg_binary = str(script)
        return script

    return install


@pytest.fixture
def import_metadata() -> ImportMetadata:
    return ImportMetadata(
        filename="input.mkv",
        nb_streams=2,
        nb_programs=0,
        format_name="matroska,webm",
        format_long_name="Matroska / WebM",
        start_time=timedelta(0),
        duration=timedelta(seconds=10),
        size=1_250_000,
        bit_rate=1_000_000,
        probe_score=100,
        tags={"title": "Sample", "encoder": "libebml"}
    )
