import gzip
import json
from pathlib import Path

import pytest

from ffmonitor import main as main_module
from ffmonitor.exceptions import TranscoderExitError
from ffmonitor.snapshot import session_snapshot


@pytest.fixture
def fake_ffprobe(mock_app_config, tmp_path):
    output_file = tmp_path / "ffprobe.json"
    output_file.write_text(json.dumps({
        "format": {
            "filename": "input.mkv",
            "nb_streams": 1,
            "nb_programs": 0,
            "format_name": "matroska,webm",
            "start_time": "0.000000",
            "duration": "2.000000",
            "size": "250000",
            "bit_rate": "1000000",
            "probe_score": 100
        }
    }))
    script = tmp_path / "fake_ffprobe.sh"
    script.write_text(f"#!/bin/sh\ncat '{output_file}'\n")
    script.chmod(0o755)
    mock_app_config.ffprobe_binary = str(script)
    return script


def test_parse_args_splits_ffmpeg_arguments():
    args = main_module.parse_args(["--input", "in.mkv", "-y", "--save-stats", "--", "-c:v", "libx264", "out.mkv"])

    assert args.input == Path("in.mkv")
    assert args.overwrite
    assert args.save_stats
    assert not args.load_stats
    assert args.ffmpeg_args == ["-c:v", "libx264", "out.mkv"]


def test_parse_args_requires_output_unless_loading_stats():
    with pytest.raises(SystemExit):
        main_module.parse_args(["--input", "in.mkv"])

    args = main_module.parse_args(["--input", "in.mkv", "-s"])
    assert args.load_stats


def test_compose_ffmpeg_args_adds_input():
    assert main_module.compose_ffmpeg_args(Path("in.mkv"), ["out.mkv"]) == ["-i", "in.mkv", "out.mkv"]


def test_run_saves_and_reloads_statistics(fake_ffmpeg, fake_ffprobe, tmp_path):
    fake_ffmpeg("printf 'frame=1\\nout_time=00:00:01.000000\\nprogress=continue\\nframe=2\\nprogress=end\\n'")
    input_path = tmp_path / "input.mkv"

    args = main_module.parse_args(["--input", str(input_path), "--save-stats", "--show-stats", "--", "out.mkv"])
    assert main_module.run(args) == 0

    snapshot = session_snapshot.load(input_path)
    assert [record.frame for _, record in snapshot.history] == [1, 2]

    args = main_module.parse_args(["--input", str(input_path), "--load-stats"])
    assert main_module.run(args) == 0


def test_run_saves_partial_history_before_raising(fake_ffmpeg, fake_ffprobe, tmp_path):
    fake_ffmpeg("printf 'frame=1\\nprogress=continue\\n'\necho 'Conversion failed!' >&2\nexit 1")
    input_path = tmp_path / "input.mkv"

    args = main_module.parse_args(["--input", str(input_path), "--save-stats", "--", "out.mkv"])
    with pytest.raises(TranscoderExitError):
        main_module.run(args)

    assert len(session_snapshot.load(input_path).history) == 1


def test_main_returns_error_code(mock_app_config, monkeypatch, tmp_path):
    monkeypatch.setattr(main_module, "configure_logging", lambda app_config: None)

    assert main_module.main(["--input", str(tmp_path / "missing.mkv"), "-s"]) == 1


def test_run_error_survives_failed_save(fake_ffmpeg, fake_ffprobe, tmp_path):
    fake_ffmpeg("echo 'Conversion failed!' >&2\nexit 1")
    input_path = tmp_path / "input.mkv"
    (tmp_path / "input.mkv.stats").mkdir()

    args = main_module.parse_args(["--input", str(input_path), "--save-stats", "--", "out.mkv"])
    with pytest.raises(TranscoderExitError, match="Conversion failed!"):
        main_module.run(args)


def test_run_saves_with_configured_format_version(fake_ffmpeg, fake_ffprobe, mock_app_config, tmp_path):
    fake_ffmpeg("printf 'frame=1\\nprogress=end\\n'")
    input_path = tmp_path / "input.mkv"

    args = main_module.parse_args(["--input", str(input_path), "--save-stats", "--", "out.mkv"])
    main_module.run(args)

    payload = gzip.decompress(session_snapshot.snapshot_path(input_path).read_bytes())
    assert payload[0] == mock_app_config.snapshot_format_version
