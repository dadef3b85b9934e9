import json
from datetime import timedelta

import pytest

from ffmonitor.exceptions import ProbeError
from ffmonitor.extractor import import_metadata_extractor

FFPROBE_OUTPUT = {
    "streams": [{"index": 0, "codec_type": "video"}],
    "format": {
        "filename": "input.mkv",
        "nb_streams": 2,
        "nb_programs": 0,
        "format_name": "matroska,webm",
        "format_long_name": "Matroska / WebM",
        "start_time": "0.000000",
        "duration": "12.500000",
        "size": "1562500",
        "bit_rate": "1000000",
        "probe_score": 100,
        "tags": {"title": "Sample", "encoder": "libebml"}
    }
}


def test_parse_format_reads_ffprobe_strings():
    metadata = import_metadata_extractor.parse_format(FFPROBE_OUTPUT)

    assert metadata.filename == "input.mkv"
    assert metadata.duration == timedelta(seconds=12.5)
    assert metadata.size == 1_562_500
    assert metadata.bit_rate == 1_000_000
    assert list(metadata.tags) == ["encoder", "title"]


def test_parse_format_without_optional_fields():
    format_data = {key: value for key, value in FFPROBE_OUTPUT["format"].items()
                   if key not in ("format_long_name", "tags")}

    metadata = import_metadata_extractor.parse_format({"format": format_data})

    assert metadata.format_long_name is None
    assert metadata.tags == {}


def test_parse_format_requires_format_section():
    with pytest.raises(ProbeError):
        import_metadata_extractor.parse_format({"streams": []})


def test_parse_format_rejects_invalid_values():
    format_data = dict(FFPROBE_OUTPUT["format"], size="-1")

    with pytest.raises(ProbeError):
        import_metadata_extractor.parse_format({"format": format_data})


def test_extract_runs_ffprobe(mock_app_config, tmp_path):
    script = tmp_path / "fake_ffprobe.sh"
    output_file = tmp_path / "ffprobe.json"
    output_file.write_text(json.dumps(FFPROBE_OUTPUT))
    script.write_text(f"#!/bin/sh\ncat '{output_file}'\n")
    script.chmod(0o755)
    mock_app_config.ffprobe_binary = str(script)

    metadata = import_metadata_extractor.extract(tmp_path / "input.mkv")

    assert metadata.format_name == "matroska,webm"


def test_extract_reports_ffprobe_failure(mock_app_config, tmp_path):
    script = tmp_path / "fake_ffprobe.sh"
    script.write_text("#!/bin/sh\necho 'input.mkv: No such file or directory' >&2\nexit 1\n")
    script.chmod(0o755)
    mock_app_config.ffprobe_binary = str(script)

    with pytest.raises(ProbeError, match="No such file"):
        import_metadata_extractor.extract(tmp_path / "input.mkv")


def test_extract_without_ffprobe(mock_app_config, tmp_path):
    mock_app_config.ffprobe_binary = str(tmp_path / "no_such_ffprobe")

    with pytest.raises(ProbeError):
        import_metadata_extractor.extract(tmp_path / "input.mkv")
