from pathlib import Path

from ffmonitor.config.app_config import ConfigManager


def test_parameters_come_from_first_config_file_found(tmp_path):
    first_dir = tmp_path / "first"
    second_dir = tmp_path / "second"
    first_dir.mkdir()
    second_dir.mkdir()
    (first_dir / "app_config.toml").write_text('[params]\nchart_capacity = 64\nlogs_dir = "run_logs"\n')
    (second_dir / "app_config.toml").write_text('[params]\nchart_capacity = 128\n')

    config = ConfigManager.load_config((first_dir, second_dir))

    assert config.chart_capacity == 64
    assert config.logs_dir == first_dir / "run_logs"
    assert config.snapshot_format_version == 1


def test_defaults_without_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = ConfigManager.load_config((tmp_path / "nowhere",))

    assert config.app_name == "ffmonitor"
    assert config.sparkline_capacity == 500
    assert config.logs_dir == Path.cwd() / "logs"


def test_project_info_without_pyproject(monkeypatch, tmp_path):
    monkeypatch.setattr("ffmonitor.config.app_config.SOURCE_DIR", tmp_path)

    name, version = ConfigManager.read_project_info()

    assert name == "ffmonitor"
    assert version
