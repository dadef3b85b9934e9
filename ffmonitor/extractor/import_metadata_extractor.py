import json
import logging
import subprocess
from pathlib import Path

from pydantic import ValidationError

from ffmonitor.config.app_config import ConfigManager
from ffmonitor.exceptions import ProbeError
from ffmonitor.model.import_metadata import ImportMetadata

log = logging.getLogger(__name__)


def extract(path_to_file: Path) -> ImportMetadata:
    app_config = ConfigManager.get_config()

    cmd = [
        app_config.ffprobe_binary,
        '-hide_banner',
        '-print_format', 'json=compact=1',
        '-show_streams',
        '-show_format',
        '-i', str(path_to_file),
    ]

    log.info(f"Executing ffprobe for {path_to_file}")

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        ffprobe_output = json.loads(result.stdout)

    except subprocess.CalledProcessError as e:
        log.error(f"ffprobe execution failed: {e.stderr}")
        raise ProbeError(e.stderr.strip() or f"Could not run ffprobe on {path_to_file}") from e
    except FileNotFoundError as e:
        raise ProbeError("ffprobe is not found. Please ensure it is installed and in your PATH.") from e
    except json.JSONDecodeError as e:
        raise ProbeError("ffprobe returned unparseable JSON.") from e

    return parse_format(ffprobe_output)


def parse_format(ffprobe_output) -> ImportMetadata:
    format_data = ffprobe_output.get('format') if isinstance(ffprobe_output, dict) else None
    if not isinstance(format_data, dict):
        raise ProbeError("ffprobe output has no format section.")

    try:
        metadata = ImportMetadata.model_validate(format_data)
    except ValidationError as e:
        log.error("ffprobe format section is invalid.")
        log.error("|-Details: %s", e)
        raise ProbeError(f"ffprobe format section is invalid: {e}") from e

    log.info("Import metadata extracted.")
    log.info("|-File: %s", metadata.filename)
    log.info("|-Format: %s", metadata.format_name)
    log.info("|-Duration: %s", metadata.duration)
    log.info("|-Bit rate: %d", metadata.bit_rate)

    return metadata
