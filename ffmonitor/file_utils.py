import logging
from pathlib import Path

log = logging.getLogger(__name__)


def append_suffix(file_path: Path, suffix: str) -> Path:
    # movie.mkv -> movie.mkv.stats, the media extension is kept
    return Path(str(file_path) + suffix)


def check_file_exists(file_path: Path) -> bool:
    return file_path.is_file()


def check_directory_exists(dir_path: Path) -> bool:
    return dir_path.is_dir()


def delete_file(file_path: Path) -> bool:
    if file_path.is_file():
        try:
            file_path.unlink()
            log.debug(f"Deleted file: {file_path}")
            return True
        except OSError as e:
            log.error(f"Error deleting file {file_path}. Details: \n{e}")
            return False
    return False
