import logging
import shlex
import subprocess
import tempfile
from typing import IO, List, Optional, Sequence

from ffmonitor.config.app_config import ConfigManager
from ffmonitor.exceptions import TranscoderExitError, TranscoderLaunchError
from ffmonitor.model.progress_record import ProgressRecord
from ffmonitor.os_resources.os_resources_utils import set_process_priority, terminate_process_safely
from ffmonitor.transcoder.progress_parser import ProgressParser

log = logging.getLogger(__name__)


class ProgressStream:
    """
    Iterator over the progress records of a running ffmpeg process.

    The stream owns the process: nothing else reads its output or signals it.
    Every way out of the iteration ends with the process stopped and reaped:
    the stream closing on its own, a parse or exit failure, an explicit
    ``close()``, leaving a ``with`` block or the stream being garbage collected.
    """

    def __init__(self, process: subprocess.Popen, stderr_file: IO[bytes], termination_timeout: float = 5.0):
        self._process = process
        self._stderr_file = stderr_file
        self._termination_timeout = termination_timeout
        self._parser = ProgressParser()
        self._closed = False

    @property
    def process(self) -> subprocess.Popen:
        return self._process

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> "ProgressStream":
        return self

    def __next__(self) -> ProgressRecord:
        if self._closed:
            raise StopIteration

        try:
            record = self._read_epoch()
        except BaseException:
            self.close()
            raise

        if record is None:
            raise StopIteration
        return record

    def __enter__(self) -> "ProgressStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __del__(self):
        if getattr(self, "_closed", True):
            return
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        if self._process.poll() is None:
            log.info("Stopping ffmpeg process (PID %d)...", self._process.pid)

        try:
            terminate_process_safely(self._process, self._termination_timeout)
        finally:
            self._stderr_file.close()

    def _read_epoch(self) -> Optional[ProgressRecord]:
        for line in iter(self._process.stdout.readline, ""):
            record = self._parser.feed(line)
            if record is not None:
                return record

        self._finish_process()
        return None

    def _finish_process(self) -> None:
        returncode = self._process.wait()
        stderr = self._read_stderr()
        self.close()

        if self._parser.has_partial_epoch:
            log.debug("ffmpeg output ended inside an epoch. Discarding its fields.")

        if returncode != 0:
            log.error("ffmpeg exited with an error.")
            log.error("|-Return code: %d", returncode)
            log.error("|-Records received: %d", self._parser.records_emitted)
            log.error(f"|-FFmpeg Error Output:\n{stderr}")
            raise TranscoderExitError(returncode, stderr)

        log.info("ffmpeg finished successfully.")
        log.info("|-Records received: %d", self._parser.records_emitted)

    def _read_stderr(self) -> str:
        self._stderr_file.seek(0)
        return self._stderr_file.read().decode("utf-8", errors="replace")


def compose_command(args: Sequence[str], overwrite: bool) -> List[str]:
    app_config = ConfigManager.get_config()

    command = [
        app_config.ffmpeg_binary,

        '-progress', 'pipe:1',
        '-nostats',
        '-nostdin',
        '-hide_banner',
        '-stats_period', f'{app_config.stats_period_seconds:g}',
        '-loglevel', app_config.ffmpeg_loglevel,

        '-y' if overwrite else '-n',

        *args,
    ]

    return command


def spawn(args: Sequence[str], overwrite: bool) -> ProgressStream:
    app_config = ConfigManager.get_config()
    command = compose_command(args, overwrite)

    log.info("Starting ffmpeg...")
    log.info("|-Command: %s", shlex.join(command))

    # stderr is only read back after the process exits
    stderr_file = tempfile.TemporaryFile()

    try:
        process = subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=stderr_file,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1
        )
    except FileNotFoundError as e:
        stderr_file.close()
        log.error("FFmpeg not found. Please check your installation and PATH settings.")
        raise TranscoderLaunchError(f"ffmpeg is not found: {app_config.ffmpeg_binary}") from e
    except OSError as e:
        stderr_file.close()
        log.error(f"Could not start ffmpeg. Details: {e}")
        raise TranscoderLaunchError(f"Could not start ffmpeg: {e}") from e

    log.debug("ffmpeg started with PID %d", process.pid)

    if app_config.transcoder_process_priority != "normal":
        set_process_priority(process, app_config.transcoder_process_priority)

    return ProgressStream(process, stderr_file, app_config.termination_timeout_seconds)
