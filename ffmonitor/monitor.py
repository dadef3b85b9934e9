import logging
import time
from datetime import timedelta
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from ffmonitor.config.app_config import ConfigManager
from ffmonitor.exceptions import MonitorCancelledError, MonitorError
from ffmonitor.model.import_metadata import ImportMetadata
from ffmonitor.model.monitor_tick import MonitorTick
from ffmonitor.model.session import Session
from ffmonitor.transcoder.progress_stream import ProgressStream
from ffmonitor.views.live_views import LiveViews

log = logging.getLogger(__name__)


class MonitorRun(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    session: Session
    error: Optional[MonitorError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def monitor(
        import_metadata: ImportMetadata,
        stream: ProgressStream,
        on_tick: Optional[Callable[[MonitorTick], None]] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
        width: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic
) -> MonitorRun:
    """
    Drive one transcode from its first progress record to the end of the stream.

    Every record is appended to the session history and folded into the live views,
    then a tick is handed to ``on_tick``. ``should_cancel`` is polled before each
    read. The stream is closed on every way out of the loop. Failures do not
    discard the history collected so far: they are returned next to the finalized
    session and the caller decides what to do with both.
    """
    app_config = ConfigManager.get_config()

    session = Session(import_metadata=import_metadata)
    views = LiveViews(import_metadata, app_config.sparkline_capacity, app_config.chart_capacity)
    start_time = clock()
    error: Optional[MonitorError] = None

    try:
        with stream:
            while True:
                if should_cancel is not None and should_cancel():
                    raise MonitorCancelledError("Encoding cancelled by user.")

                record = next(stream, None)
                if record is None:
                    break

                elapsed = timedelta(seconds=clock() - start_time)
                session.append(elapsed, record)
                views.update(record)

                if on_tick is not None:
                    on_tick(views.tick(record, elapsed, width))
    except KeyboardInterrupt:
        log.warning("Encoding interrupted by user.")
        error = MonitorCancelledError("Encoding cancelled by user.")
    except MonitorError as e:
        log.error(f"Monitoring stopped: {e}")
        error = e
    finally:
        session.finalize()

    log.info("Monitoring finished.")
    log.info("|-History entries: %d", len(session.history))
    log.info("|-Status: %s", "success" if error is None else type(error).__name__)

    return MonitorRun(session=session, error=error)
