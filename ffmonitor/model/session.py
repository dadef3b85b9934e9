from datetime import timedelta
from typing import List, Tuple

from pydantic import BaseModel, Field, PrivateAttr

from ffmonitor.exceptions import SessionFinalizedError
from ffmonitor.model.import_metadata import ImportMetadata
from ffmonitor.model.progress_record import ProgressRecord

HistoryEntry = Tuple[timedelta, ProgressRecord]


class Session(BaseModel):
    import_metadata: ImportMetadata
    history: List[HistoryEntry] = Field(default_factory=list)

    _finalized: bool = PrivateAttr(default=False)

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def append(self, elapsed: timedelta, record: ProgressRecord) -> None:
        if self._finalized:
            raise SessionFinalizedError("Cannot append progress to a finalized session.")
        self.history.append((elapsed, record))

    def finalize(self) -> "Session":
        self._finalized = True
        return self

    @classmethod
    def restored(cls, import_metadata: ImportMetadata, history: List[HistoryEntry]) -> "Session":
        session = cls(import_metadata=import_metadata, history=history)
        return session.finalize()
