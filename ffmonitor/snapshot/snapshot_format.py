from abc import ABC, abstractmethod

from ffmonitor.model.session import Session
from ffmonitor.snapshot.binary_codec import BinaryReader, BinaryWriter
from ffmonitor.snapshot.snapshot_version import SnapshotVersion


class SnapshotFormat(ABC):
    @property
    @abstractmethod
    def version(self) -> SnapshotVersion:
        pass

    @abstractmethod
    def write(self, writer: BinaryWriter, session: Session) -> None:
        pass

    @abstractmethod
    def read(self, reader: BinaryReader) -> Session:
        pass
