import gzip
import logging
import os
import zlib
from pathlib import Path
from typing import Dict

from pydantic import ValidationError

from ffmonitor import file_utils
from ffmonitor.exceptions import SnapshotDecodeError, SnapshotEncodeError, SnapshotIOError
from ffmonitor.locking import LockManager
from ffmonitor.model.session import Session
from ffmonitor.snapshot.binary_codec import BinaryReader, BinaryWriter
from ffmonitor.snapshot.snapshot_format import SnapshotFormat
from ffmonitor.snapshot.snapshot_version import SnapshotVersion
from ffmonitor.snapshot.versions.v1_snapshot_format import V1SnapshotFormat

log = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".stats"
TEMP_SUFFIX = ".tmp"
COMPRESSION_LEVEL = 9
CURRENT_VERSION = SnapshotVersion.V1

_FORMATS: Dict[SnapshotVersion, SnapshotFormat] = {
    snapshot_format.version: snapshot_format for snapshot_format in [
        V1SnapshotFormat(),
    ]
}


def snapshot_path(input_path: Path) -> Path:
    return file_utils.append_suffix(Path(input_path), SNAPSHOT_SUFFIX)


def encode(session: Session, version: SnapshotVersion = CURRENT_VERSION) -> bytes:
    if not session.is_finalized:
        raise ValueError("Only finalized sessions can be encoded.")

    writer = BinaryWriter()
    writer.write_varint(version.value)
    try:
        _FORMATS[version].write(writer, session)
    except ValueError as e:
        raise SnapshotEncodeError(f"Session cannot be stored in snapshot format {version.name}: {e}") from e

    # mtime=0: identical sessions encode to identical bytes
    return gzip.compress(writer.getvalue(), compresslevel=COMPRESSION_LEVEL, mtime=0)


def decode(data: bytes) -> Session:
    try:
        payload = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise SnapshotDecodeError(f"Snapshot data is not a valid gzip stream: {e}") from e

    reader = BinaryReader(payload)
    tag = reader.read_varint()

    try:
        version = SnapshotVersion(tag)
    except ValueError:
        raise SnapshotDecodeError(f"Unknown snapshot format version tag: {tag}")

    try:
        session = _FORMATS[version].read(reader)
    except ValidationError as e:
        raise SnapshotDecodeError(f"Snapshot contains invalid values: {e}") from e

    reader.expect_end()
    return session


def save(session: Session, input_path: Path, version: SnapshotVersion = CURRENT_VERSION) -> Path:
    path = snapshot_path(input_path)
    temp_path = file_utils.append_suffix(path, TEMP_SUFFIX)
    data = encode(session, version)

    log.info("Saving session snapshot...")
    log.info("|-Snapshot file: %s", path)
    log.info("|-Format version: %s", version.name)
    log.info("|-History entries: %d", len(session.history))

    try:
        with LockManager.acquire_snapshot_lock(path):
            try:
                temp_path.write_bytes(data)
                os.replace(temp_path, path)
            except OSError:
                file_utils.delete_file(temp_path)
                raise
    except OSError as e:
        log.error(f"Could not save snapshot {path}. Details: {e}")
        raise SnapshotIOError(f"Could not save snapshot {path}: {e}") from e

    log.info("Snapshot saved: %d bytes", len(data))
    return path


def load(input_path: Path) -> Session:
    path = snapshot_path(input_path)

    log.info("Loading session snapshot...")
    log.info("|-Snapshot file: %s", path)

    if not file_utils.check_file_exists(path):
        raise SnapshotIOError(f"Snapshot file not found: {path}")

    try:
        with LockManager.acquire_snapshot_lock(path):
            data = path.read_bytes()
    except OSError as e:
        log.error(f"Could not read snapshot {path}. Details: {e}")
        raise SnapshotIOError(f"Could not read snapshot {path}: {e}") from e

    session = decode(data)

    log.info("Snapshot loaded.")
    log.info("|-Source file: %s", session.import_metadata.filename)
    log.info("|-History entries: %d", len(session.history))

    return session
