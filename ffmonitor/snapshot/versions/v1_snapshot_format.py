from ffmonitor.model.import_metadata import ImportMetadata
from ffmonitor.model.progress_record import ProgressRecord
from ffmonitor.model.session import Session
from ffmonitor.snapshot.binary_codec import BinaryReader, BinaryWriter
from ffmonitor.snapshot.snapshot_format import SnapshotFormat
from ffmonitor.snapshot.snapshot_version import SnapshotVersion


class V1SnapshotFormat(SnapshotFormat):
    """
    Layout (after the version discriminant):

    import metadata: filename, nb_streams, nb_programs, format_name,
    format_long_name (optional), start_time, duration, size, bit_rate,
    probe_score (single byte), tags (map)

    history: entry count, then per entry the elapsed duration followed by frame,
    fps, bitrate, total_size, out_time_us, out_time_ms, out_time, dup_frames,
    drop_frames, speed
    """

    @property
    def version(self) -> SnapshotVersion:
        return SnapshotVersion.V1

    def write(self, writer: BinaryWriter, session: Session) -> None:
        self._write_import_metadata(writer, session.import_metadata)

        writer.write_varint(len(session.history))
        for elapsed, record in session.history:
            writer.write_duration(elapsed)
            self._write_progress_record(writer, record)

    def read(self, reader: BinaryReader) -> Session:
        import_metadata = self._read_import_metadata(reader)

        history = []
        for _ in range(reader.read_varint()):
            elapsed = reader.read_duration()
            history.append((elapsed, self._read_progress_record(reader)))

        return Session.restored(import_metadata, history)

    @staticmethod
    def _write_import_metadata(writer: BinaryWriter, metadata: ImportMetadata) -> None:
        writer.write_str(metadata.filename)
        writer.write_varint(metadata.nb_streams)
        writer.write_varint(metadata.nb_programs)
        writer.write_str(metadata.format_name)
        writer.write_optional_str(metadata.format_long_name)
        writer.write_duration(metadata.start_time)
        writer.write_duration(metadata.duration)
        writer.write_varint(metadata.size)
        writer.write_varint(metadata.bit_rate)
        writer.write_u8(metadata.probe_score)
        writer.write_str_map(metadata.tags)

    @staticmethod
    def _read_import_metadata(reader: BinaryReader) -> ImportMetadata:
        return ImportMetadata(
            filename=reader.read_str(),
            nb_streams=reader.read_varint(),
            nb_programs=reader.read_varint(),
            format_name=reader.read_str(),
            format_long_name=reader.read_optional_str(),
            start_time=reader.read_duration(),
            duration=reader.read_duration(),
            size=reader.read_varint(),
            bit_rate=reader.read_varint(),
            probe_score=reader.read_u8(),
            tags=reader.read_str_map()
        )

    @staticmethod
    def _write_progress_record(writer: BinaryWriter, record: ProgressRecord) -> None:
        writer.write_varint(record.frame)
        writer.write_f64(record.fps)
        writer.write_varint(record.bitrate)
        writer.write_varint(record.total_size)
        writer.write_varint(record.out_time_us)
        writer.write_varint(record.out_time_ms)
        writer.write_duration(record.out_time)
        writer.write_varint(record.dup_frames)
        writer.write_varint(record.drop_frames)
        writer.write_f64(record.speed)

    @staticmethod
    def _read_progress_record(reader: BinaryReader) -> ProgressRecord:
        return ProgressRecord(
            frame=reader.read_varint(),
            fps=reader.read_f64(),
            bitrate=reader.read_varint(),
            total_size=reader.read_varint(),
            out_time_us=reader.read_varint(),
            out_time_ms=reader.read_varint(),
            out_time=reader.read_duration(),
            dup_frames=reader.read_varint(),
            drop_frames=reader.read_varint(),
            speed=reader.read_f64()
        )
