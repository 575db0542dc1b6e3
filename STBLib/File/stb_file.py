import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import List, Optional

from STBLib.Exceptions import CompanionFileMissingException, SegmentNotFoundException, STBException
from STBLib.IO.extended_binary import ExtendedBinaryReader, ExtendedBinaryWriter
from STBLib.Misc.constants import (
    META_ENTRY_SIZE,
    RECORD_SIZE,
    SCRIPT_START_POSITION,
    SUB_HEADER_SIZE,
    align,
)
from STBLib.Misc.settings import STBSettings
from STBLib.Scripting import DecodeResult, MethodRecord, OpCode, STBDecoder, assemble

from .file_base import FileBase

logger = logging.getLogger(__name__)


@dataclass
class STBHeader:
    script_start: int = 0
    header_size: int = 0
    script_meta_start: int = 0
    meta_count: int = 0

    @property
    def code_start(self) -> int:
        return self.script_start + SUB_HEADER_SIZE


@dataclass
class SegmentEntry:
    id: int
    offset: int

    @property
    def code_start(self) -> int:
        return self.offset + SUB_HEADER_SIZE


class STBFile(FileBase):
    """A storyboard container: header, meta table and the raw segment data.

    Only the script segment the header points at is decoded or replaced, the
    other segments are kept as raw bytes and only get their absolute offsets
    corrected when the script changes size.
    """

    def __init__(self, settings: Optional[STBSettings] = None):
        super().__init__(settings)
        self.header = STBHeader()
        self.segments: List[SegmentEntry] = []
        self.buffer = BytesIO()

    def load_from_reader(self, reader: ExtendedBinaryReader):
        self.buffer = BytesIO(reader.base_stream.read())
        reader = self._reader()

        reader.jump_to(SCRIPT_START_POSITION)
        self.header = STBHeader(reader.read_int32(), reader.read_int32(), reader.read_int32(), reader.read_int32())
        logger.debug(
            "Script at 0x%08X, meta table at 0x%08X with %d entries.",
            self.header.script_start,
            self.header.script_meta_start,
            self.header.meta_count,
        )

        reader.jump_to(self.header.script_meta_start)
        self.segments = [SegmentEntry(reader.read_int32(), reader.read_int32()) for _ in range(self.header.meta_count)]

    def save_from_writer(self, writer: ExtendedBinaryWriter):
        writer.write_bytes(self.buffer.getvalue())

    @property
    def length(self) -> int:
        return len(self.buffer.getbuffer())

    def find_segment_index(self, offset: int) -> int:
        for index, segment in enumerate(self.segments):
            if segment.offset == offset:
                return index
        raise SegmentNotFoundException(offset)

    def get_segment_end(self, index: int) -> int:
        if index + 1 < len(self.segments):
            return self.segments[index + 1].offset
        return self.length

    def get_code_length(self, index: int) -> int:
        return self.get_segment_end(index) - self.segments[index].code_start

    def get_script_decoder(self) -> STBDecoder:
        reader = self._reader()
        reader.jump_to(self.header.code_start)
        return STBDecoder(reader, self.settings)

    def get_lines(self) -> List[str]:
        return list(self.get_script_decoder().iter_lines())

    def decode(self) -> DecodeResult:
        try:
            decoder = self.get_script_decoder()
        except STBException as exc:
            return DecodeResult(error=exc)
        return decoder.decode()

    def encode(self, lines: List[str]) -> bytes:
        return assemble(lines, self.header.code_start, self.settings)

    def inject(self, new_script: bytes) -> int:
        """Replace the script segment's code and string pool with `new_script`.

        Returns the amount of bytes every following segment moved by.
        """
        index = self.find_segment_index(self.header.script_start)
        segment = self.segments[index]
        actual_change = align(len(new_script)) - self.get_code_length(index)
        logger.debug("Segment %d (id %d) changes size by %d byte(s).", index, segment.id, actual_change)

        writer = self._writer()
        if actual_change == 0:
            writer.jump_to(segment.code_start)
            writer.write_bytes(new_script)
            writer.fix_padding()
            return 0

        trailing = self.segments[index + 1 :]
        for number, entry in enumerate(trailing, index + 1):
            self._correct_segment(entry, self.get_segment_end(number), actual_change)

        reader = self._reader()
        tail = b""
        if trailing:
            reader.jump_to(trailing[0].offset)
            tail = reader.read_bytes(self.length - trailing[0].offset)

        writer.jump_to(segment.code_start)
        writer.write_bytes(new_script)
        writer.fix_padding()
        writer.write_bytes(tail)
        writer.truncate()

        # Offsets were taken before the data moved, the meta table itself stays in place
        for number, entry in enumerate(trailing, index + 1):
            entry.offset += actual_change
            writer.write_int32_at(self.header.script_meta_start + number * META_ENTRY_SIZE + 4, entry.offset)

        return actual_change

    def _correct_segment(self, entry: SegmentEntry, end: int, actual_change: int):
        reader = self._reader()
        writer = self._writer()

        # The sub header starts with the segment's own offset
        writer.write_int32_at(entry.offset, reader.read_int32_at(entry.offset) + actual_change)

        corrected = 0
        reader.jump_to(entry.code_start)
        while True:
            if reader.get_position() + RECORD_SIZE > end:
                logger.warning("Segment %d has no exit record, stopped scanning at 0x%08X.", entry.id, reader.get_position())
                break

            position = reader.get_position()
            record = MethodRecord.read(reader)
            if record.is_string_reference:
                writer.write_int32_at(position + 8, record.value + actual_change)
                corrected += 1
            if record.op_code == OpCode.Exit:
                break

        logger.debug("Segment %d: corrected %d string reference(s).", entry.id, corrected)

    def _reader(self) -> ExtendedBinaryReader:
        return ExtendedBinaryReader(self.buffer, self.settings.encoding)

    def _writer(self) -> ExtendedBinaryWriter:
        return ExtendedBinaryWriter(self.buffer, self.settings.encoding)


def load_companion(path, settings: Optional[STBSettings] = None) -> STBFile:
    path = Path(path)
    if not path.is_file():
        raise CompanionFileMissingException(path)

    file = STBFile(settings)
    file.load(path)
    return file


def inject_and_correct(path, new_script: bytes, settings: Optional[STBSettings] = None) -> int:
    """Patch the script segment of the storyboard at `path` and rewrite it."""
    file = load_companion(path, settings)
    actual_change = file.inject(new_script)
    file.save(Path(path))
    return actual_change


def convert_lines(path, lines: List[str], settings: Optional[STBSettings] = None) -> int:
    """Encode `lines` against the storyboard at `path` and inject the result."""
    file = load_companion(path, settings)
    actual_change = file.inject(file.encode(lines))
    file.save(Path(path))
    return actual_change
