import struct
from typing import BinaryIO

from STBLib.Exceptions import InvalidOffsetException, StringScanLimitException, UnexpectedEndOfStreamException


class ExtendedBinaryReader:
    def __init__(self, stream: BinaryIO, encoding: str = "cp932"):
        self.stream = stream
        self.encoding = encoding

    @property
    def base_stream(self) -> BinaryIO:
        return self.stream

    def get_position(self) -> int:
        return self.stream.tell()

    def jump_to(self, position: int):
        if position < 0:
            raise InvalidOffsetException(position)
        self.stream.seek(position)

    def read_null_terminated_string(self, limit: int = 0x1000) -> str:
        """Read bytes up to a zero byte, scanning at most `limit` bytes"""
        start = self.stream.tell()
        chars = bytearray()
        for _ in range(limit):
            char = self.stream.read(1)
            if not char:
                break
            if char == b"\x00":
                return chars.decode(self.encoding)
            chars += char
        raise StringScanLimitException(start, limit)

    def read_string_elsewhere(self, position: int, limit: int = 0x1000) -> str:
        old_pos = self.stream.tell()
        try:
            self.jump_to(position)
            return self.read_null_terminated_string(limit)
        finally:
            self.jump_to(old_pos)

    def read_int32(self) -> int:
        """Read a 32-bit signed integer"""
        return struct.unpack("<i", self.read_exact(4))[0]

    def read_int32_at(self, position: int) -> int:
        old_pos = self.stream.tell()
        try:
            self.jump_to(position)
            return self.read_int32()
        finally:
            self.jump_to(old_pos)

    def read_bytes(self, count: int) -> bytes:
        return self.stream.read(count)

    def read_exact(self, count: int) -> bytes:
        data = self.stream.read(count)
        if len(data) != count:
            raise UnexpectedEndOfStreamException(self.stream.tell() - len(data), count, len(data))
        return data


class ExtendedBinaryWriter:
    def __init__(self, stream: BinaryIO, encoding: str = "cp932"):
        self.stream = stream
        self.encoding = encoding

    @property
    def base_stream(self) -> BinaryIO:
        return self.stream

    def get_position(self) -> int:
        return self.stream.tell()

    def jump_to(self, position: int):
        if position < 0:
            raise InvalidOffsetException(position)
        self.stream.seek(position)

    def write_null(self):
        """Write a single null byte"""
        self.stream.write(b"\x00")

    def write_nulls(self, count: int):
        """Write multiple null bytes"""
        self.stream.write(b"\x00" * count)

    def write_null_terminated_string(self, value: str) -> int:
        """Write a null-terminated string, returns the amount of bytes written"""
        data = value.encode(self.encoding)
        self.stream.write(data)
        self.write_null()
        return len(data) + 1

    def fix_padding(self, amount: int = 4):
        if amount < 1:
            return

        pad_amount = 0
        while (self.stream.tell() + pad_amount) % amount != 0:
            pad_amount += 1
        self.write_nulls(pad_amount)

    def write_int32(self, value: int):
        """Write a 32-bit signed integer"""
        self.stream.write(struct.pack("<i", value))

    def write_int32_at(self, position: int, value: int):
        old_pos = self.stream.tell()
        try:
            self.jump_to(position)
            self.write_int32(value)
        finally:
            self.jump_to(old_pos)

    def write_bytes(self, data: bytes):
        self.stream.write(data)

    def truncate(self):
        self.stream.truncate()
