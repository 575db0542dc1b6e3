import struct
from enum import IntEnum
from typing import NamedTuple

from STBLib.IO.extended_binary import ExtendedBinaryReader, ExtendedBinaryWriter


class OpCode(IntEnum):
    End = 0x00
    Push = 0x03
    Call = 0x04
    PushTrue = 0x06
    PushNull = 0x0B
    Exit = 0x0F
    PushCode = 0x13
    CallSub = 0x15


class PushType(IntEnum):
    Int32 = 0x01
    Float32 = 0x02
    String = 0x03


class MethodRecord(NamedTuple):
    op_code: int
    sub_code: int = 0
    value: int = 0

    @classmethod
    def read(cls, reader: ExtendedBinaryReader) -> "MethodRecord":
        return cls(reader.read_int32(), reader.read_int32(), reader.read_int32())

    def write(self, writer: ExtendedBinaryWriter):
        writer.write_int32(self.op_code)
        writer.write_int32(self.sub_code)
        writer.write_int32(self.value)

    @property
    def is_sentinel(self) -> bool:
        return self.op_code == OpCode.End

    @property
    def is_string_reference(self) -> bool:
        return self.op_code == OpCode.Push and self.sub_code == PushType.String


def int_bits_to_float(value: int) -> float:
    return struct.unpack("<f", struct.pack("<i", value))[0]


def float_to_int_bits(value: float) -> int:
    return struct.unpack("<i", struct.pack("<f", value))[0]


def to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value
