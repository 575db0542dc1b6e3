import logging
import math
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, List, Optional

from STBLib.Exceptions import (
    MalformedTypeDescriptorException,
    STBException,
    UnexpectedValueTypeException,
    UnsupportedOpcodeException,
)
from STBLib.IO.extended_binary import ExtendedBinaryReader
from STBLib.Misc.constants import SCRIPT_START_POSITION, STRING_CORRECTION, SUB_HEADER_SIZE, TYPE_DESCRIPTOR_MARKER
from STBLib.Misc.settings import STBSettings

from .stb_instructions import MethodRecord, OpCode, PushType, int_bits_to_float
from .stb_stack import StackValue, ValueStack, ValueType

logger = logging.getLogger(__name__)


@dataclass
class DecodeResult:
    lines: List[str] = field(default_factory=list)
    error: Optional[Exception] = None
    leftover: List[StackValue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


class STBDecoder:
    """Runs a bytecode stream through the value stack and renders the
    instructions that consume it as text lines.

    The reader has to be positioned at the first method record of a segment.
    """

    def __init__(self, reader: ExtendedBinaryReader, settings: Optional[STBSettings] = None):
        self.reader = reader
        self.settings = settings or STBSettings()
        self.stack = ValueStack()

    def iter_lines(self) -> Iterator[str]:
        while True:
            position = self.reader.get_position()
            record = MethodRecord.read(self.reader)
            if record.is_sentinel:
                break

            line = self.try_produce_line(record, position)
            if line is not None:
                yield line

        if len(self.stack) != 0:
            logger.warning("Reached the end of the script with %d value(s) left on the stack.", len(self.stack))

    def decode(self) -> DecodeResult:
        result = DecodeResult()
        try:
            for line in self.iter_lines():
                result.lines.append(line)
        except (STBException, UnicodeDecodeError) as exc:
            result.error = exc
        result.leftover = self.stack.snapshot()
        return result

    def try_produce_line(self, record: MethodRecord, position: int = -1) -> Optional[str]:
        op_code, sub_code, value = record
        stack = self.stack

        # Pushes
        if op_code == OpCode.Push:
            if sub_code == PushType.Int32:
                stack.push(StackValue.int32(value))
            elif sub_code == PushType.Float32:
                stack.push(StackValue.float32(int_bits_to_float(value)))
            elif sub_code == PushType.String:
                stack.push(StackValue.string(self.read_string(value + STRING_CORRECTION)))
            else:
                raise UnsupportedOpcodeException(op_code, sub_code, position)
            return None

        if op_code == OpCode.PushTrue:
            stack.push(StackValue.boolean(True))
            return None

        if op_code == OpCode.PushNull:
            stack.push(StackValue.null())
            return None

        if op_code == OpCode.PushCode:
            stack.push(StackValue.uint16(value))
            return None

        # Instructions consuming the stack
        if op_code == OpCode.Call:
            code = stack.pop_expect(ValueType.VT_UInt16)
            if code == 0:
                return f"time = {stack.pop_expect(ValueType.VT_Int32)};"
            return f"macro(0x{code:04X});"

        if op_code == OpCode.Exit:
            return f"exit({stack.pop_expect(ValueType.VT_Int32)});"

        if op_code == OpCode.CallSub:
            arguments: List[str] = []
            suffix = False
            while len(arguments) < sub_code - 1:
                argument = stack.pop()
                if argument.is_null:
                    suffix = True
                    continue
                arguments.append(self.stringify(argument) + ("f" if suffix else ""))
                suffix = False

            sub_type = self.pop_sub_method_type()
            arguments.reverse()
            return f"sub{sub_type:03d}({', '.join(arguments)});"

        raise UnsupportedOpcodeException(op_code, sub_code, position)

    def pop_sub_method_type(self) -> int:
        values = (self.stack.pop(), self.stack.pop(), self.stack.pop())
        marker, sub_type, size = values

        if (
            marker.type != ValueType.VT_Bool
            or marker.value is not True
            or sub_type.type != ValueType.VT_Int32
            or size.type != ValueType.VT_Int32
            or size.value != TYPE_DESCRIPTOR_MARKER
        ):
            raise MalformedTypeDescriptorException(", ".join(str(v) for v in values))

        return sub_type.value

    def read_string(self, position: int) -> str:
        return self.reader.read_string_elsewhere(position, self.settings.string_scan_limit)

    @staticmethod
    def stringify(value: StackValue) -> str:
        if value.type == ValueType.VT_Float32:
            # nan and inf have no literal form to encode back from
            if not math.isfinite(value.value):
                raise UnexpectedValueTypeException("finite Float32", str(value))
            return f"{value.value:.4f}"
        if value.type == ValueType.VT_Int32:
            return str(value.value)
        if value.type == ValueType.VT_String:
            return f'"{value.value}"'
        raise UnexpectedValueTypeException("Int32, Float32 or String", str(value))


def open_script(stream: BinaryIO, settings: Optional[STBSettings] = None) -> STBDecoder:
    """Position a decoder at the script segment a storyboard's header points at."""
    settings = settings or STBSettings()
    reader = ExtendedBinaryReader(stream, settings.encoding)

    script_start = reader.read_int32_at(SCRIPT_START_POSITION)
    logger.debug("Script segment starts at 0x%08X.", script_start)
    reader.jump_to(script_start + SUB_HEADER_SIZE)

    return STBDecoder(reader, settings)


def get_lines(stream: BinaryIO, settings: Optional[STBSettings] = None) -> Iterator[str]:
    return open_script(stream, settings).iter_lines()


def decode_stream(stream: BinaryIO, settings: Optional[STBSettings] = None) -> DecodeResult:
    try:
        decoder = open_script(stream, settings)
    except STBException as exc:
        return DecodeResult(error=exc)
    return decoder.decode()
