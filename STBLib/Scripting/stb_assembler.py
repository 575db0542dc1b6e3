import logging
from io import BytesIO
from typing import List, Optional, Sequence

from STBLib.IO.extended_binary import ExtendedBinaryWriter
from STBLib.Misc.constants import RECORD_SIZE, STRING_CORRECTION, TYPE_DESCRIPTOR_MARKER
from STBLib.Misc.settings import STBSettings

from .stb_instructions import MethodRecord, OpCode, PushType
from .stb_literals import LiteralKind
from .stb_text import LineKind, ScriptLine, parse_lines

logger = logging.getLogger(__name__)

# Records written per line kind, not counting sub call arguments
LINE_RECORD_COUNTS = {
    LineKind.LK_Sub: 4,  # 0x40, sub type, true, call
    LineKind.LK_Macro: 2,
    LineKind.LK_Time: 3,
    LineKind.LK_Exit: 3,
}


def get_line_size(line: ScriptLine) -> int:
    count = LINE_RECORD_COUNTS[line.kind]
    if line.kind == LineKind.LK_Sub:
        for literal in line.literals():
            # Null prefixed values carry an extra null push
            count += 2 if literal.kind.is_null_prefixed else 1
    return count * RECORD_SIZE


def calculate_script_size(lines: Sequence[ScriptLine]) -> int:
    """Byte size of the bytecode for `lines`, string pool excluded."""
    return sum(get_line_size(line) for line in lines)


class STBAssembler:
    """Writes parsed lines as method records followed by their string pool.

    `script_start` is the absolute position of the first record of the
    segment, string operands are stored relative to it.
    """

    def __init__(self, script_start: int, settings: Optional[STBSettings] = None):
        self.script_start = script_start
        self.settings = settings or STBSettings()

    def emit(self, lines: Sequence[ScriptLine], script_size: int) -> bytes:
        code = ExtendedBinaryWriter(BytesIO(), self.settings.encoding)
        names = ExtendedBinaryWriter(BytesIO(), self.settings.encoding)
        string_base = self.script_start + script_size - STRING_CORRECTION

        for line in lines:
            if line.kind == LineKind.LK_Sub:
                self.emit_sub(code, names, line, string_base)
            elif line.kind == LineKind.LK_Macro:
                MethodRecord(OpCode.PushCode, 0, line.value).write(code)
                MethodRecord(OpCode.Call).write(code)
            elif line.kind == LineKind.LK_Time:
                MethodRecord(OpCode.Push, PushType.Int32, line.value).write(code)
                MethodRecord(OpCode.PushCode).write(code)
                MethodRecord(OpCode.Call).write(code)
            elif line.kind == LineKind.LK_Exit:
                MethodRecord(OpCode.Push, PushType.Int32, line.value).write(code)
                MethodRecord(OpCode.Exit).write(code)
                MethodRecord(OpCode.End).write(code)

        if code.get_position() != script_size:
            raise ValueError(f"Wrote 0x{code.get_position():X} bytes of code, expected 0x{script_size:X}.")

        return code.base_stream.getvalue() + names.base_stream.getvalue()

    @staticmethod
    def emit_sub(code: ExtendedBinaryWriter, names: ExtendedBinaryWriter, line: ScriptLine, string_base: int):
        literals = line.literals()

        # Type descriptor, popped in reverse by the game
        MethodRecord(OpCode.Push, PushType.Int32, TYPE_DESCRIPTOR_MARKER).write(code)
        MethodRecord(OpCode.Push, PushType.Int32, line.sub_type).write(code)
        MethodRecord(OpCode.PushTrue).write(code)

        for literal in literals:
            if literal.kind == LiteralKind.LK_String:
                MethodRecord(OpCode.Push, PushType.String, string_base + names.get_position()).write(code)
                names.write_null_terminated_string(literal.value)
            elif literal.kind in (LiteralKind.LK_Float, LiteralKind.LK_NullFloat):
                MethodRecord(OpCode.Push, PushType.Float32, literal.to_operand()).write(code)
            else:
                MethodRecord(OpCode.Push, PushType.Int32, literal.to_operand()).write(code)

            if literal.kind.is_null_prefixed:
                MethodRecord(OpCode.PushNull).write(code)

        MethodRecord(OpCode.CallSub, len(literals) + 1).write(code)


def assemble(lines: List[str], script_start: int, settings: Optional[STBSettings] = None) -> bytes:
    """Encode text lines into the bytecode and string pool of one segment."""
    parsed = parse_lines(lines)
    script_size = calculate_script_size(parsed)
    logger.debug("Encoding %d line(s) into 0x%X bytes of code.", len(parsed), script_size)
    return STBAssembler(script_start, settings).emit(parsed, script_size)
