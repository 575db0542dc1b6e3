from .stb_assembler import STBAssembler, assemble, calculate_script_size, get_line_size
from .stb_decoder import DecodeResult, STBDecoder, decode_stream, get_lines, open_script
from .stb_instructions import MethodRecord, OpCode, PushType, float_to_int_bits, int_bits_to_float, to_int32
from .stb_literals import Literal, LiteralKind, classify_literal, parse_int_literal
from .stb_stack import StackValue, ValueStack, ValueType
from .stb_text import LineKind, ScriptLine, parse_line, parse_lines, split_arguments

__all__ = [
    "STBAssembler",
    "assemble",
    "calculate_script_size",
    "get_line_size",
    "DecodeResult",
    "STBDecoder",
    "decode_stream",
    "get_lines",
    "open_script",
    "MethodRecord",
    "OpCode",
    "PushType",
    "float_to_int_bits",
    "int_bits_to_float",
    "to_int32",
    "Literal",
    "LiteralKind",
    "classify_literal",
    "parse_int_literal",
    "StackValue",
    "ValueStack",
    "ValueType",
    "LineKind",
    "ScriptLine",
    "parse_line",
    "parse_lines",
    "split_arguments",
]
