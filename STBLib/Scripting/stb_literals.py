import re
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Union

from STBLib.Exceptions import UnsupportedLiteralException

from .stb_instructions import float_to_int_bits, to_int32


class LiteralKind(Enum):
    LK_Int = 1
    LK_Float = 2
    LK_String = 3
    LK_NullFloat = 4
    LK_NullInt = 5

    @property
    def is_null_prefixed(self) -> bool:
        return self in (LiteralKind.LK_NullFloat, LiteralKind.LK_NullInt)


@dataclass(frozen=True)
class Literal:
    kind: LiteralKind
    value: Union[int, float, str]

    def to_operand(self) -> int:
        """The value field of the push record for this literal"""
        if self.kind in (LiteralKind.LK_Float, LiteralKind.LK_NullFloat):
            return float_to_int_bits(self.value)
        return self.value


STRING_PATTERN = re.compile(r'^"(.*)"$', re.DOTALL)
NULL_FLOAT_PATTERN = re.compile(r"^-?\d+\.\d+f$")
NULL_INT_PATTERN = re.compile(r"^-?\d+f$")
FLOAT_PATTERN = re.compile(r"^-?\d+\.\d+$")
DECIMAL_PATTERN = re.compile(r"^[-+]?\d+$")
HEX_PATTERN = re.compile(r"^[0-9A-Fa-f]+$")

INT32_MIN = -0x80000000
INT32_MAX = 0x7FFFFFFF


def classify_literal(text: str) -> Literal:
    """Classify one sub call argument, the most specific form first."""
    match = STRING_PATTERN.match(text)
    if match:
        return Literal(LiteralKind.LK_String, match.group(1))

    if NULL_FLOAT_PATTERN.match(text):
        return Literal(LiteralKind.LK_NullFloat, _parse_float(text[:-1], text))

    if NULL_INT_PATTERN.match(text):
        return Literal(LiteralKind.LK_NullInt, _parse_decimal(text[:-1], text))

    if FLOAT_PATTERN.match(text):
        return Literal(LiteralKind.LK_Float, _parse_float(text, text))

    if text.startswith("0x"):
        digits = text[2:]
        if not HEX_PATTERN.match(digits) or len(digits) > 8:
            raise UnsupportedLiteralException(text)
        return Literal(LiteralKind.LK_Int, to_int32(int(digits, 16)))

    return Literal(LiteralKind.LK_Int, _parse_decimal(text, text))


def parse_int_literal(text: str) -> int:
    literal = classify_literal(text)
    if literal.kind != LiteralKind.LK_Int:
        raise UnsupportedLiteralException(text)
    return literal.value


def _parse_decimal(digits: str, text: str) -> int:
    if not DECIMAL_PATTERN.match(digits):
        raise UnsupportedLiteralException(text)
    value = int(digits)
    if not INT32_MIN <= value <= INT32_MAX:
        raise UnsupportedLiteralException(text)
    return value


def _parse_float(digits: str, text: str) -> float:
    value = float(digits)
    try:
        struct.pack("<f", value)
    except OverflowError:
        raise UnsupportedLiteralException(text) from None
    return value
