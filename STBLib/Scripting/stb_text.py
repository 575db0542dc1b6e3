import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from STBLib.Exceptions import UnsupportedLineException

from .stb_literals import Literal, classify_literal, parse_int_literal


class LineKind(Enum):
    LK_Sub = 1
    LK_Macro = 2
    LK_Time = 3
    LK_Exit = 4


@dataclass
class ScriptLine:
    kind: LineKind
    value: int = 0
    arguments: List[str] = field(default_factory=list)
    line_number: int = 0

    @property
    def sub_type(self) -> int:
        return self.value

    def literals(self) -> List[Literal]:
        return [classify_literal(argument) for argument in self.arguments]


SUB_PATTERN = re.compile(r"^sub(\d{3,})\((.*)\);$")
MACRO_PATTERN = re.compile(r"^macro\((0x[0-9A-Fa-f]{1,4})\);$")
TIME_PATTERN = re.compile(r"^time = (\S+);$")
EXIT_PATTERN = re.compile(r"^exit\((\S+)\);$")

ARGUMENT_SEPARATOR = ", "


def split_arguments(text: str) -> List[str]:
    """Split a sub call's argument list on ", " outside of string literals.

    A quote only closes a string when the separator or the end of the list
    follows it, so strings may contain quotes of their own.
    """
    if not text:
        return []

    arguments = []
    buffer: List[str] = []
    in_string = False
    i = 0
    while i < len(text):
        char = text[i]
        if in_string:
            buffer.append(char)
            if char == '"' and (i + 1 == len(text) or text.startswith(ARGUMENT_SEPARATOR, i + 1)):
                in_string = False
            i += 1
            continue

        if char == '"' and not buffer:
            in_string = True
            buffer.append(char)
        elif text.startswith(ARGUMENT_SEPARATOR, i):
            arguments.append("".join(buffer))
            buffer = []
            i += len(ARGUMENT_SEPARATOR)
            continue
        else:
            buffer.append(char)
        i += 1

    arguments.append("".join(buffer))
    return arguments


def parse_line(line: str, line_number: int = 0) -> ScriptLine:
    match = SUB_PATTERN.match(line)
    if match:
        sub_type = int(match.group(1))
        if sub_type > 0x7FFFFFFF:
            raise UnsupportedLineException(line, line_number)
        return ScriptLine(LineKind.LK_Sub, sub_type, split_arguments(match.group(2)), line_number)

    match = MACRO_PATTERN.match(line)
    if match:
        return ScriptLine(LineKind.LK_Macro, int(match.group(1)[2:], 16), line_number=line_number)

    kind: Optional[LineKind] = None
    match = TIME_PATTERN.match(line)
    if match:
        kind = LineKind.LK_Time
    else:
        match = EXIT_PATTERN.match(line)
        if match:
            kind = LineKind.LK_Exit

    if kind is None:
        raise UnsupportedLineException(line, line_number)

    return ScriptLine(kind, parse_int_literal(match.group(1)), line_number=line_number)


def parse_lines(lines: List[str]) -> List[ScriptLine]:
    return [parse_line(line, index) for index, line in enumerate(lines, 1)]
