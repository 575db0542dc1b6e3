class STBException(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedOpcodeException(STBException):
    def __init__(self, op_code: int, sub_code: int, position: int = -1):
        message = f"Got opcode 0x{op_code:X} with subcode 0x{sub_code:X} at 0x{position:08X}. This instruction is not supported!"
        super().__init__(message)
        self.op_code = op_code
        self.sub_code = sub_code
        self.position = position


class MalformedTypeDescriptorException(STBException):
    def __init__(self, values):
        message = f"The sub method type descriptor does not match (true, <type>, 64)! (Got {values})"
        super().__init__(message)
        self.values = values


class UnsupportedLiteralException(STBException):
    def __init__(self, literal: str):
        message = f"The argument {literal!r} is not a supported literal!"
        super().__init__(message)
        self.literal = literal


class UnsupportedLineException(STBException):
    def __init__(self, line: str, line_number: int = 0):
        message = f"Line {line_number}: {line!r} is not a supported instruction!"
        super().__init__(message)
        self.line = line
        self.line_number = line_number


class SegmentNotFoundException(STBException):
    def __init__(self, offset: int):
        message = f"No script segment starts at 0x{offset:08X} in the meta table!"
        super().__init__(message)
        self.offset = offset


class CompanionFileMissingException(STBException, FileNotFoundError):
    def __init__(self, path):
        message = f"The storyboard {path} belonging to this text file does not exist!"
        super().__init__(message)
        self.path = path


class StackUnderflowException(STBException):
    def __init__(self):
        super().__init__("Tried to pop a value from an empty stack!")


class UnexpectedValueTypeException(STBException):
    def __init__(self, expected, got):
        message = f"Expected a {expected} value on the stack, got {got}!"
        super().__init__(message)
        self.expected = expected
        self.got = got


class UnexpectedEndOfStreamException(STBException, EOFError):
    def __init__(self, position: int, expected: int, got: int):
        message = f"Expected {expected} bytes at 0x{position:08X}, got {got}!"
        super().__init__(message)
        self.position = position


class InvalidOffsetException(STBException):
    def __init__(self, position: int):
        message = f"Tried to seek to the negative offset {position}!"
        super().__init__(message)
        self.position = position


class StringScanLimitException(STBException):
    def __init__(self, position: int, limit: int):
        message = f"The string at 0x{position:08X} is not terminated within {limit} bytes!"
        super().__init__(message)
        self.position = position
        self.limit = limit


__all__ = [
    "STBException",
    "UnsupportedOpcodeException",
    "MalformedTypeDescriptorException",
    "UnsupportedLiteralException",
    "UnsupportedLineException",
    "SegmentNotFoundException",
    "CompanionFileMissingException",
    "StackUnderflowException",
    "UnexpectedValueTypeException",
    "UnexpectedEndOfStreamException",
    "StringScanLimitException",
    "InvalidOffsetException",
]
