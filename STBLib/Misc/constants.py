# Container header fields
SCRIPT_START_POSITION = 0x04

META_ENTRY_SIZE = 0x08
SUB_HEADER_SIZE = 0x38

# Method records
RECORD_SIZE = 0x0C
STRING_CORRECTION = 0x58
TYPE_DESCRIPTOR_MARKER = 0x40

ALIGNMENT = 0x04


def align(value: int, amount: int = ALIGNMENT) -> int:
    return (value + amount - 1) & ~(amount - 1)


__all__ = [
    "SCRIPT_START_POSITION",
    "META_ENTRY_SIZE",
    "SUB_HEADER_SIZE",
    "RECORD_SIZE",
    "STRING_CORRECTION",
    "TYPE_DESCRIPTOR_MARKER",
    "ALIGNMENT",
    "align",
]
