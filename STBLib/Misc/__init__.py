from .constants import (
    ALIGNMENT,
    META_ENTRY_SIZE,
    RECORD_SIZE,
    SCRIPT_START_POSITION,
    STRING_CORRECTION,
    SUB_HEADER_SIZE,
    TYPE_DESCRIPTOR_MARKER,
    align,
)
from .settings import STBSettings

__all__ = [
    "ALIGNMENT",
    "META_ENTRY_SIZE",
    "RECORD_SIZE",
    "SCRIPT_START_POSITION",
    "STRING_CORRECTION",
    "SUB_HEADER_SIZE",
    "TYPE_DESCRIPTOR_MARKER",
    "align",
    "STBSettings",
]
