from dataclasses import dataclass


@dataclass
class STBSettings:
    # Storyboard strings are Shift-JIS (Windows code page 932)
    encoding: str = "cp932"
    # Upper bound for a single string literal scan, terminator included
    string_scan_limit: int = 0x1000


__all__ = ["STBSettings"]
