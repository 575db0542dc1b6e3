from .file_base import FileBase
from .stb_file import SegmentEntry, STBFile, STBHeader, convert_lines, inject_and_correct, load_companion

__all__ = ["FileBase", "SegmentEntry", "STBFile", "STBHeader", "convert_lines", "inject_and_correct", "load_companion"]
