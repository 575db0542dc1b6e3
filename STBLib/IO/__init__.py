from .extended_binary import ExtendedBinaryReader, ExtendedBinaryWriter

__all__ = ["ExtendedBinaryReader", "ExtendedBinaryWriter"]
