import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional

from STBLib.IO.extended_binary import ExtendedBinaryReader, ExtendedBinaryWriter
from STBLib.Misc.settings import STBSettings


class FileBase:
    def __init__(self, settings: Optional[STBSettings] = None):
        self.settings = settings or STBSettings()

    def load(self, path_or_stream):
        if isinstance(path_or_stream, (str, Path)):
            # Load from file path
            with open(path_or_stream, "rb") as stream:
                self._load_from_stream(stream)
        else:
            # Load from stream
            self._load_from_stream(path_or_stream)

    def _load_from_stream(self, stream: BinaryIO):
        self.load_from_reader(ExtendedBinaryReader(stream, self.settings.encoding))

    def load_from_reader(self, reader: ExtendedBinaryReader):
        pass

    def save(self, path_or_stream):
        if isinstance(path_or_stream, (str, Path)):
            self._save_to_path(Path(path_or_stream))
        else:
            # Save to stream
            self._save_to_stream(path_or_stream)

    def _save_to_path(self, path: Path):
        # Write a sibling temp file, then replace the target with it
        fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as stream:
                self._save_to_stream(stream)
            if path.exists():
                shutil.copymode(path, temp_name)
            os.replace(temp_name, path)
        except BaseException:
            if os.path.exists(temp_name):
                os.remove(temp_name)
            raise

    def _save_to_stream(self, stream: BinaryIO):
        self.save_from_writer(ExtendedBinaryWriter(stream, self.settings.encoding))

    def save_from_writer(self, writer: ExtendedBinaryWriter):
        pass
