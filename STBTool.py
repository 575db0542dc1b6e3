import argparse
import logging
import sys
from pathlib import Path
from typing import List

from tqdm import tqdm

from STBLib.Exceptions import CompanionFileMissingException, STBException
from STBLib.File import STBFile, convert_lines
from STBLib.Misc import STBSettings

info = logging.info
error = logging.error
warning = logging.warning

SUPPORTED_SUFFIXES = {".stb", ".txt"}


def parse_args(args=None, namespace=None):
    parser = argparse.ArgumentParser(description="Convert storyboard (.stb) scripts to text and inject edited text back.")
    parser.add_argument("path", help=".stb or .txt file, or a directory containing them")
    parser.add_argument("--encoding", default="cp932", help="Encoding of the storyboard's string literals")
    parser.add_argument("--scan-limit", type=lambda value: int(value, 0), default=0x1000, help="Maximum length of a single string literal in bytes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print debug output")
    return parser.parse_args(args=args, namespace=namespace)


def to_txt(path: Path, settings: STBSettings) -> Path:
    """Decode a storyboard into `<name>.stb.txt` next to it."""
    file = STBFile(settings)
    file.load(path)

    result = file.decode()
    if not result.ok:
        raise result.error

    output_path = path.with_name(path.name + ".txt")
    output_path.write_text("".join(line + "\n" for line in result.lines), encoding="utf-8")
    info(f"{path.name}: {len(result.lines)} lines -> {output_path.name}")
    return output_path


def to_stb(path: Path, settings: STBSettings) -> Path:
    """Encode an edited text file and inject it into the storyboard it was made from."""
    stb_path = path.with_suffix("")
    if not stb_path.is_file():
        raise CompanionFileMissingException(stb_path)

    lines = path.read_text(encoding="utf-8").splitlines()
    actual_change = convert_lines(stb_path, lines, settings)
    info(f"{path.name} -> {stb_path.name} ({actual_change:+d} bytes)")
    return stb_path


def process_file(path: Path, settings: STBSettings) -> bool:
    try:
        if path.suffix.lower() == ".stb":
            to_txt(path, settings)
        elif path.suffix.lower() == ".txt":
            to_stb(path, settings)
        else:
            return True
    except (STBException, OSError, UnicodeError) as exc:
        error(f"{path}: {exc}")
        return False
    return True


def skip_edited_storyboards(files: List[Path]) -> List[Path]:
    """Drop storyboards whose `.stb.txt` is part of the same batch, the text gets injected instead."""
    names = {p.name.lower() for p in files}
    kept = []
    for file_path in files:
        if file_path.suffix.lower() == ".stb" and (file_path.name + ".txt").lower() in names:
            warning(f"{file_path.name}: skipping decode, {file_path.name}.txt is injected instead.")
            continue
        kept.append(file_path)
    return kept


def collect_files(path: Path) -> List[Path]:
    if path.is_dir():
        files = [p for p in sorted(path.iterdir()) if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES]
        return skip_edited_storyboards(files)
    if path.is_file():
        return [path]
    raise FileNotFoundError(f"Input path '{path}' does not exist.")


def main(path: Path, settings: STBSettings) -> int:
    files = collect_files(path)
    failed = 0
    for file_path in tqdm(files, ncols=150, disable=len(files) < 2):
        if not process_file(file_path, settings):
            failed += 1

    if failed:
        error(f"{failed} of {len(files)} file(s) failed.")
        return 1
    return 0


def cli(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s: %(message)s")
    try:
        return main(Path(args.path), STBSettings(encoding=args.encoding, string_scan_limit=args.scan_limit))
    except FileNotFoundError as exc:
        error(str(exc))
        return 2


if __name__ == "__main__":
    sys.exit(cli())
