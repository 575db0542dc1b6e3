"""Test configuration ensuring the project source tree is importable."""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
TESTS = ROOT / "tests"

for path in (str(ROOT), str(TESTS)):
    if path not in sys.path:
        sys.path.insert(0, path)

from stb_builder import build_container  # noqa: E402

SCRIPTS = [
    [
        'sub010("first", 1);',
        "exit(0);",
    ],
    [
        "time = 30;",
        'sub001(1, 2.5000, "hi");',
        "macro(0x00AB);",
        'sub002(1.5000f, 3f, "ゲーム");',
        "exit(1);",
    ],
    [
        'sub020("third", -4, 0.2500);',
        'sub021("again");',
        "exit(2);",
    ],
    [
        'sub030(7, "last");',
        "exit(3);",
    ],
]


@pytest.fixture
def scripts():
    return [list(lines) for lines in SCRIPTS]


@pytest.fixture
def container(scripts):
    """Four segments, the second one is the script the header points at."""
    return build_container(scripts, script_index=1)


@pytest.fixture
def stb_path(tmp_path, container):
    path = tmp_path / "scene01.stb"
    path.write_bytes(container.data)
    return path
