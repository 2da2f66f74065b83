import sys
from pathlib import Path
import importlib
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture()
def m():
    """Lazily import the main module for tests to avoid module-level import."""
    return importlib.import_module("main")


@pytest.fixture()
def no_progress(monkeypatch, m):
    """Suppress progress rendering in main module during tests."""
    calls = []

    def _stub(line: str):
        calls.append(line)

    monkeypatch.setattr(m, "_print_progress", _stub)
    return calls


@pytest.fixture()
def progress_recorder():
    """Provide a reusable progress callback and its call log."""
    calls = []

    def cb(done, total):
        calls.append((done, total))

    return cb, calls


@pytest.fixture()
def codec():
    from codec import HuffmanCodec
    return HuffmanCodec()


@pytest.fixture()
def sample_file(tmp_path: Path):
    """Write a small multi-line text file with reserved characters in it."""
    path = tmp_path / "sample.txt"
    path.write_text(
        "Hello World!\r\nkey: value; other: thing\n~DnE~ \\ done\n",
        encoding="utf-8",
        newline="",
    )
    return path
