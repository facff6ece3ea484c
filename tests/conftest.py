import os
from collections.abc import Callable
from contextlib import nullcontext
from pathlib import Path

import pytest


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """
    Creates:

    root/                   depth 0
        report.txt   120 B  depth 1
        README        10 B  depth 1
        .bashrc        5 B  depth 1
        docs/               depth 1
            guide.MD 300 B  depth 2
            notes.txt 30 B  depth 2
            deep/           depth 2
                data.json 50 B  depth 3
    """
    root: Path = tmp_path / "root"
    deep: Path = root / "docs" / "deep"
    deep.mkdir(parents=True)

    (root / "report.txt").write_bytes(b"r" * 120)
    (root / "README").write_bytes(b"x" * 10)
    (root / ".bashrc").write_bytes(b"b" * 5)
    (root / "docs" / "guide.MD").write_bytes(b"g" * 300)
    (root / "docs" / "notes.txt").write_bytes(b"n" * 30)
    (deep / "data.json").write_bytes(b"{" * 50)

    return root


@pytest.fixture
def block_listing(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """
    Make os.scandir fail for the given directories.

    The error defaults to PermissionError; pass `error` to raise another
    OSError instead.
    """
    real_scandir = os.scandir
    blocked: dict[str, OSError] = {}

    def fake_scandir(path: "str | os.PathLike[str]" = "."):
        key: str = os.fspath(path)
        if key in blocked:
            raise blocked[key]
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)

    def block(path: Path, error: OSError | None = None) -> None:
        blocked[str(path)] = error if error is not None else PermissionError(13, "Permission denied", str(path))

    return block


@pytest.fixture
def delete_after_listing(monkeypatch: pytest.MonkeyPatch) -> Callable[[Path], None]:
    """Remove the given files right after their directory is listed, before they are stat'ed."""
    real_scandir = os.scandir
    doomed: set[str] = set()

    def fake_scandir(path: "str | os.PathLike[str]" = "."):
        with real_scandir(path) as it:
            entries: list[os.DirEntry[str]] = list(it)

        for entry in entries:
            if entry.path in doomed:
                os.unlink(entry.path)

        return nullcontext(entries)

    monkeypatch.setattr(os, "scandir", fake_scandir)

    def delete(path: Path) -> None:
        doomed.add(str(path))

    return delete
