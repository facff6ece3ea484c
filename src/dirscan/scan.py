import logging
import os
import stat
from collections.abc import Callable, Iterator
from pathlib import Path

from .aggregate import ReportBuilder
from .errors import NotADirectory, NotFound, root_failure
from .models import Entry, EntryError, EntryKind, ScanReport

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[EntryError], None]


def classify(mode: int) -> EntryKind:
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISREG(mode):
        return EntryKind.FILE
    return EntryKind.OTHER


def _reason(exc: OSError) -> str:
    return exc.strerror or exc.__class__.__name__


def resolve_root(path: str | Path) -> Entry:
    """
    Validate the scan root and return it as the depth 0 entry.

    The root may itself be a symlink to a directory.

    Raises
    ------
    NotFound
        If the path does not exist.
    NotADirectory
        If the path exists but is not a directory.
    PermissionDenied
        If the path cannot be stat'ed.
    ScanFailed
        For any other OS error on the path, e.g. a symlink loop.
    """
    root: str = os.fspath(path)

    try:
        st: os.stat_result = os.stat(root)
    except NotADirectoryError:
        # A path component is a regular file
        raise NotFound(root)
    except OSError as e:
        raise root_failure(root, e)

    if not stat.S_ISDIR(st.st_mode):
        raise NotADirectory(root)

    return Entry(
        path=root,
        name=Path(root).name or root,
        kind=EntryKind.DIRECTORY,
        size=0,
        depth=0,
        mtime_ns=st.st_mtime_ns,
    )


def _read_dir(path: str) -> list[os.DirEntry[str]]:
    with os.scandir(path) as it:
        return sorted(it, key=lambda e: e.name)


def _to_entries(dir_entries: list[os.DirEntry[str]], depth: int, on_error: ErrorHandler) -> list[Entry]:
    entries: list[Entry] = []
    for dir_entry in dir_entries:
        try:
            st: os.stat_result = dir_entry.stat(follow_symlinks=False)
        except OSError as e:
            # Deleted since listing, or not stat-able
            on_error(EntryError(path=dir_entry.path, reason=_reason(e)))
            continue

        kind: EntryKind = classify(st.st_mode)

        if kind is EntryKind.SYMLINK:
            try:
                _ = os.stat(dir_entry.path)
            except OSError as e:
                on_error(EntryError(path=dir_entry.path, reason=f"broken symlink ({_reason(e)})"))

        entries.append(
            Entry(
                path=dir_entry.path,
                name=dir_entry.name,
                kind=kind,
                size=st.st_size if kind is EntryKind.FILE else 0,
                depth=depth,
                mtime_ns=st.st_mtime_ns,
            )
        )

    return entries


def list_dir(path: str, depth: int, on_error: ErrorHandler) -> list[Entry] | None:
    """
    Return the entries directly inside `path`, sorted by name.

    Entries that vanish or cannot be stat'ed are reported through
    `on_error` and skipped. Broken symlinks are returned and reported.
    Returns None when the directory itself cannot be listed.
    """
    try:
        dir_entries: list[os.DirEntry[str]] = _read_dir(path)
    except OSError as e:
        on_error(EntryError(path=path, reason=_reason(e)))
        return None

    return _to_entries(dir_entries, depth, on_error)


def walk(root: str | Path, max_depth: int | None, on_error: ErrorHandler) -> Iterator[Entry]:
    """
    Yield every entry under `root` depth-first, root included.

    Directories at `max_depth` are yielded but not listed. Failures on
    the root raise; failures below it go to `on_error` and the walk
    carries on with the remaining entries.
    """
    if max_depth is not None and max_depth < 0:
        raise ValueError("max_depth must be >= 0")

    root_entry: Entry = resolve_root(root)
    yield root_entry

    if max_depth == 0:
        return

    # The root must be listable, unlike any directory below it.
    try:
        root_listing: list[os.DirEntry[str]] = _read_dir(root_entry.path)
    except OSError as e:
        raise root_failure(root_entry.path, e)

    # Reversed so the first name is popped first
    stack: list[Entry] = list(reversed(_to_entries(root_listing, 1, on_error)))

    while stack:
        entry: Entry = stack.pop()
        yield entry

        if entry.kind is not EntryKind.DIRECTORY:
            continue
        if max_depth is not None and entry.depth >= max_depth:
            continue

        listed: list[Entry] | None = list_dir(entry.path, entry.depth + 1, on_error)
        if listed is not None:
            stack.extend(reversed(listed))


def scan(root_path: str | Path, max_depth: int | None = None, top_n: int = 10) -> ScanReport:
    """
    Walk `root_path` and aggregate every visited entry into a report.

    Parameters
    ----------
    root_path : str | Path
        Directory to scan.
    max_depth : int | None
        Deepest level recorded, root being 0. None means unbounded.
    top_n : int
        Length of the largest and oldest file rankings.

    Returns
    -------
    ScanReport
        The finished, read-only report.

    Raises
    ------
    NotFound, NotADirectory, PermissionDenied
        If the root itself cannot be scanned.
    ScanFailed
        For any other OS error on the root.
    """
    builder: ReportBuilder = ReportBuilder(root=os.fspath(root_path), max_depth=max_depth, top_n=top_n)

    def record_error(error: EntryError) -> None:
        logger.debug("Skipping %s: %s", error.path, error.reason)
        builder.add_error(error)

    logger.info("Scanning %s (max depth: %s)", builder.root, "unbounded" if max_depth is None else max_depth)

    for entry in walk(root_path, max_depth, record_error):
        builder.add_entry(entry)

    report: ScanReport = builder.build()
    logger.info(
        "Scanned %d entries, %d bytes, %d errors", report.total_entries, report.total_size, len(report.errors)
    )
    return report
