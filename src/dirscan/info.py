import os
import stat
from pathlib import Path

from .aggregate import extension_of
from .errors import NotFound, root_failure
from .models import EntryKind, PathInfo
from .scan import classify


def inspect_path(path: str | Path) -> PathInfo:
    """
    Describe a single filesystem path without following it if it is a symlink.

    Raises
    ------
    NotFound
        If nothing exists at the path.
    PermissionDenied, ScanFailed
        If the path cannot be stat'ed.
    """
    target: str = os.fspath(path)

    try:
        st: os.stat_result = os.lstat(target)
    except NotADirectoryError:
        # A path component is a regular file
        raise NotFound(target)
    except OSError as e:
        raise root_failure(target, e)

    kind: EntryKind = classify(st.st_mode)
    name: str = Path(target).name or target

    target_kind: EntryKind | None = None
    if kind is EntryKind.SYMLINK:
        try:
            target_kind = classify(os.stat(target).st_mode)
        except OSError:
            # Broken link
            target_kind = None

    return PathInfo(
        path=target,
        name=name,
        kind=kind,
        size=st.st_size if kind is EntryKind.FILE else 0,
        extension=extension_of(name) if kind is EntryKind.FILE else "",
        mtime_ns=st.st_mtime_ns,
        mode=stat.S_IMODE(st.st_mode),
        target_kind=target_kind,
    )
