from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

# Bucket key for files without an extension. Never produced by a real
# extension because trailing dots map here too.
NO_EXTENSION: str = ""


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Entry:
    path: str
    name: str
    kind: EntryKind
    size: int
    depth: int
    mtime_ns: int


@dataclass(frozen=True, slots=True)
class EntryError:
    path: str
    reason: str


@dataclass(frozen=True, slots=True)
class ExtensionStats:
    count: int
    total_size: int


@dataclass(frozen=True, slots=True)
class FileRef:
    path: str
    size: int
    mtime_ns: int


@dataclass(frozen=True)
class ScanReport:
    root: str
    max_depth: int | None

    # Totals
    total_entries: int
    total_size: int

    # Kinds
    files: int
    directories: int
    symlinks: int
    others: int

    # Breakdown
    extensions: MappingProxyType[str, ExtensionStats]
    depth_counts: MappingProxyType[int, int]
    max_depth_seen: int

    # Rankings
    largest_file: FileRef | None
    smallest_file: FileRef | None
    largest_files: tuple[FileRef, ...]
    oldest_files: tuple[FileRef, ...]

    # Skipped entries
    errors: tuple[EntryError, ...]

    def extensions_by_size(self) -> list[tuple[str, ExtensionStats]]:
        """Extension buckets sorted by descending total size, then name."""
        return sorted(self.extensions.items(), key=lambda item: (-item[1].total_size, item[0]))


@dataclass(frozen=True, slots=True)
class SearchCriteria:
    name_pattern: str | None = None
    extension: str | None = None
    min_size: int | None = None
    max_size: int | None = None
    max_depth: int | None = None


@dataclass(frozen=True)
class SearchResult:
    root: str
    matches: tuple[Entry, ...]
    total_size: int
    elapsed_ms: float
    errors: tuple[EntryError, ...]

    @property
    def total_count(self) -> int:
        return len(self.matches)


@dataclass(frozen=True, slots=True)
class PathInfo:
    path: str
    name: str
    kind: EntryKind
    size: int
    extension: str
    mtime_ns: int
    mode: int
    # Set for symlinks only; None when the link is broken
    target_kind: EntryKind | None = None
