import heapq
from types import MappingProxyType

from .models import NO_EXTENSION, Entry, EntryError, EntryKind, ExtensionStats, FileRef, ScanReport


def extension_of(name: str) -> str:
    """
    Return the lower-cased extension of a file name, without the dot.

    Names without a dot, dot-files without a further dot (".bashrc") and
    names ending in a dot all map to `NO_EXTENSION`.
    """
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem or not ext:
        return NO_EXTENSION
    return ext.lower()


class ReportBuilder:
    def __init__(self, root: str, max_depth: int | None = None, top_n: int = 10) -> None:
        if max_depth is not None and max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if top_n < 0:
            raise ValueError("top_n must be >= 0")

        self.root: str = root
        self.max_depth: int | None = max_depth
        self.top_n: int = top_n

        self.total_entries: int = 0
        self.total_size: int = 0
        self.kind_counts: dict[EntryKind, int] = {kind: 0 for kind in EntryKind}
        self.extensions: dict[str, tuple[int, int]] = {}
        self.depth_counts: dict[int, int] = {}
        self.max_depth_seen: int = 0
        self.errors: list[EntryError] = []

        self.largest_file: FileRef | None = None
        self.smallest_file: FileRef | None = None

        # Min-heaps of (rank key, ref). Keys grow with "better", ties go to
        # the entry visited first through the negated sequence number.
        self._largest: list[tuple[tuple[int, int], FileRef]] = []
        self._oldest: list[tuple[tuple[int, int], FileRef]] = []
        self._seq: int = 0
        self._built: bool = False

    def _check_open(self) -> None:
        if self._built:
            raise RuntimeError("Report already built")

    def add_entry(self, entry: Entry) -> None:
        self._check_open()

        if self.max_depth is not None and entry.depth > self.max_depth:
            raise ValueError(f"Entry {entry.path} at depth {entry.depth} exceeds max depth {self.max_depth}")

        self.total_entries += 1
        self.kind_counts[entry.kind] += 1
        self.depth_counts[entry.depth] = self.depth_counts.get(entry.depth, 0) + 1
        self.max_depth_seen = max(self.max_depth_seen, entry.depth)

        if entry.kind is EntryKind.FILE:
            self._add_file(entry)

    def _add_file(self, entry: Entry) -> None:
        self.total_size += entry.size

        ext: str = extension_of(entry.name)
        count, size = self.extensions.get(ext, (0, 0))
        self.extensions[ext] = (count + 1, size + entry.size)

        ref: FileRef = FileRef(path=entry.path, size=entry.size, mtime_ns=entry.mtime_ns)

        # First visited wins on equal sizes
        if self.largest_file is None or ref.size > self.largest_file.size:
            self.largest_file = ref
        if self.smallest_file is None or ref.size < self.smallest_file.size:
            self.smallest_file = ref

        self._seq += 1
        self._push(self._largest, (ref.size, -self._seq), ref)
        self._push(self._oldest, (-ref.mtime_ns, -self._seq), ref)

    def _push(self, heap: list[tuple[tuple[int, int], FileRef]], key: tuple[int, int], ref: FileRef) -> None:
        if self.top_n == 0:
            return
        if len(heap) < self.top_n:
            heapq.heappush(heap, (key, ref))
        elif key > heap[0][0]:
            _ = heapq.heapreplace(heap, (key, ref))

    def add_error(self, error: EntryError) -> None:
        self._check_open()
        self.errors.append(error)

    def build(self) -> ScanReport:
        self._check_open()
        self._built = True

        return ScanReport(
            root=self.root,
            max_depth=self.max_depth,
            total_entries=self.total_entries,
            total_size=self.total_size,
            files=self.kind_counts[EntryKind.FILE],
            directories=self.kind_counts[EntryKind.DIRECTORY],
            symlinks=self.kind_counts[EntryKind.SYMLINK],
            others=self.kind_counts[EntryKind.OTHER],
            extensions=MappingProxyType(
                {ext: ExtensionStats(count=count, total_size=size) for ext, (count, size) in self.extensions.items()}
            ),
            depth_counts=MappingProxyType(dict(sorted(self.depth_counts.items()))),
            max_depth_seen=self.max_depth_seen,
            largest_file=self.largest_file,
            smallest_file=self.smallest_file,
            largest_files=tuple(ref for _, ref in sorted(self._largest, key=lambda item: item[0], reverse=True)),
            oldest_files=tuple(ref for _, ref in sorted(self._oldest, key=lambda item: item[0], reverse=True)),
            errors=tuple(self.errors),
        )
