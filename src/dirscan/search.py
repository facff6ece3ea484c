import logging
import os
import time
from pathlib import Path

from .aggregate import extension_of
from .models import Entry, EntryError, EntryKind, SearchCriteria, SearchResult
from .scan import walk

logger = logging.getLogger(__name__)


def parse_size(value: str) -> int:
    # Normalize
    text: str = value.strip().upper()
    if not text:
        raise ValueError("Size is empty.")

    last_char: str = text[-1]
    # Match "[number][optional suffix]"
    if last_char in {"K", "M", "G"}:
        number: str = text[:-1]
        suffix: str | None = last_char
    else:
        number = text
        suffix = None

    try:
        base: int = int(number)
    except ValueError:
        raise ValueError(f"Size {value!r} is not a number. Only K, M and G are allowed suffixes.")

    if base < 0:
        raise ValueError(f"Size {value!r} must not be negative.")

    if suffix == "K":
        return base * 1024
    elif suffix == "M":
        return base * 1024 * 1024
    elif suffix == "G":
        return base * 1024 * 1024 * 1024
    else:
        return base


def parse_size_range(value: str) -> tuple[int | None, int | None]:
    """
    Parse "N", "MIN-MAX", "MIN-" or "-MAX" into inclusive bounds.

    A single number means an exact size.
    """
    text: str = value.strip()

    if "-" not in text:
        size: int = parse_size(text)
        return size, size

    low, _, high = text.partition("-")
    min_size: int | None = parse_size(low) if low.strip() else None
    max_size: int | None = parse_size(high) if high.strip() else None

    if min_size is None and max_size is None:
        raise ValueError("Size range needs at least one bound.")
    if min_size is not None and max_size is not None and min_size > max_size:
        raise ValueError(f"Size range {value!r} has min greater than max.")

    return min_size, max_size


def matches(entry: Entry, criteria: SearchCriteria) -> bool:
    if entry.kind is not EntryKind.FILE:
        return False

    if criteria.extension is not None:
        wanted: str = criteria.extension.lower().lstrip(".")
        if extension_of(entry.name) != wanted:
            return False

    if criteria.name_pattern is not None and criteria.name_pattern.lower() not in entry.name.lower():
        return False

    if criteria.min_size is not None and entry.size < criteria.min_size:
        return False
    if criteria.max_size is not None and entry.size > criteria.max_size:
        return False

    return True


def search(root_path: str | Path, criteria: SearchCriteria) -> SearchResult:
    """Find files under `root_path` that satisfy every set criterion."""
    started: float = time.perf_counter()

    found: list[Entry] = []
    errors: list[EntryError] = []

    def record_error(error: EntryError) -> None:
        logger.debug("Skipping %s: %s", error.path, error.reason)
        errors.append(error)

    for entry in walk(root_path, criteria.max_depth, record_error):
        if matches(entry, criteria):
            found.append(entry)

    elapsed_ms: float = (time.perf_counter() - started) * 1000

    return SearchResult(
        root=os.fspath(root_path),
        matches=tuple(found),
        total_size=sum(entry.size for entry in found),
        elapsed_ms=elapsed_ms,
        errors=tuple(errors),
    )
