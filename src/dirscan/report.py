from datetime import datetime

import typer
import yaml

from .models import NO_EXTENSION, EntryKind, FileRef, PathInfo, ScanReport, SearchResult


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size:,} B"

    value: float = size / 1024
    for unit in ("KB", "MB", "GB"):
        if value < 1024:
            return f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} TB"


def _format_ns(ts: int) -> str:
    return datetime.fromtimestamp(ts / 1e9).isoformat(timespec="seconds")


def _ext_label(ext: str) -> str:
    return "(none)" if ext == NO_EXTENSION else f".{ext}"


def _file_ref(ref: FileRef | None) -> dict[str, object] | None:
    if ref is None:
        return None
    return {"path": ref.path, "size": ref.size, "modified": _format_ns(ref.mtime_ns)}


def report_to_raw(report: ScanReport) -> dict[str, object]:
    return {
        "root": report.root,
        "max_depth": report.max_depth,
        "total_entries": report.total_entries,
        "total_size": report.total_size,
        "kinds": {
            "files": report.files,
            "directories": report.directories,
            "symlinks": report.symlinks,
            "others": report.others,
        },
        "extensions": [
            {"extension": ext, "count": stats.count, "total_size": stats.total_size}
            for ext, stats in report.extensions_by_size()
        ],
        "max_depth_seen": report.max_depth_seen,
        "depth_counts": dict(report.depth_counts),
        "largest_file": _file_ref(report.largest_file),
        "smallest_file": _file_ref(report.smallest_file),
        "largest_files": [_file_ref(ref) for ref in report.largest_files],
        "oldest_files": [_file_ref(ref) for ref in report.oldest_files],
        "errors": [{"path": error.path, "reason": error.reason} for error in report.errors],
    }


def render_yaml(report: ScanReport) -> str:
    return yaml.safe_dump(report_to_raw(report), sort_keys=False, allow_unicode=True)


def print_report(report: ScanReport) -> None:
    typer.echo(f"Directory scan: {report.root}")
    typer.echo("-" * (16 + len(report.root)))
    typer.echo(f"Max depth:           {'unbounded' if report.max_depth is None else report.max_depth}")
    typer.echo(f"Deepest level:       {report.max_depth_seen}")
    typer.echo(f"Total entries:       {report.total_entries}")
    typer.echo(f"Total size:          {report.total_size:,} bytes ({format_size(report.total_size)})")

    typer.echo("\nEntries")
    typer.echo("-------")
    typer.echo(f"Files:               {report.files}")
    typer.echo(f"Directories:         {report.directories}")
    typer.echo(f"Symlinks:            {report.symlinks}")
    typer.echo(f"Other:               {report.others}")

    if report.extensions:
        typer.echo("\nFile types")
        typer.echo("----------")
        for ext, stats in report.extensions_by_size():
            typer.echo(f"  {_ext_label(ext):<18} {stats.count:>6} files  {format_size(stats.total_size):>12}")

    typer.echo("\nDepth distribution")
    typer.echo("------------------")
    for depth, count in report.depth_counts.items():
        typer.echo(f"  depth {depth:<3} {count:>8}")

    if report.largest_file is not None and report.smallest_file is not None:
        typer.echo("\nExtremes")
        typer.echo("--------")
        typer.echo(f"Largest file:        {report.largest_file.path} ({report.largest_file.size:,} bytes)")
        typer.echo(f"Smallest file:       {report.smallest_file.path} ({report.smallest_file.size:,} bytes)")

    if report.largest_files:
        typer.echo(f"\nLargest {len(report.largest_files)} files")
        typer.echo("-------------")
        for i, ref in enumerate(report.largest_files, start=1):
            typer.echo(f"  {i}. {ref.path} ({format_size(ref.size)})")

    if report.oldest_files:
        typer.echo(f"\nOldest {len(report.oldest_files)} files")
        typer.echo("------------")
        for i, ref in enumerate(report.oldest_files, start=1):
            typer.echo(f"  {i}. {ref.path} (modified {_format_ns(ref.mtime_ns)})")

    if report.errors:
        typer.echo("\nSkipped entries")
        typer.echo("---------------")
        typer.echo(f"{len(report.errors)} entries could not be read:")
        for error in report.errors:
            typer.echo(f"  {error.path}: {error.reason}")
    else:
        typer.echo("\nNo entries skipped.")


def print_search_result(result: SearchResult) -> None:
    typer.echo(f"Search results: {result.root}")
    typer.echo(f"Files found:         {result.total_count}")
    typer.echo(f"Total size:          {result.total_size:,} bytes ({format_size(result.total_size)})")
    typer.echo(f"Search time:         {result.elapsed_ms:.1f} ms")

    if result.matches:
        typer.echo("")
        for i, entry in enumerate(result.matches, start=1):
            typer.echo(f"  {i}. {entry.path} ({format_size(entry.size)})")

    if result.errors:
        typer.echo(f"\n{len(result.errors)} entries could not be read:")
        for error in result.errors:
            typer.echo(f"  {error.path}: {error.reason}")


def print_info(info: PathInfo) -> None:
    typer.echo("File info")
    typer.echo("---------")
    typer.echo(f"Name:                {info.name}")
    typer.echo(f"Path:                {info.path}")
    typer.echo(f"Type:                {info.kind.value}")
    if info.kind is EntryKind.SYMLINK:
        typer.echo(f"Target:              {'broken' if info.target_kind is None else info.target_kind.value}")
    if info.kind is EntryKind.FILE:
        typer.echo(f"Size:                {info.size:,} bytes ({format_size(info.size)})")
        typer.echo(f"Extension:           {_ext_label(info.extension)}")
    typer.echo(f"Permissions:         {info.mode:o}")
    typer.echo(f"Modified:            {_format_ns(info.mtime_ns)}")
