import logging
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Annotated

import typer

from .config import CONFIG_FILENAME, OUTPUT_FORMATS, AppConfig
from .errors import ScanFailed
from .info import inspect_path
from .models import PathInfo, ScanReport, SearchCriteria, SearchResult
from .report import print_info, print_report, print_search_result, render_yaml
from .scan import scan as scan_directory
from .search import parse_size_range
from .search import search as search_files


def installed_version() -> str:
    try:
        return version(distribution_name="dirscan")
    except PackageNotFoundError:
        return "unknown (package not installed)"


app: typer.Typer = typer.Typer(
    help=f"dirscan: summarize what is inside a directory tree\n\nVersion: {installed_version()}",
)


def print_version(is_version: bool) -> None:
    """
    Callback for the global --version / -V option.

    Typer passes a boolean telling whether --version was given. Without
    the flag this returns so normal command execution can continue; with
    it the installed version is printed and the program exits early.
    """
    if not is_version:
        return

    typer.echo(installed_version())
    raise typer.Exit()


def load_config(config_path: Path | None) -> AppConfig:
    try:
        return AppConfig.load_or_default(config_path)
    except (FileNotFoundError, TypeError, ValueError) as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def init(
    max_depth: Annotated[int | None, typer.Option(min=0)] = None,
    top: Annotated[int, typer.Option(min=0)] = 10,
    output_format: Annotated[str, typer.Option("--format")] = "text",
    force: Annotated[bool, typer.Option()] = False,
) -> None:
    """
    Write a config file with scan defaults.

    The file is written to the current directory and picked up by later
    scan runs started from there.
    """
    if CONFIG_FILENAME.exists() and not force:
        typer.echo("Config file already exists. Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        cfg: AppConfig = AppConfig(max_depth=max_depth, top_n=top, output_format=output_format)
    except ValueError as e:
        raise typer.BadParameter(str(e))

    cfg.save(CONFIG_FILENAME)
    typer.echo(f"Config written to {CONFIG_FILENAME}")


@app.command()
def scan(
    path: Path,
    max_depth: Annotated[
        int | None, typer.Option(min=0, help="Deepest level to record, the root being 0.")
    ] = None,
    top: Annotated[int | None, typer.Option(min=0, help="Number of largest and oldest files to list.")] = None,
    output_format: Annotated[str | None, typer.Option("--format", help="text or yaml")] = None,
    config: Annotated[Path | None, typer.Option(help="Config file to read defaults from.")] = None,
) -> None:
    """Scan a directory tree and print an aggregate report."""
    cfg: AppConfig = load_config(config)

    if max_depth is not None:
        cfg.max_depth = max_depth
    if top is not None:
        cfg.top_n = top
    if output_format is not None:
        if output_format not in OUTPUT_FORMATS:
            raise typer.BadParameter(f"Format must be one of {', '.join(OUTPUT_FORMATS)}.")
        cfg.output_format = output_format

    try:
        report: ScanReport = scan_directory(path, max_depth=cfg.max_depth, top_n=cfg.top_n)
    except ScanFailed as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if cfg.output_format == "yaml":
        typer.echo(render_yaml(report), nl=False)
    else:
        print_report(report)


@app.command()
def search(
    path: Path,
    name: Annotated[str | None, typer.Option("--name", "-n", help="Substring of the file name.")] = None,
    ext: Annotated[str | None, typer.Option("--ext", "-e", help="File extension, e.g. txt")] = None,
    size: Annotated[
        str | None, typer.Option("--size", help="Size or range in bytes, K/M/G suffix allowed (e.g. 1K-4M).")
    ] = None,
    max_depth: Annotated[int | None, typer.Option("--max-depth", "-d", min=0)] = None,
) -> None:
    """Find files by name, extension and size."""
    min_size: int | None = None
    max_size: int | None = None

    if size is not None:
        try:
            min_size, max_size = parse_size_range(size)
        except ValueError as e:
            raise typer.BadParameter(str(e))

    criteria: SearchCriteria = SearchCriteria(
        name_pattern=name,
        extension=ext,
        min_size=min_size,
        max_size=max_size,
        max_depth=max_depth,
    )

    try:
        result: SearchResult = search_files(path, criteria)
    except ScanFailed as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    print_search_result(result)


@app.command()
def info(path: Path) -> None:
    """Show type, size, extension and modification time of one path."""
    try:
        path_info: PathInfo = inspect_path(path)
    except ScanFailed as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    print_info(path_info)


@app.command(name="version")
def version_cmd() -> None:
    """Print the installed version of dirscan."""
    print_version(True)


@app.callback()
def main(
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=print_version,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log skipped entries.")] = False,
) -> None:
    """
    Global options for dirscan. All subcommands run after this callback
    unless --version is used.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    app()
