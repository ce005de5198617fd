"""groot command line: init, add, commit, log, show, status, cat."""

import functools
import logging
import sys
from pathlib import Path
from typing import Any, Callable

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from .errors import AlreadyInitialized, GrootError
from .history import CommitReport, FileReport
from .repo import DEFAULT_ROOT, Repository, repository

logger = logging.getLogger(__name__)

console = Console(highlight=False, emoji=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, emoji=False, soft_wrap=True)

SEPARATOR = "-" * 46
SEGMENT_STYLES = {"added": ("+", "green"), "removed": ("-", "red"), "unchanged": (" ", "grey50")}


def _configure_logging(verbose: bool) -> None:
    root = logging.getLogger()
    if not root.handlers:
        handler = RichHandler(console=err_console, show_time=False, show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _handle_errors(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Report storage errors in red and exit 1."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except (GrootError, OSError) as e:
            logger.debug("Command failed", exc_info=True)
            err_console.print(f"Error: {e}", style="red", markup=False)
            sys.exit(1)

    return wrapper


def _repo(ctx: click.Context, *, require_init: bool = True) -> Repository:
    repo: Repository = ctx.obj
    if require_init:
        repo.require_initialized()
    return repo


@click.group()
@click.option(
    "--root",
    envvar="GROOT_DIR",
    default=DEFAULT_ROOT,
    show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Storage root directory.",
)
@click.option(
    "--storage",
    type=click.Choice(["files", "disk"]),
    default="files",
    show_default=True,
    help="Storage backend.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, root: Path, storage: str, verbose: bool) -> None:
    """A minimal content-addressed version control tool."""
    _configure_logging(verbose)
    if ctx.obj is None:
        ctx.obj = repository(storage, path=root)  # type: ignore[arg-type]


@cli.command()
@click.pass_context
@_handle_errors
def init(ctx: click.Context) -> None:
    """Create the storage root, HEAD and index."""
    repo = _repo(ctx, require_init=False)
    try:
        repo.init()
    except AlreadyInitialized:
        console.print("Already initialized.", style="yellow")
        return
    console.print("Initialized empty groot repository.", style="green")


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.pass_context
@_handle_errors
def add(ctx: click.Context, paths: tuple[Path, ...]) -> None:
    """Stage one or more files."""
    repo = _repo(ctx)
    for path in paths:
        entry = repo.add(path)
        console.print(entry.digest, markup=False)
        console.print(f"Added {entry.path}", markup=False)


@cli.command()
@click.argument("message")
@click.pass_context
@_handle_errors
def commit(ctx: click.Context, message: str) -> None:
    """Commit the staged files."""
    repo = _repo(ctx)
    digest = repo.commit(message)
    console.print(f"Commit successfully created: {digest}", style="green", markup=False)


@cli.command()
@click.option("-n", "--limit", type=click.IntRange(min=1), default=None, help="Show at most N commits.")
@click.pass_context
@_handle_errors
def log(ctx: click.Context, limit: int | None) -> None:
    """Show commits from HEAD back to the first commit."""
    repo = _repo(ctx)
    for summary in repo.log(limit=limit):
        console.print(SEPARATOR)
        console.print(f"Commit: {summary.digest}", style="yellow", markup=False)
        console.print(f"Date: {summary.timestamp}", markup=False)
        console.print()
        console.print(f"    {summary.message}", markup=False)
        console.print()


@cli.command()
@click.argument("digest")
@click.pass_context
@_handle_errors
def show(ctx: click.Context, digest: str) -> None:
    """Show each file in a commit and its diff against the parent."""
    repo = _repo(ctx)
    _render_report(repo.show(digest))


@cli.command()
@click.pass_context
@_handle_errors
def status(ctx: click.Context) -> None:
    """List staged entries in the order they were added."""
    repo = _repo(ctx)
    entries = repo.index.load()
    if not entries:
        console.print("Nothing staged.")
        return
    console.print(f"Staged for commit ({len(entries)}):")
    for entry in entries:
        console.print(f"  {entry.digest[:10]}  {entry.path}", markup=False)


@cli.command()
@click.argument("digest")
@click.pass_context
@_handle_errors
def cat(ctx: click.Context, digest: str) -> None:
    """Print a stored object verbatim."""
    repo = _repo(ctx)
    click.echo(repo.objects.get(digest), nl=False)


def _render_report(report: CommitReport) -> None:
    console.print(f"Changes in commit {report.digest}:", markup=False)
    for file in report.files:
        console.print(SEPARATOR)
        console.print(f"File: {file.path}", style="bold", markup=False)
        _render_file(file)


def _render_file(file: FileReport) -> None:
    if file.status == "initial":
        console.print(file.content.rstrip("\n"), markup=False)
        console.print("First commit", style="cyan")
        return
    if file.status == "new":
        console.print(file.content.rstrip("\n"), markup=False)
        console.print("New file in this commit", style="cyan")
        return
    if not file.changed:
        console.print(file.content.rstrip("\n"), markup=False)
        console.print("No changes", style="grey50")
        return
    for segment in file.segments:
        marker, style = SEGMENT_STYLES[segment.kind]
        for line in segment.lines:
            console.print(Text(f"{marker} {line}", style=style))


def main() -> None:
    cli(prog_name="groot")


if __name__ == "__main__":
    main()
