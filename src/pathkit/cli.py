"""CLI commands using Typer."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from pathkit.context import PathContext

import typer
from rich.console import Console

from pathkit import __version__
from pathkit.context import create_context
from pathkit.errors import PathError
from pathkit.output import Output
from pathkit.types import DEFAULT_DIR_MODE, PathInfo

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="pathkit",
    help="File and directory operations through path objects",
    no_args_is_help=True,
)

console = Console()
output = Output(console)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"pathkit v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Log filesystem calls at debug level")
    ] = False,
) -> None:
    """File and directory operations through path objects."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


def _parse_mode(mode: str) -> int:
    """Parse an octal permission string such as ``755``."""
    try:
        value = int(mode, 8)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid octal mode: {mode}") from e
    if not 0 <= value <= 0o7777:
        raise typer.BadParameter(f"Mode out of range: {mode}")
    return value


@contextmanager
def _report_failure(action: str) -> Iterator[None]:
    """Turn path and OS errors into an error line and exit code 1."""
    try:
        yield
    except (PathError, OSError) as e:
        logger.debug("%s failed", action, exc_info=True)
        output.show_error(f"{action} failed: {e}")
        raise typer.Exit(1) from e


def _context_or_default(context: PathContext | None) -> PathContext:
    return context or create_context()


@app.command("touch")
def touch(
    path: Annotated[str, typer.Argument(help="File to create or truncate")],
    _context=None,
) -> None:
    """Create a file, truncating it if it exists."""
    target = _context_or_default(_context).path(path)
    with _report_failure(f"touch {path}"):
        target.touch()
    output.show_success(f"Touched '{path}'")


@app.command("mkdir")
def mkdir(
    path: Annotated[str, typer.Argument(help="Directory to create")],
    parents: Annotated[
        bool, typer.Option("--parents", "-p", help="Create missing parent directories")
    ] = False,
    mode: Annotated[str, typer.Option("--mode", "-m", help="Octal permission bits")] = oct(
        DEFAULT_DIR_MODE
    )[2:],
    _context=None,
) -> None:
    """Create a directory."""
    bits = _parse_mode(mode)
    target = _context_or_default(_context).path(path)
    with _report_failure(f"mkdir {path}"):
        target.mkdir(bits, parents=parents)
    output.show_success(f"Created directory '{path}'")


@app.command("rm")
def rm(
    path: Annotated[str, typer.Argument(help="File or link to remove")],
    _context=None,
) -> None:
    """Remove a file or link."""
    target = _context_or_default(_context).path(path)
    with _report_failure(f"rm {path}"):
        target.unlink()
    output.show_success(f"Removed '{path}'")


@app.command("rmdir")
def rmdir(
    path: Annotated[str, typer.Argument(help="Empty directory to remove")],
    _context=None,
) -> None:
    """Remove an empty directory."""
    target = _context_or_default(_context).path(path)
    with _report_failure(f"rmdir {path}"):
        target.rmdir()
    output.show_success(f"Removed directory '{path}'")


@app.command("cat")
def cat(
    path: Annotated[str, typer.Argument(help="File to print")],
    _context=None,
) -> None:
    """Print the contents of a file."""
    target = _context_or_default(_context).path(path)
    with _report_failure(f"cat {path}"):
        data = target.read_bytes()
    typer.echo(data, nl=False)


@app.command("write")
def write(
    path: Annotated[str, typer.Argument(help="File to write")],
    text: Annotated[str, typer.Argument(help="Text to write")],
    _context=None,
) -> None:
    """Replace the contents of a file with TEXT."""
    target = _context_or_default(_context).path(path)
    with _report_failure(f"write {path}"):
        target.write_text(text)
    output.show_success(f"Wrote {len(text)} characters to '{path}'")


@app.command("mv")
def mv(
    source: Annotated[str, typer.Argument(help="Path to move")],
    destination: Annotated[str, typer.Argument(help="New path")],
    _context=None,
) -> None:
    """Rename SOURCE to DESTINATION."""
    ctx = _context_or_default(_context)
    with _report_failure(f"mv {source}"):
        ctx.path(source).rename(ctx.path(destination))
    output.show_success(f"Moved '{source}' to '{destination}'")


@app.command("chmod")
def chmod(
    mode: Annotated[str, typer.Argument(help="Octal permission bits")],
    path: Annotated[str, typer.Argument(help="Path to change")],
    _context=None,
) -> None:
    """Change the permission bits of a path."""
    bits = _parse_mode(mode)
    target = _context_or_default(_context).path(path)
    with _report_failure(f"chmod {path}"):
        target.chmod(bits)
    output.show_success(f"Changed mode of '{path}' to {mode}")


@app.command("info")
def info(
    path: Annotated[str, typer.Argument(help="Path to describe")],
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON")] = False,
    _context=None,
) -> None:
    """Describe a path."""
    target = _context_or_default(_context).path(path)
    with _report_failure(f"info {path}"):
        summary = PathInfo.from_path(target)
    if as_json:
        typer.echo(summary.model_dump_json(indent=2))
    else:
        output.show_path_info(summary)


if __name__ == "__main__":
    app()
