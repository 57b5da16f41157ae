"""
Scans, strips, and restores //$NON-NLS-n$ markers in Java-like source files.
The `format` command runs an external formatter with markers kept attached to
their string literals.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click
from .config import MarkerConfig, build_config
from .exceptions import FormatterCommandError, MarkerError
from .filesystem import (
    SourceSnapshot,
    get_max_file_size,
    read_source,
    resolve_source_path,
    write_source,
)
from .markers import Trace, erase_markers, extract_markers
from .pipeline import command_reformatter, format_preserving_markers
from .ranges import ActiveRangeSet

__all__ = ["cli"]


class RangeParamType(click.ParamType):
    """Parse ``START:END`` half-open character ranges."""

    name = "range"

    def convert(self, value, param, ctx):
        if isinstance(value, tuple):
            return value

        start_text, separator, end_text = value.partition(":")
        if not separator:
            self.fail(f"{value!r} is not of the form START:END", param, ctx)
        try:
            start, end = int(start_text), int(end_text)
        except ValueError:
            self.fail(f"{value!r} must use integer offsets", param, ctx)
        if start < 0 or end < start:
            self.fail(f"{value!r} must satisfy 0 <= START <= END", param, ctx)
        return start, end


RANGE = RangeParamType()

_range_option = click.option(
    "--range",
    "ranges",
    type=RANGE,
    multiple=True,
    help="Active character range START:END (repeatable). Defaults to the whole file.",
)
_trace_option = click.option(
    "--trace", is_flag=True, help="Echo diagnostic traces to stderr."
)
_in_place_option = click.option(
    "--in-place", "-i", is_flag=True, help="Rewrite the file instead of printing the result."
)
_filepath_argument = click.argument("filepath", type=click.Path(exists=True, dir_okay=False))


@dataclass
class SourceFile:
    """A source file read for processing and the configuration that applies to it."""

    config: MarkerConfig
    snapshot: SourceSnapshot

    @property
    def path(self) -> Path:
        return self.snapshot.path

    @property
    def text(self) -> str:
        return self.snapshot.text


def _echo_err(message: str) -> None:
    click.echo(message, err=True)


def _load_source(filepath: str, **overrides: object) -> SourceFile:
    try:
        path = resolve_source_path(filepath, Path.cwd().resolve())
        config = build_config(path.parent, **overrides)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        snapshot = read_source(path, config.extensions, max_file_size)
    except UnicodeDecodeError as error:
        raise click.ClickException(f"Invalid UTF-8 sequence in {path}: {error}") from error
    except ValueError as error:
        raise click.BadParameter(str(error)) from error
    except OSError as error:
        raise click.ClickException(str(error)) from error

    return SourceFile(config, snapshot)


def _tracer(config: MarkerConfig) -> Trace | None:
    return _echo_err if config.trace else None


def _active_ranges(ranges: tuple[tuple[int, int], ...]) -> ActiveRangeSet | None:
    return ActiveRangeSet(ranges) if ranges else None


def _emit(source: SourceFile, result: str, in_place: bool) -> None:
    if not in_place:
        click.echo(result, nl=False)
        return
    if result == source.text:
        return
    try:
        write_source(source.snapshot, result, warn=_echo_err)
    except OSError as error:
        raise click.ClickException(str(error)) from error


@click.group()
@click.version_option()
def cli():
    """
    Manage //$NON-NLS-n$ markers attached to string literals.

    Examples:
        nonnls-markers scan Messages.java
        nonnls-markers format --command "google-java-format -" -i Messages.java
    """


@cli.command()
@_range_option
@_trace_option
@_filepath_argument
def scan(filepath: str, ranges: tuple[tuple[int, int], ...], trace: bool = False):
    """
    List string literals and whether each one carries a marker.

    Prints one tab-separated line per literal: its index, ``NLS`` or ``-``, and
    the literal text. A summary is written to stderr.
    """
    source = _load_source(filepath, trace=trace or None)
    try:
        result = extract_markers(
            source.text, _active_ranges(ranges), trace=_tracer(source.config)
        )
    except MarkerError as error:
        raise click.ClickException(str(error)) from error

    for index, (literal, flagged) in enumerate(zip(result.literals, result.has_marker)):
        click.echo(f"{index}\t{'NLS' if flagged else '-'}\t{literal}")
    click.echo(
        f"{len(result.literals)} literals, {sum(result.has_marker)} with markers", err=True
    )


@cli.command()
@_range_option
@_trace_option
@_in_place_option
@_filepath_argument
def strip(
    filepath: str,
    ranges: tuple[tuple[int, int], ...],
    in_place: bool,
    trace: bool = False,
):
    """
    Blank out markers, keeping every character offset unchanged.
    """
    source = _load_source(filepath, trace=trace or None)
    result = erase_markers(source.text, _active_ranges(ranges), trace=_tracer(source.config))
    _emit(source, result, in_place)


@cli.command("format")
@click.option(
    "--command",
    "formatter_command",
    help="Formatter command reading stdin; {offset} and {length} receive each active range.",
)
@click.option("--timeout", "formatter_timeout", type=int, help="Formatter timeout in seconds.")
@_range_option
@_trace_option
@_in_place_option
@_filepath_argument
def format_command(
    filepath: str,
    ranges: tuple[tuple[int, int], ...],
    in_place: bool,
    formatter_command: str | None = None,
    formatter_timeout: int | None = None,
    trace: bool = False,
):
    """
    Run an external formatter while keeping markers on their literals.

    The file is left untouched when the formatter fails or changes any string
    literal.
    """
    source = _load_source(
        filepath,
        formatter_command=formatter_command,
        formatter_timeout=formatter_timeout,
        trace=trace or None,
    )
    if source.config.formatter_command is None:
        raise click.UsageError(
            "No formatter command given; pass --command or set `formatter_command`."
        )

    try:
        reformat = command_reformatter(
            source.config.formatter_command, source.config.formatter_timeout
        )
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        result = format_preserving_markers(
            source.text,
            reformat,
            _active_ranges(ranges),
            trace=_tracer(source.config),
        )
    except (MarkerError, FormatterCommandError) as error:
        raise click.ClickException(f"{error}\n{source.path} was left unchanged.") from error

    _emit(source, result, in_place)


if __name__ == "__main__":
    cli()
