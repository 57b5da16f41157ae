"""Reformat source text while keeping ``//$NON-NLS-n$`` markers attached."""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Callable, Iterable

from .constants import DEFAULT_FORMATTER_TIMEOUT
from .exceptions import FormatterCommandError
from .markers import Ranges, Trace, erase_markers, extract_markers, reinject_markers
from .ranges import ActiveRangeSet, coerce_ranges

Reformatter = Callable[[str, ActiveRangeSet | None], str]

RANGE_PLACEHOLDERS = ("{offset}", "{length}")


def format_preserving_markers(
    text: str,
    reformat: Reformatter,
    active_ranges: Ranges = None,
    trace: Trace | None = None,
) -> str:
    """Run a reformatter over `text` with markers stripped and restored.

    Markers inside the active ranges are erased before `reformat` sees the text
    and re-emitted afterwards on whichever lines their literals end up. When
    the text carries no marker, `reformat` runs on it untouched.

    Args:
        text: Source text to reformat.
        reformat: Callable taking the text and the active ranges and returning
            the reformatted text. It must not change any string literal.
        active_ranges: Character ranges the caller intends to touch, or None
            for the whole text.
        trace: Optional callback receiving diagnostic messages.

    Returns:
        str: Reformatted text with markers restored.

    Raises:
        LineSplitError: If line splitting fails before or after reformatting.
        LiteralMismatchError: If reformatting altered the literal sequence. No
            partial result is produced; callers should keep the original text.

    Examples:
        format_preserving_markers(source, lambda text, ranges: text.replace("\\t", "  "))
    """
    range_set = coerce_ranges(active_ranges)

    extraction = extract_markers(text, range_set, trace=trace)
    source = text
    if extraction.any_marker:
        source = erase_markers(source, range_set, trace=trace)

    formatted = reformat(source, range_set)

    if extraction.any_marker:
        formatted = reinject_markers(
            formatted, extraction.literals, extraction.has_marker, trace=trace
        )
    return formatted


def _has_range_placeholder(argument: str) -> bool:
    return any(placeholder in argument for placeholder in RANGE_PLACEHOLDERS)


def expand_range_arguments(argv: list[str], spans: Iterable[tuple[int, int]]) -> list[str]:
    """Substitute ``{offset}`` and ``{length}`` once per span.

    The run of arguments from the first to the last one holding a placeholder
    is repeated for every span, so ``--offset={offset} --length={length}``
    becomes one offset/length pair per range.

    Examples:
        expand_range_arguments(["fmt", "--offset={offset}", "--length={length}", "-"],
                               [(0, 4), (9, 12)])
        # ['fmt', '--offset=0', '--length=4', '--offset=9', '--length=3', '-']
    """
    positions = [index for index, argument in enumerate(argv) if _has_range_placeholder(argument)]
    if not positions:
        return list(argv)

    first, last = positions[0], positions[-1]
    expanded = list(argv[:first])
    for start, end in spans:
        for argument in argv[first : last + 1]:
            expanded.append(
                argument.replace("{offset}", str(start)).replace("{length}", str(end - start))
            )
    expanded.extend(argv[last + 1 :])
    return expanded


def command_reformatter(command: str, timeout: int = DEFAULT_FORMATTER_TIMEOUT) -> Reformatter:
    """Wrap an external formatter command as a `Reformatter`.

    The command receives the source on standard input and must write the
    formatted source to standard output. Active ranges reach the command
    through ``{offset}`` and ``{length}`` placeholders, for example
    ``"google-java-format --offset={offset} --length={length} -"``; without
    ranges the placeholders cover the whole text. A command with no
    placeholder can only reformat whole texts and fails when ranges restrict
    the text.

    Args:
        command: Shell-style command line, for example ``"google-java-format -"``.
        timeout: Seconds to wait for the command before giving up.

    Returns:
        Reformatter: Callable running the command on each invocation.

    Raises:
        ValueError: If `command` is empty.
    """
    argv = shlex.split(command)
    if not argv:
        raise ValueError("Formatter command must not be empty")
    accepts_ranges = any(_has_range_placeholder(argument) for argument in argv)

    def _reformat(text: str, active_ranges: ActiveRangeSet | None) -> str:
        if active_ranges is None or active_ranges.encloses_all(len(text)):
            spans: tuple[tuple[int, int], ...] = ((0, len(text)),)
        else:
            spans = active_ranges.spans
            if not accepts_ranges:
                raise FormatterCommandError(
                    command,
                    "cannot restrict formatting to the active ranges; "
                    "add {offset} and {length} placeholders to the command",
                )
            if not spans:
                return text

        try:
            result = subprocess.run(
                expand_range_arguments(argv, spans),
                input=text.encode("UTF-8"),
                capture_output=True,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as error:
            raise FormatterCommandError(command, f"executable not found ({error})") from error
        except subprocess.TimeoutExpired as error:
            raise FormatterCommandError(command, f"timed out after {timeout} seconds") from error

        stderr = result.stderr.decode("UTF-8", errors="replace")
        if result.returncode != 0:
            raise FormatterCommandError(command, f"exit status {result.returncode}", stderr)

        # Bytes keep "\r\n" terminators intact.
        try:
            return result.stdout.decode("UTF-8")
        except UnicodeDecodeError as error:
            raise FormatterCommandError(command, f"invalid UTF-8 output ({error})") from error

    return _reformat
