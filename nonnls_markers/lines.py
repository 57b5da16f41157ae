"""Line splitting that keeps the original line terminators."""

from __future__ import annotations

from .constants import END_OF_LINE_PATTERN
from .exceptions import LineSplitError


def split_lines(text: str) -> tuple[list[str], list[str]]:
    r"""Split text into line contents and the terminators between them.

    Every Unicode linebreak sequence counts as a terminator, and ``\r\n`` is
    a single terminator. Mixed styles within one text are preserved.

    Args:
        text: Source text to split.

    Returns:
        tuple[list[str], list[str]]: Line contents without terminators, and the
            terminator that followed each line except the last. There is always
            exactly one more line than terminators.

    Raises:
        LineSplitError: If line and terminator detection disagree.

    Examples:
        split_lines("a\r\nb\n")  # (["a", "b", ""], ["\r\n", "\n"])
        split_lines("")  # ([""], [])
    """
    terminators = END_OF_LINE_PATTERN.findall(text)
    lines = END_OF_LINE_PATTERN.split(text)
    if len(terminators) != len(lines) - 1:
        raise LineSplitError(len(lines), len(terminators))
    return lines, terminators


def join_lines(lines: list[str], terminators: list[str]) -> str:
    """Reassemble text produced by `split_lines`.

    Args:
        lines: Line contents.
        terminators: Terminators following each line but the last.

    Returns:
        str: Lines joined with their terminators.

    Raises:
        LineSplitError: If there is not exactly one more line than terminators.
    """
    if len(terminators) != len(lines) - 1:
        raise LineSplitError(len(lines), len(terminators))
    parts = []
    for line, terminator in zip(lines, terminators):
        parts.append(line)
        parts.append(terminator)
    parts.append(lines[-1])
    return "".join(parts)
