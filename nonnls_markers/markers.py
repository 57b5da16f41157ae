"""Extraction, erasure, and reinjection of ``//$NON-NLS-n$`` markers."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from .constants import MARKER_PATTERN, MARKER_TEMPLATE
from .exceptions import LiteralMismatchError
from .lines import join_lines, split_lines
from .models import ExtractionResult, ScanMode
from .ranges import ActiveRangeSet, coerce_ranges
from .scanner import iter_line_literals

Trace = Callable[[str], None]
Ranges = ActiveRangeSet | Iterable[tuple[int, int]] | None


def format_marker(ordinal: int) -> str:
    """Render the marker for the `ordinal`-th (1-based) literal on a line."""
    return MARKER_TEMPLATE.format(ordinal=ordinal)


def _restriction(active_ranges: Ranges, length: int) -> ActiveRangeSet | None:
    """Return the range set to test against, or None when everything is active."""
    range_set = coerce_ranges(active_ranges)
    if range_set is None or range_set.encloses_all(length):
        return None
    return range_set


def _is_honoured(match: re.Match, offset: int, restriction: ActiveRangeSet | None) -> bool:
    if restriction is None:
        return True
    return restriction.encloses(offset + match.start(), offset + match.end())


def extract_markers(
    text: str, active_ranges: Ranges = None, trace: Trace | None = None
) -> ExtractionResult:
    """Collect string literals and the markers attached to them.

    Literals are found on every line whatever the active ranges. A marker
    numbered ``k`` flags the ``k``-th literal of its line; numbers outside the
    line's literals are ignored, as are markers not fully inside an active range.

    Args:
        text: Source text to scan.
        active_ranges: Character ranges where markers are honoured. None, or
            ranges covering the whole text, honour every marker.
        trace: Optional callback receiving diagnostic messages.

    Returns:
        ExtractionResult: Literals in document order, a parallel list of marker
            flags, and whether any marker was found.

    Raises:
        LineSplitError: If the text cannot be split into lines consistently.

    Examples:
        extract_markers('f("a","b"); //$NON-NLS-2$').has_marker  # [False, True]
    """
    lines, terminators = split_lines(text)
    restriction = _restriction(active_ranges, len(text))

    result = ExtractionResult()
    mode = ScanMode.CODE
    offset = 0
    for line_number, line in enumerate(lines):
        line_literals, mode = iter_line_literals(line, mode)

        flags = [False] * len(line_literals)
        for match in MARKER_PATTERN.finditer(line):
            if not _is_honoured(match, offset, restriction):
                continue
            ordinal = int(match.group(1))
            if 1 <= ordinal <= len(flags):
                flags[ordinal - 1] = True

        result.literals.extend(line_literals)
        result.has_marker.extend(flags)
        result.any_marker = result.any_marker or any(flags)

        offset += len(line)
        if line_number < len(terminators):
            offset += len(terminators[line_number])

    if trace is not None:
        trace(f"{len(result.literals)} literals")
        for index, (literal, flagged) in enumerate(zip(result.literals, result.has_marker)):
            trace(f"{index} -> {literal}     {flagged}")

    return result


def erase_markers(text: str, active_ranges: Ranges = None, trace: Trace | None = None) -> str:
    """Blank out markers without changing the text length.

    Args:
        text: Source text.
        active_ranges: Character ranges where markers are erased. None, or
            ranges covering the whole text, erase every marker.
        trace: Optional callback receiving the erased text.

    Returns:
        str: Text where each erased marker is replaced by as many spaces.

    Examples:
        erase_markers('f("a"); //$NON-NLS-1$')  # 'f("a"); ' followed by 13 spaces
    """
    restriction = _restriction(active_ranges, len(text))

    def _blank(match: re.Match) -> str:
        if _is_honoured(match, 0, restriction):
            return " " * len(match.group(0))
        return match.group(0)

    erased = MARKER_PATTERN.sub(_blank, text)

    if trace is not None:
        trace("Before formatting")
        trace(erased)

    return erased


def reinject_markers(
    text: str,
    literals: list[str],
    has_marker: list[bool],
    trace: Trace | None = None,
) -> str:
    """Append markers to the lines that now hold the flagged literals.

    The literals found in `text` must match `literals` one for one. Each
    flagged literal gets a marker numbered by its 1-based position on its new
    line, appended after the line content.

    Args:
        text: Text produced by the external reformatting step.
        literals: Literals captured by `extract_markers` before reformatting.
        has_marker: Marker flags parallel to `literals`.
        trace: Optional callback receiving the reassembled text.

    Returns:
        str: Text with markers restored.

    Raises:
        ValueError: If `literals` and `has_marker` differ in length.
        LineSplitError: If the text cannot be split into lines consistently.
        LiteralMismatchError: If a literal was altered, added, removed, or
            reordered by reformatting.

    Examples:
        reinject_markers('f(\\n"a");', ['"a"'], [True])  # 'f(\\n"a"); //$NON-NLS-1$'
    """
    if len(literals) != len(has_marker):
        raise ValueError(
            f"Expected one marker flag per literal, got {len(has_marker)} flags "
            f"for {len(literals)} literals"
        )

    lines, terminators = split_lines(text)

    rebuilt: list[str] = []
    expected_index = 0
    mode = ScanMode.CODE
    for line in lines:
        line_literals, mode = iter_line_literals(line, mode)

        suffix = ""
        for ordinal, literal in enumerate(line_literals, start=1):
            if expected_index >= len(literals):
                raise LiteralMismatchError(literal, None, expected_index)
            if literal != literals[expected_index]:
                raise LiteralMismatchError(literal, literals[expected_index], expected_index)
            if has_marker[expected_index]:
                suffix += " " + format_marker(ordinal)
            expected_index += 1

        rebuilt.append(line + suffix)

    if expected_index < len(literals):
        raise LiteralMismatchError(None, literals[expected_index], expected_index)

    result = join_lines(rebuilt, terminators)

    if trace is not None:
        trace("After formatting")
        trace(result)

    return result
