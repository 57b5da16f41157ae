"""Per-line state machine locating string literals outside comments."""

from __future__ import annotations

from .constants import (
    LITERAL_PATTERN,
    MULTI_LINE_COMMENT_END,
    MULTI_LINE_COMMENT_START,
    SINGLE_LINE_COMMENT_START,
)
from .models import Candidate, ScanMode, ScanState

_EXHAUSTED = None


def pick_earliest(single_line: int, multi_line: int, literal: int) -> Candidate | None:
    """Choose the candidate that starts first in the rest of a line.

    Negative positions mean the candidate was not found. On equal positions a
    ``//`` comment wins over a ``/*`` comment, which wins over a literal.

    Args:
        single_line: Offset of the next ``//``, or -1.
        multi_line: Offset of the next ``/*``, or -1.
        literal: Offset of the next literal's opening quote, or -1.

    Returns:
        Candidate | None: The earliest candidate, or None when nothing was found.

    Examples:
        pick_earliest(4, -1, 2)  # Candidate.LITERAL
        pick_earliest(-1, -1, -1)  # None
    """
    found = [
        (position, candidate)
        for position, candidate in (
            (single_line, Candidate.SINGLE_LINE_COMMENT),
            (multi_line, Candidate.MULTI_LINE_COMMENT),
            (literal, Candidate.LITERAL),
        )
        if position >= 0
    ]
    if not found:
        return None
    # min() keeps the first of equal keys, which gives the tie-break order.
    return min(found, key=lambda item: item[0])[1]


def find_next_literal(line: str, state: ScanState) -> tuple[str | None, ScanState]:
    """Advance the scanner by one step within a line.

    A step either returns the next string literal, changes the lexical mode, or
    exhausts the line. Callers loop until ``state.exhausted``.

    Args:
        line: Line content without its terminator.
        state: Scanner position and mode before the step.

    Returns:
        tuple[str | None, ScanState]: The literal found in this step (quotes
            included) or None, and the state after the step.

    Examples:
        find_next_literal('f("a");', ScanState())  # ('"a"', ScanState(cursor=5, ...))
    """
    cursor = state.cursor
    if cursor is _EXHAUSTED or cursor >= len(line):
        return None, ScanState(_EXHAUSTED, state.mode)

    if state.mode is ScanMode.IN_SINGLE_LINE_COMMENT:
        return None, ScanState(_EXHAUSTED, ScanMode.CODE)

    if state.mode is ScanMode.IN_MULTI_LINE_COMMENT:
        closing_at = line.find(MULTI_LINE_COMMENT_END, cursor)
        if closing_at < 0:
            return None, ScanState(_EXHAUSTED, ScanMode.IN_MULTI_LINE_COMMENT)
        return None, ScanState(closing_at + len(MULTI_LINE_COMMENT_END), ScanMode.CODE)

    single_line = line.find(SINGLE_LINE_COMMENT_START, cursor)
    multi_line = line.find(MULTI_LINE_COMMENT_START, cursor)
    literal_match = LITERAL_PATTERN.search(line, cursor)
    literal = literal_match.start(1) if literal_match else -1

    candidate = pick_earliest(single_line, multi_line, literal)
    if candidate is Candidate.SINGLE_LINE_COMMENT:
        return None, ScanState(
            single_line + len(SINGLE_LINE_COMMENT_START), ScanMode.IN_SINGLE_LINE_COMMENT
        )
    if candidate is Candidate.MULTI_LINE_COMMENT:
        return None, ScanState(
            multi_line + len(MULTI_LINE_COMMENT_START), ScanMode.IN_MULTI_LINE_COMMENT
        )
    if candidate is Candidate.LITERAL:
        return literal_match.group(1), ScanState(literal_match.end(1), ScanMode.CODE)
    return None, ScanState(_EXHAUSTED, ScanMode.CODE)


def iter_line_literals(line: str, mode: ScanMode = ScanMode.CODE) -> tuple[list[str], ScanMode]:
    """Collect every literal on a line, left to right.

    Args:
        line: Line content without its terminator.
        mode: Mode carried over from the previous line.

    Returns:
        tuple[list[str], ScanMode]: Literals on the line and the mode to carry
            into the next line. Only an unterminated ``/*`` comment carries over.

    Examples:
        iter_line_literals('f("a", "b"); // "c"')  # (['"a"', '"b"'], ScanMode.CODE)
        iter_line_literals('x = 1; /* "y"')  # ([], ScanMode.IN_MULTI_LINE_COMMENT)
    """
    literals = []
    state = ScanState(0, mode)
    while not state.exhausted:
        literal, state = find_next_literal(line, state)
        if literal is not None:
            literals.append(literal)

    if state.mode is ScanMode.IN_SINGLE_LINE_COMMENT:
        return literals, ScanMode.CODE
    return literals, state.mode
