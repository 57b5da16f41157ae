"""Data models for nonnls-markers."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto


class ScanMode(Enum):
    """Lexical modes used while scanning a line for string literals.

    Attributes:
        CODE: Regular source text where literals and comments may start.
        IN_SINGLE_LINE_COMMENT: Inside a ``//`` comment; ends with the line.
        IN_MULTI_LINE_COMMENT: Inside a ``/* ... */`` comment; may span lines.
    """

    CODE = auto()
    IN_SINGLE_LINE_COMMENT = auto()
    IN_MULTI_LINE_COMMENT = auto()


class Candidate(Enum):
    """Token kinds competing for the earliest position in a line remainder."""

    SINGLE_LINE_COMMENT = auto()
    MULTI_LINE_COMMENT = auto()
    LITERAL = auto()


@dataclass(frozen=True)
class ScanState:
    """Position of the scanner within the current line.

    Attributes:
        cursor: Offset within the line, or None once the line is exhausted.
        mode: Lexical mode at the cursor.
    """

    cursor: int | None = 0
    mode: ScanMode = ScanMode.CODE

    @property
    def exhausted(self) -> bool:
        return self.cursor is None


@dataclass
class ExtractionResult:
    """Literals found in a text and the markers attached to them.

    Attributes:
        literals: String literals in document order, quotes included.
        has_marker: Parallel flags; True when the literal carries a marker.
        any_marker: Whether any literal carries a marker.
    """

    literals: list[str] = field(default_factory=list)
    has_marker: list[bool] = field(default_factory=list)
    any_marker: bool = False

    def __iter__(self) -> Iterator[list[str] | list[bool] | bool]:
        """Unpack as ``literals, has_marker, any_marker = result``."""
        return iter((self.literals, self.has_marker, self.any_marker))
