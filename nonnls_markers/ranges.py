"""Active character ranges restricting where markers are honoured."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Iterator


class ActiveRangeSet:
    """Set of half-open character ranges over a text.

    Overlapping and adjacent ranges are coalesced and empty ranges are dropped,
    so a query spanning two touching ranges is enclosed.

    Args:
        ranges: Iterable of ``(start, end)`` pairs with ``0 <= start <= end``.

    Raises:
        ValueError: If a pair is negative or has ``end < start``.

    Examples:
        ActiveRangeSet([(0, 10), (10, 20)]).encloses(5, 15)  # True
        ActiveRangeSet.from_regions([(4, 2)]).spans  # ((4, 6),)
    """

    def __init__(self, ranges: Iterable[tuple[int, int]] = ()):
        spans: list[tuple[int, int]] = []
        for start, end in ranges:
            _check_bounds(start, end)
            if start < end:
                spans.append((start, end))
        spans.sort()

        merged: list[tuple[int, int]] = []
        for start, end in spans:
            if merged and start <= merged[-1][1]:
                merged[-1] = (merged[-1][0], max(merged[-1][1], end))
            else:
                merged.append((start, end))

        self._spans = tuple(merged)
        self._starts = [start for start, _ in merged]

    @classmethod
    def from_regions(cls, regions: Iterable[tuple[int, int]]) -> ActiveRangeSet:
        """Build a range set from editor-style ``(offset, length)`` regions."""
        return cls((offset, offset + length) for offset, length in regions)

    @property
    def spans(self) -> tuple[tuple[int, int], ...]:
        return self._spans

    def encloses(self, start: int, end: int) -> bool:
        """Return True when a single range contains ``[start, end)``."""
        _check_bounds(start, end)
        index = bisect_right(self._starts, start) - 1
        if index < 0:
            return False
        return end <= self._spans[index][1]

    def encloses_all(self, length: int) -> bool:
        """Return True when the ranges cover a whole text of `length` characters."""
        return self.encloses(0, length)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(self._spans)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActiveRangeSet):
            return NotImplemented
        return self._spans == other._spans

    def __repr__(self) -> str:
        return f"ActiveRangeSet({list(self._spans)!r})"


def coerce_ranges(
    ranges: ActiveRangeSet | Iterable[tuple[int, int]] | None,
) -> ActiveRangeSet | None:
    """Accept an `ActiveRangeSet`, plain ``(start, end)`` pairs, or None."""
    if ranges is None or isinstance(ranges, ActiveRangeSet):
        return ranges
    return ActiveRangeSet(ranges)


def _check_bounds(start: int, end: int) -> None:
    if start < 0:
        raise ValueError(f"Range start must be non-negative, got {start}")
    if end < start:
        raise ValueError(f"Range end {end} is before range start {start}")
