from __future__ import annotations

import re

import pytest

import nonnls_markers.lines as lines_module
from nonnls_markers.exceptions import LineSplitError
from nonnls_markers.lines import join_lines, split_lines
from nonnls_markers.markers import extract_markers


@pytest.mark.parametrize(
    ("text", "expected_lines", "expected_terminators"),
    [
        ("", [""], []),
        ("one line", ["one line"], []),
        ("a\n", ["a", ""], ["\n"]),
        ("a\r\nb\nc", ["a", "b", "c"], ["\r\n", "\n"]),
        ("x\ry\r\nz\u2028w", ["x", "y", "z", "w"], ["\r", "\r\n", "\u2028"]),
        ("\n\r", ["", "", ""], ["\n", "\r"]),
        ("a\x0bb\x0cc\x85d\u2029", ["a", "b", "c", "d", ""], ["\x0b", "\x0c", "\x85", "\u2029"]),
    ],
)
def test_split_lines_keeps_terminators(text, expected_lines, expected_terminators):
    lines, terminators = split_lines(text)

    assert lines == expected_lines
    assert terminators == expected_terminators
    assert len(lines) == len(terminators) + 1


def test_join_lines_reconstructs_mixed_endings():
    text = 'class A {\r\n  String s = "x";\n}\r'

    assert join_lines(*split_lines(text)) == text


def test_join_lines_rejects_inconsistent_counts():
    with pytest.raises(LineSplitError) as exc_info:
        join_lines(["a", "b"], [])

    assert exc_info.value.line_count == 2
    assert exc_info.value.terminator_count == 0


def test_split_lines_raises_when_detection_disagrees(monkeypatch):
    # A capturing pattern makes re.split return the separators as extra items.
    monkeypatch.setattr(lines_module, "END_OF_LINE_PATTERN", re.compile(r"(\r)?\n"))

    with pytest.raises(LineSplitError) as exc_info:
        split_lines("foo\nbar")

    assert exc_info.value.line_count == 3
    assert exc_info.value.terminator_count == 1
    assert "End of line detection failed" in str(exc_info.value)


def test_extraction_propagates_line_split_error(monkeypatch):
    monkeypatch.setattr(lines_module, "END_OF_LINE_PATTERN", re.compile(r"(\r)?\n"))

    with pytest.raises(LineSplitError):
        extract_markers('f("a"); //$NON-NLS-1$\ng("b");')
