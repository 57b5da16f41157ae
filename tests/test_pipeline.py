from __future__ import annotations

import shlex
import sys

import pytest

from nonnls_markers.exceptions import FormatterCommandError, LiteralMismatchError
from nonnls_markers.pipeline import (
    command_reformatter,
    expand_range_arguments,
    format_preserving_markers,
)
from nonnls_markers.ranges import ActiveRangeSet


def _python_command(code: str) -> str:
    return f"{shlex.quote(sys.executable)} -c {shlex.quote(code)}"


def _rewrap(text: str, active_ranges) -> str:
    """Stand-in formatter: breaks argument lists and trims trailing blanks."""
    text = text.replace('", "', '",\n    "')
    return "\n".join(line.rstrip() for line in text.split("\n"))


def test_markers_follow_literals_through_reformatting():
    source = 'class A {\n  f("a", "b"); //$NON-NLS-2$\n}\n'

    result = format_preserving_markers(source, _rewrap)

    assert result == 'class A {\n  f("a",\n    "b"); //$NON-NLS-1$\n}\n'


def test_reformatter_sees_erased_text_and_ranges():
    calls = []

    def _spy(text, active_ranges):
        calls.append((text, active_ranges))
        return text

    source = 'f("a"); //$NON-NLS-1$'
    format_preserving_markers(source, _spy, [(0, 8)])

    (seen_text, seen_ranges), = calls
    assert seen_ranges == ActiveRangeSet([(0, 8)])
    # Marker is outside the range: nothing honoured, nothing erased.
    assert seen_text == source


def test_reformatter_receives_blanked_markers():
    calls = []

    def _spy(text, active_ranges):
        calls.append(text)
        return text

    source = 'f("a"); //$NON-NLS-1$'
    format_preserving_markers(source, _spy)

    assert "NON-NLS" not in calls[0]
    assert len(calls[0]) == len(source)


def test_text_without_markers_is_passed_through():
    result = format_preserving_markers('f("a");', lambda text, ranges: text.replace("a", "A"))

    assert result == 'f("A");'


def test_changed_literal_aborts():
    source = 'f("a"); //$NON-NLS-1$'

    with pytest.raises(LiteralMismatchError):
        format_preserving_markers(source, lambda text, ranges: text.replace('"a"', '"A"'))


def test_trace_collects_all_stages():
    messages: list[str] = []

    format_preserving_markers('f("a"); //$NON-NLS-1$', _rewrap, trace=messages.append)

    assert "Before formatting" in messages
    assert "After formatting" in messages
    assert messages[-1] == 'f("a"); //$NON-NLS-1$'


def test_command_reformatter_round_trips_bytes():
    reformat = command_reformatter(
        _python_command("import sys; sys.stdout.buffer.write(sys.stdin.buffer.read())")
    )

    assert reformat('a\r\nb = "é";\n', None) == 'a\r\nb = "é";\n'


def test_command_reformatter_reports_exit_status():
    reformat = command_reformatter(
        _python_command("import sys; sys.stderr.write('bad input'); sys.exit(3)")
    )

    with pytest.raises(FormatterCommandError) as exc_info:
        reformat("x", None)

    assert "exit status 3" in str(exc_info.value)
    assert exc_info.value.stderr == "bad input"


def test_command_reformatter_reports_missing_executable():
    reformat = command_reformatter("definitely-not-a-formatter-3f9a -")

    with pytest.raises(FormatterCommandError, match="executable not found"):
        reformat("x", None)


def test_command_reformatter_reports_timeout():
    reformat = command_reformatter(_python_command("import time; time.sleep(10)"), timeout=1)

    with pytest.raises(FormatterCommandError, match="timed out"):
        reformat("x", None)


def test_command_reformatter_rejects_empty_command():
    with pytest.raises(ValueError):
        command_reformatter("   ")


ECHO_ARGUMENTS = "import sys; sys.stdin.read(); sys.stdout.write(' '.join(sys.argv[1:]))"


def test_expand_range_arguments_repeats_placeholder_run_per_span():
    argv = ["fmt", "--offset={offset}", "--length={length}", "-"]

    assert expand_range_arguments(argv, [(0, 4), (9, 12)]) == [
        "fmt",
        "--offset=0",
        "--length=4",
        "--offset=9",
        "--length=3",
        "-",
    ]


def test_expand_range_arguments_without_placeholders():
    assert expand_range_arguments(["fmt", "-"], [(0, 4)]) == ["fmt", "-"]


def test_command_reformatter_forwards_active_ranges():
    reformat = command_reformatter(
        _python_command(ECHO_ARGUMENTS) + " --offset={offset} --length={length}"
    )

    assert reformat("0123456789", ActiveRangeSet([(2, 4), (6, 9)])) == (
        "--offset=2 --length=2 --offset=6 --length=3"
    )


def test_command_reformatter_placeholders_cover_whole_text_without_ranges():
    reformat = command_reformatter(
        _python_command(ECHO_ARGUMENTS) + " --offset={offset} --length={length}"
    )

    assert reformat("0123456789", None) == "--offset=0 --length=10"
    assert reformat("0123456789", ActiveRangeSet([(0, 10)])) == "--offset=0 --length=10"


def test_command_without_placeholders_refuses_partial_ranges():
    reformat = command_reformatter(_python_command(ECHO_ARGUMENTS))

    with pytest.raises(FormatterCommandError, match="cannot restrict formatting"):
        reformat("0123456789", ActiveRangeSet([(2, 4)]))


def test_command_without_placeholders_accepts_ranges_covering_everything():
    reformat = command_reformatter(_python_command(ECHO_ARGUMENTS))

    assert reformat("0123456789", ActiveRangeSet([(0, 5), (5, 10)])) == ""


def test_command_with_placeholders_skips_empty_range_set():
    reformat = command_reformatter("definitely-not-a-formatter-3f9a --offset={offset}")

    assert reformat("0123456789", ActiveRangeSet([(3, 3)])) == "0123456789"
