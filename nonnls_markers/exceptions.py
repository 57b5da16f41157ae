"""Package-specific exception types."""

from __future__ import annotations


class MarkerError(ValueError):
    """Base class for marker scanning errors.

    Represents failures that abort an extract, erase, or reinject pass. Callers
    should discard any intermediate output and leave the source unmodified.
    """


class LineSplitError(MarkerError):
    """Raised when line and terminator detection disagree.

    Args:
        line_count: Number of lines produced by splitting.
        terminator_count: Number of line terminators detected.
    """

    def __init__(self, line_count: int, terminator_count: int):
        self.line_count = line_count
        self.terminator_count = terminator_count
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return (
            f"End of line detection failed: {self.line_count} lines "
            f"but {self.terminator_count} line terminators"
        )


class LiteralMismatchError(MarkerError):
    """Raised when reformatted text does not carry the expected literals.

    Either side may be None: `found` when the text ran out of literals early,
    `expected` when the text holds more literals than were extracted.

    Args:
        found: Literal found in the reformatted text, or None.
        expected: Literal expected at this position, or None.
        index: Zero-based position in the document-wide literal sequence.
    """

    def __init__(self, found: str | None, expected: str | None, index: int):
        self.found = found
        self.expected = expected
        self.index = index
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        if self.found is None:
            return f"Missing literal {self.expected} (literal #{self.index + 1})"
        if self.expected is None:
            return f"Found unexpected literal {self.found} after the last expected literal"
        return (
            f"Found literal {self.found} does not match next expected literal "
            f"{self.expected}"
        )


class FormatterCommandError(Exception):
    """Raised when the external formatter command fails.

    Args:
        command: Command line that was run.
        reason: Exit status or failure description.
        stderr: Captured standard error output, if any.
    """

    def __init__(self, command: str, reason: str, stderr: str = ""):
        self.command = command
        self.reason = reason
        self.stderr = stderr
        message = f"Formatter command `{command}` failed: {reason}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)
