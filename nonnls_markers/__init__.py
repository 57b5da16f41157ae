"""
nonnls-markers: keep //$NON-NLS-n$ markers attached to string literals.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    nonnls-markers scan Messages.java
    nonnls-markers format --command "google-java-format -" Messages.java

Library Usage:
    from nonnls_markers import extract_markers, erase_markers, reinject_markers

    literals, has_marker, any_marker = extract_markers(source)
    stripped = erase_markers(source) if any_marker else source
    formatted = reformat(stripped)
    restored = reinject_markers(formatted, literals, has_marker)
"""

from .exceptions import FormatterCommandError, LineSplitError, LiteralMismatchError, MarkerError
from .lines import join_lines, split_lines
from .markers import erase_markers, extract_markers, format_marker, reinject_markers
from .models import ExtractionResult, ScanMode, ScanState
from .pipeline import command_reformatter, expand_range_arguments, format_preserving_markers
from .ranges import ActiveRangeSet
from .scanner import find_next_literal, iter_line_literals, pick_earliest

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "extract_markers",
    "erase_markers",
    "reinject_markers",
    "format_preserving_markers",
    # Scanning primitives
    "split_lines",
    "join_lines",
    "find_next_literal",
    "iter_line_literals",
    "pick_earliest",
    "format_marker",
    # Data models
    "ActiveRangeSet",
    "ExtractionResult",
    "ScanMode",
    "ScanState",
    # Utilities
    "command_reformatter",
    "expand_range_arguments",
    # Exceptions
    "FormatterCommandError",
    "LineSplitError",
    "LiteralMismatchError",
    "MarkerError",
    # Version
    "__version__",
]
