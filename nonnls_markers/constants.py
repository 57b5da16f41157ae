"""Constants used across the nonnls-markers package."""

from __future__ import annotations

import re

# Unicode linebreak sequences; "\r\n" must stay first so it is taken as one break.
END_OF_LINE_PATTERN = re.compile("\r\n|[\n\x0b\x0c\r\x85\u2028\u2029]")

# A double-quoted run not opened right after a backslash or a single quote.
# Group 1 is the literal itself, quotes included.
LITERAL_PATTERN = re.compile(r"""[^\\'](\"(?:[^\"\\]|\\.)*\")""")

MARKER_PATTERN = re.compile(r"//\$NON-NLS-([0-9]+)\$")
MARKER_TEMPLATE = "//$NON-NLS-{ordinal}$"

SINGLE_LINE_COMMENT_START = "//"
MULTI_LINE_COMMENT_START = "/*"
MULTI_LINE_COMMENT_END = "*/"

DEFAULT_EXTENSIONS = (".java",)
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_FORMATTER_TIMEOUT = 60
