"""
Tokenizing helpers shared by the parser.

Each field of an item line is pulled out by one pattern. Extraction is
destructive: the matched text is cut out of the line and the shorter
remainder is handed to the next step, so the order the parser calls these
in is part of the notation.

None of these patterns nest or backtrack across lines; work is linear in
the length of the line.
"""

import re
from typing import Optional

HEADER_PREFIX = "##"

# Group bodies exclude their own opener, so a stray "(" or "[" in a
# description never swallows the real group after it.
EQUIPMENT_GROUP = re.compile(r"\[([^\[\]]+)\]")  # "[fins, paddles]"
INTENSITY_GROUP = re.compile(r"\(([^()]+)\)")  # "(race pace)"
DESCRIPTION_SUFFIX = re.compile(r"\s+-\s*(.+)$")  # " - descend 1-4"
INTERVAL_TOKEN = re.compile(r"@(\S+)")  # "@1:30", "@:45"

# Reps and distance are capped at 9 digits; longer runs are not a count.
# "4x100 Free", "4 X 100 free", "4×100 Free"
REPS_BY_DISTANCE = re.compile(r"^([0-9]{1,9})\s*[xX×]\s*([0-9]{1,9})\s+(.+)$")
# "200 IM" (a single rep)
DISTANCE_ONLY = re.compile(r"^([0-9]{1,9})\s+(.+)$")


def take(pattern: re.Pattern, line: str) -> tuple[Optional[re.Match], str]:
    """
    Find the first match of pattern and cut it out of line.

    Returns the match (or None) and the trimmed remainder. When nothing
    matches the line comes back trimmed but otherwise untouched.
    """
    match = pattern.search(line)
    if match is None:
        return None, line.strip()
    remainder = line[:match.start()] + line[match.end():]
    return match, remainder.strip()


def split_list(group: str) -> list[str]:
    """Split a comma-separated bracket body, dropping empty entries."""
    return [token.strip() for token in group.split(",") if token.strip()]


def is_header(line: str) -> bool:
    return line.strip().startswith(HEADER_PREFIX)


def header_name(line: str) -> str:
    """Name of a set header line: "## Main Set " -> "Main Set"."""
    return line.strip()[len(HEADER_PREFIX):].strip()
