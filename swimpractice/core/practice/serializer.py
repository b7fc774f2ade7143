"""
Render structured practices back into notation text.

Used to pre-fill the text editor from stored sets, so the output must
parse back to the same items. Strokes are written with their canonical
value ("free", "IM") and set names are upper-cased.
"""

import logging
from collections.abc import Iterable

from .models import PracticeItem, PracticeSet
from .tokens import HEADER_PREFIX

logger = logging.getLogger(__name__)


def serialize_item(item: PracticeItem) -> str:
    """One item as a single line, e.g. "4x100 free @1:30 - descend (moderate) [fins]"."""
    line = f"{item.reps}x{item.distance} {item.stroke.value}"
    if item.interval:
        line += f" @{item.interval}"
    if item.description:
        line += f" - {item.description}"
    if item.intensity is not None:
        line += f" ({item.intensity.value})"
    if item.equipment:
        line += f" [{', '.join(e.value for e in item.equipment)}]"
    return line


def serialize_set(practice_set: PracticeSet) -> str:
    """A header line, one line per item (in order_index order), then a blank line."""
    lines = [f"{HEADER_PREFIX} {practice_set.name.upper()}"]
    items = sorted(practice_set.items, key=lambda item: item.order_index)
    lines.extend(serialize_item(item) for item in items)
    return "\n".join(lines) + "\n\n"


def serialize_practice(sets: Iterable[PracticeSet]) -> str:
    """
    Render a whole practice as notation text.

    Sets are written in order_index order. An empty practice renders as
    an empty string.
    """
    if sets is None or isinstance(sets, (str, bytes)):
        raise TypeError("serialize_practice expects an iterable of PracticeSet")

    ordered = sorted(sets, key=lambda s: s.order_index)
    text = "".join(serialize_set(s) for s in ordered)

    logger.debug(
        "Serialized practice",
        extra={"set_count": len(ordered), "length": len(text)},
    )
    return text
