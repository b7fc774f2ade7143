"""
Swim practice notation.

Contains the domain models, the vocabulary registry, and the
text parser/serializer pair.
"""

from .models import (
    Equipment,
    Intensity,
    LineError,
    ParseErrorKind,
    ParseResult,
    PracticeItem,
    PracticeSet,
    SetType,
    Stroke,
)
from .parser import ItemLineError, parse_item_line, parse_practice
from .serializer import serialize_item, serialize_practice, serialize_set
from .totals import estimate_duration_minutes, practice_total_distance, stroke_breakdown

__all__ = [
    "Equipment",
    "Intensity",
    "LineError",
    "ParseErrorKind",
    "ParseResult",
    "PracticeItem",
    "PracticeSet",
    "SetType",
    "Stroke",
    "ItemLineError",
    "parse_item_line",
    "parse_practice",
    "serialize_item",
    "serialize_practice",
    "serialize_set",
    "estimate_duration_minutes",
    "practice_total_distance",
    "stroke_breakdown",
]
