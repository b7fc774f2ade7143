"""
Controlled vocabulary for practice notation.

The single place that turns coach-typed words into canonical values.
Both the parser and the serializer go through here, so the accepted
spellings and the rendered spellings cannot drift apart.

Every normalizer returns None for text it does not recognize. Turning
that into a user-facing error is the caller's job, since only the caller
knows which line the text came from.
"""

import re
from types import MappingProxyType
from typing import Optional

from .models import Equipment, Intensity, SetType, Stroke


_WHITESPACE = re.compile(r"\s+")

STROKE_SYNONYMS = MappingProxyType({
    "free": Stroke.FREE,
    "freestyle": Stroke.FREE,
    "fr": Stroke.FREE,
    "back": Stroke.BACK,
    "backstroke": Stroke.BACK,
    "bk": Stroke.BACK,
    "breast": Stroke.BREAST,
    "breaststroke": Stroke.BREAST,
    "br": Stroke.BREAST,
    "fly": Stroke.FLY,
    "butterfly": Stroke.FLY,
    "fl": Stroke.FLY,
    "im": Stroke.IM,
    "choice": Stroke.CHOICE,
    "drill": Stroke.DRILL,
    "dr": Stroke.DRILL,
    "kick": Stroke.KICK,
    "ki": Stroke.KICK,
})

_INTENSITIES = MappingProxyType({i.value: i for i in Intensity})
_EQUIPMENT = MappingProxyType({e.value: e for e in Equipment})
_SET_TYPES = MappingProxyType({t.value: t for t in SetType})

# Order matters: first keyword found in the name wins.
SET_TYPE_KEYWORDS: tuple[tuple[str, SetType], ...] = (
    ("warmup", SetType.WARMUP),
    ("warm up", SetType.WARMUP),
    ("pre-set", SetType.PRE_SET),
    ("preset", SetType.PRE_SET),
    ("test", SetType.TEST_SET),
    ("cooldown", SetType.COOLDOWN),
    ("cool down", SetType.COOLDOWN),
    ("dryland", SetType.DRYLAND),
    ("dry land", SetType.DRYLAND),
)

# Shown in error hints, in enum order
VALID_STROKES = ", ".join(s.value for s in Stroke)
VALID_INTENSITIES = ", ".join(i.value for i in Intensity)
VALID_EQUIPMENT = ", ".join(e.value for e in Equipment)


def normalize_stroke(raw: str) -> Optional[Stroke]:
    """Map any accepted spelling ("Freestyle", "FR", "im") to a Stroke."""
    key = _WHITESPACE.sub(" ", raw.strip()).lower()
    return STROKE_SYNONYMS.get(key)


def normalize_intensity(raw: str) -> Optional[Intensity]:
    """
    Map an intensity as typed to its canonical token.

    Whitespace runs become underscores first, so "Race Pace" and
    "race  pace" both resolve to race_pace.
    """
    key = _WHITESPACE.sub("_", raw.strip().lower())
    return _INTENSITIES.get(key)


def normalize_equipment(raw: str) -> Optional[Equipment]:
    return _EQUIPMENT.get(raw.strip().lower())


def normalize_set_type(raw: str) -> Optional[SetType]:
    """Exact set type token ("main_set"), for structured input that names one."""
    key = _WHITESPACE.sub("_", raw.strip().lower())
    return _SET_TYPES.get(key)


def infer_set_type(name: str) -> SetType:
    """Guess a set's purpose from its name ("Warm Up 1" -> warmup)."""
    lowered = name.lower()
    for keyword, set_type in SET_TYPE_KEYWORDS:
        if keyword in lowered:
            return set_type
    return SetType.MAIN_SET
