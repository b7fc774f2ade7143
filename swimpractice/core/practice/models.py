"""
Domain models for structured swim practices.

A practice is an ordered list of sets, each holding ordered repetition
items. These models know nothing about text notation, HTTP, or storage;
the parser produces them, the serializer and repository consume them.

Vocabulary values are enums so that once past the registry boundary no
code can carry a raw synonym like "freestyle" around.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Stroke(Enum):
    """Canonical strokes and training modes an item can prescribe."""
    FREE = "free"
    BACK = "back"
    BREAST = "breast"
    FLY = "fly"
    IM = "IM"  # Stored upper-case
    CHOICE = "choice"  # Swimmer's choice
    DRILL = "drill"
    KICK = "kick"


class Intensity(Enum):
    """How hard the item should be swum."""
    EASY = "easy"
    MODERATE = "moderate"
    FAST = "fast"
    SPRINT = "sprint"
    RACE_PACE = "race_pace"


class Equipment(Enum):
    """Gear a swimmer needs for an item."""
    FINS = "fins"
    PADDLES = "paddles"
    SNORKEL = "snorkel"
    KICKBOARD = "kickboard"
    PULL_BUOY = "pull_buoy"
    BAND = "band"


class SetType(Enum):
    """
    The purpose of a set within a practice.

    Inferred from the set's name; anything unrecognized is main work.
    """
    WARMUP = "warmup"
    PRE_SET = "pre_set"
    MAIN_SET = "main_set"
    TEST_SET = "test_set"
    COOLDOWN = "cooldown"
    DRYLAND = "dryland"


class ParseErrorKind(Enum):
    """Why an item line was rejected."""
    UNKNOWN_EQUIPMENT = "unknown_equipment"
    UNKNOWN_INTENSITY = "unknown_intensity"
    UNKNOWN_STROKE = "unknown_stroke"
    UNRECOGNIZED_FORMAT = "unrecognized_format"


@dataclass(frozen=True)
class PracticeItem:
    """
    One line of prescribed work: reps x distance of a stroke.

    Distance is unit-less here; yards vs meters is a display concern.
    """
    order_index: int
    reps: int
    distance: int
    stroke: Stroke
    interval: Optional[str] = None
    description: Optional[str] = None
    intensity: Optional[Intensity] = None
    equipment: tuple[Equipment, ...] = ()

    def __post_init__(self) -> None:
        if self.order_index < 0:
            raise ValueError("Item order_index cannot be negative")
        if self.reps < 1:
            raise ValueError("Item reps must be at least 1")
        if self.distance < 1:
            raise ValueError("Item distance must be at least 1")

    @property
    def total_distance(self) -> int:
        return self.reps * self.distance


@dataclass(frozen=True)
class PracticeSet:
    """A named, ordered group of items sharing a purpose."""
    name: str
    set_type: SetType = SetType.MAIN_SET
    order_index: int = 0
    items: tuple[PracticeItem, ...] = ()

    def __post_init__(self) -> None:
        if self.order_index < 0:
            raise ValueError("Set order_index cannot be negative")

    @property
    def total_distance(self) -> int:
        """Everything swum in this set, reps included."""
        return sum(item.total_distance for item in self.items)


@dataclass(frozen=True)
class LineError:
    """
    A rejected item line.

    Carries the 1-based line number in the submitted text so an editor
    can point the coach straight at it, plus the offending raw text.
    """
    line_number: int
    kind: ParseErrorKind
    message: str
    raw: str = ""

    @property
    def formatted(self) -> str:
        return f"Line {self.line_number}: {self.message}"


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing a practice.

    Either every line parsed (errors is empty and sets holds the practice)
    or nothing is usable: sets is empty and errors lists every bad line.
    """
    sets: tuple[PracticeSet, ...] = ()
    errors: tuple[LineError, ...] = ()

    def __post_init__(self) -> None:
        if self.errors and self.sets:
            raise ValueError("A failed parse cannot carry sets")

    @property
    def ok(self) -> bool:
        return not self.errors
