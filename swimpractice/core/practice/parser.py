"""
Practice notation parser.

Turns the text a coach types into structured sets and items:

    ## WARMUP
    400 Free (easy)
    4x50 Kick @1:00 [kickboard]

    ## MAIN SET
    4x100 Free @1:30 - descend 1-4 (moderate) [fins, paddles]

Lines starting with "##" open a new set. Every other non-blank line is an
item. A practice that starts with items and no header gets an implicit
set named "Set".

Item fields are stripped off the line in a fixed order: equipment
brackets, intensity parentheses, the " - description" tail, the @interval,
and finally "<reps>x<distance> <stroke>" from whatever is left. Because
each step cuts its match out before the next one runs, a description
cannot contain a closed "[...]" or "(...)" group; there is no escaping.

Parsing is all-or-nothing. Every item line is attempted so the coach sees
all problems at once, but if any line fails the result carries no sets
and callers must not store anything.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .models import (
    LineError,
    ParseErrorKind,
    ParseResult,
    PracticeItem,
    PracticeSet,
    SetType,
)
from .tokens import (
    DESCRIPTION_SUFFIX,
    DISTANCE_ONLY,
    EQUIPMENT_GROUP,
    INTENSITY_GROUP,
    INTERVAL_TOKEN,
    REPS_BY_DISTANCE,
    header_name,
    is_header,
    split_list,
    take,
)
from .vocabulary import (
    VALID_EQUIPMENT,
    VALID_INTENSITIES,
    VALID_STROKES,
    infer_set_type,
    normalize_equipment,
    normalize_intensity,
    normalize_stroke,
)

logger = logging.getLogger(__name__)

DEFAULT_SET_NAME = "Set"
FORMAT_HINT = '"4x100 Free @1:30"'


class ItemLineError(Exception):
    """
    Raised by parse_item_line for a line that breaks the notation.

    parse_practice catches these and turns them into LineErrors; they
    never escape a full-practice parse.
    """

    def __init__(self, kind: ParseErrorKind, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.raw = raw


def parse_item_line(line: str, order_index: int = 0) -> PracticeItem:
    """
    Parse one item line such as "4x100 Free @1:30 - descend (moderate) [fins]".

    Raises ItemLineError describing the first problem found.
    """
    # 1. Equipment
    equipment = ()
    match, line = take(EQUIPMENT_GROUP, line)
    if match:
        tokens = split_list(match.group(1))
        unknown = [token for token in tokens if normalize_equipment(token) is None]
        if unknown:
            raise ItemLineError(
                ParseErrorKind.UNKNOWN_EQUIPMENT,
                f"Unknown equipment: {', '.join(unknown)}. Use: {VALID_EQUIPMENT}",
                raw=", ".join(unknown),
            )
        equipment = tuple(normalize_equipment(token) for token in tokens)

    # 2. Intensity
    intensity = None
    match, line = take(INTENSITY_GROUP, line)
    if match:
        raw_intensity = match.group(1)
        intensity = normalize_intensity(raw_intensity)
        if intensity is None:
            raise ItemLineError(
                ParseErrorKind.UNKNOWN_INTENSITY,
                f"Unknown intensity: {raw_intensity}. Use: {VALID_INTENSITIES}",
                raw=raw_intensity,
            )

    # 3. Description
    description = None
    match, line = take(DESCRIPTION_SUFFIX, line)
    if match:
        description = match.group(1).strip() or None

    # 4. Interval
    interval = None
    match, line = take(INTERVAL_TOKEN, line)
    if match:
        interval = match.group(1)

    # 5. Reps, distance, stroke
    match = REPS_BY_DISTANCE.match(line)
    if match:
        reps, distance, raw_stroke = int(match.group(1)), int(match.group(2)), match.group(3)
    else:
        match = DISTANCE_ONLY.match(line)
        if not match:
            raise ItemLineError(
                ParseErrorKind.UNRECOGNIZED_FORMAT,
                f'Could not parse: "{line}". Format: {FORMAT_HINT}',
                raw=line,
            )
        reps, distance, raw_stroke = 1, int(match.group(1)), match.group(2)

    if reps < 1 or distance < 1:
        raise ItemLineError(
            ParseErrorKind.UNRECOGNIZED_FORMAT,
            f'Reps and distance must be at least 1: "{line}"',
            raw=line,
        )

    # 6. Stroke
    raw_stroke = raw_stroke.strip()
    stroke = normalize_stroke(raw_stroke)
    if stroke is None:
        raise ItemLineError(
            ParseErrorKind.UNKNOWN_STROKE,
            f'Unknown stroke: "{raw_stroke}". Use: {VALID_STROKES}',
            raw=raw_stroke,
        )

    return PracticeItem(
        order_index=order_index,
        reps=reps,
        distance=distance,
        stroke=stroke,
        interval=interval,
        description=description,
        intensity=intensity,
        equipment=equipment,
    )


@dataclass
class _OpenSet:
    """A set still collecting items while lines are read."""
    name: str
    set_type: SetType
    items: list[PracticeItem] = field(default_factory=list)

    def close(self, order_index: int) -> PracticeSet:
        return PracticeSet(
            name=self.name,
            set_type=self.set_type,
            order_index=order_index,
            items=tuple(self.items),
        )


def parse_practice(text: str) -> ParseResult:
    """
    Parse a whole practice.

    Returns a ParseResult whose errors list every rejected line (1-based,
    blank lines counted) in input order. A set whose header is followed
    directly by another header, or by the end of the text, is dropped.

    Raises TypeError when text is not a string; that is a caller bug,
    not bad notation.
    """
    if not isinstance(text, str):
        raise TypeError(f"Practice text must be a str, not {type(text).__name__}")

    sets: list[PracticeSet] = []
    errors: list[LineError] = []
    current: Optional[_OpenSet] = None

    for line_number, raw_line in enumerate(text.split("\n"), start=1):
        line = raw_line.strip()
        if not line:
            continue

        if is_header(line):
            if current is not None:
                if current.items:
                    sets.append(current.close(len(sets)))
                else:
                    logger.debug(
                        "Dropping set with no items",
                        extra={"set_name": current.name, "line_number": line_number},
                    )
            name = header_name(line)
            current = _OpenSet(name=name, set_type=infer_set_type(name))
            continue

        if current is None:
            current = _OpenSet(name=DEFAULT_SET_NAME, set_type=SetType.MAIN_SET)

        try:
            item = parse_item_line(line, order_index=len(current.items))
        except ItemLineError as e:
            errors.append(LineError(
                line_number=line_number,
                kind=e.kind,
                message=e.message,
                raw=e.raw,
            ))
            logger.debug(
                "Rejected practice line",
                extra={"line_number": line_number, "kind": e.kind.value},
            )
            continue

        current.items.append(item)

    if current is not None and current.items:
        sets.append(current.close(len(sets)))

    if errors:
        logger.info(
            "Practice text has errors",
            extra={"error_count": len(errors)},
        )
        return ParseResult(errors=tuple(errors))

    logger.info(
        "Parsed practice text",
        extra={
            "set_count": len(sets),
            "item_count": sum(len(s.items) for s in sets),
        },
    )
    return ParseResult(sets=tuple(sets))
