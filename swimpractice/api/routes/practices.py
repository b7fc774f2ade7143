"""
Practice notation API endpoints.

Backs the quick-entry editor: coaches type a practice as text, the API
checks it line by line, and only a practice without a single bad line is
stored. Stored practices can be turned back into text to edit again.

Malformed notation is not an HTTP error on the parse endpoint - it is the
answer. Saving is different: a practice with errors is rejected with 422
and nothing already stored is touched.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from ...core.practice.models import LineError, PracticeItem, PracticeSet
from ...core.practice.parser import parse_practice
from ...core.practice.serializer import serialize_practice
from ...core.practice.totals import (
    estimate_duration_minutes,
    practice_total_distance,
    stroke_breakdown,
)
from ...core.practice.vocabulary import (
    VALID_EQUIPMENT,
    VALID_INTENSITIES,
    VALID_STROKES,
    normalize_equipment,
    normalize_intensity,
    normalize_set_type,
    normalize_stroke,
)
from ..dependencies import (
    AuthenticatedUser,
    PracticeRepositoryDep,
    SettingsDep,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class PracticeTextRequest(BaseModel):
    """Practice notation as typed in the editor."""
    text: str = Field(description="Practice notation, one item per line")


class PracticeItemModel(BaseModel):
    """One item of a set."""
    order_index: int = Field(ge=0, description="Position within the set")
    reps: int = Field(ge=1, description="Number of repetitions")
    distance: int = Field(ge=1, description="Distance per repetition")
    stroke: str = Field(description="Canonical stroke (free, back, breast, fly, IM, choice, drill, kick)")
    interval: Optional[str] = Field(None, description="Send-off interval as typed, e.g. 1:30")
    description: Optional[str] = Field(None, description="Free-form note")
    intensity: Optional[str] = Field(None, description="easy, moderate, fast, sprint or race_pace")
    equipment: list[str] = Field(default_factory=list, description="Equipment tokens, in order")


class PracticeSetModel(BaseModel):
    """A named set with its items."""
    name: str = Field(description="Set name as authored")
    set_type: str = Field("main_set", description="warmup, pre_set, main_set, test_set, cooldown or dryland")
    order_index: int = Field(ge=0, description="Position within the practice")
    items: list[PracticeItemModel] = Field(default_factory=list)
    total_distance: int = Field(0, description="Distance of the whole set (read-only)")


class LineErrorModel(BaseModel):
    """A rejected line of notation."""
    line_number: int = Field(description="1-based line number in the submitted text")
    kind: str = Field(description="unknown_equipment, unknown_intensity, unknown_stroke or unrecognized_format")
    message: str = Field(description="What is wrong and how to write it instead")


class ParseResponse(BaseModel):
    """Outcome of checking a practice."""
    ok: bool = Field(description="True when every line parsed")
    sets: list[PracticeSetModel] = Field(description="Parsed sets; empty when ok is false")
    errors: list[LineErrorModel] = Field(description="Every rejected line, in order")
    total_distance: int = Field(0, description="Distance of the whole practice")


class SerializeRequest(BaseModel):
    """Structured sets to render as notation."""
    sets: list[PracticeSetModel]


class PracticeTextResponse(BaseModel):
    """Practice rendered as notation."""
    text: str = Field(description="Notation text, ready to edit")


class PracticeDetailResponse(BaseModel):
    """A stored practice with its totals."""
    practice_id: UUID = Field(description="Practice identifier")
    sets: list[PracticeSetModel]
    total_distance: int = Field(description="Distance of the whole practice")
    estimated_minutes: int = Field(description="Rough duration at 1.5 seconds per unit of distance")
    stroke_breakdown: dict[str, int] = Field(description="Distance per stroke")


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------

def _set_to_model(practice_set: PracticeSet) -> PracticeSetModel:
    return PracticeSetModel(
        name=practice_set.name,
        set_type=practice_set.set_type.value,
        order_index=practice_set.order_index,
        total_distance=practice_set.total_distance,
        items=[
            PracticeItemModel(
                order_index=item.order_index,
                reps=item.reps,
                distance=item.distance,
                stroke=item.stroke.value,
                interval=item.interval,
                description=item.description,
                intensity=item.intensity.value if item.intensity else None,
                equipment=[e.value for e in item.equipment],
            )
            for item in practice_set.items
        ],
    )


def _error_to_model(error: LineError) -> LineErrorModel:
    return LineErrorModel(
        line_number=error.line_number,
        kind=error.kind.value,
        message=error.message,
    )


def _model_to_set(model: PracticeSetModel, problems: list[str]) -> Optional[PracticeSet]:
    """
    Rebuild a PracticeSet from request data through the vocabulary.

    Unknown tokens are appended to problems instead of raising, so the
    caller can report all of them at once.
    """
    set_type = normalize_set_type(model.set_type)
    if set_type is None:
        problems.append(f'Set "{model.name}": unknown set type "{model.set_type}"')

    items = []
    for item in model.items:
        where = f'Set "{model.name}" item {item.order_index}'

        stroke = normalize_stroke(item.stroke)
        if stroke is None:
            problems.append(f'{where}: Unknown stroke: "{item.stroke}". Use: {VALID_STROKES}')

        intensity = None
        if item.intensity:
            intensity = normalize_intensity(item.intensity)
            if intensity is None:
                problems.append(f"{where}: Unknown intensity: {item.intensity}. Use: {VALID_INTENSITIES}")

        equipment = [normalize_equipment(token) for token in item.equipment]
        unknown = [token for token, known in zip(item.equipment, equipment) if known is None]
        if unknown:
            problems.append(f"{where}: Unknown equipment: {', '.join(unknown)}. Use: {VALID_EQUIPMENT}")

        if stroke is None or (item.intensity and intensity is None) or unknown:
            continue

        items.append(PracticeItem(
            order_index=item.order_index,
            reps=item.reps,
            distance=item.distance,
            stroke=stroke,
            interval=item.interval,
            description=item.description,
            intensity=intensity,
            equipment=tuple(equipment),
        ))

    if set_type is None:
        return None

    return PracticeSet(
        name=model.name,
        set_type=set_type,
        order_index=model.order_index,
        items=tuple(items),
    )


def _check_text_size(text: str, limit: int) -> None:
    if len(text) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Practice text is limited to {limit} characters",
        )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/parse",
    response_model=ParseResponse,
    status_code=status.HTTP_200_OK,
    summary="Check practice notation",
    description="Parse practice text without storing it; returns sets or every line error",
)
async def parse_practice_text(
    request: PracticeTextRequest,
    settings: SettingsDep,
    api_key: AuthenticatedUser = None,
) -> ParseResponse:
    """
    Parse practice text and report the result.

    Lets the editor show the structured practice (or the list of bad
    lines) as the coach types, before anything is saved.
    """
    _check_text_size(request.text, settings.max_practice_text_chars)

    result = parse_practice(request.text)

    return ParseResponse(
        ok=result.ok,
        sets=[_set_to_model(s) for s in result.sets],
        errors=[_error_to_model(e) for e in result.errors],
        total_distance=practice_total_distance(result.sets),
    )


@router.post(
    "/serialize",
    response_model=PracticeTextResponse,
    status_code=status.HTTP_200_OK,
    summary="Render sets as notation",
    description="Turn structured sets into editable practice text",
)
async def serialize_practice_sets(
    request: SerializeRequest,
    api_key: AuthenticatedUser = None,
) -> PracticeTextResponse:
    """
    Render structured sets as notation text.

    Every stroke, intensity and equipment token must be in the controlled
    vocabulary; unknown tokens are reported together with 422.
    """
    problems: list[str] = []
    sets = [_model_to_set(model, problems) for model in request.sets]

    if problems:
        logger.info(
            "Rejected sets for serialization",
            extra={"problem_count": len(problems)}
        )
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=problems,
        )

    return PracticeTextResponse(text=serialize_practice(sets))


@router.put(
    "/{practice_id}/text",
    response_model=PracticeDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Save practice from notation",
    description="Parse practice text and replace the stored sets; rejected as a whole if any line fails",
    responses={
        422: {"description": "One or more lines could not be parsed"},
    },
)
async def save_practice_text(
    practice_id: UUID,
    request: PracticeTextRequest,
    settings: SettingsDep,
    api_key: AuthenticatedUser = None,
    repository: PracticeRepositoryDep = None,
) -> PracticeDetailResponse:
    """
    Parse and store a practice.

    Nothing is written unless every line parses. On success the stored
    sets are replaced wholesale with the parsed ones.
    """
    _check_text_size(request.text, settings.max_practice_text_chars)

    logger.info(
        "Saving practice text",
        extra={
            "practice_id": str(practice_id),
            "text_length": len(request.text),
        }
    )

    result = parse_practice(request.text)

    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": f"{len(result.errors)} line(s) could not be parsed. Nothing was saved.",
                "errors": [_error_to_model(e).model_dump() for e in result.errors],
            },
        )

    try:
        repository.replace_practice_sets(practice_id, result.sets)
    except Exception as e:
        logger.error(
            "Practice save failed",
            extra={"practice_id": str(practice_id), "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save practice",
        )

    return _detail_response(practice_id, list(result.sets))


@router.get(
    "/{practice_id}/text",
    response_model=PracticeTextResponse,
    status_code=status.HTTP_200_OK,
    summary="Load practice as notation",
    description="Render the stored sets of a practice as editable text",
)
async def get_practice_text(
    practice_id: UUID,
    api_key: AuthenticatedUser = None,
    repository: PracticeRepositoryDep = None,
) -> PracticeTextResponse:
    """Load stored sets and render them for the editor; empty text if none."""
    sets = _load_sets(repository, practice_id)
    return PracticeTextResponse(text=serialize_practice(sets))


@router.get(
    "/{practice_id}",
    response_model=PracticeDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get practice",
    description="Stored sets of a practice with distance totals",
)
async def get_practice(
    practice_id: UUID,
    api_key: AuthenticatedUser = None,
    repository: PracticeRepositoryDep = None,
) -> PracticeDetailResponse:
    sets = _load_sets(repository, practice_id)
    return _detail_response(practice_id, sets)


def _load_sets(repository, practice_id: UUID) -> list[PracticeSet]:
    try:
        return repository.get_practice_sets(practice_id)
    except Exception as e:
        logger.error(
            "Failed to load practice",
            extra={"practice_id": str(practice_id), "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load practice",
        )


def _detail_response(practice_id: UUID, sets: list[PracticeSet]) -> PracticeDetailResponse:
    return PracticeDetailResponse(
        practice_id=practice_id,
        sets=[_set_to_model(s) for s in sets],
        total_distance=practice_total_distance(sets),
        estimated_minutes=estimate_duration_minutes(sets),
        stroke_breakdown={
            stroke.value: distance
            for stroke, distance in stroke_breakdown(sets).items()
        },
    )
