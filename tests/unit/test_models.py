"""
Unit tests for the practice domain models and totals.

These tests verify the core business logic without touching
external services (no API calls, no database, no file system).

Testing philosophy:
- Test behavior, not implementation
- Each test should have a clear "given/when/then" structure
- Prefer real objects over mocks where practical
"""

import pytest

from swimpractice.core.practice.models import (
    LineError,
    ParseErrorKind,
    ParseResult,
    PracticeItem,
    PracticeSet,
    SetType,
    Stroke,
)
from swimpractice.core.practice.totals import (
    estimate_duration_minutes,
    practice_total_distance,
    stroke_breakdown,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_practice() -> list[PracticeSet]:
    """A short two-set practice totalling 1000."""
    return [
        PracticeSet(
            name="Warmup",
            set_type=SetType.WARMUP,
            order_index=0,
            items=(
                PracticeItem(order_index=0, reps=4, distance=100, stroke=Stroke.FREE),
                PracticeItem(order_index=1, reps=1, distance=200, stroke=Stroke.IM),
            ),
        ),
        PracticeSet(
            name="Main Set",
            order_index=1,
            items=(
                PracticeItem(order_index=0, reps=8, distance=25, stroke=Stroke.KICK),
                PracticeItem(order_index=1, reps=2, distance=100, stroke=Stroke.FREE),
            ),
        ),
    ]


# ---------------------------------------------------------------------------
# Item and Set Tests
# ---------------------------------------------------------------------------

class TestPracticeItem:
    """Tests for the PracticeItem value object."""

    def test_total_distance_counts_reps(self):
        item = PracticeItem(order_index=0, reps=4, distance=100, stroke=Stroke.FREE)
        assert item.total_distance == 400

    def test_rejects_zero_reps(self):
        with pytest.raises(ValueError, match="reps"):
            PracticeItem(order_index=0, reps=0, distance=100, stroke=Stroke.FREE)

    def test_rejects_zero_distance(self):
        with pytest.raises(ValueError, match="distance"):
            PracticeItem(order_index=0, reps=1, distance=0, stroke=Stroke.FREE)

    def test_rejects_negative_order_index(self):
        with pytest.raises(ValueError, match="order_index"):
            PracticeItem(order_index=-1, reps=1, distance=100, stroke=Stroke.FREE)

    def test_items_are_immutable(self):
        item = PracticeItem(order_index=0, reps=1, distance=100, stroke=Stroke.FREE)
        with pytest.raises(AttributeError):
            item.reps = 2


class TestPracticeSet:

    def test_defaults_to_main_set(self):
        assert PracticeSet(name="Set").set_type == SetType.MAIN_SET

    def test_total_distance_sums_items(self, sample_practice):
        assert sample_practice[0].total_distance == 600
        assert sample_practice[1].total_distance == 400


class TestParseResult:
    """A result is either a practice or a list of errors, never both."""

    def test_ok_without_errors(self):
        assert ParseResult().ok

    def test_not_ok_with_errors(self):
        error = LineError(line_number=1, kind=ParseErrorKind.UNKNOWN_STROKE, message="bad")
        assert not ParseResult(errors=(error,)).ok

    def test_failed_result_cannot_carry_sets(self, sample_practice):
        error = LineError(line_number=1, kind=ParseErrorKind.UNKNOWN_STROKE, message="bad")
        with pytest.raises(ValueError, match="cannot carry sets"):
            ParseResult(sets=tuple(sample_practice), errors=(error,))

    def test_line_error_formatting(self):
        error = LineError(line_number=7, kind=ParseErrorKind.UNRECOGNIZED_FORMAT, message="nope")
        assert error.formatted == "Line 7: nope"


# ---------------------------------------------------------------------------
# Totals Tests
# ---------------------------------------------------------------------------

class TestTotals:

    def test_practice_total(self, sample_practice):
        assert practice_total_distance(sample_practice) == 1000

    def test_stroke_breakdown_in_first_seen_order(self, sample_practice):
        breakdown = stroke_breakdown(sample_practice)

        assert breakdown == {Stroke.FREE: 600, Stroke.IM: 200, Stroke.KICK: 200}
        assert list(breakdown) == [Stroke.FREE, Stroke.IM, Stroke.KICK]

    def test_duration_estimate(self, sample_practice):
        """1000 at 1.5 seconds each is 25 minutes."""
        assert estimate_duration_minutes(sample_practice) == 25

    def test_empty_practice(self):
        assert practice_total_distance([]) == 0
        assert stroke_breakdown([]) == {}
        assert estimate_duration_minutes([]) == 0
