"""
Unit tests for the practice notation parser.

Covers the line state machine (headers, implicit sets, dropped empty
sets), per-item field extraction, and error collection. No I/O.
"""

import pytest

from swimpractice.core.practice.models import (
    Equipment,
    Intensity,
    ParseErrorKind,
    SetType,
    Stroke,
)
from swimpractice.core.practice.parser import (
    ItemLineError,
    parse_item_line,
    parse_practice,
)


# ---------------------------------------------------------------------------
# Item Line Tests
# ---------------------------------------------------------------------------

class TestParseItemLine:
    """Field extraction from a single item line."""

    def test_complete_line(self):
        """Every optional field can appear on one line."""
        item = parse_item_line("4x100 Free @1:30 - descend (moderate) [fins]")

        assert item.reps == 4
        assert item.distance == 100
        assert item.stroke == Stroke.FREE
        assert item.interval == "1:30"
        assert item.description == "descend"
        assert item.intensity == Intensity.MODERATE
        assert item.equipment == (Equipment.FINS,)

    def test_minimal_line_has_no_optional_fields(self):
        item = parse_item_line("4x100 Free")

        assert item.interval is None
        assert item.description is None
        assert item.intensity is None
        assert item.equipment == ()

    def test_single_distance_defaults_to_one_rep(self):
        """'200 IM' is one 200 of IM."""
        item = parse_item_line("200 IM")

        assert item.reps == 1
        assert item.distance == 200
        assert item.stroke == Stroke.IM

    @pytest.mark.parametrize("line", [
        "4x100 Free",
        "4 x 100 Free",
        "4X100 Free",
        "4×100 Free",
    ])
    def test_reps_separator_variants(self, line):
        item = parse_item_line(line)
        assert (item.reps, item.distance) == (4, 100)

    def test_description_keeps_inner_hyphens(self):
        """Only the first ' -' starts the description."""
        item = parse_item_line("4x100 Free @1:30 - descend 1-4")

        assert item.description == "descend 1-4"
        assert item.interval == "1:30"

    def test_interval_kept_verbatim(self):
        item = parse_item_line("6x50 Fly @:55 - build each")

        assert item.interval == ":55"
        assert item.stroke == Stroke.FLY

    def test_multi_word_intensity(self):
        """Whitespace inside the parentheses becomes an underscore."""
        item = parse_item_line("8x25 Free (Race  Pace)")
        assert item.intensity == Intensity.RACE_PACE

    def test_equipment_order_and_duplicates_preserved(self):
        item = parse_item_line("6x50 Free [Paddles, pull_buoy, paddles]")

        assert item.equipment == (
            Equipment.PADDLES,
            Equipment.PULL_BUOY,
            Equipment.PADDLES,
        )

    def test_trailing_comma_in_equipment_ignored(self):
        item = parse_item_line("4x100 Free [fins, ]")
        assert item.equipment == (Equipment.FINS,)

    def test_fields_may_appear_in_any_position(self):
        """Bracket and parenthesis groups are found wherever they are."""
        item = parse_item_line("4x100 [fins] Free (easy) @1:40")

        assert item.stroke == Stroke.FREE
        assert item.equipment == (Equipment.FINS,)
        assert item.intensity == Intensity.EASY
        assert item.interval == "1:40"

    def test_order_index_is_passed_through(self):
        assert parse_item_line("100 Kick", order_index=3).order_index == 3


class TestParseItemLineErrors:
    """Each way an item line can be rejected."""

    def test_unknown_equipment_lists_every_bad_token(self):
        with pytest.raises(ItemLineError) as exc_info:
            parse_item_line("4x100 Free [floaties, noodle, fins]")

        error = exc_info.value
        assert error.kind == ParseErrorKind.UNKNOWN_EQUIPMENT
        assert error.message == (
            "Unknown equipment: floaties, noodle. "
            "Use: fins, paddles, snorkel, kickboard, pull_buoy, band"
        )

    def test_unknown_intensity(self):
        with pytest.raises(ItemLineError) as exc_info:
            parse_item_line("4x100 Free (hard)")

        assert exc_info.value.kind == ParseErrorKind.UNKNOWN_INTENSITY
        assert exc_info.value.message == (
            "Unknown intensity: hard. Use: easy, moderate, fast, sprint, race_pace"
        )

    def test_unknown_stroke_quotes_raw_text(self):
        with pytest.raises(ItemLineError) as exc_info:
            parse_item_line("4x100 Swim @1:30")

        assert exc_info.value.kind == ParseErrorKind.UNKNOWN_STROKE
        assert exc_info.value.message == (
            'Unknown stroke: "Swim". Use: free, back, breast, fly, IM, choice, drill, kick'
        )

    def test_unrecognized_format_shows_remaining_line(self):
        """Extracted fields are already gone from the quoted text."""
        with pytest.raises(ItemLineError) as exc_info:
            parse_item_line("Free 4x100 @1:30")

        assert exc_info.value.kind == ParseErrorKind.UNRECOGNIZED_FORMAT
        assert exc_info.value.message == (
            'Could not parse: "Free 4x100". Format: "4x100 Free @1:30"'
        )

    def test_missing_stroke_is_unrecognized(self):
        with pytest.raises(ItemLineError) as exc_info:
            parse_item_line("4x100")
        assert exc_info.value.kind == ParseErrorKind.UNRECOGNIZED_FORMAT

    @pytest.mark.parametrize("line", ["0x100 Free", "4x0 Free", "0 Free"])
    def test_zero_reps_or_distance_rejected(self, line):
        with pytest.raises(ItemLineError) as exc_info:
            parse_item_line(line)

        assert exc_info.value.kind == ParseErrorKind.UNRECOGNIZED_FORMAT
        assert "at least 1" in exc_info.value.message

    def test_equipment_checked_before_stroke(self):
        """The first failing step wins."""
        with pytest.raises(ItemLineError) as exc_info:
            parse_item_line("4x100 Swim [floaties]")
        assert exc_info.value.kind == ParseErrorKind.UNKNOWN_EQUIPMENT


# ---------------------------------------------------------------------------
# Whole Practice Tests
# ---------------------------------------------------------------------------

class TestParsePractice:
    """Set structure built from multi-line text."""

    def test_headerless_text_gets_default_set(self):
        result = parse_practice("4x100 Free @1:30")

        assert result.ok
        assert len(result.sets) == 1
        assert result.sets[0].name == "Set"
        assert result.sets[0].set_type == SetType.MAIN_SET
        assert len(result.sets[0].items) == 1

    @pytest.mark.parametrize("text", ["1x100 Free", "1x100 freestyle", "1x100 FR"])
    def test_stroke_synonyms_equivalent(self, text):
        result = parse_practice(text)
        assert result.sets[0].items[0].stroke == Stroke.FREE

    def test_set_type_inferred_from_header(self):
        result = parse_practice("## COOLDOWN\n4x100 Choice")
        assert result.sets[0].set_type == SetType.COOLDOWN

    def test_header_name_is_trimmed(self):
        result = parse_practice("  ##   Main Set  \n200 Free")
        assert result.sets[0].name == "Main Set"

    def test_empty_set_dropped(self):
        """A header followed directly by another header is discarded."""
        result = parse_practice("## WARMUP\n## MAIN SET\n4x100 Free")

        assert result.ok
        assert [s.name for s in result.sets] == ["MAIN SET"]
        assert result.sets[0].order_index == 0

    def test_trailing_empty_set_dropped(self):
        result = parse_practice("## MAIN SET\n4x100 Free\n## COOLDOWN\n")
        assert [s.name for s in result.sets] == ["MAIN SET"]

    def test_order_indexes_are_dense(self):
        text = "\n".join([
            "## WARMUP",
            "400 Free (easy)",
            "4x50 Kick @1:00 [kickboard]",
            "",
            "## MAIN SET",
            "4x100 Free @1:30",
            "200 IM",
            "8x25 Fly",
        ])

        result = parse_practice(text)

        assert [s.order_index for s in result.sets] == [0, 1]
        for practice_set in result.sets:
            assert [i.order_index for i in practice_set.items] == list(range(len(practice_set.items)))

    def test_items_before_first_header_keep_default_set(self):
        result = parse_practice("200 Free\n## COOLDOWN\n100 Choice")

        assert [(s.name, s.set_type) for s in result.sets] == [
            ("Set", SetType.MAIN_SET),
            ("COOLDOWN", SetType.COOLDOWN),
        ]

    def test_windows_line_endings(self):
        result = parse_practice("## WARMUP\r\n200 Free\r\n")

        assert result.ok
        assert result.sets[0].items[0].distance == 200

    def test_empty_text_is_an_empty_practice(self):
        result = parse_practice("")

        assert result.ok
        assert result.sets == ()

    def test_none_is_a_caller_bug(self):
        with pytest.raises(TypeError):
            parse_practice(None)


class TestParsePracticeErrors:
    """Error collection across lines."""

    def test_unknown_equipment_fails_whole_practice(self):
        result = parse_practice("4x100 Free [floaties]")

        assert not result.ok
        assert result.sets == ()
        assert len(result.errors) == 1
        assert result.errors[0].line_number == 1
        assert "floaties" in result.errors[0].message

    def test_every_bad_line_reported(self):
        """Lines 1 and 3 are bad; line 2 is fine."""
        result = parse_practice("4x100 Free [floaties]\n4x100 Free\n200 Swim")

        assert [e.line_number for e in result.errors] == [1, 3]
        assert [e.kind for e in result.errors] == [
            ParseErrorKind.UNKNOWN_EQUIPMENT,
            ParseErrorKind.UNKNOWN_STROKE,
        ]

    def test_line_numbers_count_blank_lines(self):
        result = parse_practice("## WARMUP\n\n4x100 Freestlye")
        assert result.errors[0].line_number == 3

    def test_error_carries_offending_text(self):
        result = parse_practice("4x100 Backstrokee")
        assert result.errors[0].raw == "Backstrokee"

    def test_formatted_error_for_display(self):
        result = parse_practice("## MAIN\n4x100 Free (hard)")
        assert result.errors[0].formatted.startswith("Line 2: Unknown intensity: hard.")

    def test_overlong_number_is_a_format_error(self):
        """A digit run too long to be a distance is reported, not raised."""
        result = parse_practice("1x" + "9" * 5000 + " Free\n" + "1" * 5000 + " Free")

        assert not result.ok
        assert [e.line_number for e in result.errors] == [1, 2]
        assert {e.kind for e in result.errors} == {ParseErrorKind.UNRECOGNIZED_FORMAT}

    def test_only_newlines_split_lines(self):
        """A Unicode line separator inside a description is not a new line."""
        result = parse_practice("4x100 Free - easy\u2028swim\n4x100 Freee")

        assert [e.line_number for e in result.errors] == [2]
