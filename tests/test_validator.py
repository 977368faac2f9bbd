"""
Tests for the composition validator.
"""

from chuk_music_midi.composition import (
    CompositionValidator,
    ValidationSeverity,
    validate_composition,
)
from chuk_music_midi.config import TranslatorConfig
from chuk_music_midi.constants import ProgramChannelPolicy
from chuk_music_midi.models import Composition, Part


class TestCompositionValidator:
    """Test CompositionValidator."""

    def test_valid_composition(self, simple_composition: Composition) -> None:
        """The shared fixture has no issues."""
        result = validate_composition(simple_composition)
        assert result.is_valid
        assert result.issues == []
        assert str(result) == "no issues"

    def test_no_parts_is_info(self) -> None:
        """An empty composition is valid but noted."""
        result = validate_composition(Composition())
        assert result.is_valid
        assert result.codes() == {"NO_PARTS"}
        assert result.issues[0].severity == ValidationSeverity.INFO

    def test_measure_order(self, make_measure) -> None:
        """Measures going backwards is an error."""
        part = Part(measures=[make_measure(4.0), make_measure(0.0)])
        result = validate_composition(Composition(parts=[part]))

        assert not result.is_valid
        assert [e.code for e in result.errors] == ["MEASURE_ORDER"]
        assert result.errors[0].location == "parts/0/measures/1"

    def test_transposed_pitch_out_of_midi_range(self, make_measure) -> None:
        """A key offset pushing a pitch past 127 is an error."""
        part = Part(measures=[make_measure(0.0, key_offset=5, notes=[(125, 100, 1.0, 0.0)])])
        result = validate_composition(Composition(parts=[part]))

        assert not result.is_valid
        assert "PITCH_OUT_OF_RANGE" in result.codes()
        assert "130" in result.errors[0].message

    def test_outside_part_range_is_warning(self, make_measure) -> None:
        """Notes outside min/max note are warnings."""
        part = Part(
            min_note=60,
            max_note=72,
            measures=[make_measure(0.0, notes=[(48, 100, 1.0, 0.0), (64, 100, 1.0, 1.0)])],
        )
        result = validate_composition(Composition(parts=[part]))

        assert result.is_valid
        assert [w.code for w in result.warnings] == ["OUTSIDE_PART_RANGE"]

    def test_measure_count_mismatch(self, simple_composition: Composition) -> None:
        """Parts shorter than number_of_measures are flagged."""
        simple_composition.number_of_measures = 6
        result = validate_composition(simple_composition)

        assert result.is_valid
        assert [w.location for w in result.warnings] == ["parts/0", "parts/1"]
        assert result.codes() == {"MEASURE_COUNT_MISMATCH"}

    def test_zero_measure_count_is_not_checked(self, make_measure) -> None:
        """number_of_measures 0 means 'not declared'."""
        part = Part(measures=[make_measure(0.0), make_measure(4.0)])
        result = validate_composition(Composition(parts=[part], number_of_measures=0))
        assert result.issues == []

    def test_program_channel_conflict(self, make_measure) -> None:
        """More than 16 parts share channels under the part-index policy."""
        parts = [Part(measures=[make_measure(0.0)]) for _ in range(17)]
        composition = Composition(parts=parts)

        result = validate_composition(composition)
        assert result.codes() == {"PROGRAM_CHANNEL_CONFLICT"}

        config = TranslatorConfig(program_channel_policy=ProgramChannelPolicy.FIXED)
        assert CompositionValidator(config).validate(composition).issues == []

    def test_issue_str(self, make_measure) -> None:
        """Issues print severity, code, location and message."""
        part = Part(measures=[make_measure(4.0), make_measure(0.0)])
        issue = validate_composition(Composition(parts=[part])).issues[0]
        assert str(issue).startswith("error: MEASURE_ORDER (parts/0/measures/1) Measure starts")
