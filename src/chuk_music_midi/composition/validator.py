"""
Composition Validator - checks a composition before it is exported.

Validates:
- Measures start in non-decreasing order within each part
- Transposed pitches stay in the MIDI range (the exporter does not clamp)
- Notes stay inside each part's playable range
- Part lengths agree with number_of_measures
- Program-change channels do not collide (part-index policy)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from chuk_music_midi.config import TranslatorConfig
from chuk_music_midi.constants import ProgramChannelPolicy
from chuk_music_midi.models.composition import Composition, Part


class ValidationSeverity(str, Enum):
    """How much an issue matters for export."""

    ERROR = "error"  # Export raises or writes wrong pitches
    WARNING = "warning"  # Exports, but probably not what was meant
    INFO = "info"


@dataclass(frozen=True)
class ValidationIssue:
    """One finding, located by a 'parts/<i>/measures/<j>' style path."""

    severity: ValidationSeverity
    code: str
    message: str
    location: str = ""

    def __str__(self) -> str:
        where = f" ({self.location})" if self.location else ""
        return f"{self.severity.value}: {self.code}{where} {self.message}"


@dataclass
class ValidationResult:
    """Issues collected while validating one composition."""

    issues: list[ValidationIssue] = field(default_factory=list)

    def add(
        self, severity: ValidationSeverity, code: str, message: str, location: str = ""
    ) -> None:
        self.issues.append(ValidationIssue(severity, code, message, location))

    def of_severity(self, severity: ValidationSeverity) -> list[ValidationIssue]:
        """Issues with the given severity, in the order found."""
        return [issue for issue in self.issues if issue.severity == severity]

    @property
    def errors(self) -> list[ValidationIssue]:
        return self.of_severity(ValidationSeverity.ERROR)

    @property
    def warnings(self) -> list[ValidationIssue]:
        return self.of_severity(ValidationSeverity.WARNING)

    @property
    def is_valid(self) -> bool:
        """Only errors block an export."""
        return not self.errors

    def codes(self) -> set[str]:
        """Codes of all issues."""
        return {issue.code for issue in self.issues}

    def __str__(self) -> str:
        if not self.issues:
            return "no issues"
        return "\n".join(map(str, self.issues))


class CompositionValidator:
    """Validates composition structure before export."""

    def __init__(self, config: TranslatorConfig | None = None):
        self.config = config or TranslatorConfig()

    def validate(self, composition: Composition) -> ValidationResult:
        """
        Validate a composition.

        Args:
            composition: The composition to validate

        Returns:
            ValidationResult with any issues found
        """
        result = ValidationResult()

        if not composition.parts:
            result.add(
                ValidationSeverity.INFO, "NO_PARTS", "Composition has no parts; nothing to export"
            )
            return result

        for index, part in enumerate(composition.parts):
            self._validate_measure_order(index, part, result)
            self._validate_pitches(index, part, result)

        self._validate_lengths(composition, result)
        self._validate_program_channels(composition, result)

        return result

    def _validate_measure_order(self, index: int, part: Part, result: ValidationResult) -> None:
        """Measure starts must not go backwards."""
        previous = None
        for measure_index, measure in enumerate(part.measures):
            if previous is not None and measure.first_beat_timestamp < previous:
                result.add(
                    ValidationSeverity.ERROR,
                    "MEASURE_ORDER",
                    f"Measure starts at beat {measure.first_beat_timestamp}, "
                    f"before the previous measure ({previous})",
                    f"parts/{index}/measures/{measure_index}",
                )
            previous = measure.first_beat_timestamp

    def _validate_pitches(self, index: int, part: Part, result: ValidationResult) -> None:
        """Check transposed pitches against MIDI and the part's range."""
        for measure_index, measure in enumerate(part.measures):
            location = f"parts/{index}/measures/{measure_index}"
            for note in measure.notes:
                pitch = note.pitch + measure.key_signature_offset
                if not 0 <= pitch <= 127:
                    result.add(
                        ValidationSeverity.ERROR,
                        "PITCH_OUT_OF_RANGE",
                        f"Pitch {note.pitch} transposed by {measure.key_signature_offset} "
                        f"gives {pitch}, outside 0-127",
                        location,
                    )
                elif not part.min_note <= pitch <= part.max_note:
                    result.add(
                        ValidationSeverity.WARNING,
                        "OUTSIDE_PART_RANGE",
                        f"Pitch {pitch} outside part range {part.min_note}-{part.max_note}",
                        location,
                    )

    def _validate_lengths(self, composition: Composition, result: ValidationResult) -> None:
        """Part lengths should match the declared number of measures."""
        expected = composition.number_of_measures
        for index, part in enumerate(composition.parts):
            if expected and len(part.measures) != expected:
                result.add(
                    ValidationSeverity.WARNING,
                    "MEASURE_COUNT_MISMATCH",
                    f"Part has {len(part.measures)} measures, expected {expected}",
                    f"parts/{index}",
                )

    def _validate_program_channels(
        self, composition: Composition, result: ValidationResult
    ) -> None:
        """Under the part-index policy, parts past 16 share program channels."""
        if self.config.program_channel_policy != ProgramChannelPolicy.PART_INDEX:
            return
        if composition.number_of_parts > 16:
            result.add(
                ValidationSeverity.WARNING,
                "PROGRAM_CHANNEL_CONFLICT",
                f"{composition.number_of_parts} parts share 16 program-change channels",
                "parts",
            )


def validate_composition(
    composition: Composition, config: TranslatorConfig | None = None
) -> ValidationResult:
    """
    Convenience function to validate a composition.

    Args:
        composition: The composition to validate
        config: Optional translator settings

    Returns:
        ValidationResult with any issues found
    """
    validator = CompositionValidator(config)
    return validator.validate(composition)
