"""
Composition checks run before export.
"""

from chuk_music_midi.composition.validator import (
    CompositionValidator,
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
    validate_composition,
)

__all__ = [
    "CompositionValidator",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSeverity",
    "validate_composition",
]
