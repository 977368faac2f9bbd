"""
Composition model - the structured document the exporter reads.

A Composition contains:
- Parts (one instrument line each, with a sound preset and note range)
- Measures per part (tempo, time signature, key offset, chord, notes)
- Notes per measure (absolute timestamps, untransposed pitch)

The exporter only reads this graph. Mutation happens through the
exchange operations, which swap whole values and hand back the displaced one.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from chuk_music_midi.models.events import NoteEvent

SCHEMA_VERSION = "composition/v1"


class NoteInMeasure(BaseModel):
    """
    A note owned by a measure.

    ``timestamp`` is sequence-relative (not measure-relative) and ``pitch``
    is untransposed: the measure's key offset is applied at export time.
    """

    channel: int = Field(0, ge=0, le=15, description="MIDI channel (0-15)")
    pitch: int = Field(..., ge=0, le=127, description="Untransposed MIDI note number")
    velocity: int = Field(..., ge=0, le=127, description="Note-on velocity")
    release_velocity: int = Field(0, ge=0, le=127, description="Note-off velocity")
    duration: float = Field(..., ge=0, description="Duration in beats")
    timestamp: float = Field(..., ge=0, description="Absolute position in beats")

    def to_note_event(self, transpose: int = 0) -> NoteEvent:
        """
        Build the NoteEvent written for this note.

        Raises ValueError if the transposed pitch leaves 0-127.
        """
        return NoteEvent(
            channel=self.channel,
            pitch=self.pitch + transpose,
            velocity=self.velocity,
            release_velocity=self.release_velocity,
            duration=self.duration,
            timestamp=self.timestamp,
        )


class MeasureTimeSignature(BaseModel):
    """Time signature of a single measure."""

    number_of_beats: int = Field(4, ge=1, description="Beats per measure")
    beat_length: int = Field(4, ge=1, description="Beat unit (4 = quarter note)")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.number_of_beats}/{self.beat_length}"


class Measure(BaseModel):
    """One bar's worth of notes plus its tempo, meter and key context."""

    tempo: float = Field(..., gt=0, description="Tempo in BPM")
    first_beat_timestamp: float = Field(..., ge=0, description="Start of the measure in beats")
    key_signature_offset: int = Field(0, description="Semitones applied to every note on export")
    time_signature: MeasureTimeSignature = Field(
        default_factory=MeasureTimeSignature, description="Measure time signature"
    )
    notes: list[NoteInMeasure] = Field(default_factory=list, description="Notes in this measure")
    chord: str | None = Field(None, description="Chord name for this measure")

    @property
    def end_timestamp(self) -> float:
        """Beat at which this measure ends."""
        return self.first_beat_timestamp + self.time_signature.number_of_beats


class Part(BaseModel):
    """
    A single instrument line.

    A part always holds at least one measure; the exporter relies on it.
    """

    sound_preset: int = Field(0, ge=0, le=127, description="GM program number")
    min_note: int = Field(0, ge=0, le=127, description="Lowest playable note")
    max_note: int = Field(127, ge=0, le=127, description="Highest playable note")
    measures: list[Measure] = Field(..., min_length=1, description="Measures in musical order")

    @model_validator(mode="after")
    def validate_note_range(self) -> Part:
        """Ensure the note range is not inverted."""
        if self.min_note > self.max_note:
            raise ValueError(
                f"min_note ({self.min_note}) must not exceed max_note ({self.max_note})"
            )
        return self

    @property
    def last_measure(self) -> Measure:
        """The final measure of the part."""
        return self.measures[-1]

    def note_count(self) -> int:
        """Total number of notes across all measures."""
        return sum(len(measure.notes) for measure in self.measures)

    def set_measure(self, index: int, measure: Measure) -> None:
        """Replace the measure at ``index``."""
        self.measures[index] = measure


class Composition(BaseModel):
    """
    A complete composition.

    The first part is tempo-authoritative: its measures drive the exported
    tempo track and the reported tempo and chord progression.
    """

    name: str = Field("New Composition", description="Composition name")
    parts: list[Part] = Field(default_factory=list, description="Parts in track order")
    number_of_measures: int = Field(0, ge=0, description="Measures per part")

    @property
    def number_of_parts(self) -> int:
        """Number of parts."""
        return len(self.parts)

    @property
    def tempo(self) -> float | None:
        """Tempo of the first measure of the first part, or None when empty."""
        if not self.parts:
            return None
        return self.parts[0].measures[0].tempo

    @property
    def chord_progression_string(self) -> str:
        """Chord names of the first part joined as 'C ➝ G ➝ END'."""
        if not self.parts:
            return ""
        names = [measure.chord or "?" for measure in self.parts[0].measures]
        return " ➝ ".join([*names, "END"])

    def copy_composition(self) -> Composition:
        """Return a fresh deep copy."""
        return self.model_copy(deep=True)

    def exchange_part(self, index: int, new_part: Part) -> Part:
        """
        Replace a part, returning the displaced one.

        Both the stored and the returned part are copies.
        """
        displaced = self.parts[index].model_copy(deep=True)
        self.parts[index] = new_part.model_copy(deep=True)
        return displaced

    def exchange_measure(
        self, part_index: int, measure_index: int, new_measure: Measure
    ) -> Measure:
        """
        Replace one measure of one part, returning the displaced one.

        Both the stored and the returned measure are copies.
        """
        part = self.parts[part_index]
        displaced = part.measures[measure_index].model_copy(deep=True)
        part.set_measure(measure_index, new_measure.model_copy(deep=True))
        return displaced

    def to_yaml_dict(self) -> dict[str, Any]:
        """
        Convert to a YAML-friendly dict.

        This produces the document format read by the CLI.
        """
        return {
            "schema": SCHEMA_VERSION,
            "name": self.name,
            "number_of_measures": self.number_of_measures,
            "parts": [part.model_dump(mode="json") for part in self.parts],
        }

    @classmethod
    def from_yaml_dict(cls, data: dict[str, Any]) -> Composition:
        """Create a Composition from a YAML-parsed dict."""
        parts = [Part.model_validate(part) for part in data.get("parts", [])]
        number_of_measures = data.get("number_of_measures")
        if number_of_measures is None:
            number_of_measures = max((len(p.measures) for p in parts), default=0)
        return cls(
            name=data.get("name", "New Composition"),
            parts=parts,
            number_of_measures=number_of_measures,
        )
