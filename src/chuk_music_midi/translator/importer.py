"""
MIDI Importer - reads a sequence into the structured intermediate form.

The importer:
1. Reads the time resolution from the tempo track
2. Scans the tempo track for tempo changes and time signatures
3. Scans every track for notes (with bar/beat positions) and markers

Parsing is lenient: any event it does not understand is skipped, never an
error. Notes and markers keep track order, then in-track order; they are
not re-sorted across tracks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from chuk_music_midi.config import TranslatorConfig
from chuk_music_midi.constants import MetaType, SuccessMessages
from chuk_music_midi.engine.sequence import MeterMap, Sequence, Track, TrackProperty
from chuk_music_midi.engine.smf import load_sequence
from chuk_music_midi.models.events import (
    EventType,
    TempoChange,
    TimedNote,
    TimeSignatureEvent,
)

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Everything the importer derives from one sequence."""

    tempo_track: list[TempoChange] = field(default_factory=list)
    notes: list[TimedNote] = field(default_factory=list)
    time_resolution: int = 0
    time_signatures: list[TimeSignatureEvent] = field(default_factory=list)
    markers: list[float] = field(default_factory=list)

    def note_count(self) -> int:
        """Total number of notes."""
        return len(self.notes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for YAML/JSON inspection."""
        return {
            "time_resolution": self.time_resolution,
            "tempo_track": [t.to_dict() for t in self.tempo_track],
            "time_signatures": [ts.to_dict() for ts in self.time_signatures],
            "markers": list(self.markers),
            "notes": [n.to_dict() for n in self.notes],
        }

    def summary(self) -> dict[str, Any]:
        """Generate a summary for quick inspection."""
        pitches = [n.note.pitch for n in self.notes]
        return {
            "time_resolution": self.time_resolution,
            "total_notes": self.note_count(),
            "tempo_changes": len(self.tempo_track),
            "time_signatures": [f"{ts.numerator}/{ts.denominator}" for ts in self.time_signatures],
            "markers": len(self.markers),
            "pitch_range": (min(pitches), max(pitches)) if pitches else (0, 0),
        }


class MidiImporter:
    """
    Translates a loaded Sequence into an ImportResult.

    Stateless between calls; never mutates the sequence it reads.
    """

    def __init__(self, config: TranslatorConfig | None = None):
        """
        Initialize the importer.

        Args:
            config: Translator settings (marker trigger value)
        """
        self.config = config or TranslatorConfig()

    def import_sequence(self, sequence: Sequence) -> ImportResult:
        """
        Import a sequence.

        Args:
            sequence: The sequence to read

        Returns:
            ImportResult with tempo summary, notes, resolution,
            time signatures and markers
        """
        result = ImportResult()
        result.time_resolution = sequence.tempo_track.get_property(TrackProperty.TIME_RESOLUTION)

        self._parse_tempo_track(sequence.tempo_track, result)
        meter = MeterMap.from_sequence(sequence)

        logger.debug(f"Parsing {sequence.track_count} tracks, {len(meter)} meter segments")
        for index in range(sequence.track_count):
            self._parse_track(sequence, index, meter, result)

        return result

    def _parse_tempo_track(self, tempo_track: Track, result: ImportResult) -> None:
        """Collect tempo changes and time signatures in encounter order."""
        for timestamp, event_type, event in tempo_track.new_cursor():
            if event_type == EventType.TEMPO:
                result.tempo_track.append(TempoChange(timestamp=timestamp, bpm=event.bpm))
                continue

            if event_type != EventType.META:
                continue

            logger.debug(
                f"Meta event at beat {timestamp}: type {event.meta_type:#04x}, "
                f"length {event.data_length}"
            )
            if event.meta_type != MetaType.TIME_SIGNATURE:
                continue
            if event.data_length < 2:
                logger.debug(f"Skipping short time signature payload at beat {timestamp}")
                continue

            result.time_signatures.append(
                TimeSignatureEvent(
                    numerator=event.payload[0],
                    denominator_log=event.payload[1],
                    timestamp=timestamp,
                )
            )

    def _parse_track(
        self, sequence: Sequence, index: int, meter: MeterMap, result: ImportResult
    ) -> None:
        """Append one track's notes and markers to the result."""
        track = sequence.get_track(index)
        notes_before = len(result.notes)
        markers_before = len(result.markers)

        for timestamp, event_type, event in track.new_cursor():
            if event_type == EventType.NOTE:
                bar_beat = meter.position(timestamp, result.time_resolution)
                result.notes.append(TimedNote(note=event, bar_beat=bar_beat, timestamp=timestamp))
            elif event_type == EventType.CHANNEL:
                if event.data1 == self.config.marker_trigger:
                    result.markers.append(timestamp)

        logger.debug(
            f"Track {index}: {len(result.notes) - notes_before} notes, "
            f"{len(result.markers) - markers_before} markers"
        )


def import_sequence(sequence: Sequence, config: TranslatorConfig | None = None) -> ImportResult:
    """
    Convenience function to import a loaded sequence.

    Args:
        sequence: The sequence to read
        config: Optional translator settings

    Returns:
        ImportResult
    """
    return MidiImporter(config).import_sequence(sequence)


def import_midi_file(path: str | Path, config: TranslatorConfig | None = None) -> ImportResult:
    """
    Load a MIDI file and import it.

    Raises:
        LoadError: if the file is missing or corrupt
    """
    sequence = load_sequence(path)
    result = import_sequence(sequence, config)
    logger.info(
        SuccessMessages.IMPORTED.format(
            notes=result.note_count(), markers=len(result.markers), path=path
        )
    )
    return result
