"""
Composition Exporter - flattens a Composition into a Sequence.

The pipeline:
    Composition → tempo track (run-length compressed, first part only)
    → one track per part: bank select, program change, transposed notes,
      trailing silent note
    → Sequence → MIDI file

The exporter reads the composition and never mutates it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from chuk_music_midi.config import TranslatorConfig
from chuk_music_midi.constants import Controller, StatusByte, SuccessMessages
from chuk_music_midi.engine.sequence import Sequence, Track
from chuk_music_midi.engine.smf import ensure_midi_suffix, save_sequence
from chuk_music_midi.models.composition import Composition, Measure, Part
from chuk_music_midi.models.events import ChannelMessage, NoteEvent, TempoChange

logger = logging.getLogger(__name__)


def compress_tempo_map(measures: list[Measure]) -> list[TempoChange]:
    """
    Run-length compress measure tempos into tempo changes.

    The first measure's tempo is seeded at beat 0; afterwards a change is
    emitted only when a measure's tempo differs from the last one emitted,
    at that measure's first beat.

    Example:
        [120, 120, 120, 90, 90, 120] → (0, 120), (t4, 90), (t6, 120)
    """
    if not measures:
        return []

    previous = measures[0].tempo
    changes = [TempoChange(timestamp=0.0, bpm=previous)]
    for measure in measures:
        if measure.tempo != previous:
            changes.append(TempoChange(timestamp=measure.first_beat_timestamp, bpm=measure.tempo))
            previous = measure.tempo
    return changes


class CompositionExporter:
    """
    Builds a Sequence from a Composition.

    Stateless between calls; a new Sequence is created for every export.
    """

    def __init__(self, config: TranslatorConfig | None = None):
        """
        Initialize the exporter.

        Args:
            config: Translator settings (resolution, padding, program channel policy)
        """
        self.config = config or TranslatorConfig()

    def export(self, composition: Composition) -> Sequence:
        """
        Export a composition.

        A composition without parts yields a sequence holding only an
        empty tempo track.

        Args:
            composition: The composition to export

        Returns:
            The populated Sequence
        """
        sequence = Sequence(time_resolution=self.config.ticks_per_beat)

        if not composition.parts:
            logger.debug(f"Composition {composition.name!r} has no parts, nothing to export")
            return sequence

        # The first part is tempo-authoritative
        for change in compress_tempo_map(composition.parts[0].measures):
            sequence.tempo_track.add_tempo_event(change.timestamp, change.bpm)

        for part_index, part in enumerate(composition.parts):
            self.add_part(sequence, part, part_index)

        logger.debug(
            f"Exported {composition.number_of_parts} parts, "
            f"{len(sequence.tempo_track)} tempo events"
        )
        return sequence

    def add_part(self, sequence: Sequence, part: Part, part_index: int) -> Track:
        """
        Append one part to a sequence as a new track.

        Args:
            sequence: Destination sequence
            part: The part to write
            part_index: Zero-based position of the part in the composition

        Returns:
            The new track
        """
        track = sequence.new_track()

        # Sound preset: bank select MSB/LSB then program change, all at 0
        control = StatusByte.CONTROL_CHANGE.value
        track.add_channel_event(0.0, ChannelMessage(control, Controller.BANK_SELECT_MSB.value, 0))
        track.add_channel_event(0.0, ChannelMessage(control, Controller.BANK_SELECT_LSB.value, 0))
        program_status = StatusByte.PROGRAM_CHANGE.value | self.config.channel_for_part(part_index)
        track.add_channel_event(0.0, ChannelMessage(program_status, part.sound_preset, 0))

        for measure in part.measures:
            for note in measure.notes:
                event = note.to_note_event(transpose=measure.key_signature_offset)
                track.add_note_event(note.timestamp, event)

        track.add_note_event(self.pad_note_time(part), self.pad_note())

        logger.debug(
            f"Part {part_index}: preset {part.sound_preset}, "
            f"{len(part.measures)} measures, {part.note_count()} notes"
        )
        return track

    def pad_note_time(self, part: Part) -> float:
        """Beat of the silent note that closes a part."""
        last = part.last_measure
        return (
            last.first_beat_timestamp
            + last.time_signature.number_of_beats
            + self.config.trailing_silence_beats
        )

    def pad_note(self) -> NoteEvent:
        """The zero-velocity note that keeps trailing silence in the file."""
        return NoteEvent(
            channel=0,
            pitch=0,
            velocity=0,
            release_velocity=0,
            duration=self.config.pad_note_duration,
        )


def export_sequence(composition: Composition, config: TranslatorConfig | None = None) -> Sequence:
    """
    Convenience function to export a composition to a Sequence.

    Args:
        composition: The composition to export
        config: Optional translator settings

    Returns:
        The populated Sequence
    """
    return CompositionExporter(config).export(composition)


def export_composition(
    composition: Composition,
    path: str | Path,
    config: TranslatorConfig | None = None,
) -> Path:
    """
    Export a composition and write it as a MIDI file.

    '.mid' is appended to the path when missing.

    Returns:
        The path written

    Raises:
        SaveError: if the destination is not writable
    """
    sequence = export_sequence(composition, config)
    output_path = save_sequence(sequence, ensure_midi_suffix(path))
    logger.info(
        SuccessMessages.EXPORTED.format(parts=composition.number_of_parts, path=output_path)
    )
    return output_path
