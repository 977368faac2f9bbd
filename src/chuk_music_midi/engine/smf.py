"""
Standard MIDI File I/O for sequences, built on mido.

Loading:
    MidiFile → Sequence
    - meta events of the first track → tempo track, set_tempo as TempoEvents
    - later tracks contribute only tempo and time signature meta events
    - channel events split into one track per MIDI channel, ascending
    - note_on/note_off pairs → NoteEvents with duration and release velocity

Saving:
    Sequence → MidiFile (type 1)
    - track 0 is the tempo track, then one MidiTrack per sequence track
    - beats are converted to ticks with the sequence's time resolution
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import TYPE_CHECKING

import mido
from mido import Message, MetaMessage, MidiFile, MidiTrack
from mido.midifiles.meta import KeySignatureError

from chuk_music_midi.constants import ErrorMessages, StatusByte
from chuk_music_midi.engine.sequence import Sequence, Track
from chuk_music_midi.models.events import (
    ChannelMessage,
    EventType,
    MetaEvent,
    NoteEvent,
    TempoEvent,
)

if TYPE_CHECKING:
    from chuk_music_midi.models.events import Event

logger = logging.getLogger(__name__)

MIDI_SUFFIX = ".mid"

# Message kinds whose channel messages carry a single data byte
_ONE_DATA_BYTE_KINDS = {StatusByte.PROGRAM_CHANGE, StatusByte.CHANNEL_AFTERTOUCH}

# Sort rank of messages sharing a tick when writing
_RANK_SETUP = 0
_RANK_NOTE_OFF = 1
_RANK_NOTE_ON = 2
_RANK_ZERO_LENGTH_OFF = 3

# What mido raises for truncated or undecodable files and meta payloads
_DECODE_ERRORS = (OSError, EOFError, ValueError, KeyError, IndexError, KeySignatureError)

# Meta events taken from every source track; the rest come from the first only
_SHARED_META_TYPES = {"set_tempo", "time_signature"}


class SequenceError(Exception):
    """Base class for sequence I/O failures."""


class LoadError(SequenceError):
    """A MIDI file is missing or cannot be parsed."""


class SaveError(SequenceError):
    """A MIDI file cannot be written."""


def ensure_midi_suffix(path: str | Path) -> Path:
    """Append '.mid' unless the path already ends with it."""
    text = str(path)
    if not text.endswith(MIDI_SUFFIX):
        text = text + MIDI_SUFFIX
    return Path(text)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_sequence(path: str | Path) -> Sequence:
    """
    Load a Standard MIDI File into a Sequence.

    Args:
        path: Path to an existing .mid file

    Returns:
        The loaded Sequence

    Raises:
        LoadError: if the file is missing or corrupt
    """
    path = Path(path)
    if not path.is_file():
        raise LoadError(ErrorMessages.FILE_NOT_FOUND.format(path=path))

    try:
        midi_file = MidiFile(str(path))
    except _DECODE_ERRORS as e:
        raise LoadError(ErrorMessages.LOAD_FAILED.format(path=path, reason=e)) from e

    sequence = midi_file_to_sequence(midi_file)
    logger.debug(f"Loaded {path}: {sequence!r}")
    return sequence


def midi_file_to_sequence(midi_file: MidiFile) -> Sequence:
    """
    Convert a mido MidiFile to a Sequence.

    Channel events become one track per channel (ascending channel order).
    Meta events of later source tracks other than tempo and time signature
    (track names, lyrics) are dropped.
    Unmatched note-offs are dropped; notes still sounding at the end of
    their source track are closed there.
    """
    ticks_per_beat = midi_file.ticks_per_beat
    sequence = Sequence(time_resolution=ticks_per_beat)

    # (absolute tick, arrival order, event) per destination
    tempo_entries: list[tuple[int, int, Event]] = []
    channel_entries: dict[int, list[tuple[int, int, Event]]] = defaultdict(list)
    order = 0

    for track_index, midi_track in enumerate(midi_file.tracks):
        abs_ticks = 0
        # (channel, pitch) → FIFO of (start tick, velocity, arrival order)
        open_notes: dict[tuple[int, int], list[tuple[int, int, int]]] = defaultdict(list)

        for msg in midi_track:
            abs_ticks += msg.time
            order += 1
            timestamp = abs_ticks / ticks_per_beat

            if msg.is_meta:
                if msg.type == "end_of_track":
                    continue
                if track_index > 0 and msg.type not in _SHARED_META_TYPES:
                    logger.debug(
                        f"Track {track_index}: dropping {msg.type} meta event at tick {abs_ticks}"
                    )
                    continue
                if msg.type == "set_tempo":
                    event: Event = TempoEvent(bpm=mido.tempo2bpm(msg.tempo), timestamp=timestamp)
                else:
                    meta_type, payload = _split_meta_bytes(msg.bytes())
                    event = MetaEvent(meta_type=meta_type, payload=payload, timestamp=timestamp)
                tempo_entries.append((abs_ticks, order, event))
                continue

            if msg.type == "note_on" and msg.velocity > 0:
                open_notes[(msg.channel, msg.note)].append((abs_ticks, msg.velocity, order))
                continue

            if msg.type in ("note_on", "note_off"):
                pending = open_notes.get((msg.channel, msg.note))
                if not pending:
                    logger.debug(
                        f"Track {track_index}: note-off without note-on "
                        f"(channel {msg.channel}, pitch {msg.note}) at tick {abs_ticks}"
                    )
                    continue
                start, velocity, note_order = pending.pop(0)
                release = msg.velocity if msg.type == "note_off" else 0
                event = _note(
                    msg.channel, msg.note, velocity, release, start, abs_ticks, ticks_per_beat
                )
                channel_entries[msg.channel].append((start, note_order, event))
                continue

            if hasattr(msg, "channel"):
                data = msg.bytes()
                event = ChannelMessage(
                    status=data[0],
                    data1=data[1] if len(data) > 1 else 0,
                    data2=data[2] if len(data) > 2 else 0,
                    timestamp=timestamp,
                )
                channel_entries[msg.channel].append((abs_ticks, order, event))
                continue

            logger.debug(f"Track {track_index}: skipping {msg.type} at tick {abs_ticks}")

        # Notes still sounding close at the end of their source track
        for (channel, pitch), pending in open_notes.items():
            for start, velocity, note_order in pending:
                event = _note(channel, pitch, velocity, 0, start, abs_ticks, ticks_per_beat)
                channel_entries[channel].append((start, note_order, event))

    _fill_track(sequence.tempo_track, tempo_entries)
    for channel in sorted(channel_entries):
        _fill_track(sequence.new_track(), channel_entries[channel])

    return sequence


def _note(
    channel: int,
    pitch: int,
    velocity: int,
    release_velocity: int,
    start_ticks: int,
    end_ticks: int,
    ticks_per_beat: int,
) -> NoteEvent:
    return NoteEvent(
        channel=channel,
        pitch=pitch,
        velocity=velocity,
        release_velocity=release_velocity,
        duration=(end_ticks - start_ticks) / ticks_per_beat,
        timestamp=start_ticks / ticks_per_beat,
    )


def _fill_track(track: Track, entries: list[tuple[int, int, Event]]) -> None:
    for _, _, event in sorted(entries, key=lambda entry: (entry[0], entry[1])):
        track.add_event(event)


def _split_meta_bytes(raw: list[int]) -> tuple[int, bytes]:
    """Split [0xFF, type, varlen length, data...] into (type, data)."""
    meta_type = raw[1]
    index = 2
    while index < len(raw) and raw[index] & 0x80:
        index += 1
    return meta_type, bytes(raw[index + 1 :])


# ---------------------------------------------------------------------------
# Saving
# ---------------------------------------------------------------------------


def save_sequence(sequence: Sequence, path: str | Path) -> Path:
    """
    Write a Sequence as a type 1 Standard MIDI File.

    Args:
        sequence: The sequence to write
        path: Destination path (used as given)

    Returns:
        The path written

    Raises:
        SaveError: if the destination is not writable
    """
    path = Path(path)
    midi_file = sequence_to_midi_file(sequence)
    try:
        midi_file.save(str(path))
    except OSError as e:
        raise SaveError(ErrorMessages.SAVE_FAILED.format(path=path, reason=e)) from e
    logger.debug(f"Saved {sequence!r} to {path}")
    return path


def sequence_to_midi_file(sequence: Sequence) -> MidiFile:
    """
    Convert a Sequence to a mido MidiFile.

    This function is deterministic: same sequence → same MIDI file.
    """
    ticks_per_beat = sequence.time_resolution
    mid = MidiFile(type=1, ticks_per_beat=ticks_per_beat)
    mid.tracks.append(_track_to_midi(sequence.tempo_track, ticks_per_beat))
    for track in sequence.tracks:
        mid.tracks.append(_track_to_midi(track, ticks_per_beat))
    return mid


def _track_to_midi(track: Track, ticks_per_beat: int) -> MidiTrack:
    # (absolute tick, rank, arrival order, message)
    messages: list[tuple[int, int, int, Message | MetaMessage]] = []

    def ticks(beats: float) -> int:
        return int(round(beats * ticks_per_beat))

    for order, event in enumerate(track.events):
        start = ticks(event.timestamp)

        if event.event_type == EventType.NOTE:
            end = ticks(event.timestamp + event.duration)
            note_on = Message(
                "note_on", channel=event.channel, note=event.pitch, velocity=event.velocity
            )
            note_off = Message(
                "note_off",
                channel=event.channel,
                note=event.pitch,
                velocity=event.release_velocity,
            )
            off_rank = _RANK_ZERO_LENGTH_OFF if end == start else _RANK_NOTE_OFF
            messages.append((start, _RANK_NOTE_ON, order, note_on))
            messages.append((end, off_rank, order, note_off))
        elif event.event_type == EventType.TEMPO:
            tempo = MetaMessage("set_tempo", tempo=mido.bpm2tempo(event.bpm))
            messages.append((start, _RANK_SETUP, order, tempo))
        elif event.event_type == EventType.CHANNEL:
            data = [event.status, event.data1, event.data2]
            if event.kind in _ONE_DATA_BYTE_KINDS:
                data = data[:2]
            messages.append((start, _RANK_SETUP, order, Message.from_bytes(data)))
        elif event.event_type == EventType.META:
            meta = _build_meta_message(event)
            if meta is not None:
                messages.append((start, _RANK_SETUP, order, meta))

    # Sort by absolute time, then rank (note_off before note_on at the same tick)
    messages.sort(key=lambda item: (item[0], item[1], item[2]))

    # Convert to delta times
    midi_track = MidiTrack()
    current_time = 0
    for abs_time, _, _, msg in messages:
        msg.time = abs_time - current_time
        midi_track.append(msg)
        current_time = abs_time

    midi_track.append(MetaMessage("end_of_track", time=0))
    return midi_track


def _build_meta_message(event: MetaEvent) -> MetaMessage | None:
    raw = [0xFF, event.meta_type, *_encode_varlen(event.data_length), *event.payload]
    try:
        return MetaMessage.from_bytes(raw)
    except (ValueError, KeyError, IndexError, KeySignatureError):
        logger.warning(
            f"Dropping undecodable meta event {event.meta_type:#04x} at beat {event.timestamp}"
        )
        return None


def _encode_varlen(value: int) -> list[int]:
    result = [value & 0x7F]
    value >>= 7
    while value:
        result.insert(0, (value & 0x7F) | 0x80)
        value >>= 7
    return result
