"""
Sequence engine - the collaborator the translators read from and write to.

    MIDI file ⇄ (smf) ⇄ Sequence [tempo track + tracks] ⇄ EventCursor
"""

from chuk_music_midi.engine.sequence import (
    EventCursor,
    MeterMap,
    Sequence,
    SequenceType,
    Track,
    TrackProperty,
    beats_to_bar_beat_time,
)
from chuk_music_midi.engine.smf import (
    MIDI_SUFFIX,
    LoadError,
    SaveError,
    SequenceError,
    ensure_midi_suffix,
    load_sequence,
    midi_file_to_sequence,
    save_sequence,
    sequence_to_midi_file,
)

__all__ = [
    # Sequence
    "EventCursor",
    "MeterMap",
    "Sequence",
    "SequenceType",
    "Track",
    "TrackProperty",
    "beats_to_bar_beat_time",
    # SMF I/O
    "MIDI_SUFFIX",
    "LoadError",
    "SaveError",
    "SequenceError",
    "ensure_midi_suffix",
    "load_sequence",
    "midi_file_to_sequence",
    "save_sequence",
    "sequence_to_midi_file",
]
