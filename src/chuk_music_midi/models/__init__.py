"""
Data model for the translator.

This module provides:
- Events: NoteEvent, MetaEvent, ChannelMessage, TempoEvent (tagged union)
- Import output: TimedNote, BarBeatTime, TimeSignatureEvent, TempoChange
- Composition document: Composition, Part, Measure, NoteInMeasure
"""

from chuk_music_midi.models.composition import (
    Composition,
    Measure,
    MeasureTimeSignature,
    NoteInMeasure,
    Part,
)
from chuk_music_midi.models.events import (
    BarBeatTime,
    ChannelMessage,
    Event,
    EventType,
    MetaEvent,
    NoteEvent,
    TempoChange,
    TempoEvent,
    TimedNote,
    TimeSignatureEvent,
)

__all__ = [
    # Events
    "BarBeatTime",
    "ChannelMessage",
    "Event",
    "EventType",
    "MetaEvent",
    "NoteEvent",
    "TempoChange",
    "TempoEvent",
    "TimedNote",
    "TimeSignatureEvent",
    # Composition
    "Composition",
    "Measure",
    "MeasureTimeSignature",
    "NoteInMeasure",
    "Part",
]
