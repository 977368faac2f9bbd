"""
Sequence engine - in-memory sequences, tracks and event cursors.

A Sequence owns one tempo track plus any number of note tracks. Each track
keeps its events time-ordered; events with equal timestamps keep the order
in which they were added. Reading happens through an EventCursor scoped to
a single scan.

Timestamps are beats (quarter notes). The engine also provides the bar/beat
decomposition of a timestamp, driven by the tempo track's time signatures.
"""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from chuk_music_midi.constants import TICKS_PER_BEAT, MetaType
from chuk_music_midi.models.events import (
    BarBeatTime,
    ChannelMessage,
    Event,
    EventType,
    MetaEvent,
    NoteEvent,
    TempoEvent,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

# Tolerance for float beat arithmetic
_EPSILON = 1e-9


class SequenceType(str, Enum):
    """Timing mode of a sequence."""

    BEATS = "beats"


class TrackProperty(str, Enum):
    """Properties a track can expose."""

    TIME_RESOLUTION = "time_resolution"


class Track:
    """
    An ordered stream of events.

    Events are inserted at their timestamp; the stream stays sorted with
    stable ordering for equal timestamps.
    """

    def __init__(self, properties: dict[TrackProperty, int] | None = None):
        self._events: list[Event] = []
        self._properties: dict[TrackProperty, int] = dict(properties or {})

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"Track({len(self._events)} events)"

    @property
    def events(self) -> tuple[Event, ...]:
        """Snapshot of the events in time order."""
        return tuple(self._events)

    def events_of_type(self, event_type: EventType) -> list[Event]:
        """All events carrying the given tag, in time order."""
        return [e for e in self._events if e.event_type == event_type]

    def get_property(self, prop: TrackProperty) -> int:
        """
        Read a track property.

        Raises:
            KeyError: if the track does not carry the property
        """
        if prop not in self._properties:
            raise KeyError(f"Track has no property {prop.value!r}")
        return self._properties[prop]

    def add_event(self, event: Event) -> None:
        """Insert an already-timestamped event."""
        bisect.insort_right(self._events, event, key=lambda e: e.timestamp)

    def add_tempo_event(self, timestamp: float, bpm: float) -> TempoEvent:
        """Add an extended tempo event."""
        event = TempoEvent(bpm=bpm, timestamp=timestamp)
        self.add_event(event)
        return event

    def add_channel_event(self, timestamp: float, message: ChannelMessage) -> ChannelMessage:
        """Add a channel message at ``timestamp``."""
        event = replace(message, timestamp=timestamp)
        self.add_event(event)
        return event

    def add_note_event(self, timestamp: float, note: NoteEvent) -> NoteEvent:
        """Add a note at ``timestamp``."""
        event = replace(note, timestamp=timestamp)
        self.add_event(event)
        return event

    def add_meta_event(self, timestamp: float, meta_type: int, payload: bytes) -> MetaEvent:
        """Add a meta event with a raw payload."""
        event = MetaEvent(meta_type=int(meta_type), payload=bytes(payload), timestamp=timestamp)
        self.add_event(event)
        return event

    def new_cursor(self) -> EventCursor:
        """Create a cursor positioned on the first event."""
        return EventCursor(self._events)


class EventCursor:
    """
    Forward-only cursor over a track's events.

    The cursor reads from a snapshot taken at creation, so it never observes
    later insertions. Use it for one scan and drop it.
    """

    def __init__(self, events: list[Event]):
        self._events = tuple(events)
        self._index = 0

    def has_current(self) -> bool:
        """True while the cursor points at an event."""
        return self._index < len(self._events)

    def current_event(self) -> tuple[float, EventType, Event]:
        """
        Return (timestamp, event type, event) for the current position.

        Raises:
            IndexError: if the cursor is exhausted
        """
        if not self.has_current():
            raise IndexError("Event cursor has no current event")
        event = self._events[self._index]
        return event.timestamp, event.event_type, event

    def advance(self) -> None:
        """Move to the next event."""
        if self._index < len(self._events):
            self._index += 1

    def __iter__(self) -> Iterator[tuple[float, EventType, Event]]:
        while self.has_current():
            yield self.current_event()
            self.advance()


class Sequence:
    """
    A beats-based sequence: one tempo track and an ordered list of tracks.

    The time resolution (ticks per quarter note) is exposed as the tempo
    track's TIME_RESOLUTION property.
    """

    def __init__(self, time_resolution: int = TICKS_PER_BEAT):
        if time_resolution <= 0:
            raise ValueError(f"Time resolution must be > 0, got {time_resolution}")
        self.sequence_type = SequenceType.BEATS
        self.tempo_track = Track({TrackProperty.TIME_RESOLUTION: time_resolution})
        self.tracks: list[Track] = []

    def __repr__(self) -> str:
        return f"Sequence({self.track_count} tracks, resolution={self.time_resolution})"

    @property
    def time_resolution(self) -> int:
        """Ticks per quarter note."""
        return self.tempo_track.get_property(TrackProperty.TIME_RESOLUTION)

    @property
    def track_count(self) -> int:
        """Number of tracks, not counting the tempo track."""
        return len(self.tracks)

    def get_track(self, index: int) -> Track:
        """Get a track by index (0..track_count)."""
        if not 0 <= index < len(self.tracks):
            raise IndexError(f"Track index {index} out of range (0-{len(self.tracks) - 1})")
        return self.tracks[index]

    def new_track(self) -> Track:
        """Append and return a new empty track."""
        track = Track()
        self.tracks.append(track)
        return track

    def time_signatures(self) -> list[tuple[float, int, int]]:
        """
        (timestamp, numerator, denominator_log) of the tempo track's time signatures.

        Entries with a short payload or a zero numerator are skipped.
        """
        result = []
        for event in self.tempo_track.events_of_type(EventType.META):
            if event.meta_type != MetaType.TIME_SIGNATURE or event.data_length < 2:
                continue
            numerator, denominator_log = event.payload[0], event.payload[1]
            if numerator == 0:
                continue
            result.append((event.timestamp, numerator, denominator_log))
        return result


@dataclass(frozen=True)
class _MeterSegment:
    start: float  # Beat at which this meter takes effect
    first_bar: int  # 1-based bar number at ``start``
    numerator: int
    beat_length: float  # Quarter notes per beat


class MeterMap:
    """
    Bar layout of a sequence, built once from its time signatures.

    The meter is 4/4 until the first time signature. A signature that starts
    mid-bar opens a new bar. Lookups bisect the segment list, so decomposing
    every note of a sequence costs one pass over the tempo track.
    """

    def __init__(self, signatures: list[tuple[float, int, int]]):
        segments = [_MeterSegment(start=0.0, first_bar=1, numerator=4, beat_length=1.0)]

        for sig_time, numerator, denominator_log in signatures:
            last = segments[-1]
            beat_length = 4.0 / 2**denominator_log
            if sig_time > last.start:
                bar_length = last.numerator * last.beat_length
                bars = math.ceil((sig_time - last.start) / bar_length - _EPSILON)
                segments.append(
                    _MeterSegment(sig_time, last.first_bar + bars, numerator, beat_length)
                )
            else:
                # Same start: the later signature wins
                segments[-1] = _MeterSegment(last.start, last.first_bar, numerator, beat_length)

        self._segments = segments
        self._starts = [segment.start for segment in segments]

    @classmethod
    def from_sequence(cls, sequence: Sequence) -> MeterMap:
        """Build the map from the sequence's tempo track."""
        return cls(sequence.time_signatures())

    def __len__(self) -> int:
        return len(self._segments)

    def position(self, timestamp: float, time_resolution: int) -> BarBeatTime:
        """
        Decompose a beat timestamp into bar, beat and sub-beat.

        Args:
            timestamp: Position in quarter-note beats
            time_resolution: Sub-beat divisor (ticks per beat)

        Returns:
            BarBeatTime with 1-based bar and beat
        """
        index = max(bisect.bisect_right(self._starts, timestamp + _EPSILON) - 1, 0)
        segment = self._segments[index]
        bar_length = segment.numerator * segment.beat_length

        offset = max(timestamp - segment.start, 0.0)
        whole_bars = int((offset + _EPSILON) // bar_length)
        within_bar = max(offset - whole_bars * bar_length, 0.0)
        beat_index = min(int((within_bar + _EPSILON) // segment.beat_length), segment.numerator - 1)
        fraction = max(within_bar - beat_index * segment.beat_length, 0.0)

        subbeat = 0
        if time_resolution > 0:
            subbeat = min(
                int(round(fraction / segment.beat_length * time_resolution)), time_resolution - 1
            )

        return BarBeatTime(
            bar=segment.first_bar + whole_bars,
            beat=beat_index + 1,
            subbeat=subbeat,
            subbeat_divisor=time_resolution,
        )


def beats_to_bar_beat_time(
    sequence: Sequence,
    timestamp: float,
    time_resolution: int,
) -> BarBeatTime:
    """
    Decompose a single beat timestamp using the sequence's time signatures.

    Builds a MeterMap on every call; build one with MeterMap.from_sequence
    when decomposing many timestamps.
    """
    return MeterMap.from_sequence(sequence).position(timestamp, time_resolution)
