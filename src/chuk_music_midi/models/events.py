"""
Event model - the records stored in a sequence's event streams.

Events are a tagged union decoded once when a sequence is built:
- NoteEvent: a note with its duration already paired
- MetaEvent: raw meta type byte + payload
- ChannelMessage: status byte + two data bytes
- TempoEvent: an extended tempo change in BPM

Plus the structures the importer derives from them (TimedNote,
TimeSignatureEvent, TempoChange). All times are in beats (quarter notes).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Union


class EventType(str, Enum):
    """Tag of an event in a track's stream."""

    NOTE = "note"
    META = "meta"
    CHANNEL = "channel"
    TEMPO = "tempo"


def _check_byte(name: str, value: int, upper: int = 127) -> None:
    if not 0 <= value <= upper:
        raise ValueError(f"{name} must be 0-{upper}, got {value}")


def _check_timestamp(value: float) -> None:
    if value < 0:
        raise ValueError(f"Timestamp must be >= 0, got {value}")


@dataclass(frozen=True)
class NoteEvent:
    """
    A single note message.

    Duration and timestamp are in beats. The timestamp is the position in
    the sequence; NoteEvents created for export carry the timestamp at which
    they are added.
    """

    channel: int  # 0-15
    pitch: int  # MIDI note number (0-127)
    velocity: int  # 0-127
    release_velocity: int = 0  # 0-127
    duration: float = 1.0  # Beats
    timestamp: float = 0.0  # Beats from sequence start

    event_type = EventType.NOTE

    def __post_init__(self) -> None:
        """Validate MIDI ranges."""
        _check_byte("Pitch", self.pitch)
        _check_byte("Velocity", self.velocity)
        _check_byte("Release velocity", self.release_velocity)
        _check_byte("Channel", self.channel, 15)
        if self.duration < 0:
            raise ValueError(f"Duration must be >= 0, got {self.duration}")
        _check_timestamp(self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


@dataclass(frozen=True)
class MetaEvent:
    """A meta event as stored in the stream: type byte plus raw payload."""

    meta_type: int
    payload: bytes = b""
    timestamp: float = 0.0

    event_type = EventType.META

    def __post_init__(self) -> None:
        _check_byte("Meta type", self.meta_type)
        _check_timestamp(self.timestamp)

    @property
    def data_length(self) -> int:
        """Length of the payload in bytes."""
        return len(self.payload)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "meta_type": self.meta_type,
            "payload": list(self.payload),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ChannelMessage:
    """
    A channel voice message other than a note.

    The status byte carries both the message kind (high nibble) and the
    channel (low nibble).
    """

    status: int
    data1: int = 0
    data2: int = 0
    timestamp: float = 0.0

    event_type = EventType.CHANNEL

    def __post_init__(self) -> None:
        if not 0x80 <= self.status <= 0xEF:
            raise ValueError(f"Status must be 0x80-0xEF, got {self.status:#04x}")
        _check_byte("Data1", self.data1)
        _check_byte("Data2", self.data2)
        _check_timestamp(self.timestamp)

    @property
    def kind(self) -> int:
        """Message kind with the channel bits cleared (e.g. 0xB0)."""
        return self.status & 0xF0

    @property
    def channel(self) -> int:
        """Channel encoded in the status byte."""
        return self.status & 0x0F

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


@dataclass(frozen=True)
class TempoEvent:
    """An extended tempo event, tempo in BPM."""

    bpm: float
    timestamp: float = 0.0

    event_type = EventType.TEMPO

    def __post_init__(self) -> None:
        if self.bpm <= 0:
            raise ValueError(f"Tempo must be > 0, got {self.bpm}")
        _check_timestamp(self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


Event = Union[NoteEvent, MetaEvent, ChannelMessage, TempoEvent]


@dataclass(frozen=True)
class BarBeatTime:
    """
    A beat timestamp decomposed into bar, beat and sub-beat.

    Bars and beats are 1-based. ``subbeat`` counts in units of
    ``1 / subbeat_divisor`` of a beat.
    """

    bar: int
    beat: int
    subbeat: int
    subbeat_divisor: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    def __str__(self) -> str:
        return f"{self.bar}.{self.beat}.{self.subbeat}"


@dataclass(frozen=True)
class TimedNote:
    """A note read from a track together with its bar/beat position."""

    note: NoteEvent
    bar_beat: BarBeatTime
    timestamp: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "note": self.note.to_dict(),
            "bar_beat": self.bar_beat.to_dict(),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class TimeSignatureEvent:
    """A time signature read from the tempo track."""

    numerator: int
    denominator_log: int  # Power of two: 2 → quarter note
    timestamp: float

    @property
    def denominator(self) -> int:
        """Denominator as written in a score (4, 8, ...)."""
        return 2**self.denominator_log

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


@dataclass(frozen=True)
class TempoChange:
    """One entry of the tempo-track summary."""

    timestamp: float
    bpm: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)
