"""
Tests for the event model.

Events are validated on construction and carry their own type tag.
"""

import pytest

from chuk_music_midi.models.events import (
    BarBeatTime,
    ChannelMessage,
    EventType,
    MetaEvent,
    NoteEvent,
    TempoEvent,
    TimedNote,
    TimeSignatureEvent,
)


class TestNoteEvent:
    """Test NoteEvent dataclass."""

    def test_create_valid_note(self) -> None:
        """Can create a valid note."""
        note = NoteEvent(channel=0, pitch=60, velocity=100, release_velocity=64, duration=1.5)
        assert note.pitch == 60
        assert note.velocity == 100
        assert note.release_velocity == 64
        assert note.duration == 1.5
        assert note.timestamp == 0.0
        assert note.event_type == EventType.NOTE

    def test_pitch_range(self) -> None:
        """Pitch must be 0-127."""
        with pytest.raises(ValueError, match="Pitch must be 0-127"):
            NoteEvent(channel=0, pitch=128, velocity=100)

        with pytest.raises(ValueError, match="Pitch must be 0-127"):
            NoteEvent(channel=0, pitch=-1, velocity=100)

    def test_velocity_range(self) -> None:
        """Velocity must be 0-127."""
        with pytest.raises(ValueError, match="Velocity must be 0-127"):
            NoteEvent(channel=0, pitch=60, velocity=200)

    def test_channel_range(self) -> None:
        """Channel must be 0-15."""
        with pytest.raises(ValueError, match="Channel must be 0-15"):
            NoteEvent(channel=16, pitch=60, velocity=100)

    def test_negative_duration(self) -> None:
        """Duration must be >= 0."""
        with pytest.raises(ValueError, match="Duration must be >= 0"):
            NoteEvent(channel=0, pitch=60, velocity=100, duration=-0.5)

    def test_negative_timestamp(self) -> None:
        """Timestamp must be >= 0."""
        with pytest.raises(ValueError, match="Timestamp must be >= 0"):
            NoteEvent(channel=0, pitch=60, velocity=100, timestamp=-1.0)

    def test_zero_velocity_is_valid(self) -> None:
        """The trailing silent note has velocity 0."""
        note = NoteEvent(channel=0, pitch=0, velocity=0, duration=2.0)
        assert note.velocity == 0

    def test_to_dict(self) -> None:
        """Note serializes to dictionary."""
        d = NoteEvent(channel=2, pitch=48, velocity=90, duration=0.5, timestamp=4.0).to_dict()
        assert d == {
            "channel": 2,
            "pitch": 48,
            "velocity": 90,
            "release_velocity": 0,
            "duration": 0.5,
            "timestamp": 4.0,
        }


class TestMetaEvent:
    """Test MetaEvent dataclass."""

    def test_data_length(self) -> None:
        """data_length is the payload size."""
        event = MetaEvent(meta_type=0x58, payload=bytes([4, 2, 24, 8]))
        assert event.data_length == 4
        assert event.event_type == EventType.META

    def test_empty_payload(self) -> None:
        """Meta events may carry no payload."""
        assert MetaEvent(meta_type=0x2F).data_length == 0

    def test_to_dict_lists_payload(self) -> None:
        """Payload is serialized as a list of ints."""
        d = MetaEvent(meta_type=0x59, payload=b"\x00\x01", timestamp=2.0).to_dict()
        assert d == {"meta_type": 0x59, "payload": [0, 1], "timestamp": 2.0}


class TestChannelMessage:
    """Test ChannelMessage dataclass."""

    def test_kind_and_channel(self) -> None:
        """Status byte splits into kind and channel."""
        message = ChannelMessage(status=0xC3, data1=40)
        assert message.kind == 0xC0
        assert message.channel == 3
        assert message.event_type == EventType.CHANNEL

    def test_status_range(self) -> None:
        """Status must be a channel voice status byte."""
        with pytest.raises(ValueError, match="Status must be 0x80-0xEF"):
            ChannelMessage(status=0xF0)

        with pytest.raises(ValueError, match="Status must be 0x80-0xEF"):
            ChannelMessage(status=0x40)

    def test_data_range(self) -> None:
        """Data bytes must be 0-127."""
        with pytest.raises(ValueError, match="Data1 must be 0-127"):
            ChannelMessage(status=0xB0, data1=128)

        with pytest.raises(ValueError, match="Data2 must be 0-127"):
            ChannelMessage(status=0xB0, data1=0, data2=128)


class TestTempoEvent:
    """Test TempoEvent dataclass."""

    def test_positive_tempo(self) -> None:
        """Tempo must be positive."""
        assert TempoEvent(bpm=90.0, timestamp=8.0).bpm == 90.0

        with pytest.raises(ValueError, match="Tempo must be > 0"):
            TempoEvent(bpm=0)


class TestDerivedStructures:
    """Test structures produced by the importer."""

    def test_time_signature_denominator(self) -> None:
        """Denominator is two to the power of denominator_log."""
        assert TimeSignatureEvent(numerator=6, denominator_log=3, timestamp=0.0).denominator == 8
        assert TimeSignatureEvent(numerator=3, denominator_log=2, timestamp=0.0).denominator == 4

    def test_bar_beat_str(self) -> None:
        """BarBeatTime prints as bar.beat.subbeat."""
        assert str(BarBeatTime(bar=2, beat=3, subbeat=240, subbeat_divisor=480)) == "2.3.240"

    def test_timed_note_to_dict(self) -> None:
        """TimedNote nests the note and position."""
        note = NoteEvent(channel=0, pitch=60, velocity=100, timestamp=4.0)
        timed = TimedNote(note=note, bar_beat=BarBeatTime(2, 1, 0, 480), timestamp=4.0)
        d = timed.to_dict()
        assert d["note"]["pitch"] == 60
        assert d["bar_beat"] == {"bar": 2, "beat": 1, "subbeat": 0, "subbeat_divisor": 480}
        assert d["timestamp"] == 4.0
