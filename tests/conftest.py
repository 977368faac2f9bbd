"""
Pytest configuration and shared fixtures.
"""

import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

from chuk_music_midi.models import (
    Composition,
    Measure,
    MeasureTimeSignature,
    NoteInMeasure,
    Part,
)


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_midi_path(temp_dir: Path) -> Path:
    """Path for a temporary MIDI file."""
    return temp_dir / "test.mid"


def build_measure(
    start: float,
    tempo: float = 120.0,
    key_offset: int = 0,
    beats: int = 4,
    notes: list[tuple[int, int, float, float]] | None = None,
    channel: int = 0,
    chord: str | None = None,
) -> Measure:
    """
    Build a measure from (pitch, velocity, duration, offset-in-measure) tuples.

    Note timestamps are stored absolute: start + offset.
    """
    return Measure(
        tempo=tempo,
        first_beat_timestamp=start,
        key_signature_offset=key_offset,
        time_signature=MeasureTimeSignature(number_of_beats=beats, beat_length=4),
        notes=[
            NoteInMeasure(
                channel=channel,
                pitch=pitch,
                velocity=velocity,
                duration=duration,
                timestamp=start + offset,
            )
            for pitch, velocity, duration, offset in (notes or [])
        ],
        chord=chord,
    )


@pytest.fixture
def make_measure() -> Callable[..., Measure]:
    """Factory for measures (see build_measure)."""
    return build_measure


@pytest.fixture
def simple_composition() -> Composition:
    """
    Two parts, four 4/4 measures each.

    Part 0 (preset 0, channel 0) carries a key offset of 2 in measure 2.
    Part 1 (preset 33, channel 1) plays half notes.
    """
    melody = Part(
        sound_preset=0,
        min_note=48,
        max_note=84,
        measures=[
            build_measure(0.0, notes=[(60, 100, 1.0, 0.0), (64, 90, 1.0, 1.0)], chord="C"),
            build_measure(4.0, notes=[(67, 80, 2.0, 0.0)], chord="G"),
            build_measure(8.0, key_offset=2, notes=[(60, 70, 0.5, 0.0)], chord="D"),
            build_measure(12.0, notes=[(72, 110, 4.0, 0.0)], chord="C"),
        ],
    )
    bass = Part(
        sound_preset=33,
        min_note=28,
        max_note=60,
        measures=[
            build_measure(start, channel=1, notes=[(36, 100, 2.0, 0.0), (43, 95, 2.0, 2.0)])
            for start in (0.0, 4.0, 8.0, 12.0)
        ],
    )
    return Composition(name="Simple", parts=[melody, bass], number_of_measures=4)
