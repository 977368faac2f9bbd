"""
CHUK Music MIDI - translation between MIDI event streams and compositions.

Import: MIDI file → Sequence → notes with bar/beat positions, tempo changes,
time signatures and markers.

Export: Composition (parts → measures → notes) → Sequence → MIDI file,
with run-length compressed tempo, sound presets and trailing silence.
"""

from chuk_music_midi.config import TranslatorConfig
from chuk_music_midi.engine import LoadError, SaveError, Sequence, load_sequence, save_sequence
from chuk_music_midi.models import Composition, Measure, MeasureTimeSignature, NoteInMeasure, Part
from chuk_music_midi.translator import (
    CompositionExporter,
    ImportResult,
    MidiImporter,
    export_composition,
    import_midi_file,
)

__version__ = "0.1.0"

__all__ = [
    "Composition",
    "CompositionExporter",
    "ImportResult",
    "LoadError",
    "Measure",
    "MeasureTimeSignature",
    "MidiImporter",
    "NoteInMeasure",
    "Part",
    "SaveError",
    "Sequence",
    "TranslatorConfig",
    "export_composition",
    "import_midi_file",
    "load_sequence",
    "save_sequence",
]
