"""
Translation pipeline - between sequences and compositions.

    MIDI file → Sequence → MidiImporter → ImportResult
    Composition → CompositionExporter → Sequence → MIDI file
"""

from chuk_music_midi.translator.exporter import (
    CompositionExporter,
    compress_tempo_map,
    export_composition,
    export_sequence,
)
from chuk_music_midi.translator.importer import (
    ImportResult,
    MidiImporter,
    import_midi_file,
    import_sequence,
)

__all__ = [
    # Import
    "ImportResult",
    "MidiImporter",
    "import_midi_file",
    "import_sequence",
    # Export
    "CompositionExporter",
    "compress_tempo_map",
    "export_composition",
    "export_sequence",
]
