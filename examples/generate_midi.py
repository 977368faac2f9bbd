#!/usr/bin/env python3
"""
Example: Export a small composition and read it back.

Builds a two-part composition in code, writes it as a MIDI file, then
imports the file and prints what the importer sees.

Usage:
    python examples/generate_midi.py
    # Creates: examples/output/d_minor.mid
"""

from pathlib import Path

from chuk_music_midi import (
    Composition,
    Measure,
    NoteInMeasure,
    Part,
    export_composition,
    import_midi_file,
)
from chuk_music_midi.composition import validate_composition


def main() -> None:
    """Export and re-import an example composition."""
    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    composition = create_d_minor()
    print(f"Composition: {composition.name}")
    print(f"  Chords: {composition.chord_progression_string}")
    print(f"  Validation: {validate_composition(composition)}")

    path = export_composition(composition, output_dir / "d_minor")
    print(f"\nCreated: {path}")

    result = import_midi_file(path)
    print("\nImported:")
    for key, value in result.summary().items():
        print(f"  {key}: {value}")

    print("\nFirst bar:")
    for timed in result.notes:
        if timed.bar_beat.bar == 1:
            print(f"  {timed.bar_beat}  pitch {timed.note.pitch}  vel {timed.note.velocity}")


def create_d_minor() -> Composition:
    """
    Create a i-VI-III-VII progression in D minor, slowing down in bar 4.

    This demonstrates:
    - Absolute note timestamps (measure start + offset)
    - A per-measure tempo (exported as a compressed tempo map)
    - A key offset transposing the last bar up a tone
    """
    # Root notes: D2=38, Bb1=34, F2=41, C2=36
    progression = [("Dm", 38), ("Bb", 34), ("F", 41), ("C", 36)]

    bass_measures = []
    lead_measures = []
    for bar, (chord, root) in enumerate(progression):
        start = bar * 4.0
        tempo = 96.0 if bar == 3 else 110.0
        key_offset = 2 if bar == 3 else 0

        # Quarter note pulse, accent on the downbeat
        bass_notes = [
            NoteInMeasure(
                channel=1,
                pitch=root,
                velocity=100 if beat == 0 else 80,
                duration=0.9,
                timestamp=start + beat,
            )
            for beat in range(4)
        ]
        bass_measures.append(
            Measure(
                tempo=tempo,
                first_beat_timestamp=start,
                key_signature_offset=key_offset,
                notes=bass_notes,
                chord=chord,
            )
        )

        # One sustained note two octaves above the root
        lead_notes = [NoteInMeasure(pitch=root + 24, velocity=90, duration=4.0, timestamp=start)]
        lead_measures.append(
            Measure(
                tempo=tempo,
                first_beat_timestamp=start,
                key_signature_offset=key_offset,
                notes=lead_notes,
                chord=chord,
            )
        )

    return Composition(
        name="D minor loop",
        parts=[
            Part(sound_preset=81, min_note=48, max_note=84, measures=lead_measures),
            Part(sound_preset=33, min_note=28, max_note=60, measures=bass_measures),
        ],
        number_of_measures=len(progression),
    )


if __name__ == "__main__":
    main()
