"""
Tests for the command line entry point.
"""

from pathlib import Path

import yaml

from chuk_music_midi.cli import build_parser, main
from chuk_music_midi.models import Composition


def write_document(path: Path, composition: Composition) -> Path:
    path.write_text(yaml.safe_dump(composition.to_yaml_dict(), sort_keys=False))
    return path


class TestParser:
    """Test argument parsing."""

    def test_import_arguments(self) -> None:
        """The import command takes an input and an optional output."""
        args = build_parser().parse_args(["import", "song.mid", "-o", "out.yaml"])
        assert args.command == "import"
        assert args.input == Path("song.mid")
        assert args.output == Path("out.yaml")
        assert not args.debug

    def test_export_arguments(self) -> None:
        """The export command takes a document and an output path."""
        args = build_parser().parse_args(["--debug", "export", "doc.yaml", "song"])
        assert args.command == "export"
        assert args.document == Path("doc.yaml")
        assert args.output == Path("song")
        assert args.debug


class TestMain:
    """Test running commands end to end."""

    def test_export_then_import(self, simple_composition: Composition, temp_dir: Path) -> None:
        """Export a document, import the file, read the YAML result."""
        document = write_document(temp_dir / "simple.yaml", simple_composition)

        assert main(["export", str(document), str(temp_dir / "simple")]) == 0
        midi_path = temp_dir / "simple.mid"
        assert midi_path.exists()

        output = temp_dir / "imported.yaml"
        assert main(["import", str(midi_path), "-o", str(output)]) == 0

        data = yaml.safe_load(output.read_text())
        assert data["time_resolution"] == 480
        assert data["markers"] == []
        assert len(data["notes"]) == 13
        assert data["tempo_track"][0]["timestamp"] == 0.0

    def test_import_to_stdout(
        self, simple_composition: Composition, temp_dir: Path, capsys
    ) -> None:
        """Without -o the result goes to stdout."""
        document = write_document(temp_dir / "simple.yaml", simple_composition)
        main(["export", str(document), str(temp_dir / "simple.mid")])

        assert main(["import", str(temp_dir / "simple.mid")]) == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["time_resolution"] == 480

    def test_import_missing_file(self, temp_dir: Path) -> None:
        """A missing MIDI file fails with exit code 1."""
        assert main(["import", str(temp_dir / "missing.mid")]) == 1

    def test_import_undecodable_file(self, temp_dir: Path) -> None:
        """A file mido cannot decode fails with exit code 1, not a traceback."""
        track = bytes([0x00, 0xFF, 0x59, 0x02, 0x14, 0x00, 0x00, 0xFF, 0x2F, 0x00])
        header = b"MThd" + (6).to_bytes(4, "big") + bytes([0, 0, 0, 1, 0x01, 0xE0])
        path = temp_dir / "bad.mid"
        path.write_bytes(header + b"MTrk" + len(track).to_bytes(4, "big") + track)

        assert main(["import", str(path)]) == 1

    def test_export_missing_document(self, temp_dir: Path) -> None:
        """A missing document fails with exit code 1."""
        assert main(["export", str(temp_dir / "absent.yaml"), str(temp_dir / "out")]) == 1
        assert not (temp_dir / "out.mid").exists()

    def test_export_invalid_composition(self, temp_dir: Path) -> None:
        """Validation errors stop the export."""
        document = temp_dir / "backwards.yaml"
        document.write_text(
            yaml.safe_dump(
                {
                    "name": "Backwards",
                    "parts": [
                        {
                            "measures": [
                                {"tempo": 120, "first_beat_timestamp": 4},
                                {"tempo": 120, "first_beat_timestamp": 0},
                            ]
                        }
                    ],
                }
            )
        )
        assert main(["export", str(document), str(temp_dir / "out")]) == 1
        assert not (temp_dir / "out.mid").exists()

    def test_export_malformed_document(self, temp_dir: Path) -> None:
        """Documents failing model validation exit with 1."""
        document = temp_dir / "bad.yaml"
        document.write_text(yaml.safe_dump({"parts": [{"measures": []}]}))
        assert main(["export", str(document), str(temp_dir / "out")]) == 1

    def test_config_file(self, simple_composition: Composition, temp_dir: Path) -> None:
        """--config changes the written resolution."""
        config = temp_dir / "translator.yaml"
        config.write_text("ticks_per_beat: 960\n")
        document = write_document(temp_dir / "simple.yaml", simple_composition)

        argv = ["--config", str(config), "export", str(document), str(temp_dir / "hi")]
        assert main(argv) == 0

        output = temp_dir / "hi.yaml"
        assert main(["import", str(temp_dir / "hi.mid"), "-o", str(output)]) == 0
        assert yaml.safe_load(output.read_text())["time_resolution"] == 960
