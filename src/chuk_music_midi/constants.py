"""
Constants and enums for the translator.

No magic numbers - status bytes, meta types and defaults live here.
"""

from enum import Enum, IntEnum

# Standard ticks per beat (quarter note) used for new sequences
TICKS_PER_BEAT = 480

# Channel control value reserved as a user marker trigger
MARKER_TRIGGER = 20

# Trailing silence appended after the last measure of every exported part
TRAILING_SILENCE_BEATS = 3.0
PAD_NOTE_DURATION = 2.0


class StatusByte(IntEnum):
    """Channel voice status bytes (channel 0)."""

    NOTE_OFF = 0x80
    NOTE_ON = 0x90
    POLY_AFTERTOUCH = 0xA0
    CONTROL_CHANGE = 0xB0
    PROGRAM_CHANGE = 0xC0
    CHANNEL_AFTERTOUCH = 0xD0
    PITCH_BEND = 0xE0


class MetaType(IntEnum):
    """Meta event type bytes the engine knows about."""

    SEQUENCE_NUMBER = 0x00
    TEXT = 0x01
    COPYRIGHT = 0x02
    TRACK_NAME = 0x03
    LYRICS = 0x05
    MARKER = 0x06
    END_OF_TRACK = 0x2F
    SET_TEMPO = 0x51
    SMPTE_OFFSET = 0x54
    TIME_SIGNATURE = 0x58
    KEY_SIGNATURE = 0x59


class Controller(IntEnum):
    """Controller numbers used by the exporter."""

    BANK_SELECT_MSB = 0
    BANK_SELECT_LSB = 32


class ProgramChannelPolicy(str, Enum):
    """
    How the program-change status byte picks its channel.

    PART_INDEX reproduces the historical ``0xC0 + part_index`` status byte,
    so part N's preset lands on channel N. FIXED always uses the configured
    program channel.
    """

    PART_INDEX = "part_index"
    FIXED = "fixed"


class ErrorMessages:
    """Standardized error messages."""

    FILE_NOT_FOUND = "MIDI file not found: {path}"
    LOAD_FAILED = "Could not load MIDI file {path}: {reason}"
    SAVE_FAILED = "Could not save MIDI file {path}: {reason}"
    DOCUMENT_NOT_FOUND = "Composition document not found: {path}"


class SuccessMessages:
    """Standardized success messages."""

    IMPORTED = "Imported {notes} notes, {markers} markers from {path}."
    EXPORTED = "Exported {parts} parts to {path}."
