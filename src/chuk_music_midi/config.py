"""
Translator configuration.

Defaults match the historical behaviour; a YAML file can override any of
them:

    ticks_per_beat: 960
    trailing_silence_beats: 4.0
    program_channel_policy: fixed
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from chuk_music_midi.constants import (
    MARKER_TRIGGER,
    PAD_NOTE_DURATION,
    TICKS_PER_BEAT,
    TRAILING_SILENCE_BEATS,
    ProgramChannelPolicy,
)

logger = logging.getLogger(__name__)


class TranslatorConfig(BaseModel):
    """Settings shared by the importer and the exporter."""

    ticks_per_beat: int = Field(TICKS_PER_BEAT, gt=0, description="Resolution of exported files")
    marker_trigger: int = Field(
        MARKER_TRIGGER, ge=0, le=127, description="Channel message data1 value read as a marker"
    )
    trailing_silence_beats: float = Field(
        TRAILING_SILENCE_BEATS, ge=0, description="Silence after the last measure of each part"
    )
    pad_note_duration: float = Field(
        PAD_NOTE_DURATION, ge=0, description="Duration of the trailing silent note"
    )
    program_channel_policy: ProgramChannelPolicy = Field(
        ProgramChannelPolicy.PART_INDEX, description="How program changes pick their channel"
    )
    program_channel: int = Field(
        0, ge=0, le=15, description="Program-change channel under the 'fixed' policy"
    )

    model_config = {"frozen": True, "extra": "forbid"}

    def channel_for_part(self, part_index: int) -> int:
        """
        Channel of the program-change event for a part.

        Under PART_INDEX the part index is the channel, wrapping at 16.
        """
        if self.program_channel_policy == ProgramChannelPolicy.FIXED:
            return self.program_channel
        return part_index % 16

    @classmethod
    def from_yaml(cls, path: Path | None) -> TranslatorConfig:
        """
        Load settings from a YAML mapping.

        A missing path or an empty file yields the defaults.
        """
        if path is None or not path.exists():
            if path is not None:
                logger.debug(f"No config at {path}, using defaults")
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls(**data)
