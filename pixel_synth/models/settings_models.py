"""Parameter models for pipeline configuration.

This module defines the Pydantic models that configure a generation run:
the closed scale and root-note enumerations, the ``Settings`` record every
pipeline stage reads, and the ``ImageAnalysis`` record an advisory
collaborator may use to pre-populate settings.
"""

import math
from enum import Enum

from pydantic import BaseModel, Field, ValidationError, model_validator

from pixel_synth.exceptions import InvalidSettingsError

# Largest value the 24-bit tempo meta-event can carry.
MAX_TEMPO = 0xFFFFFF
MICROSECONDS_PER_MINUTE = 60_000_000


def tempo_for_bpm(bpm: float) -> int:
    """Microseconds per quarter note for ``bpm``, rounding exact halves up."""
    return math.floor(MICROSECONDS_PER_MINUTE / bpm + 0.5)


class ScaleType(str, Enum):
    """Scale used to quantize pitches, each with a fixed interval set."""

    CHROMATIC = "chromatic"
    MAJOR = "major"
    MINOR = "minor"
    PENTATONIC_MAJOR = "pentatonic_major"
    PENTATONIC_MINOR = "pentatonic_minor"
    BLUES = "blues"
    DIMINISHED = "diminished"

    @property
    def intervals(self) -> frozenset[int]:
        """Pitch classes of the scale relative to its root."""
        return _SCALE_INTERVALS[self]

    @property
    def label(self) -> str:
        """Human-readable name, e.g. "Pentatonic Major"."""
        return self.value.replace("_", " ").title()


_SCALE_INTERVALS: dict[ScaleType, frozenset[int]] = {
    ScaleType.CHROMATIC: frozenset(range(12)),
    ScaleType.MAJOR: frozenset({0, 2, 4, 5, 7, 9, 11}),
    ScaleType.MINOR: frozenset({0, 2, 3, 5, 7, 8, 10}),
    ScaleType.PENTATONIC_MAJOR: frozenset({0, 2, 4, 7, 9}),
    ScaleType.PENTATONIC_MINOR: frozenset({0, 3, 5, 7, 10}),
    ScaleType.BLUES: frozenset({0, 3, 5, 6, 7, 10}),
    # whole-half octatonic
    ScaleType.DIMINISHED: frozenset({0, 2, 3, 5, 6, 8, 9, 11}),
}


class RootNote(str, Enum):
    """The twelve pitch classes, in semitone order starting at C."""

    C = "C"
    C_SHARP = "C#"
    D = "D"
    D_SHARP = "D#"
    E = "E"
    F = "F"
    F_SHARP = "F#"
    G = "G"
    G_SHARP = "G#"
    A = "A"
    A_SHARP = "A#"
    B = "B"

    @property
    def index(self) -> int:
        """Semitone offset of this pitch class above C (0-11)."""
        return _ROOT_ORDER.index(self)


_ROOT_ORDER: list[RootNote] = list(RootNote)


class Settings(BaseModel):
    """Configuration for one image-to-MIDI generation run.

    Settings are frozen: a run never mutates them, and the UI layer uses
    them directly as cache keys. Build a modified copy with
    ``Settings.model_validate({**s.model_dump(), ...})`` so the copy is
    validated again.

    Attributes:
        bpm: Tempo in beats per minute (> 0, default 120).
        threshold: Brightness a cell must exceed to sound (0-254, default 100).
        duration_bars: Length of the sequence in 4/4 bars (default 4).
        min_note: Pitch for the bottom of the image (default 36, C2).
        max_note: Pitch for the top of the image (default 96, C7).
        scale: Scale used to quantize pitches (default chromatic).
        root_note: Root of the scale (default C).
        resolution_x: Number of time steps across the image (default 128).
        resolution_y: Number of pitch rows down the image (default 64).
        channel: MIDI channel, zero-based (0-15, default 0).
    """

    bpm: float = Field(
        120.0, gt=0, allow_inf_nan=False, description="Tempo in beats per minute"
    )
    threshold: int = Field(
        100, ge=0, le=255, description="Brightness threshold for active cells"
    )
    duration_bars: int = Field(4, ge=1, description="Length in 4/4 bars")
    min_note: int = Field(36, ge=0, le=127, description="Lowest MIDI note")
    max_note: int = Field(96, ge=0, le=127, description="Highest MIDI note")
    scale: ScaleType = Field(ScaleType.CHROMATIC, description="Quantization scale")
    root_note: RootNote = Field(RootNote.C, description="Root of the scale")
    resolution_x: int = Field(128, ge=1, description="Time steps across the image")
    resolution_y: int = Field(64, ge=1, description="Pitch rows down the image")
    channel: int = Field(0, ge=0, le=15, description="Zero-based MIDI channel")

    class Config:
        frozen = True

    @model_validator(mode="after")
    def _check_consistency(self) -> "Settings":
        if self.min_note > self.max_note:
            raise ValueError(
                f"min_note ({self.min_note}) must not exceed max_note ({self.max_note})"
            )
        if self.threshold >= 255:
            raise ValueError("threshold must be below 255 to leave a velocity range")
        tempo = tempo_for_bpm(self.bpm)
        if not 1 <= tempo <= MAX_TEMPO:
            raise ValueError(f"bpm {self.bpm} cannot be written as a MIDI tempo")
        return self

    @property
    def root_index(self) -> int:
        return self.root_note.index

    def apply_analysis(self, analysis: "ImageAnalysis") -> "Settings":
        """Return a copy with the tempo and key suggested by ``analysis``.

        The suggestions go through the same validation as manual settings.

        Raises:
            InvalidSettingsError: If the suggested tempo is not usable.
        """
        return load_settings(
            **{
                **self.model_dump(),
                "bpm": analysis.suggested_bpm,
                "scale": analysis.suggested_scale,
                "root_note": analysis.suggested_root,
            }
        )


class ImageAnalysis(BaseModel):
    """Musical parameters suggested for an image by an advisory collaborator.

    Attributes:
        suggested_bpm: Suggested tempo in beats per minute.
        suggested_scale: Suggested quantization scale.
        suggested_root: Suggested root note.
        title: Creative title for the generated track.
        mood_description: Short description of the visual mood.
    """

    suggested_bpm: float = Field(120.0, gt=0, description="Suggested tempo")
    suggested_scale: ScaleType = Field(ScaleType.MINOR, description="Suggested scale")
    suggested_root: RootNote = Field(RootNote.C, description="Suggested root note")
    title: str = Field("Untitled Scan", description="Track title")
    mood_description: str = Field("", description="Description of the mood")

    @classmethod
    def fallback(cls) -> "ImageAnalysis":
        """Defaults used when no analysis is available."""
        return cls(mood_description="Analysis failed, using defaults.")


def load_settings(**values) -> Settings:
    """Build a ``Settings`` record from loose values such as UI widget state.

    Args:
        **values: Field values; scale and root may be given as their
            string values (e.g. ``scale="major"``, ``root_note="F#"``).

    Returns:
        A validated, frozen ``Settings`` instance.

    Raises:
        InvalidSettingsError: If any value violates a settings constraint.
    """
    try:
        return Settings(**values)
    except ValidationError as e:
        raise InvalidSettingsError(str(e)) from e
