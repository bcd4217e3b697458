"""Mapping of active grid cells to notes.

Horizontal grid position becomes time on a fixed grid, vertical position
becomes pitch (top row highest), and the brightness margin above the
threshold becomes velocity. Every note lasts exactly one grid step.
"""

import logging
import math

from pydantic import ValidationError

from pixel_synth.exceptions import (
    DegenerateTimingError,
    InvalidSettingsError,
    OutOfRangeNoteError,
)
from pixel_synth.models import (
    BEATS_PER_BAR,
    TICKS_PER_BEAT,
    Note,
    Sample,
    Settings,
)
from pixel_synth.music_transformations import snap_to_scale

logger = logging.getLogger(__name__)

# Velocity of a cell just above threshold, and the span up to full brightness.
MIN_VELOCITY = 40
VELOCITY_SPAN = 87


def total_ticks(duration_bars: int) -> int:
    """Length in ticks of ``duration_bars`` bars of 4/4."""
    return duration_bars * BEATS_PER_BAR * TICKS_PER_BEAT


def ticks_per_step(duration_bars: int, resolution_x: int) -> int:
    """Length in ticks of one grid column.

    Raises:
        DegenerateTimingError: If the grid has more columns than ticks, which
            would make every note zero ticks long.
    """
    step = total_ticks(duration_bars) // resolution_x
    if step < 1:
        raise DegenerateTimingError(
            f"{resolution_x} time steps do not fit in {duration_bars} bar(s) "
            f"({total_ticks(duration_bars)} ticks)"
        )
    return step


def raw_pitch(y: int, settings: Settings) -> int:
    """Map a grid row to a pitch before scale quantization.

    Row 0 (the top of the image) maps to ``max_note`` and lower rows
    descend toward ``min_note``.
    """
    pitch_ratio = 1 - y / settings.resolution_y
    return math.floor(
        settings.min_note + pitch_ratio * (settings.max_note - settings.min_note)
    )


def map_pitch(y: int, settings: Settings) -> int:
    """Map a grid row to its final, scale-quantized pitch."""
    return snap_to_scale(raw_pitch(y, settings), settings.root_index, settings.scale)


def map_velocity(brightness: float, threshold: int) -> int:
    """Map brightness in ``(threshold, 255]`` to a velocity in ``(40, 127]``.

    Raises:
        InvalidSettingsError: If ``threshold`` is 255 or more, leaving no
            brightness range to scale.
    """
    if threshold >= 255:
        raise InvalidSettingsError("threshold must be below 255 to map velocity")
    return math.floor(
        MIN_VELOCITY + ((brightness - threshold) / (255 - threshold)) * VELOCITY_SPAN
    )


def build_note(sample: Sample, settings: Settings, step: int) -> Note:
    """Build the note for one active sample.

    Args:
        sample: An active grid sample.
        settings: Generation settings.
        step: Ticks per grid step, as returned by ``ticks_per_step``.

    Raises:
        OutOfRangeNoteError: If the mapped pitch or velocity is not a legal
            MIDI value.
    """
    pitch = map_pitch(sample.y, settings)
    velocity = map_velocity(sample.brightness, settings.threshold)
    try:
        return Note(
            pitch=pitch,
            velocity=velocity,
            start_time=sample.x * step,
            duration=step,
        )
    except ValidationError as e:
        raise OutOfRangeNoteError(
            f"Cell ({sample.x}, {sample.y}) mapped to pitch {pitch}, "
            f"velocity {velocity}"
        ) from e


def build_notes(samples: list[Sample], settings: Settings) -> list[Note]:
    """Convert active samples to notes, keeping the samples' order.

    Args:
        samples: Active samples, typically from ``find_active_samples``.
        settings: Generation settings.

    Returns:
        One note per sample.

    Raises:
        DegenerateTimingError: If a grid step would be shorter than one tick.
        OutOfRangeNoteError: If any mapped note is not a legal MIDI note.
    """
    step = ticks_per_step(settings.duration_bars, settings.resolution_x)
    notes = [build_note(sample, settings, step) for sample in samples]
    logger.debug(f"Mapped {len(notes)} notes at {step} ticks per step")
    return notes
