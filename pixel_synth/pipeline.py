"""
Pipeline processing functions for pixel-to-MIDI conversion.

This module contains the stage functions of the conversion pipeline
(sampling, note mapping, MIDI encoding), separating business logic from
visualization and UI concerns. Every stage is a pure function of its inputs;
failures are raised as ``PipelineError`` subclasses and never replaced by
default values.
"""

import logging
from collections.abc import Mapping

import numpy as np

from pixel_synth.exceptions import PipelineError
from pixel_synth.grid_sampling import sample_grid, find_active_samples
from pixel_synth.note_mapping import build_notes, ticks_per_step, total_ticks
from pixel_synth.midi_utils import (
    build_header_chunk,
    build_linear_events,
    build_track_chunk,
    bpm_to_tempo,
)
from pixel_synth.models import (
    Settings,
    SamplingResult,
    NoteResult,
    MidiResult,
    load_settings,
)

logger = logging.getLogger(__name__)


def resolve_settings(settings: Settings | Mapping | None) -> Settings:
    """Accept a Settings record, a mapping of field values, or None (defaults).

    Raises:
        InvalidSettingsError: If a mapping does not form valid settings.
    """
    if settings is None:
        return Settings()
    if isinstance(settings, Settings):
        return settings
    return load_settings(**settings)


def sample_image(pixels: np.ndarray, settings: Settings) -> SamplingResult:
    """Sample the image grid and select the active cells.

    Args:
        pixels: ``H×W×4`` uint8 RGBA array.
        settings: Generation settings.

    Returns:
        SamplingResult with every grid sample and the active subset.
    """
    samples = sample_grid(pixels, settings.resolution_x, settings.resolution_y)
    active = find_active_samples(samples, settings.threshold)
    logger.debug(
        f"{len(active)} of {len(samples)} cells above threshold {settings.threshold}"
    )

    height, width = pixels.shape[:2]
    return SamplingResult(
        samples=samples, active_samples=active, width=width, height=height
    )


def map_notes(sampling_result: SamplingResult, settings: Settings) -> NoteResult:
    """Turn active samples into notes.

    Args:
        sampling_result: Output of ``sample_image``.
        settings: Generation settings.

    Returns:
        NoteResult with one note per active sample.
    """
    notes = build_notes(sampling_result.active_samples, settings)
    return NoteResult(
        notes=notes,
        ticks_per_step=ticks_per_step(settings.duration_bars, settings.resolution_x),
        total_ticks=total_ticks(settings.duration_bars),
    )


def generate_midi(note_result: NoteResult, settings: Settings) -> MidiResult:
    """Serialize notes to a Standard MIDI File.

    An empty note list is not an error: the result holds a valid file with
    only the tempo and end-of-track events.

    Args:
        note_result: Output of ``map_notes``.
        settings: Generation settings.

    Returns:
        MidiResult with the written event stream and the file bytes.
    """
    if not note_result.notes:
        logger.info("No cells above threshold; writing an empty sequence")

    events = build_linear_events(note_result.notes)
    midi_bytes = build_header_chunk() + build_track_chunk(
        events, settings.bpm, settings.channel
    )
    return MidiResult(
        events=events,
        midi_bytes=midi_bytes,
        tempo=bpm_to_tempo(settings.bpm),
    )


def process_complete_pipeline(
    pixels: np.ndarray, settings: Settings | Mapping | None = None
) -> tuple[SamplingResult, NoteResult, MidiResult]:
    """Process the complete pixel-to-MIDI pipeline.

    Args:
        pixels: ``H×W×4`` uint8 RGBA array.
        settings: Generation settings, a mapping of setting values, or None
            for the defaults.

    Returns:
        Tuple of (sampling_result, note_result, midi_result).

    Raises:
        InvalidSettingsError: If the settings are invalid; nothing is sampled.
        InputError: If the pixel array is unusable.
        DegenerateTimingError: If a grid step is shorter than one tick; checked
            before the image is sampled.
        OutOfRangeNoteError: If a mapped note is not a legal MIDI note.
    """
    try:
        settings = resolve_settings(settings)
        ticks_per_step(settings.duration_bars, settings.resolution_x)
        sampling_result = sample_image(pixels, settings)
        note_result = map_notes(sampling_result, settings)
        midi_result = generate_midi(note_result, settings)
    except PipelineError as e:
        logger.error(f"Error in pipeline processing: {e}")
        raise

    logger.info(
        f"Generated {len(note_result.notes)} notes "
        f"({len(midi_result.midi_bytes)} bytes)"
    )
    return sampling_result, note_result, midi_result


def generate_midi_from_image(
    pixels: np.ndarray, settings: Settings | Mapping | None = None
) -> bytes:
    """Convert an RGBA image straight to MIDI file bytes.

    Convenience wrapper around ``process_complete_pipeline`` for callers that
    only need the ``audio/midi`` payload.
    """
    _, _, midi_result = process_complete_pipeline(pixels, settings)
    return midi_result.midi_bytes
