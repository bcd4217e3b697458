"""
Musical transformation utilities for note data.

This module provides functions for transforming notes according to musical
principles: scale membership, snapping pitches to the nearest in-scale
neighbor, and naming pitches for display.
"""

import logging

import music21

from pixel_synth.models import RootNote, ScaleType

logger = logging.getLogger(__name__)

# Furthest distance, in semitones, searched for an in-scale neighbor.
MAX_SNAP_DISTANCE = 11


def get_available_scale_names() -> list[str]:
    """Get the scale identifiers in UI display order.

    Returns:
        List of scale values (e.g., ["chromatic", "major", ...]).
    """
    return [scale.value for scale in ScaleType]


def get_available_root_notes() -> list[str]:
    """Get the twelve root note names in semitone order starting at C.

    Returns:
        List of pitch-class names (e.g., ["C", "C#", "D", ...]).
    """
    return [root.value for root in RootNote]


def is_note_in_scale(note: int, root_index: int, scale: ScaleType) -> bool:
    """Check whether a MIDI note belongs to a scale.

    Args:
        note: MIDI note number.
        root_index: Pitch class of the scale root (0 = C).
        scale: Scale to test against. Chromatic accepts every note.

    Returns:
        True if the note's pitch class relative to the root is in the scale.
    """
    if scale is ScaleType.CHROMATIC:
        return True
    # +120 keeps the operand non-negative before the modulo
    relative = (note - root_index + 120) % 12
    return relative in scale.intervals


def snap_to_scale(note: int, root_index: int, scale: ScaleType) -> int:
    """Move a note to the nearest pitch of a scale.

    Notes already in the scale are returned unchanged. Otherwise neighbors
    are tried at growing distances, the upper neighbor before the lower one
    at each distance, so ties resolve upward.

    Args:
        note: MIDI note number to quantize.
        root_index: Pitch class of the scale root (0 = C).
        scale: Target scale.

    Returns:
        The snapped MIDI note number, or ``note`` itself if no in-scale
        pitch lies within ``MAX_SNAP_DISTANCE`` semitones.
    """
    if is_note_in_scale(note, root_index, scale):
        return note

    for offset in range(1, MAX_SNAP_DISTANCE + 1):
        if is_note_in_scale(note + offset, root_index, scale):
            return note + offset
        if is_note_in_scale(note - offset, root_index, scale):
            return note - offset

    return note


def get_key_name(midi_note: int) -> str:
    """Convert a MIDI note number to a key name (e.g., "C4").

    Args:
        midi_note: MIDI note number (0–127).

    Returns:
        The pitch name with octave (e.g., "C4", "C#3").
    """
    p = music21.pitch.Pitch()
    p.midi = midi_note
    return p.nameWithOctave


def midi_note_label(midi_note: int) -> str:
    """Format a MIDI note for display, e.g. 'C4 (MIDI: 60)'."""
    return f"{get_key_name(midi_note)} (MIDI: {midi_note})"
