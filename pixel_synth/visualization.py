"""
Visualization functions for the pixel-to-MIDI pipeline.

This module centralizes all visualization functions used by the interface:
a 1-bit style preview of the sampled grid and a piano roll of the generated
notes.
"""

import math
from collections.abc import Sequence

import cv2
import numpy as np
from matplotlib.figure import Figure

from pixel_synth.grid_sampling import cell_size
from pixel_synth.models import Note, Settings, SamplingResult, NoteResult
from pixel_synth.models.visualization_models import VisualizationSet
from pixel_synth.music_transformations import get_key_name, is_note_in_scale
from pixel_synth.note_mapping import raw_pitch

IN_SCALE_COLOR = (255, 255, 255)
# Cells whose pitch will be snapped to the scale
SNAPPED_COLOR = (0x33, 0x00, 0x00)


def create_grid_preview(
    sampling_result: SamplingResult | None, settings: Settings
) -> np.ndarray | None:
    """Draw the active grid cells as blocks on a black canvas.

    Each active cell fills its grid block: white when its unquantized pitch
    is already in the chosen scale, dark red when it will be snapped.

    Args:
        sampling_result: Output of the sampling stage, or None.
        settings: Settings the sampling was done with.

    Returns:
        RGB image of the same size as the sampled image, or None if there
        is nothing to draw on.
    """
    if (
        sampling_result is None
        or sampling_result.width == 0
        or sampling_result.height == 0
    ):
        return None

    w, h = sampling_result.width, sampling_result.height
    canvas = np.zeros((h, w, 3), np.uint8)
    block_w, block_h = cell_size(w, h, settings.resolution_x, settings.resolution_y)

    for sample in sampling_result.active_samples:
        pitch = raw_pitch(sample.y, settings)
        in_scale = is_note_in_scale(pitch, settings.root_index, settings.scale)
        color = IN_SCALE_COLOR if in_scale else SNAPPED_COLOR

        x0 = math.floor(sample.x * block_w)
        y0 = math.floor(sample.y * block_h)
        # cv2.rectangle corners are inclusive
        x1 = x0 + math.ceil(block_w) - 1
        y1 = y0 + math.ceil(block_h) - 1
        cv2.rectangle(canvas, (x0, y0), (x1, y1), color, -1)

    return canvas


def create_piano_roll_visualization(
    notes: Sequence[Note],
    *,
    width_px: int = 1200,
    note_h_in: float = 0.14,
    max_h_in: float = 12.0,
    min_h_in: float = 2.0,
    dpi: int = 150,
    margin_frac: float = 0.05,
) -> Figure:
    """Create a piano roll visualization of notes with pitch labels.

    Generates a horizontal timeline chart showing notes as colored bars,
    with each row representing a different pitch. Bars are colored by pitch
    class and shaded by velocity.

    Args:
        notes: Sequence of notes to visualize.
        width_px: Logical bitmap width in pixels (default 1200).
        note_h_in: Physical height per pitch row in inches (default 0.14).
        max_h_in: Maximum figure height in inches (default 12.0).
        min_h_in: Minimum figure height in inches (default 2.0).
        dpi: Raster resolution for output (default 150).
        margin_frac: Fraction of row height to leave as margin (default 0.05).

    Returns:
        Matplotlib Figure object containing the piano roll visualization.
        Returns a figure with a "No notes" message if notes is empty.
    """
    import matplotlib

    matplotlib.use("Agg")  # non-interactive backend for server rendering
    import matplotlib.pyplot as plt
    import matplotlib.patches as patches
    from matplotlib.colors import hsv_to_rgb

    # ---------- empty case ----------
    if not notes:
        fig, ax = plt.subplots(figsize=(width_px / dpi, min_h_in), dpi=dpi)
        ax.text(0.5, 0.5, "No notes", ha="center", va="center", transform=ax.transAxes)
        ax.axis("off")
        return fig

    # ---------- basic extents ----------
    lo_note = min(n.pitch for n in notes)
    hi_note = max(n.pitch for n in notes)
    lo_tick = min(n.start_time for n in notes)
    hi_tick = max(n.end_time for n in notes)

    pitch_span = hi_note - lo_note + 1  # number of rows

    # ---------- figure size ----------
    width_in = width_px / dpi
    height_in = max(min_h_in, min(max_h_in, pitch_span * note_h_in))
    fig, ax = plt.subplots(figsize=(width_in, height_in), dpi=dpi)

    ax.set_xlim(lo_tick, hi_tick)
    ax.set_ylim(lo_note - 0.5, hi_note + 0.5)  # rows are centred on ints

    # ---------- note rectangles fully inside each row ----------
    cell_h = 1 - 2 * margin_frac
    y_shift = 0.5 - margin_frac
    for note in notes:
        value = 0.35 + 0.6 * (note.velocity / 127)
        rgb = hsv_to_rgb(((note.pitch % 12) / 12.0, 0.8, value))
        ax.add_patch(
            patches.Rectangle(
                (note.start_time, note.pitch - y_shift),  # bottom-left
                note.duration,
                cell_h,
                facecolor=rgb,
                edgecolor="none",
                zorder=1,
            )
        )

    # ---------- pitch labels, at most ~24 of them ----------
    label_step = max(1, math.ceil(pitch_span / 24))
    y_ticks = list(range(lo_note, hi_note + 1, label_step))
    ax.set_yticks(y_ticks)
    ax.set_yticklabels([get_key_name(n) for n in y_ticks], fontsize=7)

    # ---------- cosmetics ----------
    ax.set_xticks([])
    ax.set_xlabel("Time (ticks)", fontsize=10)
    ax.set_ylabel("Note", fontsize=10)

    for spine_name, spine in ax.spines.items():
        if spine_name != "left":
            spine.set_visible(False)

    ax.set_facecolor("black")
    fig.tight_layout()
    return fig


def create_all_visualizations(
    sampling_result: SamplingResult | None,
    note_result: NoteResult | None,
    settings: Settings,
) -> VisualizationSet:
    """Create the complete set of visualizations for one generation run.

    Args:
        sampling_result: Sampling stage result, or None.
        note_result: Note mapping stage result, or None.
        settings: Settings used for the run.

    Returns:
        VisualizationSet; fields are None where the input was missing.
    """
    if sampling_result is None:
        return VisualizationSet()

    grid_preview = create_grid_preview(sampling_result, settings)

    piano_roll = None
    if note_result is not None:
        piano_roll = create_piano_roll_visualization(note_result.notes)

    return VisualizationSet(grid_preview=grid_preview, piano_roll=piano_roll)
