"""UI update functions for the Gradio interface.

This module sits between the Gradio components and the pixel-to-MIDI
pipeline. Pipeline results are cached per (image, settings) pair so that
moving a slider back and forth does not resample the image; files written
for download and playback are managed per browser session.
"""

import logging
from functools import lru_cache

from pixel_synth.app_state import get_image_by_id
from pixel_synth.file_manager import GradioFileManager, track_filename
from pixel_synth.midi_utils import midi_to_audio
from pixel_synth.models import Settings, SamplingResult, NoteResult, MidiResult
from pixel_synth.music_transformations import get_key_name
from pixel_synth.pipeline import process_complete_pipeline
from pixel_synth.visualization import create_all_visualizations

logger = logging.getLogger(__name__)

GENERATION_CACHE_SIZE = 16

# Active file managers by session ID
_file_managers: dict[str, GradioFileManager] = {}


def get_or_create_file_manager(session_id: str) -> GradioFileManager:
    """Return the file manager for a session, creating it on first use."""
    manager = _file_managers.get(session_id)
    if manager is None:
        manager = GradioFileManager(session_id)
        _file_managers[session_id] = manager
    return manager


def cleanup_session(session_id: str) -> None:
    """Delete a session's files and forget its file manager.

    Unknown sessions are ignored.
    """
    manager = _file_managers.pop(session_id, None)
    if manager is not None:
        manager.cleanup_all()


def cleanup_cache(session_id: str | None = None) -> None:
    """Clean up one session, or every session and the generation cache.

    Args:
        session_id: Session to clean up. If None, all sessions are removed
            and cached pipeline results are dropped.
    """
    if session_id is not None:
        cleanup_session(session_id)
        return

    for sid in list(_file_managers):
        cleanup_session(sid)
    cached_generation.cache_clear()


@lru_cache(maxsize=GENERATION_CACHE_SIZE)
def cached_generation(
    image_id: str, settings: Settings
) -> tuple[SamplingResult, NoteResult, MidiResult]:
    """Run the pipeline for a registered image, caching by image and settings.

    Raises:
        KeyError: If no image is registered under ``image_id``.
        PipelineError: If the pipeline rejects the input or settings.
    """
    image = get_image_by_id(image_id)
    if image is None:
        raise KeyError(f"No image registered as {image_id!r}")
    return process_complete_pipeline(image, settings)


def summarize(note_result: NoteResult, settings: Settings) -> str:
    """One-line status text describing a generation run."""
    return (
        f"{len(note_result.notes)} notes | "
        f"{settings.resolution_x}x{settings.resolution_y} grid | "
        f"{get_key_name(settings.min_note)}-{get_key_name(settings.max_note)} | "
        f"{settings.root_note.value} {settings.scale.label} @ {settings.bpm:g} BPM"
    )


def update_midi_view(
    image_id: str, session_id: str, settings: Settings, title: str | None = None
) -> tuple:
    """Generate MIDI for the UI and prepare downloadable files.

    Args:
        image_id: Identifier of a registered image.
        session_id: Browser session owning the written files.
        settings: Generation settings.
        title: Optional track title used for the download filename.

    Returns:
        Tuple of (grid_preview, piano_roll_fig, summary_text, audio_path,
        midi_path). The audio path falls back to the MIDI path if the WAV
        preview cannot be rendered.
    """
    sampling_result, note_result, midi_result = cached_generation(image_id, settings)

    visuals = create_all_visualizations(sampling_result, note_result, settings)

    manager = get_or_create_file_manager(session_id)
    midi_path = manager.write_file(
        "midi", midi_result.midi_bytes, track_filename(title, ".mid")
    )

    audio_path = midi_to_audio(midi_path)
    if audio_path is None:
        logger.warning("Audio preview unavailable; offering the MIDI file instead")
        audio_path = midi_path
    else:
        manager.track("wav", audio_path)

    return (
        visuals.grid_preview,
        visuals.piano_roll,
        summarize(note_result, settings),
        audio_path,
        midi_path,
    )
