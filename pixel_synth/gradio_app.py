"""Gradio web interface for the pixel-to-MIDI converter.

This module creates the web front end: an image upload, the generation
controls (scale, timing, threshold, grid, note range, channel) and the
outputs of a run (grid preview, piano roll, audio preview and the MIDI
download). Every control change regenerates the sequence.
"""

import logging

import gradio as gr

from pixel_synth.app_state import register_image
from pixel_synth.exceptions import PipelineError
from pixel_synth.models import Settings, load_settings
from pixel_synth.music_transformations import (
    get_available_root_notes,
    get_available_scale_names,
    midi_note_label,
)
from pixel_synth.ui_updates import cleanup_cache, cleanup_session, update_midi_view

logger = logging.getLogger(__name__)

DEFAULTS = Settings()
WAITING_STATUS = "STATUS: WAITING_FOR_INPUT..."


def handle_upload(image) -> str | None:
    """Register an uploaded image and return its ID (None when cleared)."""
    if image is None:
        return None
    return register_image(image)


def range_label(min_note: float, max_note: float) -> str:
    """Describe the note range, e.g. 'C2 (MIDI: 36) to C7 (MIDI: 96)'."""
    return f"{midi_note_label(int(min_note))} to {midi_note_label(int(max_note))}"


def regenerate(
    image_id: str | None,
    title: str,
    root_note: str,
    scale: str,
    bpm: float,
    duration_bars: int,
    threshold: int,
    resolution_x: int,
    resolution_y: int,
    min_note: int,
    max_note: int,
    channel: int,
    request: gr.Request,
) -> tuple:
    """Run the pipeline for the current control values.

    Invalid settings and pipeline failures are reported in the status text
    rather than raised, so the interface stays usable.

    Returns:
        Tuple of (grid_preview, piano_roll, status_text, audio_path,
        midi_path) for the output components.
    """
    if image_id is None:
        return None, None, WAITING_STATUS, None, None

    try:
        settings = load_settings(
            root_note=root_note,
            scale=scale,
            bpm=bpm,
            duration_bars=duration_bars,
            threshold=threshold,
            resolution_x=resolution_x,
            resolution_y=resolution_y,
            min_note=min_note,
            max_note=max_note,
            channel=channel,
        )
        return update_midi_view(image_id, request.session_hash, settings, title or None)
    except PipelineError as e:
        logger.warning(f"Generation failed: {e}")
        return None, None, f"ERROR: {e}", None, None


def cleanup_session_handler(request: gr.Request) -> None:
    """Remove a session's files when the browser disconnects."""
    try:
        cleanup_session(request.session_hash)
    except OSError as e:
        logger.warning(f"Cleanup failed for session {request.session_hash}: {e}")


def create_gradio_interface() -> gr.Blocks:
    """Create and configure the main Gradio web interface.

    Returns:
        Configured Gradio Blocks interface ready for launching.
    """
    # Check the cache every 30 minutes, delete files older than 1 hour
    with gr.Blocks(title="PixelSynth", delete_cache=(1800, 3600)) as interface:
        gr.Markdown("# PixelSynth")
        gr.Markdown(
            "Turn an image into a MIDI sequence: bright pixels become notes, "
            "left to right is time and top to bottom is pitch."
        )

        # Holds the current image ID across callbacks
        image_state = gr.State(None)

        with gr.Row():
            with gr.Column(scale=1):
                source = gr.Image(
                    label="Source Image", type="numpy", image_mode="RGBA", height=240
                )
                title = gr.Textbox(label="Track Title", placeholder="Untitled Scan")

                with gr.Group():
                    gr.Markdown("### Musical Scale")
                    with gr.Row():
                        root_note = gr.Dropdown(
                            choices=get_available_root_notes(),
                            value=DEFAULTS.root_note.value,
                            label="Root",
                        )
                        scale = gr.Dropdown(
                            choices=get_available_scale_names(),
                            value=DEFAULTS.scale.value,
                            label="Type",
                            info="Pitches outside the scale snap to the nearest step.",
                        )

                with gr.Group():
                    gr.Markdown("### Time Domain")
                    bpm = gr.Slider(40, 240, value=DEFAULTS.bpm, step=1, label="BPM")
                    duration_bars = gr.Slider(
                        1, 32, value=DEFAULTS.duration_bars, step=1, label="Bars"
                    )

                with gr.Group():
                    gr.Markdown("### Quantization")
                    threshold = gr.Slider(
                        0,
                        254,
                        value=DEFAULTS.threshold,
                        step=1,
                        label="Threshold",
                        info="Cells brighter than this become notes.",
                    )
                    with gr.Row():
                        resolution_x = gr.Number(
                            value=DEFAULTS.resolution_x,
                            minimum=16,
                            maximum=512,
                            precision=0,
                            label="X-Steps",
                        )
                        resolution_y = gr.Number(
                            value=DEFAULTS.resolution_y,
                            minimum=12,
                            maximum=128,
                            precision=0,
                            label="Y-Steps",
                        )

                with gr.Group():
                    gr.Markdown("### Range")
                    with gr.Row():
                        min_note = gr.Slider(
                            0, 127, value=DEFAULTS.min_note, step=1, label="Lowest Note"
                        )
                        max_note = gr.Slider(
                            0, 127, value=DEFAULTS.max_note, step=1, label="Highest Note"
                        )
                    range_display = gr.Textbox(
                        label="Range",
                        value=range_label(DEFAULTS.min_note, DEFAULTS.max_note),
                        interactive=False,
                    )
                    channel = gr.Slider(
                        0, 15, value=DEFAULTS.channel, step=1, label="MIDI Channel"
                    )

            with gr.Column(scale=2):
                grid_preview = gr.Image(label="Visual Monitor", height=400)
                status = gr.Textbox(
                    label="Status", value=WAITING_STATUS, interactive=False
                )
                piano_roll = gr.Plot(label="Piano Roll")
                with gr.Row():
                    audio_player = gr.Audio(
                        label="Preview", type="filepath", format="wav", autoplay=False
                    )
                    midi_download = gr.File(label="Export .MID", type="filepath")

        controls = [
            root_note,
            scale,
            bpm,
            duration_bars,
            threshold,
            resolution_x,
            resolution_y,
            min_note,
            max_note,
            channel,
        ]
        inputs = [image_state, title] + controls
        outputs = [grid_preview, piano_roll, status, audio_player, midi_download]

        source.change(
            fn=handle_upload, inputs=[source], outputs=[image_state]
        ).then(fn=regenerate, inputs=inputs, outputs=outputs)

        for control in controls + [title]:
            control.change(fn=regenerate, inputs=inputs, outputs=outputs)

        for note_control in (min_note, max_note):
            note_control.change(
                fn=range_label, inputs=[min_note, max_note], outputs=[range_display]
            )

        interface.unload(cleanup_session_handler)

    return interface


def main() -> None:
    """Launch the web interface on port 7860."""
    import asyncio
    import sys

    logging.basicConfig(level=logging.INFO)
    # Reduce logging verbosity for asyncio to suppress connection noise
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    # Windows-specific: Use SelectorEventLoop to avoid ProactorEventLoop issues
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    demo = create_gradio_interface()
    try:
        demo.launch(share=False, show_error=True, server_port=7860)
    finally:
        # Sessions still open at shutdown never fire their unload event
        cleanup_cache()


if __name__ == "__main__":
    main()
