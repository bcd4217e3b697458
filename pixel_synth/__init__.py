"""Pixel-to-MIDI conversion library.

This package turns a raster image into a playable MIDI sequence. A grid is
laid over the image; every cell brighter than a threshold becomes a note
whose start time comes from its column, whose pitch comes from its row
(optionally snapped to a musical scale) and whose velocity comes from its
brightness.

The main processing pipeline consists of:
1. Grid sampling of an RGBA pixel array
2. Note mapping (time, pitch, scale quantization, velocity)
3. Serialization to a single-track Standard MIDI File

Example:
    Basic usage through the pipeline API:

    >>> from pixel_synth.image_processing import load_image
    >>> from pixel_synth.models import Settings, ScaleType
    >>> from pixel_synth.pipeline import generate_midi_from_image
    >>>
    >>> pixels = load_image("night_city.png")
    >>> settings = Settings(scale=ScaleType.MINOR, bpm=90)
    >>> with open("night_city.mid", "wb") as f:
    ...     f.write(generate_midi_from_image(pixels, settings))
"""
