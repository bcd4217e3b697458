"""Exception hierarchy for the pixel-to-MIDI pipeline.

Every failure the core can report derives from ``PipelineError`` so callers
(the Gradio layer, scripts, tests) can catch the whole family at once while
still telling user mistakes apart from internal invariant violations.
"""


class PipelineError(Exception):
    """Base exception for pipeline processing errors."""

    pass


class InvalidSettingsError(PipelineError, ValueError):
    """Raised when a settings record cannot drive a generation run.

    Covers inverted note ranges, empty grids, a threshold of 255 (no
    brightness range left for velocity), non-positive tempo and bar counts,
    and unknown scale or root names. Detected before any sampling happens.
    """

    pass


class InputError(PipelineError, ValueError):
    """Raised when the pixel source is unusable (bad shape, dtype or file)."""

    pass


class DegenerateTimingError(PipelineError):
    """Raised when the grid is too fine for the requested duration.

    A step of zero ticks would produce zero-length notes, which are not
    valid MIDI notes.
    """

    pass


class OutOfRangeNoteError(PipelineError):
    """Raised when a mapped pitch or velocity leaves the legal MIDI range.

    This signals a broken mapping invariant rather than a user input
    problem; values are never clamped silently.
    """

    pass
