"""Core domain models for pixel-to-MIDI conversion."""

from enum import Enum

from pydantic import BaseModel, Field

# Pulses per quarter note shared by the note mapper and the file header.
TICKS_PER_BEAT = 480
# Fixed 4/4 meter.
BEATS_PER_BAR = 4


class Sample(BaseModel):
    """One grid cell read from the pixel source.

    The coordinates are grid coordinates, not pixel coordinates, with (0,0)
    at the top-left cell. Samples are ephemeral: they are produced for a
    single generation run and never persisted.

    Attributes:
        x: Column index of the cell (time axis).
        y: Row index of the cell (pitch axis, 0 is the top row).
        brightness: Perceptual brightness of the cell-center pixel (0-255).
        alpha: Alpha channel of the cell-center pixel (0-255).
    """

    x: int = Field(..., ge=0, description="Grid column")
    y: int = Field(..., ge=0, description="Grid row")
    brightness: float = Field(..., ge=0.0, le=255.0, description="BT.601 luma")
    alpha: int = Field(..., ge=0, le=255, description="Alpha channel value")


class Note(BaseModel):
    """A single note produced from an active grid cell.

    Time is measured in MIDI ticks at ``TICKS_PER_BEAT`` resolution.

    Attributes:
        pitch: MIDI note number after scale quantization (0-127).
        velocity: Note-on velocity (1-127).
        start_time: Start time in ticks (non-negative).
        duration: Length in ticks (positive).
    """

    pitch: int = Field(..., ge=0, le=127, description="MIDI note number (0-127)")
    velocity: int = Field(..., ge=1, le=127, description="Note-on velocity (1-127)")
    start_time: int = Field(..., ge=0, description="Start time in MIDI ticks")
    duration: int = Field(..., ge=1, description="Duration in MIDI ticks")

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration


class EventKind(str, Enum):
    """Kind of a linear track event."""

    NOTE_ON = "note_on"
    NOTE_OFF = "note_off"


class MidiEvent(BaseModel):
    """One entry of the linear event stream written to the track chunk.

    Attributes:
        ticks: Absolute position in ticks.
        kind: Whether the event starts or releases the note.
        pitch: MIDI note number (0-127).
        velocity: Velocity byte; always 0 for ``NOTE_OFF``.
    """

    ticks: int = Field(..., ge=0, description="Absolute time in MIDI ticks")
    kind: EventKind = Field(..., description="Note on or note off")
    pitch: int = Field(..., ge=0, le=127, description="MIDI note number (0-127)")
    velocity: int = Field(..., ge=0, le=127, description="Velocity byte (0-127)")
