"""Models for representing pipeline processing stages.

This module contains Pydantic models that encapsulate the results of each
stage in the pixel-to-MIDI conversion pipeline. Each model represents the
output data from a specific processing step, enabling clean separation of
concerns and easy testing of individual pipeline components.
"""

from pydantic import BaseModel, Field

from pixel_synth.models.core_models import Sample, Note, MidiEvent


class SamplingResult(BaseModel):
    """Result of the grid sampling stage.

    Attributes:
        samples: One sample per grid cell, in outer-x/inner-y order.
        active_samples: The subset of ``samples`` that will sound.
        width: Width in pixels of the sampled image.
        height: Height in pixels of the sampled image.
    """

    samples: list[Sample] = Field(default_factory=list, description="All grid samples")
    active_samples: list[Sample] = Field(
        default_factory=list, description="Samples above the brightness threshold"
    )
    width: int = Field(0, ge=0, description="Image width in pixels")
    height: int = Field(0, ge=0, description="Image height in pixels")


class NoteResult(BaseModel):
    """Results from the note mapping stage.

    Attributes:
        notes: One note per active sample, in sampling order.
        ticks_per_step: Length of one grid step in ticks.
        total_ticks: Length of the whole sequence in ticks.
    """

    notes: list[Note] = Field(default_factory=list, description="Mapped notes")
    ticks_per_step: int = Field(0, ge=0, description="Ticks per grid step")
    total_ticks: int = Field(0, ge=0, description="Sequence length in ticks")


class MidiResult(BaseModel):
    """MIDI serialization results.

    Attributes:
        events: Linear note-on/note-off stream in the order it was written.
        midi_bytes: Serialized Standard MIDI File, or None before encoding.
        tempo: Microseconds per quarter note written to the tempo event.
    """

    events: list[MidiEvent] = Field(
        default_factory=list, description="Sorted note on/off events"
    )
    midi_bytes: bytes | None = Field(None, description="Serialized MIDI file data")
    tempo: int = Field(0, ge=0, description="Microseconds per quarter note")

    @property
    def note_count(self) -> int:
        return sum(1 for e in self.events if e.velocity > 0)
