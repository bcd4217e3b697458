"""Domain models for the pixel-synth application.

This module provides a centralized location for all data models used throughout
the pixel-to-MIDI conversion pipeline. It includes:

- Core domain models (Sample, Note, MidiEvent)
- Pipeline processing stage results (SamplingResult, NoteResult, MidiResult)
- Generation settings and the closed scale/root enumerations
- Visualization data containers

All models are built using Pydantic for data validation and serialization,
ensuring type safety and clear interfaces between pipeline components.
"""

# Re-export core models
from pixel_synth.models.core_models import (
    TICKS_PER_BEAT,
    BEATS_PER_BAR,
    Sample,
    Note,
    EventKind,
    MidiEvent,
)

# Re-export pipeline models
from pixel_synth.models.pipeline_models import (
    SamplingResult,
    NoteResult,
    MidiResult,
)

# Re-export setting models
from pixel_synth.models.settings_models import (
    ScaleType,
    RootNote,
    Settings,
    ImageAnalysis,
    load_settings,
)

# Re-export visualization models
from pixel_synth.models.visualization_models import VisualizationSet
