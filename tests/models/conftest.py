import pytest

from pixel_synth.models import MidiEvent, EventKind, Note, Sample


@pytest.fixture
def valid_sample():
    return Sample(x=1, y=2, brightness=180.5, alpha=255)


@pytest.fixture
def valid_note():
    return Note(pitch=60, velocity=100, start_time=120, duration=60)


@pytest.fixture
def valid_midievent():
    return MidiEvent(ticks=0, kind=EventKind.NOTE_ON, pitch=60, velocity=100)
