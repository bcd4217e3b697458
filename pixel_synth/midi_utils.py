"""MIDI serialization and audio preview utilities.

This module writes notes as a single-track Standard MIDI File (format 0).
The byte layout is built explicitly rather than through a MIDI library so
that it is fully deterministic: every channel event carries its own status
byte, note releases are written as note-on with velocity 0, and event order
is the stable tick order of the note list.

It also renders a finished MIDI file to a WAV preview for the UI.
"""

import logging
import os
import struct

import numpy as np

from pixel_synth.exceptions import InvalidSettingsError, OutOfRangeNoteError
from pixel_synth.models import TICKS_PER_BEAT, EventKind, MidiEvent, Note
from pixel_synth.models.settings_models import MAX_TEMPO, tempo_for_bpm

logger = logging.getLogger(__name__)

HEADER_TAG = b"MThd"
TRACK_TAG = b"MTrk"
HEADER_LENGTH = 6
SMF_FORMAT = 0
TRACK_COUNT = 1

NOTE_ON_STATUS = 0x90
SET_TEMPO_PREFIX = b"\xff\x51\x03"
END_OF_TRACK = b"\x00\xff\x2f\x00"

# Four 7-bit groups
MAX_VARIABLE_LENGTH = 0x0FFFFFFF


def encode_variable_length(value: int) -> bytes:
    """Encode an integer as a MIDI variable-length quantity.

    Seven bits per byte, most significant group first, with the high bit set
    on every byte except the last.

    Args:
        value: Integer in ``0 .. 0x0FFFFFFF``.

    Returns:
        One to four bytes.

    Raises:
        ValueError: If ``value`` is negative or needs more than four bytes.
    """
    if not 0 <= value <= MAX_VARIABLE_LENGTH:
        raise ValueError(f"Variable-length value out of range: {value}")

    groups = [value & 0x7F]
    value >>= 7
    while value:
        groups.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(groups))


def build_header_chunk() -> bytes:
    """Return the 14-byte ``MThd`` chunk for a one-track format 0 file."""
    return struct.pack(
        ">4sIHHH", HEADER_TAG, HEADER_LENGTH, SMF_FORMAT, TRACK_COUNT, TICKS_PER_BEAT
    )


def bpm_to_tempo(bpm: float) -> int:
    """Microseconds per quarter note for a tempo in beats per minute.

    Raises:
        InvalidSettingsError: If the tempo does not fit the 24-bit field.
    """
    if bpm <= 0:
        raise InvalidSettingsError(f"bpm must be positive, got {bpm}")
    tempo = tempo_for_bpm(bpm)
    if not 1 <= tempo <= MAX_TEMPO:
        raise InvalidSettingsError(f"bpm {bpm} cannot be written as a MIDI tempo")
    return tempo


def build_tempo_event(bpm: float) -> bytes:
    """Return the set-tempo meta-event at delta-time 0."""
    tempo = bpm_to_tempo(bpm)
    return b"\x00" + SET_TEMPO_PREFIX + tempo.to_bytes(3, "big")


def _check_note(note: Note) -> None:
    """Reject notes whose values cannot be written as MIDI data bytes."""
    if not 0 <= note.pitch <= 127:
        raise OutOfRangeNoteError(f"Pitch {note.pitch} is outside 0-127")
    if not 1 <= note.velocity <= 127:
        raise OutOfRangeNoteError(f"Velocity {note.velocity} is outside 1-127")
    if note.start_time < 0 or note.duration < 1:
        raise OutOfRangeNoteError(
            f"Note at {note.start_time} with duration {note.duration} is not writable"
        )


def build_linear_events(notes: list[Note]) -> list[MidiEvent]:
    """Expand notes into note-on/note-off events ordered by tick.

    Each note yields an on-event at its start and an off-event (velocity 0)
    at its end. The sort is stable, so events sharing a tick keep the order
    in which they were produced.

    Raises:
        OutOfRangeNoteError: If a note has an illegal pitch, velocity or timing.
    """
    timeline: list[MidiEvent] = []
    for note in notes:
        _check_note(note)
        timeline.append(
            MidiEvent(
                ticks=note.start_time,
                kind=EventKind.NOTE_ON,
                pitch=note.pitch,
                velocity=note.velocity,
            )
        )
        timeline.append(
            MidiEvent(
                ticks=note.start_time + note.duration,
                kind=EventKind.NOTE_OFF,
                pitch=note.pitch,
                velocity=0,
            )
        )

    return sorted(timeline, key=lambda e: e.ticks)


def encode_track_events(events: list[MidiEvent], channel: int = 0) -> bytes:
    """Encode sorted events as delta-timed channel messages.

    Both event kinds use the note-on status byte; a release is a note-on
    with velocity 0.

    Args:
        events: Events sorted ascending by ``ticks``.
        channel: Zero-based MIDI channel (0-15).

    Returns:
        Encoded events without the tempo and end-of-track meta-events.

    Raises:
        InvalidSettingsError: If ``channel`` is not in 0-15.
        ValueError: If ``events`` is not sorted by tick.
    """
    if not 0 <= channel <= 15:
        raise InvalidSettingsError(f"MIDI channel must be 0-15, got {channel}")

    status = NOTE_ON_STATUS | channel
    data = bytearray()
    cursor = 0
    for event in events:
        delta = event.ticks - cursor
        if delta < 0:
            raise ValueError(f"Events out of order at tick {event.ticks}")
        data += encode_variable_length(delta)
        data += bytes((status, event.pitch, event.velocity))
        cursor = event.ticks
    return bytes(data)


def build_track_chunk(events: list[MidiEvent], bpm: float, channel: int = 0) -> bytes:
    """Return the complete ``MTrk`` chunk: tempo, events, end of track."""
    body = build_tempo_event(bpm) + encode_track_events(events, channel) + END_OF_TRACK
    return struct.pack(">4sI", TRACK_TAG, len(body)) + body


def write_midi_file(notes: list[Note], tempo_bpm: float = 120, channel: int = 0) -> bytes:
    """Generate a Standard MIDI File from a list of notes.

    Args:
        notes: Notes in any order.
        tempo_bpm: Tempo in beats per minute (default 120).
        channel: Zero-based MIDI channel (default 0).

    Returns:
        MIDI file data as bytes, suitable for writing to a .mid file. An
        empty note list still yields a valid file holding only the tempo and
        end-of-track events.

    Raises:
        OutOfRangeNoteError: If a note cannot be represented.
        InvalidSettingsError: If the tempo or channel cannot be represented.
    """
    events = build_linear_events(notes)
    midi_bytes = build_header_chunk() + build_track_chunk(events, tempo_bpm, channel)
    logger.debug(f"Wrote {len(notes)} notes as {len(midi_bytes)} MIDI bytes")
    return midi_bytes


def midi_to_audio(midi_path: str) -> str | None:
    """Render a MIDI file to a WAV preview using software synthesis.

    Converts a MIDI file to a WAV audio file using the pretty_midi library's
    built-in sine synthesizer. The output is normalized to prevent clipping.

    Args:
        midi_path: Path to the input MIDI file to synthesize.

    Returns:
        Path to the generated WAV file, or None if synthesis failed.
        The WAV file has the same base name as the input MIDI file.
    """
    try:
        import pretty_midi
        import soundfile as sf

        pretty_midi_obj = pretty_midi.PrettyMIDI(midi_path)
        audio_data = pretty_midi_obj.synthesize(fs=44100)

        # Normalize audio to prevent clipping
        peak_amplitude = np.max(np.abs(audio_data)) if audio_data.size else 0
        if peak_amplitude > 0:
            audio_data = audio_data / peak_amplitude

        wav_path = os.path.splitext(midi_path)[0] + ".wav"
        sf.write(wav_path, audio_data, 44100)

        return wav_path

    except Exception as e:
        logger.error(f"Failed to synthesize MIDI to audio: {e}")
        return None
