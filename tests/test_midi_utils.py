import io

import mido
import pytest

from pixel_synth.exceptions import InvalidSettingsError, OutOfRangeNoteError
from pixel_synth.midi_utils import (
    END_OF_TRACK,
    build_header_chunk,
    build_linear_events,
    build_tempo_event,
    bpm_to_tempo,
    encode_track_events,
    encode_variable_length,
    midi_to_audio,
    write_midi_file,
)
from pixel_synth.models import EventKind, MidiEvent, Note

HEADER = b"MThd\x00\x00\x00\x06\x00\x00\x00\x01\x01\xe0"
TEMPO_120 = b"\x00\xff\x51\x03\x07\xa1\x20"


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, b"\x00"),
        (0x7F, b"\x7f"),
        (0x80, b"\x81\x00"),
        (300, b"\x82\x2c"),
        (480, b"\x83\x60"),
        (0x3FFF, b"\xff\x7f"),
        (0x4000, b"\x81\x80\x00"),
        (0x0FFFFFFF, b"\xff\xff\xff\x7f"),
    ],
)
def test_encode_variable_length(value, expected):
    assert encode_variable_length(value) == expected


@pytest.mark.parametrize("value", [-1, 0x10000000])
def test_encode_variable_length_out_of_range(value):
    with pytest.raises(ValueError):
        encode_variable_length(value)


def test_header_chunk_bytes():
    assert build_header_chunk() == HEADER


def test_tempo_event_at_120_bpm():
    assert bpm_to_tempo(120) == 500000
    assert build_tempo_event(120) == TEMPO_120


@pytest.mark.parametrize(
    "bpm, tempo",
    [(1536, 39063), (60, 1000000), (128, 468750), (4, 15000000)],
)
def test_tempo_rounds_halves_up(bpm, tempo):
    # 60,000,000 / 1536 is exactly 39062.5
    assert bpm_to_tempo(bpm) == tempo
    assert build_tempo_event(bpm)[-3:] == tempo.to_bytes(3, "big")


@pytest.mark.parametrize("bpm", [0, -10, 3])
def test_unwritable_tempo_raises(bpm):
    # 3 bpm needs 20,000,000 µs per beat, more than 24 bits hold
    with pytest.raises(InvalidSettingsError):
        bpm_to_tempo(bpm)


def test_write_midi_file_empty_is_exact():
    data = write_midi_file([], tempo_bpm=120)
    body = TEMPO_120 + END_OF_TRACK
    assert data == HEADER + b"MTrk\x00\x00\x00\x0b" + body


def test_write_midi_file_single_note_bytes():
    note = Note(pitch=60, velocity=100, start_time=0, duration=480)
    data = write_midi_file([note], tempo_bpm=120)

    events = b"\x00\x90\x3c\x64" + b"\x83\x60\x90\x3c\x00"
    body = TEMPO_120 + events + END_OF_TRACK
    assert data == HEADER + b"MTrk" + len(body).to_bytes(4, "big") + body


def test_build_linear_events_is_stable(notes):
    events = build_linear_events(notes)
    assert [(e.ticks, e.kind, e.pitch) for e in events] == [
        (0, EventKind.NOTE_ON, 62),
        (480, EventKind.NOTE_ON, 60),  # produced before the release of 62
        (480, EventKind.NOTE_OFF, 62),
        (960, EventKind.NOTE_OFF, 60),
    ]
    assert all(e.velocity == 0 for e in events if e.kind is EventKind.NOTE_OFF)


def test_release_before_attack_when_listed_first():
    first = Note(pitch=60, velocity=100, start_time=0, duration=480)
    second = Note(pitch=64, velocity=100, start_time=480, duration=480)
    events = build_linear_events([first, second])
    assert (events[1].kind, events[1].pitch) == (EventKind.NOTE_OFF, 60)
    assert (events[2].kind, events[2].pitch) == (EventKind.NOTE_ON, 64)


def test_out_of_range_note_rejected():
    bad = Note.model_construct(pitch=128, velocity=100, start_time=0, duration=10)
    with pytest.raises(OutOfRangeNoteError):
        build_linear_events([bad])
    silent = Note.model_construct(pitch=60, velocity=0, start_time=0, duration=10)
    with pytest.raises(OutOfRangeNoteError):
        write_midi_file([silent])


def test_channel_sets_status_nibble(midi_decoder, notes):
    parsed = midi_decoder(write_midi_file(notes, channel=9))
    assert {status for _, status, _, _ in parsed.channel_events} == {0x99}


@pytest.mark.parametrize("channel", [-1, 16])
def test_invalid_channel_rejected(channel):
    with pytest.raises(InvalidSettingsError):
        write_midi_file([], channel=channel)


def test_unsorted_events_rejected():
    events = [
        MidiEvent(ticks=100, kind=EventKind.NOTE_ON, pitch=60, velocity=90),
        MidiEvent(ticks=50, kind=EventKind.NOTE_OFF, pitch=60, velocity=0),
    ]
    with pytest.raises(ValueError):
        encode_track_events(events)


def test_deltas_sum_to_last_event(midi_decoder):
    notes = [
        Note(pitch=40 + i, velocity=64, start_time=(i * 37) % 500, duration=60 + i)
        for i in range(20)
    ]
    parsed = midi_decoder(write_midi_file(notes))
    last_off = max(n.end_time for n in notes)

    assert parsed.header_len == 6
    assert (parsed.format, parsed.ntracks, parsed.division) == (0, 1, 480)
    assert parsed.trailing == b""
    assert len(parsed.channel_events) == 2 * len(notes)
    assert parsed.end_tick == last_off
    assert sum(parsed.deltas) == last_off
    # every status byte is explicit: no running status
    assert all(status == 0x90 for _, status, _, _ in parsed.channel_events)


def test_mido_reads_written_file(notes):
    data = write_midi_file(notes, tempo_bpm=90)
    midi = mido.MidiFile(file=io.BytesIO(data))

    assert midi.type == 0
    assert midi.ticks_per_beat == 480
    messages = list(midi.tracks[0])
    assert messages[0].type == "set_tempo"
    assert messages[0].tempo == 666667
    note_msgs = [m for m in messages if m.type == "note_on"]
    assert len(note_msgs) == 4
    assert sorted(m.note for m in note_msgs if m.velocity > 0) == [60, 62]
    assert messages[-1].type == "end_of_track"


def test_midi_to_audio_missing_file_returns_none(tmp_path):
    assert midi_to_audio(str(tmp_path / "missing.mid")) is None
