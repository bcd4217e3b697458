import struct
from types import SimpleNamespace

import numpy as np
import pytest

from pixel_synth.models import Note, Settings


def solid_rgba(height, width, rgb=(0, 0, 0), alpha=255):
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[..., :3] = rgb
    img[..., 3] = alpha
    return img


def _read_variable_length(data, pos):
    value = 0
    while True:
        byte = data[pos]
        pos += 1
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            return value, pos


def decode_midi(data):
    """Minimal reader for the single-track files the encoder writes."""
    assert data[:4] == b"MThd"
    header_len, fmt, ntracks, division = struct.unpack(">IHHH", data[4:14])
    assert data[14:18] == b"MTrk"
    (track_len,) = struct.unpack(">I", data[18:22])
    body = data[22 : 22 + track_len]

    pos = 0
    tick = 0
    deltas = []
    channel_events = []
    meta_events = []
    while pos < len(body):
        delta, pos = _read_variable_length(body, pos)
        deltas.append(delta)
        tick += delta
        status = body[pos]
        if status == 0xFF:
            meta_type, length = body[pos + 1], body[pos + 2]
            payload = body[pos + 3 : pos + 3 + length]
            meta_events.append((tick, meta_type, payload))
            pos += 3 + length
        else:
            channel_events.append((tick, status, body[pos + 1], body[pos + 2]))
            pos += 3

    return SimpleNamespace(
        header_len=header_len,
        format=fmt,
        ntracks=ntracks,
        division=division,
        track_len=track_len,
        trailing=data[22 + track_len :],
        deltas=deltas,
        end_tick=tick,
        channel_events=channel_events,
        meta_events=meta_events,
    )


@pytest.fixture
def make_rgba():
    return solid_rgba


@pytest.fixture
def midi_decoder():
    return decode_midi


@pytest.fixture
def default_settings():
    return Settings()


@pytest.fixture
def bright_pixel():
    # 1×1 opaque grey pixel, brightness 200
    return solid_rgba(1, 1, (200, 200, 200))


@pytest.fixture
def dark_image():
    return solid_rgba(32, 32, (10, 10, 10))


@pytest.fixture
def noisy_image():
    # Reproducible 48×64 RGBA noise with some transparent pixels
    rng = np.random.default_rng(1234)
    img = rng.integers(0, 256, size=(48, 64, 4), dtype=np.uint8)
    img[..., 3] = np.where(rng.random((48, 64)) < 0.1, 0, 255)
    return img


@pytest.fixture
def notes():
    return [
        Note(pitch=60, velocity=100, start_time=480, duration=480),
        Note(pitch=62, velocity=90, start_time=0, duration=480),
    ]
