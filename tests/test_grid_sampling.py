import numpy as np
import pytest

from pixel_synth.exceptions import InputError, InvalidSettingsError
from pixel_synth.grid_sampling import (
    cell_size,
    find_active_samples,
    is_active,
    perceived_brightness,
    sample_grid,
    sample_point,
)
from pixel_synth.models import Sample


def test_perceived_brightness():
    assert perceived_brightness(255, 0, 0) == pytest.approx(76.245)
    assert perceived_brightness(0, 255, 0) == pytest.approx(149.685)
    assert perceived_brightness(0, 0, 255) == pytest.approx(29.07)
    assert perceived_brightness(255, 255, 255) == pytest.approx(255.0)


def test_cell_size_and_sample_point():
    assert cell_size(100, 50, 10, 5) == (10.0, 10.0)
    assert sample_point(0, 0, 10.0, 10.0) == (5, 5)
    assert sample_point(9, 4, 10.0, 10.0) == (95, 45)
    # Fractional cells still land inside the image
    assert sample_point(3, 0, 0.5, 0.5) == (1, 0)


def test_sample_grid_count_and_order(make_rgba):
    samples = sample_grid(make_rgba(6, 4), resolution_x=2, resolution_y=3)
    assert [(s.x, s.y) for s in samples] == [
        (0, 0),
        (0, 1),
        (0, 2),
        (1, 0),
        (1, 1),
        (1, 2),
    ]


def test_sample_grid_reads_cell_centers(make_rgba):
    img = make_rgba(4, 10)
    # Column 2 is the center of the first of two 5-pixel cells
    img[:, 2, :3] = 255
    samples = sample_grid(img, resolution_x=2, resolution_y=1)
    assert samples[0].brightness == pytest.approx(255.0)
    assert samples[1].brightness == 0.0


def test_sample_grid_keeps_alpha(make_rgba):
    samples = sample_grid(make_rgba(2, 2, (255, 255, 255), alpha=0), 1, 1)
    assert samples[0].alpha == 0
    assert samples[0].brightness <= 255.0


def test_resolution_larger_than_image(make_rgba):
    samples = sample_grid(make_rgba(2, 2, (50, 50, 50)), 5, 5)
    assert len(samples) == 25


def test_sample_grid_rejects_rgb():
    with pytest.raises(InputError):
        sample_grid(np.zeros((4, 4, 3), np.uint8), 2, 2)


@pytest.mark.parametrize("rx, ry", [(0, 4), (4, 0)])
def test_sample_grid_rejects_empty_grid(make_rgba, rx, ry):
    with pytest.raises(InvalidSettingsError):
        sample_grid(make_rgba(4, 4), rx, ry)


@pytest.mark.parametrize(
    "brightness, alpha, active",
    [
        (100.0, 255, False),  # equal to threshold
        (100.01, 255, True),
        (255.0, 0, False),  # transparent
        (255.0, 1, True),
    ],
)
def test_is_active(brightness, alpha, active):
    sample = Sample(x=0, y=0, brightness=brightness, alpha=alpha)
    assert is_active(sample, 100) is active


def test_find_active_samples_preserves_order():
    samples = [
        Sample(x=0, y=0, brightness=200.0, alpha=255),
        Sample(x=0, y=1, brightness=10.0, alpha=255),
        Sample(x=1, y=0, brightness=150.0, alpha=255),
    ]
    assert find_active_samples(samples, 100) == [samples[0], samples[2]]
