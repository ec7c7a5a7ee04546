from __future__ import annotations

import numpy as np

from tonelab.process import calculate_histogram


def test_histogram_counts_each_channel() -> None:
    image = np.zeros((2, 2, 4), dtype=np.uint8)
    image[0, 0, :3] = (10, 20, 30)
    image[0, 1, :3] = (10, 0, 30)
    image[..., 3] = 255

    hist = calculate_histogram(image)
    assert hist.total_pixels == 4
    for counts in (hist.red, hist.green, hist.blue, hist.luminance):
        assert counts.shape == (256,)
        assert int(counts.sum()) == 4
    assert int(hist.red[10]) == 2
    assert int(hist.red[0]) == 2
    assert int(hist.green[20]) == 1
    assert int(hist.blue[30]) == 2
    assert hist.get_peak_value() >= 3


def test_histogram_normalization() -> None:
    image = np.zeros((1, 4, 4), dtype=np.uint8)
    hist = calculate_histogram(image)
    assert hist.get_peak_value() == 4
    assert float(hist.get_normalized_red()[0]) == 1.0
    assert float(hist.get_normalized_luminance().max()) == 1.0


def test_empty_image_has_zero_normalized_tables() -> None:
    hist = calculate_histogram(np.zeros((0, 0, 4), dtype=np.uint8))
    assert hist.total_pixels == 0
    assert hist.get_peak_value() == 0
    assert not hist.get_normalized_green().any()


def test_histogram_does_not_mutate_image() -> None:
    image = np.full((3, 3, 4), 42, dtype=np.uint8)
    original = image.copy()
    calculate_histogram(image)
    assert np.array_equal(image, original)
