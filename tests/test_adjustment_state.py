from __future__ import annotations

import pytest

from tonelab.adjust import Adjustment, AdjustmentVector, ColorGrading, LensCorrections


def test_default_vector_is_neutral() -> None:
    adj = AdjustmentVector()
    assert not adj.has_changes()
    assert adj.summary() == ["No adjustments"]


def test_get_set_by_adjustment() -> None:
    adj = AdjustmentVector()
    adj.set(Adjustment.CONTRAST, 25)
    assert adj.contrast == 25.0
    assert adj.get(Adjustment.CONTRAST) == 25.0
    assert adj.has_changes()


def test_validate_clamps_ranges() -> None:
    adj = AdjustmentVector(exposure=9.0, contrast=-400.0, sharpening=-5.0, noise_reduction=150.0)
    adj.color_grading.global_hue = 720.0
    adj.color_grading.shadows_saturation = -300.0
    adj.lens_corrections.vignetting = 500.0
    adj.validate()
    assert adj.exposure == 5.0
    assert adj.contrast == -100.0
    assert adj.sharpening == 0.0
    assert adj.noise_reduction == 100.0
    assert adj.color_grading.global_hue == 180.0
    assert adj.color_grading.shadows_saturation == -100.0
    assert adj.lens_corrections.vignetting == 100.0


def test_reset_clears_everything() -> None:
    adj = AdjustmentVector(exposure=1.0, tint=10.0)
    adj.tone_curve.add_point(0.5, 0.6)
    adj.color_grading.midtones_hue = 30.0
    adj.lens_corrections.lens_profile_enabled = True
    adj.reset()
    assert not adj.has_changes()


def test_lens_profile_flag_counts_as_change() -> None:
    lens = LensCorrections(lens_profile_enabled=True)
    assert lens.has_changes()
    assert not ColorGrading().has_changes()


def test_summary_lists_non_neutral_values() -> None:
    adj = AdjustmentVector(exposure=0.5, temperature=10.0, clarity=-20.0)
    lines = adj.summary()
    assert "Exposure: +0.50 EV" in lines
    assert "Temperature: +10 (6000K)" in lines
    assert "Clarity: -20" in lines


def test_dict_round_trip_and_unknown_keys() -> None:
    adj = AdjustmentVector(exposure=0.3, vibrance=12.0)
    adj.tone_curve.add_point(0.4, 0.5)
    adj.color_grading.highlights_hue = 45.0
    assert AdjustmentVector.from_dict(adj.to_dict()) == adj

    with pytest.raises(ValueError, match="unknown adjustment: glow"):
        AdjustmentVector.from_dict({"glow": 3})
