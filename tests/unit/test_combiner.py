"""
Unit tests for the six-model blend and raw-signal assessment.
"""

import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from seismoai.combiner import (
    SCORE_WEIGHTS,
    assess_seismic_signal,
    calculate_combined_seismic_score,
)


def test_weights_sum_to_one():
    assert sum(SCORE_WEIGHTS.values()) == pytest.approx(1.0)


def test_all_inputs_at_ceiling_gives_one():
    assert calculate_combined_seismic_score(10, 9, 300, 12, 8, 1.0) == pytest.approx(1.0)


def test_all_inputs_zero_gives_zero():
    assert calculate_combined_seismic_score(0, 0, 0, 0, 0, 0) == 0.0


def test_inputs_beyond_ceiling_are_capped():
    assert calculate_combined_seismic_score(100, 90, 3000, 120, 80, 5.0) == pytest.approx(1.0)


def test_negative_inputs_do_not_go_below_zero():
    assert calculate_combined_seismic_score(-10, -9, -300, -12, -8, -1.0) == 0.0


@pytest.mark.parametrize("kwargs,expected", [
    ({'sta_lta': 10}, 0.15),
    ({'epic_mag': 4.5}, 0.10),
    ({'finder_extent': 150}, 0.075),
    ({'plum_intensity': 12}, 0.20),
    ({'ann_prediction': 4}, 0.075),
    ({'cnn_confidence': 1.0}, 0.15),
])
def test_single_model_contribution(kwargs, expected):
    inputs = dict(sta_lta=0, epic_mag=0, finder_extent=0, plum_intensity=0, ann_prediction=0, cnn_confidence=0)
    inputs.update(kwargs)
    assert calculate_combined_seismic_score(**inputs) == pytest.approx(expected)


def test_quiet_signal_assessment():
    result = assess_seismic_signal([], [], [], [], [])
    assert result.sta_lta == 0.0
    assert result.epic_magnitude == 0.0
    assert result.epic_confidence == 0.0
    assert result.spectral_pattern == "none"
    assert result.ann_prediction == 0.0
    assert 0.0 <= result.combined_score < 0.05


def test_strong_signal_scores_higher():
    quiet = assess_seismic_signal([1.0] * 50, [1.0] * 3, [10.0] * 3, [1.0] * 8, [2.0, 2.0, 2.0])
    strong = assess_seismic_signal(
        [1.0] * 40 + [20.0] * 10,
        [1000.0] * 10,
        [10.0] * 10,
        [0.0] * 7 + [10.0],
        [5.0, 6.0, 7.0],
    )
    assert strong.sta_lta > quiet.sta_lta
    assert strong.spectral_pattern == "high_energy_burst"
    assert strong.combined_score > quiet.combined_score
    assert 0.0 <= strong.combined_score <= 1.0


def test_assessment_to_dict():
    result = assess_seismic_signal([1.0] * 50, [10.0], [5.0], [1.0, 2.0], [1.0, 2.0, 3.0])
    data = result.to_dict()
    assert data['combined_score'] == result.combined_score
    assert set(data) >= {'sta_lta', 'epic_magnitude', 'rupture_extent', 'intensity', 'ann_prediction'}
