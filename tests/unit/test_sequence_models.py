"""
Unit tests for the fixed-weight sequence scorers.
"""

import math
import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from seismoai.sequence_models import (
    SeismicLSTM,
    predict_probability_with_ann,
    predict_with_ann,
)


class TestSeismicLSTM:

    def test_short_series_returns_mean(self):
        assert SeismicLSTM().process_sequence([1.0, 2.0, 3.0]) == pytest.approx(2.0)

    def test_empty_series(self):
        assert SeismicLSTM().process_sequence([]) == 0.0

    def test_zero_input_keeps_state_at_zero(self):
        assert SeismicLSTM().process_sequence([0.0] * 30) == 0.0

    def test_single_step_matches_gate_arithmetic(self):
        x = 2.0
        f = 1 / (1 + math.exp(-0.3 * x))
        i = 1 / (1 + math.exp(-0.4 * x))
        c = f * 0.0 + i * math.tanh(0.6 * x)
        o = 1 / (1 + math.exp(-0.5 * x))
        expected = o * math.tanh(c)
        assert SeismicLSTM().process_sequence([x], sequence_length=1) == pytest.approx(expected)

    def test_only_last_window_is_used(self):
        lstm = SeismicLSTM()
        tail = [0.5] * 30
        assert lstm.process_sequence([100.0] * 10 + tail) == pytest.approx(lstm.process_sequence(tail))

    def test_state_resets_between_calls(self):
        lstm = SeismicLSTM()
        series = [float(v % 7) for v in range(40)]
        first = lstm.process_sequence(series)
        lstm.process_sequence([9.0] * 35)
        assert lstm.process_sequence(series) == first

    def test_output_bounded(self):
        score = SeismicLSTM().process_sequence([-8.0, 6.0] * 20)
        assert 0.0 <= score < 1.0


class TestLinearAnn:

    def test_empty_history(self):
        assert predict_with_ann([]) == 0.0

    @pytest.mark.parametrize("history,expected", [([5.0], 5.0), ([4.0, 5.5], 5.5)])
    def test_short_history_returns_latest(self, history, expected):
        assert predict_with_ann(history) == expected

    def test_most_recent_first_weighting(self):
        # reversed tail = [3, 2, 1]
        assert predict_with_ann([9.0, 1.0, 2.0, 3.0]) == pytest.approx(3 * 0.3 + 2 * 0.5 + 1 * 0.2)

    def test_custom_weights(self):
        assert predict_with_ann([1.0, 2.0, 3.0], weights=[1.0, 0.0, 0.0]) == pytest.approx(3.0)

    def test_floored_at_zero(self):
        assert predict_with_ann([-1.0, -1.0, -1.0]) == 0.0


class TestProbabilityAnn:

    def test_neutral_inputs_give_half(self):
        assert predict_probability_with_ann([], 0.0, 0.0) == pytest.approx(0.5)

    def test_matches_tanh_then_sigmoid(self):
        hidden = math.tanh(2.0 * 0.3 + 1.0 * 0.25 + 0.5 * 0.2)
        expected = 1 / (1 + math.exp(-hidden * 0.5))
        assert predict_probability_with_ann([1.0, 3.0], 1.0, 0.5) == pytest.approx(expected)

    def test_monotonic_in_baseline(self):
        low = predict_probability_with_ann([1.0], 0.5, 0.0)
        high = predict_probability_with_ann([1.0], 2.0, 0.0)
        assert high > low

    @pytest.mark.parametrize("baseline", [-1e6, -3.0, 0.0, 3.0, 1e6])
    def test_always_a_probability(self, baseline):
        p = predict_probability_with_ann([2.0, 8.0], baseline, -baseline)
        assert 0.0 <= p <= 1.0
