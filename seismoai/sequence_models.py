"""
sequence_models.py
------------------
Fixed-weight sequence scorers. Nothing here learns: the gate weights and the
ANN weights are constants, and every call starts from a clean state.
"""

from dataclasses import dataclass
import math
from typing import Optional, Sequence, Tuple

from seismoai.config import LSTM_SEQUENCE_LENGTH

DEFAULT_ANN_WEIGHTS: Tuple[float, float, float] = (0.3, 0.5, 0.2)
PROBABILITY_INPUT_WEIGHTS: Tuple[float, float, float] = (0.3, 0.25, 0.2)
PROBABILITY_OUTPUT_WEIGHT = 0.5


def _sigmoid(z: float) -> float:
    # numerically stable logistic
    if z >= 0:
        ez = math.exp(-z)
        return 1.0 / (1.0 + ez)
    else:
        ez = math.exp(z)
        return ez / (1.0 + ez)


@dataclass
class SeismicLSTM:
    """
    Single recurrent cell with forget, input and output gates run over the tail
    of a magnitude series. Cell and hidden state are scalars reset per call.

    Usage:
        score = SeismicLSTM().process_sequence(recent_magnitudes)
    """
    sequence_length: int = LSTM_SEQUENCE_LENGTH

    # (hidden, input) weight pairs per gate
    forget_weights: Tuple[float, float] = (0.5, 0.3)
    input_weights: Tuple[float, float] = (0.4, 0.4)
    candidate_weights: Tuple[float, float] = (0.3, 0.6)
    output_weights: Tuple[float, float] = (0.5, 0.5)

    def process_sequence(self, time_series: Sequence[float], sequence_length: Optional[int] = None) -> float:
        window = self.sequence_length if sequence_length is None else sequence_length
        if len(time_series) < window:
            if len(time_series) == 0:
                return 0.0
            return sum(time_series) / len(time_series)

        cell_state = 0.0
        hidden_state = 0.0
        for x in time_series[max(0, len(time_series) - window):]:
            wh, wx = self.forget_weights
            forget_gate = _sigmoid(wh * hidden_state + wx * x)

            wh, wx = self.input_weights
            input_gate = _sigmoid(wh * hidden_state + wx * x)
            wh, wx = self.candidate_weights
            cell_update = math.tanh(wh * hidden_state + wx * x)
            cell_state = forget_gate * cell_state + input_gate * cell_update

            wh, wx = self.output_weights
            output_gate = _sigmoid(wh * hidden_state + wx * x)
            hidden_state = output_gate * math.tanh(cell_state)

        return abs(hidden_state)


def predict_with_ann(history: Sequence[float], weights: Sequence[float] = DEFAULT_ANN_WEIGHTS) -> float:
    """Weighted sum of the last three values (most recent first), floored at 0"""
    if len(history) < 3:
        return history[-1] if len(history) > 0 else 0.0
    recent = list(reversed(history[-3:]))
    prediction = sum(value * w for value, w in zip(recent, weights))
    return max(0.0, prediction)


def predict_probability_with_ann(patterns: Sequence[float], historical_baseline: float, recent_trend: float) -> float:
    """
    Map pattern strength, baseline activity and trend onto a probability:
    linear input layer, tanh hidden unit, logistic output.
    """
    avg_pattern = sum(patterns) / len(patterns) if len(patterns) > 0 else 0.0
    inputs = (avg_pattern, historical_baseline, recent_trend)

    hidden = sum(value * w for value, w in zip(inputs, PROBABILITY_INPUT_WEIGHTS))
    hidden = math.tanh(hidden)

    output = _sigmoid(hidden * PROBABILITY_OUTPUT_WEIGHT)
    return max(0.0, min(1.0, output))
