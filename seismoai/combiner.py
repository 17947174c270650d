"""
combiner.py
-----------
Blend of the six signal-level models into one 0-1 seismic score.
Each input is normalized against its own ceiling before weighting.
"""

from dataclasses import dataclass, asdict
import logging
from typing import Any, Dict, Sequence

from seismoai.early_warning import calculate_epic, calculate_finder, calculate_plum
from seismoai.sequence_models import predict_with_ann
from seismoai.signal_stats import calculate_sta_lta, detect_with_cnn

logger = logging.getLogger(__name__)

# weights sum to 1.0
SCORE_WEIGHTS: Dict[str, float] = {
    'sta_lta': 0.15,
    'epic': 0.20,
    'finder': 0.15,
    'plum': 0.20,
    'ann': 0.15,
    'cnn': 0.15,
}
SCORE_CEILINGS: Dict[str, float] = {
    'sta_lta': 10.0,
    'epic': 9.0,
    'finder': 300.0,
    'plum': 12.0,
    'ann': 8.0,
    'cnn': 1.0,
}


def _normalize(value: float, ceiling: float) -> float:
    return max(0.0, min(value / ceiling, 1.0))


def calculate_combined_seismic_score(
    sta_lta: float,
    epic_mag: float,
    finder_extent: float,
    plum_intensity: float,
    ann_prediction: float,
    cnn_confidence: float,
) -> float:
    inputs = {
        'sta_lta': sta_lta,
        'epic': epic_mag,
        'finder': finder_extent,
        'plum': plum_intensity,
        'ann': ann_prediction,
        'cnn': cnn_confidence,
    }
    score = sum(_normalize(inputs[k], SCORE_CEILINGS[k]) * SCORE_WEIGHTS[k] for k in SCORE_WEIGHTS)
    return max(0.0, min(score, 1.0))


@dataclass
class SeismicAssessment:
    """Every sub-model output for one signal snapshot plus the blended score"""
    sta_lta: float
    epic_magnitude: float
    epic_confidence: float
    rupture_extent: float
    intensity: float
    ann_prediction: float
    spectral_pattern: str
    spectral_confidence: float
    combined_score: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def assess_seismic_signal(
    waveform: Sequence[float],
    amplitudes: Sequence[float],
    distances: Sequence[float],
    spectrum: Sequence[float],
    magnitude_history: Sequence[float],
    depth_km: float = 10.0,
    distance_km: float = 0.0,
) -> SeismicAssessment:
    """
    Run all six models on raw arrays. The EPIC magnitude drives both the
    rupture (FinDer) and ground-motion (PLUM) estimates.
    """
    sta_lta = calculate_sta_lta(waveform)
    epic = calculate_epic(distances, amplitudes)
    rupture = calculate_finder(epic.mag, depth_km)
    motion = calculate_plum(epic.mag, distance_km)
    ann = predict_with_ann(magnitude_history)
    spectral = detect_with_cnn(spectrum)

    score = calculate_combined_seismic_score(
        sta_lta, epic.mag, rupture.extent, motion.intensity, ann, spectral.confidence
    )
    logger.debug(f"Assessment: sta_lta={sta_lta:.3f} epic={epic.mag:.2f} score={score:.3f}")
    return SeismicAssessment(
        sta_lta=sta_lta,
        epic_magnitude=epic.mag,
        epic_confidence=epic.confidence,
        rupture_extent=rupture.extent,
        intensity=motion.intensity,
        ann_prediction=ann,
        spectral_pattern=spectral.pattern,
        spectral_confidence=spectral.confidence,
        combined_score=score,
    )
