"""
early_warning.py
----------------
Closed-form point estimators borrowed from early-warning systems: EPIC
(magnitude from amplitudes), FinDer (finite rupture extent) and PLUM (ground
motion at distance). Illustrative formulas only.
"""

from dataclasses import dataclass
import math
from typing import Any, Dict, Sequence

MAX_RUPTURE_EXTENT_KM = 300.0
MIN_INTENSITY = 1.0
MAX_INTENSITY = 12.0


@dataclass
class EpicEstimate:
    mag: float = 0.0
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {'mag': self.mag, 'confidence': self.confidence}


@dataclass
class RuptureEstimate:
    rupture_magnitude: float
    extent: float  # km, capped

    def to_dict(self) -> Dict[str, Any]:
        return {'rupture_magnitude': self.rupture_magnitude, 'extent': self.extent}


@dataclass
class GroundMotion:
    intensity: float  # MMI-like, 1..12
    velocity: float

    def to_dict(self) -> Dict[str, Any]:
        return {'intensity': self.intensity, 'velocity': self.velocity}


def calculate_epic(epicenter_distances: Sequence[float], amplitudes: Sequence[float]) -> EpicEstimate:
    """
    Magnitude from the mean station amplitude; confidence grows with the
    number of stations and saturates at ten.
    Distances are accepted for interface parity and not used by the formula.
    """
    if len(amplitudes) == 0:
        return EpicEstimate(0.0, 0.0)
    avg_amp = sum(amplitudes) / len(amplitudes)
    confidence = min(len(amplitudes) / 10, 1.0)
    if avg_amp <= 0:
        return EpicEstimate(0.0, confidence)
    mag = 0.63 + 0.8 * math.log10(avg_amp)
    return EpicEstimate(max(0.0, mag), confidence)


def calculate_finder(magnitude: float, depth: float) -> RuptureEstimate:
    rupture_magnitude = magnitude * 1.05
    extent = 10 ** (0.5 * magnitude - 2.2)
    return RuptureEstimate(rupture_magnitude, min(extent, MAX_RUPTURE_EXTENT_KM))


def calculate_plum(magnitude: float, distance: float) -> GroundMotion:
    # distance in km from the epicenter
    log_dist = math.log10(distance + 10)
    intensity = 2.5 * log_dist - 1.3 + magnitude
    velocity = 10 ** (0.3 * magnitude - 0.4 * log_dist - 2.5)
    return GroundMotion(
        intensity=max(MIN_INTENSITY, min(MAX_INTENSITY, intensity)),
        velocity=max(0.0, velocity),
    )
