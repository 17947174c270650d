"""
signal_stats.py
---------------
Amplitude statistics over raw seismic series: STA/LTA trigger ratio, a sliding
window variance extractor (the dashboard's "CNN" pattern layer) and a peak/mean
spectral burst detector. Pure functions, no state.
"""

from dataclasses import dataclass, field
import math
from typing import Any, Dict, List, Sequence

from seismoai.config import CNN_KERNEL_SIZE, LTA_WINDOW, STA_WINDOW

PATTERN_STRENGTH_CAP = 10.0


@dataclass
class PatternExtraction:
    """Per-window standard deviations plus their capped mean"""
    patterns: List[float] = field(default_factory=list)
    strength: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {'patterns': list(self.patterns), 'strength': self.strength}


@dataclass
class SpectralPattern:
    pattern: str = "none"
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {'pattern': self.pattern, 'confidence': self.confidence}


def calculate_sta_lta(data: Sequence[float], sta_window: int = STA_WINDOW, lta_window: int = LTA_WINDOW) -> float:
    """
    Short-term over long-term mean absolute amplitude.
    Returns 0.0 when the series is shorter than the long window or the long
    window is silent. Ratios well above 1 flag a sudden amplitude increase.
    """
    if len(data) < lta_window:
        return 0.0
    sta = sum(abs(x) for x in data[-sta_window:]) / sta_window
    lta = sum(abs(x) for x in data[-lta_window:]) / lta_window
    return sta / lta if lta > 0 else 0.0


def extract_patterns_with_cnn(series: Sequence[float], kernel_size: int = CNN_KERNEL_SIZE) -> PatternExtraction:
    """
    Slide a `kernel_size` window with stride 1 and record each window's
    population standard deviation. Strength is the mean of those, capped at 10.
    A series shorter than the kernel comes back unchanged with strength 0.
    """
    if len(series) < kernel_size:
        return PatternExtraction(patterns=list(series), strength=0.0)

    patterns: List[float] = []
    for i in range(len(series) - kernel_size + 1):
        window = series[i:i + kernel_size]
        mean = sum(window) / kernel_size
        variance = sum((x - mean) ** 2 for x in window) / kernel_size
        patterns.append(math.sqrt(variance))

    strength = sum(patterns) / len(patterns)
    return PatternExtraction(patterns=patterns, strength=min(strength, PATTERN_STRENGTH_CAP))


def detect_with_cnn(frequency_data: Sequence[float]) -> SpectralPattern:
    """Classify a frequency spectrum by its peak-to-mean ratio"""
    if len(frequency_data) == 0:
        return SpectralPattern("none", 0.0)
    max_freq = max(frequency_data)
    avg_freq = sum(frequency_data) / len(frequency_data)
    ratio = max_freq / (avg_freq or 1)

    if ratio > 3:
        return SpectralPattern("high_energy_burst", min(ratio / 5, 1.0))
    if ratio > 2:
        return SpectralPattern("elevated_activity", (ratio - 1) / 2)
    return SpectralPattern("normal", 0.5)
