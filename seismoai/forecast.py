"""
forecast.py
-----------
Regional probabilistic forecast: window-variance pattern strength and a short
recent trend fed through the probability ANN, then decayed per horizon.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Optional, Sequence

from seismoai.config import CONFIDENCE_CEILING
from seismoai.sequence_models import predict_probability_with_ann
from seismoai.signal_stats import extract_patterns_with_cnn

logger = logging.getLogger(__name__)

TREND_LOOKBACK = 7
DECAY_7_DAYS = 0.8
DECAY_30_DAYS = 0.6


@dataclass
class RegionalRiskData:
    region: str
    recent_activity: List[float] = field(default_factory=list)
    historical_baseline: float = 0.0
    depth: float = 0.0
    latitude: float = 0.0
    longitude: float = 0.0


@dataclass
class ForecastResult:
    region: str
    probability: float
    risk_level: str
    confidence: float
    forecast_7_days: float
    forecast_30_days: float
    days_ahead: int = 7

    def to_dict(self) -> Dict[str, Any]:
        return {
            'region': self.region,
            'probability': round(self.probability, 6),
            'risk_level': self.risk_level,
            'confidence': round(self.confidence, 4),
            'forecast_7_days': round(self.forecast_7_days, 6),
            'forecast_30_days': round(self.forecast_30_days, 6),
            'days_ahead': self.days_ahead,
        }


def forecast_risk_level(probability: float) -> str:
    if probability > 0.7:
        return "High"
    if probability > 0.5:
        return "Elevated"
    if probability > 0.3:
        return "Moderate"
    return "Low"


def recent_trend(activity: Sequence[float]) -> float:
    """Change between the latest value and the one up to a week back, per day"""
    if len(activity) == 0:
        return 0.0
    return (activity[-1] - activity[max(0, len(activity) - TREND_LOOKBACK)]) / TREND_LOOKBACK


def forecast_region(region: RegionalRiskData, days_ahead: int = 7) -> ForecastResult:
    extraction = extract_patterns_with_cnn(region.recent_activity)
    probability = predict_probability_with_ann(
        extraction.patterns, region.historical_baseline, recent_trend(region.recent_activity)
    )
    return ForecastResult(
        region=region.region,
        probability=min(probability, 1.0),
        risk_level=forecast_risk_level(probability),
        confidence=min(CONFIDENCE_CEILING, 0.6 + len(region.recent_activity) * 0.05),
        forecast_7_days=probability * DECAY_7_DAYS,
        forecast_30_days=probability * DECAY_30_DAYS,
        days_ahead=days_ahead,
    )


def generate_global_forecast(regional_data: Sequence[RegionalRiskData], days_ahead: int = 7) -> List[ForecastResult]:
    results = [forecast_region(region, days_ahead) for region in regional_data]
    logger.debug(f"Forecast generated for {len(results)} regions")
    return results


def search_regional_risk(region_name: str, regional_data: Sequence[RegionalRiskData]) -> Optional[ForecastResult]:
    """Case-insensitive lookup by region name; None when not found"""
    wanted = region_name.lower()
    for region in regional_data:
        if region.region.lower() == wanted:
            return forecast_region(region)
    return None
