"""
Pydantic models for the HTTP surface.
Request bodies mirror the engine's dataclasses; responses are the engine
outputs' `to_dict()` shapes.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict, Any, Tuple
from enum import Enum


class RiskLevel(str, Enum):
    """Risk buckets returned by predictions and forecasts"""
    LOW = "Low"
    MODERATE = "Moderate"
    ELEVATED = "Elevated"
    HIGH = "High"
    CRITICAL = "Critical"


class SeismicRegionIn(BaseModel):
    id: str
    name: str
    latitude: float = 0.0
    longitude: float = 0.0
    historical_magnitudes: List[float] = Field(default_factory=list)
    recent_activity: List[float] = Field(default_factory=list)
    fault_depth: float = 0.0
    tectonic_plate_velocity: float = 0.0


class PredictionRequest(BaseModel):
    region: SeismicRegionIn
    radius_km: float = Field(100.0, ge=0)
    min_magnitude: float = 0.0
    seed: Optional[int] = None  # reproducible bootstrap/confidence


class PredictionResponse(BaseModel):
    region: str
    probability_7_days: float
    probability_30_days: float
    probability_1_year: float
    confidence: float
    risk_level: RiskLevel
    expected_magnitude_range: Tuple[float, float]
    affected_radius: float
    top_factors: List[str]
    generated_at: datetime = Field(default_factory=datetime.utcnow)


class RegionalRiskIn(BaseModel):
    region: str
    recent_activity: List[float] = Field(default_factory=list)
    historical_baseline: float = 0.0
    depth: float = 0.0
    latitude: float = 0.0
    longitude: float = 0.0


class ForecastRequest(BaseModel):
    regions: List[RegionalRiskIn]
    days_ahead: int = Field(7, ge=1)


class ForecastSearchRequest(BaseModel):
    region_name: str
    regions: List[RegionalRiskIn]


class CombinedScoreRequest(BaseModel):
    """Raw sub-model outputs; each is normalized against its own ceiling"""
    sta_lta: float = 0.0
    epic_mag: float = 0.0
    finder_extent: float = 0.0
    plum_intensity: float = 0.0
    ann_prediction: float = 0.0
    cnn_confidence: float = 0.0


class AssessmentRequest(BaseModel):
    waveform: List[float] = Field(default_factory=list)
    amplitudes: List[float] = Field(default_factory=list)
    distances: List[float] = Field(default_factory=list)
    spectrum: List[float] = Field(default_factory=list)
    magnitude_history: List[float] = Field(default_factory=list)
    depth_km: float = 10.0
    distance_km: float = Field(0.0, ge=0)


class ActivityRequest(BaseModel):
    """USGS GeoJSON feature collection to bucket by day, ISO week and year"""
    feed: Dict[str, Any]


class RegionMetricsRequest(BaseModel):
    """USGS GeoJSON feature collection plus named (min_lat, max_lat, min_lng, max_lng) boxes"""
    feed: Dict[str, Any]
    regions: Dict[str, Tuple[float, float, float, float]]


class TreeEnsembleRequest(BaseModel):
    """Train the tree learners on caller rows and score `queries` with each"""
    features: List[List[float]]
    labels: List[float]
    queries: List[List[float]]
    num_trees: int = Field(50, ge=1, le=500)
    iterations: int = Field(10, ge=1, le=200)
    seed: Optional[int] = None
