"""
feed_features.py
----------------
Adapters from public earthquake feed payloads (USGS GeoJSON summary feeds,
EMSC RSS) to the plain arrays and records the scoring engine consumes.
Nothing here performs network I/O: callers hand in payloads they already
fetched.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
import logging
import re
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from seismoai.prediction_engine import SeismicRegion

logger = logging.getLogger(__name__)

# (min_lat, max_lat, min_lng, max_lng)
Bounds = Tuple[float, float, float, float]

FORECAST_WINDOWS_DAYS = (3, 7, 14, 30)
FORECAST_EVENT_SCALE = 50
EMSC_DEFAULT_DEPTH_KM = 10.0

MAJOR_MAGNITUDE = 7.0

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_MAG_RE = re.compile(r"M\s*(\d+(?:\.\d+)?)")


@dataclass
class EarthquakeEvent:
    id: str
    location: str
    latitude: float
    longitude: float
    magnitude: float
    depth: float
    timestamp: datetime
    source: str = "usgs"
    event_type: str = "earthquake"
    tsunami: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'location': self.location,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'magnitude': self.magnitude,
            'depth': self.depth,
            'timestamp': self.timestamp.isoformat(),
            'source': self.source,
            'event_type': self.event_type,
            'tsunami': self.tsunami,
        }


@dataclass
class RegionalMetrics:
    region: str
    total_events: int
    avg_magnitude: float
    max_magnitude: float
    last_event_time: datetime
    trend: str  # increasing / decreasing / stable

    def to_dict(self) -> Dict[str, Any]:
        return {
            'region': self.region,
            'total_events': self.total_events,
            'avg_magnitude': round(self.avg_magnitude, 3),
            'max_magnitude': self.max_magnitude,
            'last_event_time': self.last_event_time.isoformat(),
            'trend': self.trend,
        }


@dataclass
class DailyActivity:
    day: date
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {'date': self.day.isoformat(), 'count': self.count}


@dataclass
class WeeklyTrend:
    """Events in one ISO week"""
    year: int
    week: int
    count: int
    avg_magnitude: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'week': f"{self.year}-W{self.week:02d}",
            'count': self.count,
            'avg_magnitude': round(self.avg_magnitude, 1),
        }


@dataclass
class YearlyTrend:
    year: int
    count: int
    magnitude_7_plus: int
    avg_magnitude: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'year': self.year,
            'count': self.count,
            'magnitude_7_plus': self.magnitude_7_plus,
            'avg_magnitude': round(self.avg_magnitude, 1),
        }


def _in_bounds(lat: float, lng: float, bounds: Bounds) -> bool:
    min_lat, max_lat, min_lng, max_lng = bounds
    return min_lat <= lat <= max_lat and min_lng <= lng <= max_lng


def _utc_date(ts: datetime) -> date:
    return ts.astimezone(timezone.utc).date() if ts.tzinfo else ts.date()


def parse_usgs_feature(feature: Mapping[str, Any]) -> EarthquakeEvent:
    """
    One GeoJSON feature -> EarthquakeEvent. Missing magnitude/depth read as 0.
    Raises ValueError when the feature, its properties or its coordinates have
    the wrong shape.
    """
    if not isinstance(feature, Mapping):
        raise ValueError(f"feature is {type(feature).__name__}, expected an object")
    props = feature.get('properties') or {}
    geometry = feature.get('geometry') or {}
    if not isinstance(props, Mapping) or not isinstance(geometry, Mapping):
        raise ValueError("properties and geometry must be objects")
    coords = geometry.get('coordinates') or []
    if not isinstance(coords, (list, tuple)):
        raise ValueError(f"coordinates is {type(coords).__name__}, expected an array")
    coords = list(coords) + [0.0] * (3 - len(coords))
    millis = props.get('time') or 0
    return EarthquakeEvent(
        id=str(props.get('id') or feature.get('id') or ""),
        location=props.get('place') or "Unknown",
        latitude=float(coords[1]),
        longitude=float(coords[0]),
        magnitude=float(props.get('mag') or 0.0),
        depth=float(coords[2] or 0.0),
        timestamp=datetime.fromtimestamp(millis / 1000.0, tz=timezone.utc),
        source="usgs",
        event_type=props.get('type') or "earthquake",
        tsunami=bool(props.get('tsunami')),
    )


def parse_usgs_geojson(payload: Mapping[str, Any], bounds: Optional[Bounds] = None) -> List[EarthquakeEvent]:
    """Malformed features are logged and skipped; the rest of the feed still parses"""
    features = payload.get('features') or []
    if not isinstance(features, list):
        logger.warning(f"USGS payload 'features' is {type(features).__name__}, expected a list")
        return []
    events: List[EarthquakeEvent] = []
    for feature in features:
        try:
            event = parse_usgs_feature(feature)
        except (TypeError, ValueError, OverflowError, OSError) as e:
            logger.warning(f"Skipping malformed USGS feature: {e}")
            continue
        if bounds is None or _in_bounds(event.latitude, event.longitude, bounds):
            events.append(event)
    return events


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1]


def parse_emsc_rss(text: str, limit: int = 20, now: Optional[datetime] = None) -> List[EarthquakeEvent]:
    """
    Pull title/point pairs out of an EMSC RSS feed. The feed carries no depth
    or reliable time, so depth defaults to 10 km and time to `now`.
    Items without a title or a two-number point are skipped.
    """
    now = now or datetime.now(timezone.utc)
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        logger.warning(f"Unparseable EMSC feed: {e}")
        return []

    events: List[EarthquakeEvent] = []
    for idx, item in enumerate(list(root.iter('item'))[:limit]):
        title = " ".join((item.findtext('title') or "").split())
        point = next((child.text for child in item if _local_name(child.tag) == 'point'), None)
        coords = _NUMBER_RE.findall(point or "")
        if not title or len(coords) < 2:
            continue
        mag = _MAG_RE.search(title)
        events.append(EarthquakeEvent(
            id=f"emsc_{idx}",
            location=title,
            latitude=float(coords[0]),
            longitude=float(coords[1]),
            magnitude=float(mag.group(1)) if mag else 0.0,
            depth=EMSC_DEFAULT_DEPTH_KM,
            timestamp=now,
            source="emsc",
        ))
    return events


def magnitude_trend(magnitudes: Sequence[float]) -> str:
    """Compare the first five and last five magnitudes once there are more than ten"""
    if len(magnitudes) <= 10:
        return "stable"
    first = sum(magnitudes[:5]) / 5
    last = sum(magnitudes[-5:]) / 5
    if last > first * 1.1:
        return "increasing"
    if last < first * 0.9:
        return "decreasing"
    return "stable"


def aggregate_by_region(events: Sequence[EarthquakeEvent], region_bounds: Mapping[str, Bounds]) -> List[RegionalMetrics]:
    grouped: Dict[str, List[EarthquakeEvent]] = {}
    for event in events:
        for name, bounds in region_bounds.items():
            if _in_bounds(event.latitude, event.longitude, bounds):
                grouped.setdefault(name, []).append(event)

    metrics = []
    for name, region_events in grouped.items():
        magnitudes = [e.magnitude for e in region_events]
        latest = max(region_events, key=lambda e: e.timestamp)
        metrics.append(RegionalMetrics(
            region=name,
            total_events=len(region_events),
            avg_magnitude=sum(magnitudes) / len(magnitudes),
            max_magnitude=max(magnitudes),
            last_event_time=latest.timestamp,
            trend=magnitude_trend(magnitudes),
        ))
    return metrics


def daily_activity(events: Sequence[EarthquakeEvent]) -> List[DailyActivity]:
    """Event counts per UTC calendar day, oldest first"""
    counts: Dict[date, int] = {}
    for event in events:
        day = _utc_date(event.timestamp)
        counts[day] = counts.get(day, 0) + 1
    return [DailyActivity(day, counts[day]) for day in sorted(counts)]


def weekly_trend(events: Sequence[EarthquakeEvent]) -> List[WeeklyTrend]:
    """Count and mean magnitude per ISO (year, week), oldest first"""
    grouped: Dict[Tuple[int, int], List[float]] = {}
    for event in events:
        iso = _utc_date(event.timestamp).isocalendar()
        grouped.setdefault((iso[0], iso[1]), []).append(event.magnitude)
    return [
        WeeklyTrend(year, week, len(mags), sum(mags) / len(mags))
        for (year, week), mags in sorted(grouped.items())
    ]


def yearly_trend(events: Sequence[EarthquakeEvent]) -> List[YearlyTrend]:
    """Count, M7+ count and mean magnitude per UTC calendar year, oldest first"""
    grouped: Dict[int, List[float]] = {}
    for event in events:
        grouped.setdefault(_utc_date(event.timestamp).year, []).append(event.magnitude)
    return [
        YearlyTrend(
            year=year,
            count=len(mags),
            magnitude_7_plus=sum(1 for m in mags if m >= MAJOR_MAGNITUDE),
            avg_magnitude=sum(mags) / len(mags),
        )
        for year, mags in sorted(grouped.items())
    ]


def normalize_for_prediction(events: Sequence[EarthquakeEvent]) -> List[float]:
    """[avg mag / 10, max mag / 10, avg depth / 700, count / 100]"""
    if not events:
        return [0.0, 0.0, 0.0, 0.0]
    magnitudes = [e.magnitude for e in events]
    depths = [e.depth for e in events]
    return [
        sum(magnitudes) / len(magnitudes) / 10,
        max(magnitudes) / 10,
        sum(depths) / len(depths) / 700,
        len(events) / 100,
    ]


def window_forecast(event_times: Sequence[datetime], now: datetime) -> Dict[int, float]:
    """
    Percent chance per look-back window, scaled from the event count in that
    window and bounded to 5..95.
    """
    counts = {days: 0 for days in FORECAST_WINDOWS_DAYS}
    for ts in event_times:
        age = now - ts
        for days in FORECAST_WINDOWS_DAYS:
            if age <= timedelta(days=days):
                counts[days] += 1
    return {
        days: min(95.0, max(5.0, count / FORECAST_EVENT_SCALE * 100))
        for days, count in counts.items()
    }


def region_from_events(
    region_id: str,
    name: str,
    history: Sequence[EarthquakeEvent],
    recent: Sequence[EarthquakeEvent],
    tectonic_plate_velocity: float = 0.0,
) -> SeismicRegion:
    """
    Build a SeismicRegion from two event sets. Magnitudes are ordered oldest
    first; position and fault depth come from the historical events' means.
    """
    history = sorted(history, key=lambda e: e.timestamp)
    recent = sorted(recent, key=lambda e: e.timestamp)
    located = history or recent
    n = max(1, len(located))
    return SeismicRegion(
        id=region_id,
        name=name,
        latitude=sum(e.latitude for e in located) / n,
        longitude=sum(e.longitude for e in located) / n,
        historical_magnitudes=[e.magnitude for e in history],
        recent_activity=[e.magnitude for e in recent],
        fault_depth=sum(e.depth for e in located) / n,
        tectonic_plate_velocity=tectonic_plate_velocity,
    )
