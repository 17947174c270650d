"""
API tests against the FastAPI app in-process.
"""

import inspect
import os
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from seismoai.server import app, tree_models

client = TestClient(app)

REGION = {
    "id": "jp-trench",
    "name": "Japan Trench",
    "latitude": 38.3,
    "longitude": 142.4,
    "historical_magnitudes": [4.5, 5.0, 5.2, 6.1],
    "recent_activity": [0.2, 0.4, 0.3],
    "fault_depth": 30.0,
    "tectonic_plate_velocity": 0.08,
}

REGIONAL_DATA = [
    {"region": "Japan Trench", "recent_activity": [3.1, 4.2, 5.0, 4.4], "historical_baseline": 4.5},
    {"region": "Rift Valley"},
]

USGS_FEED = {
    "features": [
        {
            "id": "us1",
            "properties": {"mag": 5.4, "place": "off Honshu", "time": 1700000000000},
            "geometry": {"coordinates": [141.9, 40.5, 35.0]},
        },
        {
            "id": "ci1",
            "properties": {"mag": 3.0, "place": "Ridgecrest", "time": 1700000360000},
            "geometry": {"coordinates": [-117.6, 35.7, 8.0]},
        },
    ]
}


def test_root_and_health():
    assert client.get("/api/").status_code == 200
    assert client.get("/api/health").json() == {"status": "ok"}


class TestPredict:
    def test_seeded_predictions_repeat(self):
        body = {"region": REGION, "radius_km": 150, "min_magnitude": 4.0, "seed": 7}
        first = client.post("/api/predict", json=body)
        second = client.post("/api/predict", json=body)
        assert first.status_code == 200
        a, b = first.json(), second.json()
        a.pop("generated_at")
        b.pop("generated_at")
        assert a == b

    def test_prediction_shape(self):
        data = client.post("/api/predict", json={"region": REGION, "min_magnitude": 4.0, "seed": 1}).json()
        assert data["region"] == "Japan Trench"
        assert data["affected_radius"] == 100.0
        assert data["risk_level"] in {"Low", "Moderate", "Elevated", "High", "Critical"}
        low, high = data["expected_magnitude_range"]
        assert 4.0 <= low <= high
        assert 0.6 <= data["confidence"] <= 0.95
        assert len(data["top_factors"]) == 4

    def test_missing_region_rejected(self):
        assert client.post("/api/predict", json={"radius_km": 10}).status_code == 422

    def test_negative_radius_rejected(self):
        assert client.post("/api/predict", json={"region": REGION, "radius_km": -1}).status_code == 422


class TestForecast:
    def test_forecast(self):
        response = client.post("/api/forecast", json={"regions": REGIONAL_DATA, "days_ahead": 30})
        assert response.status_code == 200
        forecasts = response.json()["forecasts"]
        assert [f["region"] for f in forecasts] == ["Japan Trench", "Rift Valley"]
        assert forecasts[1]["probability"] == pytest.approx(0.5)
        assert all(f["days_ahead"] == 30 for f in forecasts)

    def test_search(self):
        response = client.post("/api/forecast/search", json={"region_name": "rift valley", "regions": REGIONAL_DATA})
        assert response.status_code == 200
        assert response.json()["risk_level"] == "Moderate"

    def test_search_not_found(self):
        response = client.post("/api/forecast/search", json={"region_name": "Atlantis", "regions": REGIONAL_DATA})
        assert response.status_code == 404


def test_combined_score_at_ceilings():
    body = {"sta_lta": 10, "epic_mag": 9, "finder_extent": 300, "plum_intensity": 12,
            "ann_prediction": 8, "cnn_confidence": 1}
    assert client.post("/api/score", json=body).json()["score"] == pytest.approx(1.0)


def test_combined_score_defaults_to_zero():
    assert client.post("/api/score", json={}).json()["score"] == 0.0


def test_assess_empty_signal():
    data = client.post("/api/assess", json={}).json()
    assert data["spectral_pattern"] == "none"
    assert data["sta_lta"] == 0.0
    assert 0.0 <= data["combined_score"] <= 1.0


class TestTreeModels:
    def test_step_function(self):
        body = {
            "features": [[1], [2], [3], [4], [5], [6]],
            "labels": [0, 0, 0, 1, 1, 1],
            "queries": [[1], [6]],
            "num_trees": 5,
            "iterations": 3,
            "seed": 3,
        }
        response = client.post("/api/models/trees", json=body)
        assert response.status_code == 200
        predictions = response.json()["predictions"]
        assert [p["decision_tree"] for p in predictions] == [0.0, 1.0]
        for p in predictions:
            assert 0.0 <= p["random_forest"] <= 1.0
        assert predictions[1]["gradient_boosting"] > predictions[0]["gradient_boosting"]

    def test_ragged_rows_rejected(self):
        body = {"features": [[1, 2], [3]], "labels": [0, 1], "queries": [[1, 2]]}
        assert client.post("/api/models/trees", json=body).status_code == 400

    def test_label_count_mismatch_rejected(self):
        body = {"features": [[1], [2]], "labels": [0], "queries": [[1]]}
        assert client.post("/api/models/trees", json=body).status_code == 400

    def test_query_width_mismatch_rejected(self):
        body = {"features": [[1], [2]], "labels": [0, 1], "queries": [[1, 2]]}
        assert client.post("/api/models/trees", json=body).status_code == 400


def test_region_metrics():
    body = {"feed": USGS_FEED, "regions": {"Japan": [30, 46, 128, 146], "California": [32, 42, -125, -114]}}
    data = client.post("/api/regions/metrics", json=body).json()
    assert data["events"] == 2
    assert len(data["features"]) == 4
    regions = {r["region"]: r for r in data["regions"]}
    assert regions["Japan"]["max_magnitude"] == 5.4
    assert regions["California"]["total_events"] == 1


def test_tree_training_runs_off_the_event_loop():
    assert not inspect.iscoroutinefunction(tree_models)


def test_region_metrics_skips_malformed_features():
    feed = {"features": USGS_FEED["features"] + [
        {"properties": {"mag": 9.0, "time": 10 ** 22}, "geometry": {"coordinates": [141.0, 38.0, 10.0]}},
        "junk",
    ]}
    response = client.post("/api/regions/metrics", json={"feed": feed, "regions": {"Japan": [30, 46, 128, 146]}})
    assert response.status_code == 200
    assert response.json()["events"] == 2


def test_region_activity():
    data = client.post("/api/regions/activity", json={"feed": USGS_FEED}).json()
    assert data["events"] == 2
    # both sample events fall on 2023-11-14 UTC
    assert data["daily"] == [{"date": "2023-11-14", "count": 2}]
    assert data["weekly"] == [{"week": "2023-W46", "count": 2, "avg_magnitude": 4.2}]
    assert data["yearly"] == [{"year": 2023, "count": 2, "magnitude_7_plus": 0, "avg_magnitude": 4.2}]
