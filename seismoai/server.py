from fastapi import FastAPI, APIRouter, HTTPException
from starlette.middleware.cors import CORSMiddleware
import logging
from typing import List

import numpy as np

from seismoai.config import CORS_ORIGINS, LOG_LEVEL, RANDOM_SEED
from seismoai.combiner import assess_seismic_signal, calculate_combined_seismic_score
from seismoai.feed_features import (
    aggregate_by_region,
    daily_activity,
    normalize_for_prediction,
    parse_usgs_geojson,
    weekly_trend,
    yearly_trend,
)
from seismoai.forecast import RegionalRiskData, generate_global_forecast, search_regional_risk
from seismoai.models.schemas import (
    ActivityRequest,
    AssessmentRequest,
    CombinedScoreRequest,
    ForecastRequest,
    ForecastSearchRequest,
    PredictionRequest,
    PredictionResponse,
    RegionMetricsRequest,
    TreeEnsembleRequest,
)
from seismoai.prediction_engine import SeismicRegion, generate_earthquake_prediction
from seismoai.tree_models import DecisionTree, GradientBoostingRiskScorer, RandomForestPredictor

# Logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title="SeismoAI Scoring Engine",
    description="Illustrative earthquake risk scores from seismic magnitude series",
    version="1.0.0",
    docs_url="/api/docs"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API Router
api_router = APIRouter(prefix="/api")


def _regional_data(items) -> List[RegionalRiskData]:
    return [RegionalRiskData(**item.model_dump()) for item in items]


@api_router.get("/")
async def root():
    return {"message": "SeismoAI Scoring Engine v1.0"}


@api_router.get("/health")
async def health():
    return {"status": "ok"}


@api_router.post("/predict", response_model=PredictionResponse)
async def predict(request: PredictionRequest):
    region = SeismicRegion(**request.region.model_dump())
    seed = request.seed if request.seed is not None else RANDOM_SEED
    prediction = generate_earthquake_prediction(
        region, request.radius_km, request.min_magnitude, rng=np.random.default_rng(seed)
    )
    logger.info(f"Prediction for {region.name}: {prediction.risk_level} (7d={prediction.probability_7_days:.3f})")
    return PredictionResponse(**prediction.to_dict())


@api_router.post("/forecast")
async def forecast(request: ForecastRequest):
    results = generate_global_forecast(_regional_data(request.regions), request.days_ahead)
    return {"forecasts": [r.to_dict() for r in results]}


@api_router.post("/forecast/search")
async def forecast_search(request: ForecastSearchRequest):
    result = search_regional_risk(request.region_name, _regional_data(request.regions))
    if result is None:
        raise HTTPException(status_code=404, detail=f"Region not found: {request.region_name}")
    return result.to_dict()


@api_router.post("/score")
async def combined_score(request: CombinedScoreRequest):
    return {"score": calculate_combined_seismic_score(**request.model_dump())}


@api_router.post("/assess")
async def assess(request: AssessmentRequest):
    return assess_seismic_signal(**request.model_dump()).to_dict()


@api_router.post("/models/trees")
# plain def: training is CPU-bound and runs in the threadpool
def tree_models(request: TreeEnsembleRequest):
    width = len(request.features[0]) if request.features else 0
    if any(len(row) != width for row in request.queries):
        raise HTTPException(status_code=400, detail=f"Query rows must have {width} columns")
    rng = np.random.default_rng(request.seed if request.seed is not None else RANDOM_SEED)
    try:
        tree = DecisionTree().train(request.features, request.labels)
        forest = RandomForestPredictor(rng=rng).train(request.features, request.labels, request.num_trees)
        boosting = GradientBoostingRiskScorer().train(request.features, request.labels, request.iterations)
    except ValueError as e:
        logger.warning(f"Rejected tree training request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "predictions": [
            {
                "decision_tree": tree.predict(row),
                "random_forest": forest.predict(row),
                "gradient_boosting": boosting.predict(row[0]) if row else 0.0,
            }
            for row in request.queries
        ]
    }


@api_router.post("/regions/metrics")
async def region_metrics(request: RegionMetricsRequest):
    events = parse_usgs_geojson(request.feed)
    metrics = aggregate_by_region(events, request.regions)
    return {
        "events": len(events),
        "features": normalize_for_prediction(events),
        "regions": [m.to_dict() for m in metrics],
    }


@api_router.post("/regions/activity")
async def region_activity(request: ActivityRequest):
    events = parse_usgs_geojson(request.feed)
    return {
        "events": len(events),
        "daily": [d.to_dict() for d in daily_activity(events)],
        "weekly": [w.to_dict() for w in weekly_trend(events)],
        "yearly": [y.to_dict() for y in yearly_trend(events)],
    }


app.include_router(api_router)
