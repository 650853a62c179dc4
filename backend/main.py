"""
FastAPI application for GRACE-X Sport
Tiered racing data facade and heuristic analytics engine
"""

from fastapi import FastAPI, Depends, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import os

from backend.auth import (
    TIER_CONFIG,
    get_tier_config,
    log_auth_mode,
    require_feature,
    verify_client_key,
)
from backend.core.race_card import Race, parse_races
from backend.core.tiers import Feature, Tier, TierConfig
from backend.services.brain import BrainError, analyse
from backend.services.enrichment import enrich
from backend.services.racing_provider import ProviderError, get_racing_client
from backend.services.synthetic import (
    entity_analysis,
    fallback_race,
    past_results,
    placeholder_card,
    search_entities,
)
from backend.schemas import (
    BrainRequest,
    BrainResponse,
    EntityAnalysisResponse,
    HealthResponse,
    RacecardsResponse,
    ResultsResponse,
    SearchResponse,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _synthetic_racing_enabled() -> bool:
    return os.getenv("RACING_SYNTHETIC", "false").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("🚀 Starting GRACE-X Sport backend")
    log_auth_mode(TIER_CONFIG)

    if os.getenv("RACING_BASE_URL"):
        logger.info("Racing provider: %s", os.getenv("RACING_BASE_URL"))
    elif _synthetic_racing_enabled():
        logger.warning("Racing provider not configured: serving SYNTHETIC racecards (RACING_SYNTHETIC=true)")
    else:
        logger.info("Racing provider not configured: upcoming racecards will be empty")

    if not os.getenv("OPENAI_API_KEY"):
        logger.warning("OPENAI_API_KEY not set: /api/brain/analyse uses the heuristic engine")

    yield

    logger.info("👋 Shutting down GRACE-X Sport backend")


app = FastAPI(
    title="GRACE-X Sport",
    description="Racing data facade with tiered access and heuristic analytics",
    version="1.0",
    lifespan=lifespan,
)

_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials="*" not in _origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _enriched(races) -> list:
    return [race.to_dict() for race in enrich(races)]


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Health check"""
    return {
        "app": "GRACE-X Sport",
        "version": "1.0",
        "status": "operational",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/api/health", response_model=HealthResponse)
async def health_check(config: TierConfig = Depends(get_tier_config)):
    """Configuration flags for the frontend status bar"""
    return HealthResponse(
        ok=True,
        time=datetime.now(timezone.utc).isoformat(),
        auth_enabled=not config.open_mode,
        racing_configured=bool(os.getenv("RACING_BASE_URL")),
        synthetic_racing=_synthetic_racing_enabled(),
        openai_configured=bool(os.getenv("OPENAI_API_KEY")),
    )


# ============================================================================
# AUTHENTICATED ENDPOINTS - RACING
# ============================================================================
# Routes that call the provider or the model stay plain def (threadpool).

@app.get("/api/racing/upcoming", response_model=RacecardsResponse)
def get_upcoming_racecards(
    date: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    tier: Tier = Depends(verify_client_key),
):
    """
    Upcoming racecards, enriched.

    Provider configured → provider cards.  Otherwise a labelled synthetic
    card when RACING_SYNTHETIC=true, else an empty list.
    """
    client = get_racing_client()
    if client is not None:
        try:
            data = client.get_upcoming(date)
        except ProviderError as exc:
            logger.error("Upcoming racecards failed: %s", exc)
            raise HTTPException(status_code=502, detail=str(exc))
        return RacecardsResponse(races=_enriched(parse_races(data)), source="provider")

    if _synthetic_racing_enabled():
        card_date = date or datetime.now(timezone.utc).date().isoformat()
        return RacecardsResponse(
            races=_enriched(placeholder_card(card_date)),
            synthetic=True,
            source="synthetic",
        )

    logger.info("No racing provider configured. Returning empty card list.")
    return RacecardsResponse(races=[], source="none")


@app.get("/api/racing/race/{race_id}/standard")
def get_race_standard(
    race_id: str,
    tier: Tier = Depends(verify_client_key),
):
    """Standard racecard detail for one race, enriched."""
    client = get_racing_client()
    if client is None:
        raise HTTPException(status_code=404, detail="No racing data available")

    try:
        data = client.get_race_standard(race_id)
    except ProviderError as exc:
        logger.warning("Race %s detail failed, serving fallback card: %s", race_id, exc)
        return enrich([fallback_race(race_id)])[0].to_dict()

    race = Race.from_dict({"id": race_id, **data}) if isinstance(data, dict) else Race(id=race_id)
    return enrich([race])[0].to_dict()


@app.get("/api/racing/search", response_model=SearchResponse)
async def search_racing(
    q: str = Query("", max_length=80),
    type: str = Query("all", pattern="^(all|horse|jockey|trainer)$"),
    tier: Tier = Depends(require_feature(Feature.SEARCH)),
):
    """Horse / jockey / trainer lookup (top tier)"""
    return SearchResponse(results=search_entities(q, type))


@app.get("/api/racing/results", response_model=ResultsResponse)
async def get_past_results(
    tier: Tier = Depends(require_feature(Feature.PAST_RESULTS)),
):
    """Yesterday's results (mid tier and above)"""
    yesterday = (datetime.now(timezone.utc).date() - timedelta(days=1)).isoformat()
    return ResultsResponse(date=yesterday, races=_enriched(past_results(yesterday)))


@app.get("/api/racing/analysis/{entity_type}/{entity_id}", response_model=EntityAnalysisResponse)
async def get_entity_analysis(
    entity_type: str,
    entity_id: str,
    tier: Tier = Depends(require_feature(Feature.AI_ANALYSIS)),
):
    """Win %, A/E and P/L for a horse, jockey or trainer (top tier)"""
    return entity_analysis(entity_type, entity_id)


# ============================================================================
# AUTHENTICATED ENDPOINTS - BRAIN
# ============================================================================

@app.post("/api/brain/analyse", response_model=BrainResponse)
def brain_analyse(
    payload: BrainRequest,
    tier: Tier = Depends(verify_client_key),
):
    """Answer a free-text question about the card in view"""
    try:
        result = analyse(payload.sport, payload.query, payload.context, payload.data)
    except BrainError as exc:
        logger.error("Brain analysis failed: %s", exc)
        raise HTTPException(
            status_code=502,
            detail={"error": str(exc), "details": exc.details},
        )
    return BrainResponse(answer=result.answer, result=result.answer, source=result.source)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Structured details (paywall, upstream errors) are returned as the body"""
    content = exc.detail if isinstance(exc.detail, dict) else {"detail": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Catch-all exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": type(exc).__name__}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
