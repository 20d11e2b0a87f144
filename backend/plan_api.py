"""
PlanCompare - FastAPI Backend
=============================
HTTP service around the 529 vs. IUL comparison engine.

The service is stateless: every comparison is computed on request from the
posted inputs and nothing is stored. Input validation happens in the
ComparisonInputs model, so malformed requests never reach the engine.
"""

import os
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from plan_constants import DEFAULT_CONFIG, get_assumptions_reference
from plan_models import ComparisonInputs, CompareResponse, HeadlineFigures
from plan_comparison import ComparisonEngine, get_scorecard
from plan_formatting import build_comparison_summary, format_currency, format_percent

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CORS_ORIGINS = os.getenv(
    "PLANCOMPARE_CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173"
).split(",")


# =============================================================================
# APPLICATION SETUP
# =============================================================================

engine = ComparisonEngine(DEFAULT_CONFIG)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("PlanCompare starting up...")
    yield
    logger.info("PlanCompare shutting down...")


app = FastAPI(
    title="PlanCompare",
    description="529 plan vs. IUL projection and recommendation API",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# API ENDPOINTS
# =============================================================================

@app.get("/")
async def root():
    """API health check."""
    return {
        "service": "PlanCompare",
        "version": "1.0.0",
        "status": "healthy",
    }


@app.get("/api/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "components": {
            "comparison_engine": "ready",
            "recommendation_engine": "ready",
        }
    }


@app.get("/api/defaults", response_model=ComparisonInputs)
async def get_default_inputs():
    """Default household, a starting point for the input wizard."""
    return ComparisonInputs.with_defaults()


# --- COMPARISON ---

@app.post("/api/compare", response_model=CompareResponse)
async def compare(inputs: ComparisonInputs):
    """
    Run a 529 vs. IUL comparison.

    All math runs locally and deterministically; posting the same inputs
    twice returns the same result.
    """
    result = engine.compare_scenarios(inputs)
    logger.info(
        "Comparison complete: %s (%s confidence)",
        result.recommendation.primary_recommendation.value,
        result.recommendation.confidence_level.value
    )

    return CompareResponse(
        result=result,
        headline=HeadlineFigures(
            total_contributed=format_currency(result.total_contributed),
            fv_529_gross=format_currency(result.fv_529_gross),
            fv_iul_cash_value_gross=format_currency(result.fv_iul_cash_value_gross),
            fv_iul_accessible=format_currency(result.fv_iul_accessible),
            return_529=format_percent(result.assumptions_used.return_529),
            return_iul_net=format_percent(result.assumptions_used.return_iul_net),
        ),
        summary_text=build_comparison_summary(result),
    )


# --- REFERENCE DATA ---

@app.get("/api/reference/assumptions")
async def get_assumptions():
    """Rates and rule constants the engine uses by default."""
    return get_assumptions_reference(engine.config)


@app.get("/api/reference/scorecard")
async def get_scorecard_rows():
    """Qualitative 529 vs. IUL scorecard."""
    return [item.model_dump(mode="json") for item in get_scorecard()]


# --- ERROR HANDLERS ---

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if os.getenv("DEBUG") else "An error occurred"
        }
    )


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
