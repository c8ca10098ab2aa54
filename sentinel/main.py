"""
SENTINEL API — Application entry point.

Bootstraps FastAPI, wires up middleware, registers route groups,
and builds the dashboard controller during startup.

Extension points:
  - Add new route groups with app.include_router() below
  - Add new middleware in the middleware block
  - Change startup behaviour in the lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from sentinel import __version__
from sentinel.ai.gemini_client import gemini_client
from sentinel.ai.risk_analyzer import risk_analyzer
from sentinel.core.config import settings
from sentinel.core.rate_limit import limiter
from sentinel.routes.analysis import router as analysis_router
from sentinel.routes.dashboard import router as dashboard_router
from sentinel.routes.health import router as health_router
from sentinel.services.dashboard_state import DashboardController
from sentinel.services.geolocation import geolocation_adapter

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage startup and shutdown lifecycle.

    Startup builds the one dashboard this process serves and makes the
    single geolocation attempt. A failed lookup leaves coordinates unset.
    """
    logger.info(
        "Starting SENTINEL API (env: %s, ai: %s)",
        settings.environment,
        "mock" if gemini_client.mock_mode else "real",
    )
    controller = DashboardController(risk_analyzer, audio_enabled=settings.audio_enabled)

    coords = await geolocation_adapter.locate()
    if coords is not None:
        controller.set_location(*coords)
        logger.info("Location acquired: %.4f, %.4f", *coords)

    app.state.dashboard = controller
    yield
    logger.info("Shutting down SENTINEL API")


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="SENTINEL API",
    description=(
        "Disaster risk dashboard backend. Risk scores, routes and alerts are "
        "generated by an LLM from simulated telemetry — not for real emergencies."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)


# ─── Rate limiting ─────────────────────────────────────────────────────────────
# Routes opt-in with @limiter.limit(...) + request: Request parameter.
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ─── Middleware ─────────────────────────────────────────────────────────────────
# In production, restrict allow_origins to the dashboard's domain.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(analysis_router)
app.include_router(dashboard_router)


@app.get("/", tags=["root"])
async def root():
    """API root — basic metadata."""
    return {
        "name": "SENTINEL API",
        "version": __version__,
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
    }
