"""
Beacon Main Application
=======================

Content-policy decision service for the Beacon browser agent.

Endpoints:
- POST /check-url: ALLOW/BLOCK verdict for one page
- POST /heartbeat: agent liveness ping
- GET /health: service and database health

Components (rule store, audit log, completion backend, AI judge, decision
pipeline) are built once in the lifespan handler from ``settings`` and kept
on ``app.state``.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..core.config import settings
from ..database import SessionLocal, init_db
from ..services.audit import AuditLogger
from ..services.completion import build_completion_client
from ..services.judge import AIJudge
from ..services.pipeline import DecisionPipeline
from ..services.rule_store import RuleStoreGateway
from ..utils.logging import setup_logging
from .middleware import RequestTimingMiddleware, register_exception_handlers
from .routes import router

# Initialize logging
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager - handles startup and shutdown."""
    # ==================== STARTUP ====================
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"AI backend: {settings.AI_BACKEND}")

    settings.validate_required()

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

    completion_client = build_completion_client(settings)
    rule_store = RuleStoreGateway(settings, SessionLocal)
    audit = AuditLogger(settings, SessionLocal)
    judge = AIJudge(completion_client, settings)

    app.state.completion_client = completion_client
    app.state.rule_store = rule_store
    app.state.pipeline = DecisionPipeline(rule_store=rule_store, judge=judge, audit=audit)

    logger.info(f"✅ SERVER IS LIVE on port {settings.PORT}")

    yield  # Application runs here

    # ==================== SHUTDOWN ====================
    logger.info(f"Shutting down {settings.APP_NAME}")
    try:
        await completion_client.aclose()
    except Exception as e:
        logger.warning(f"Completion client shutdown failed: {e}")


app = FastAPI(
    title=settings.APP_NAME,
    description="Per-page ALLOW/BLOCK decisions for the Beacon browser agent",
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# ==================== MIDDLEWARE CONFIGURATION ====================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
)
app.add_middleware(RequestTimingMiddleware)

# ==================== EXCEPTION HANDLERS ====================
register_exception_handlers(app)

# ==================== ROUTE REGISTRATION ====================
app.include_router(router)


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint with service info."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "health": "/health",
        "status": "operational",
    }


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "beacon.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
