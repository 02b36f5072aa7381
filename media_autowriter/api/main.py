"""FastAPI main application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from media_autowriter.api.dependencies import close_gateway
from media_autowriter.api.middleware.error_handler import setup_error_handlers
from media_autowriter.api.middleware.rate_limit import setup_rate_limiting
from media_autowriter.api.routers import article_generation, cron, health
from media_autowriter.database.db_session import engine
from media_autowriter.utils.logging import get_logger, setup_logging

# Setup logging
setup_logging()

logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Media Autowriter API",
    version="1.0.0",
    description="AI-assisted article generation for multi-tenant media sites",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Setup CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup rate limiting and error mapping
setup_rate_limiting(app)
setup_error_handlers(app)

# Register routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(article_generation.router, prefix="/api/v1")
app.include_router(cron.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event() -> None:
    """Startup event handler."""
    logger.info("api_started")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    """Close provider HTTP clients and the database pool."""
    await close_gateway()
    await engine.dispose()
    logger.info("api_stopped")
