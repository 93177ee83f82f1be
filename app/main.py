"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Registers API routes (users) and error handlers
- No business logic should be written here
- Manages application lifecycle (startup/shutdown)
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import setup_logging, get_logger
from app.db.elasticsearch import (
    connect_to_elasticsearch,
    close_elasticsearch_connection,
    check_elasticsearch_health,
    get_elasticsearch,
)
from app.db.redis import connect_to_redis, close_redis_connection, check_redis_health
from app.db.indexes import create_indexes
from app.services.map_tile_service import close_map_tile_service
from app.services.user_service import reset_user_service
from app.api import users

# Initialize logging first
setup_logging()
logger = get_logger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("🚀 Starting user service...")

    try:
        logger.info("Validating configuration...")
        validate_settings()
        logger.info("✅ Configuration validated")

        logger.info("Connecting to Elasticsearch...")
        await connect_to_elasticsearch()
        logger.info("✅ Elasticsearch connected")

        logger.info("Ensuring search index...")
        await create_indexes(get_elasticsearch())
        logger.info("✅ Search index ready")

        logger.info("Connecting to Redis...")
        await connect_to_redis()
        logger.info("✅ Redis connected")

        if await check_elasticsearch_health() and await check_redis_health():
            logger.info("✅ Store health check passed")
        else:
            logger.warning("⚠️ Store health check failed during startup")

        logger.info("🎉 User service started successfully!")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Debug Mode: {settings.DEBUG}")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield  # Application runs here

    # Shutdown
    logger.info("🛑 Shutting down user service...")

    try:
        reset_user_service()

        await close_map_tile_service()
        logger.info("✅ Tile service closed")

        await close_redis_connection()
        logger.info("✅ Redis connection closed")

        await close_elasticsearch_connection()
        logger.info("✅ Elasticsearch connection closed")

        logger.info("👋 User service shut down successfully")

    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)


app = FastAPI(
    title="User Service",
    description="User directory with full-text, date, geo and social network search",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,  # Disable docs in production
    redoc_url="/redoc" if settings.is_development else None,
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    if process_time > 5.0:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path}",
            extra={"duration_ms": int(process_time * 1000)}
        )

    return response


add_exception_handlers(app)

app.include_router(users.router, prefix=settings.API_PREFIX, tags=["Users"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic info."""
    return {
        "name": "User Service API",
        "version": APP_VERSION,
        "status": "running",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Checks Elasticsearch and Redis connectivity.
    Redis only backs the tile cache, so losing it degrades the service
    instead of taking it down.
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": APP_VERSION,
        "checks": {}
    }

    try:
        es_healthy = await check_elasticsearch_health()
    except Exception as e:
        logger.error(f"Elasticsearch health check failed: {str(e)}")
        es_healthy = False
    health_status["checks"]["elasticsearch"] = "healthy" if es_healthy else "unhealthy"

    try:
        redis_healthy = await check_redis_health()
    except Exception as e:
        logger.error(f"Redis health check failed: {str(e)}")
        redis_healthy = False
    health_status["checks"]["redis"] = "healthy" if redis_healthy else "unhealthy"

    if not es_healthy:
        health_status["status"] = "unhealthy"
    elif not redis_healthy:
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


# Readiness probe (for Kubernetes/orchestration)
@app.get("/ready", tags=["Health"])
async def readiness_check():
    """
    Readiness probe - indicates if app is ready to receive traffic.
    """
    try:
        if await check_elasticsearch_health():
            return {"status": "ready"}
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "elasticsearch_unavailable"}
        )
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": str(e)}
        )


# Liveness probe (for Kubernetes/orchestration)
@app.get("/live", tags=["Health"])
async def liveness_check():
    """
    Liveness probe - indicates if app is alive.
    """
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
