"""Reading progress FastAPI application."""
from datetime import datetime
import logging

import psycopg2
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.database import Database
from app.models.schemas import HealthCheck
from app.repositories.local_progress import LocalProgressStore, close_redis_client, create_redis_client
from app.repositories.remote_progress import RemoteProgressStore
from app.routers import progress
from app.services.progress_service import ProgressService

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Local-first Bible reading plan progress API",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Build the stores and the progress service once for the whole process."""
    logger.info("Initializing application resources...")
    database = Database(settings)
    try:
        database.initialize()
    except psycopg2.Error as e:
        # Remote sync stays degraded until the database is reachable again
        logger.error(f"Starting without a database pool: {e}")

    redis_client = create_redis_client(settings)

    app.state.database = database
    app.state.redis_client = redis_client
    app.state.local_store = LocalProgressStore(redis_client, prefix=settings.local_cache_prefix)
    app.state.progress_service = ProgressService(
        app.state.local_store,
        RemoteProgressStore(database),
        fetch_timeout=settings.remote_fetch_timeout_seconds,
    )
    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    """Flush pending background writes, then release connections."""
    logger.info("Shutting down application...")
    service = getattr(app.state, "progress_service", None)
    if service is not None:
        await service.drain()
    database = getattr(app.state, "database", None)
    if database is not None:
        database.close()
    close_redis_client(getattr(app.state, "redis_client", None))
    logger.info("Application shutdown complete")


app.include_router(progress.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Leitura Anual Progress API is running"}


@app.get("/health", response_model=HealthCheck)
async def health_check(request: Request):
    """Health check endpoint."""
    database = getattr(request.app.state, "database", None)
    local_store = getattr(request.app.state, "local_store", None)
    database_connected = database.ping() if database is not None else False
    cache_connected = local_store.ping() if local_store is not None else False

    return HealthCheck(
        status="healthy" if database_connected else "degraded",
        timestamp=datetime.now(),
        database_connected=database_connected,
        cache_connected=cache_connected,
    )
