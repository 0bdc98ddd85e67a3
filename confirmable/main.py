"""Confirmable Records Web Application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from confirmable.core.config import settings
from confirmable.core.database import create_db_and_tables
from confirmable.routes import confirmations

# Configure logging
settings.log_dir.mkdir(parents=True, exist_ok=True)
log_file = settings.log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    logger.info("Starting Confirmable Records application")
    create_db_and_tables()
    yield
    logger.info("Confirmable Records application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Records whose attributes are confirmed by a user at a point in time",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(confirmations.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
