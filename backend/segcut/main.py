"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from segcut.config import settings
from segcut.api.routes import router
from segcut.utils.ffmpeg import check_ffmpeg_available, check_ffprobe_available

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting SegCut...")

    settings.scratch_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Scratch directory: {settings.scratch_dir}")

    if not check_ffmpeg_available() or not check_ffprobe_available():
        logger.warning("ffmpeg/ffprobe not found on PATH; edit endpoints will fail")
    if not settings.google_api_key:
        logger.warning("GOOGLE_API_KEY is not set; event-based edits will not work")

    yield

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Timestamp-based video segment editing",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": "1.0.0",
        "api": "/api",
        "docs": "/docs"
    }


def run():
    """Run the API server with uvicorn."""
    import uvicorn
    uvicorn.run(
        "segcut.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )


if __name__ == "__main__":
    run()
