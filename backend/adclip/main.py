import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import api_router
from .config import Settings
from .services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


def configure_logging(level: str = Settings.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan: startup and shutdown events.
    """
    # Startup
    logger.info("Starting adclip backend")
    app.state.rate_limiter = RateLimiter()
    app.state.rate_limiter.start()

    yield

    # Shutdown
    await app.state.rate_limiter.stop()
    logger.info("adclip backend shut down")


configure_logging()

app = FastAPI(
    title="adclip",
    description="Backend for AI-assisted ad videos: splits voiceover scripts into timed segments and matches each segment to the user's tagged video clips.",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[],  # Empty list - use regex instead
    allow_origin_regex=Settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.include_router(api_router)
