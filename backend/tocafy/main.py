"""FastAPI application entry point."""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tocafy.config import settings
from tocafy.database import Base, engine
from tocafy.errors import TocafyError

# Import routers
from tocafy.routers import profiles, shows, songs, requests, moderation, audience

# Import all models so Base.metadata knows about them
from tocafy.models.profile import Profile                      # noqa: F401
from tocafy.models.show import Show                            # noqa: F401
from tocafy.models.song import Song                            # noqa: F401
from tocafy.models.song_request import SongRequest             # noqa: F401
from tocafy.models.moderation_config import ModerationConfig   # noqa: F401
from tocafy.models.show_activity import ShowActivity           # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Tocafy",
    description="Live show song requests — artists run the queue, the audience requests by QR code or link",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])
app.include_router(shows.router, prefix="/api/shows", tags=["Shows"])
app.include_router(songs.router, prefix="/api/songs", tags=["Songs"])
app.include_router(requests.router, prefix="/api/requests", tags=["Requests"])
app.include_router(moderation.router, prefix="/api/moderation", tags=["Moderation"])
app.include_router(audience.router, prefix="/api/audience", tags=["Audience"])


@app.exception_handler(TocafyError)
async def handle_tocafy_error(request: Request, exc: TocafyError):
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code},
        headers=headers,
    )


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
