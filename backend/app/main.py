"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.config import get_settings
from app.db.session import SessionLocal
from app.errors import register_exception_handlers
from app.routers import analytics, decisions, projects
from app.services.filter_metadata import get_search_metadata

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _warm_backend_state() -> None:
    """Prime the DB connection and the metadata query at process start."""

    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
            get_search_metadata(db)
    except Exception:
        logger.exception("Backend warm-up failed; continuing without startup pre-warm.")


@asynccontextmanager
async def lifespan(_: FastAPI):
    _warm_backend_state()
    yield


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

# Analytics first so /decisions/analytics/* is not captured by /decisions/{decision_id}.
app.include_router(analytics.router, tags=["analytics"])
app.include_router(decisions.router, tags=["decisions"])
app.include_router(projects.router, tags=["projects"])


@app.get("/health")
def health() -> dict[str, str]:
    """Simple health check endpoint."""

    return {"status": "ok"}
