"""
NoteFlow API application.

All routes live under /api:
  /api/auth         register, login, current user
  /api/notes        notes and their trash lifecycle
  /api/notebooks    notebooks (deleting one unlinks its notes)
  /api/tags         tags (deleting one strips it from notes)
  /api/tasks        to-do items, optionally linked to a note
  /api/scratch-pad  one free-form pad per user
  /api/search       title / plain-text search
  /api/health       liveness and readiness

Every data route requires a bearer token and only ever sees the caller's
own records.
"""

import logging
from contextlib import asynccontextmanager

import aiosqlite
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from noteflow import __version__
from noteflow.config import DEFAULT_JWT_SECRET, get_settings
from noteflow.database import close_db, connect_db, get_database
from noteflow.middleware.rate_limit import RateLimitMiddleware
from noteflow.routers import auth, notebooks, notes, scratch_pad, search, tags, tasks

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"NoteFlow {__version__} starting")
    if settings.jwt_secret_key == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET_KEY is the built-in default; set a real secret in .env")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    await connect_db()
    try:
        yield
    finally:
        await close_db()
        logger.info("NoteFlow stopped")


app = FastAPI(
    title="NoteFlow API",
    description="Personal notes with notebooks, tags, tasks and a scratch pad",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """No framing, no MIME sniffing, no caching of API responses."""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Cache-Control": "no-store",
    }

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(self.HEADERS)
        return response


# Added last runs first: rate limit, then CORS, then security headers outermost
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RateLimitMiddleware)

for router, prefix, tag in (
    (auth.router, "/api/auth", "Authentication"),
    (notes.router, "/api/notes", "Notes"),
    (notebooks.router, "/api/notebooks", "Notebooks"),
    (tags.router, "/api/tags", "Tags"),
    (tasks.router, "/api/tasks", "Tasks"),
    (scratch_pad.router, "/api/scratch-pad", "Scratch Pad"),
    (search.router, "/api/search", "Search"),
):
    app.include_router(router, prefix=prefix, tags=[tag])


@app.get("/api/health", tags=["Health"])
async def health_check() -> dict:
    """Liveness: the process is up."""
    return {"status": "healthy", "version": __version__}


@app.get("/api/health/ready", tags=["Health"])
async def readiness_check():
    """Readiness: the database answers."""
    try:
        await get_database().ping()
    except (RuntimeError, aiosqlite.Error) as e:
        logger.warning(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "checks": {"database": f"error: {e}"}},
        )
    return {"status": "ready", "checks": {"database": "ok"}}


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("noteflow.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    run()
