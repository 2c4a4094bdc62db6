"""Picslify Server - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from picslify import __version__
from picslify.config import settings
from picslify.database import Database
from picslify.errors import NotFound, PicslifyError
from picslify.utils.storage import LocalMediaStorage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database and media storage; close the database on shutdown."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    db = Database(settings.db_path, echo=settings.debug)
    db.init()
    app.state.db = db
    app.state.storage = LocalMediaStorage(
        settings.media_dir, settings.media_base_url, settings.media_folder
    )
    logger.info("%s started", settings.server_name)

    yield

    db.close()
    logger.info("%s stopped", settings.server_name)


app = FastAPI(
    title="Picslify",
    description="Photo albums with sharing, tags, favorites and comments",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PicslifyError)
async def picslify_error_handler(request: Request, exc: PicslifyError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# --- Register API routers ---
from picslify.api.auth import router as auth_router  # noqa: E402
from picslify.api.albums import router as albums_router  # noqa: E402
from picslify.api.images import router as images_router  # noqa: E402
from picslify.api.search import router as search_router  # noqa: E402

API_PREFIX = "/api/v1"

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(albums_router, prefix=API_PREFIX)
app.include_router(images_router, prefix=API_PREFIX)
app.include_router(search_router, prefix=API_PREFIX)


@app.get("/")
def root():
    """Server info."""
    return {
        "name": settings.server_name,
        "version": __version__,
        "status": "running",
    }


@app.get("/api/v1/health")
def health():
    return {"status": "ok"}


@app.get(settings.media_base_url + "/{public_id:path}")
def media(public_id: str, request: Request):
    """Serve a stored media object by its public id."""
    path = request.app.state.storage.resolve(public_id)
    if not path.is_file():
        raise NotFound("Media not found")
    return FileResponse(str(path))


def run() -> None:
    import uvicorn

    uvicorn.run("picslify.main:app", host=settings.host, port=settings.port)
