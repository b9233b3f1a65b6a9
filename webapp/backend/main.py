"""Mini App FastAPI application."""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from mathbot.config import settings
from mathbot.database import close_db, init_db
from mathbot.services.exceptions import StorageError
from webapp.backend.routes import history_router, preferences_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    await init_db()
    yield
    await close_db()


app = FastAPI(
    title="MathBot Mini App API",
    description="History and preferences API for the MathBot Mini App",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(history_router)
app.include_router(preferences_router)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Storage is temporarily unavailable"})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


def mount_frontend(app: FastAPI, dist: Path) -> None:
    """Serve a built Mini App from ``dist`` under /webapp, falling back to index.html."""
    index = dist / "index.html"
    app.mount("/webapp/assets", StaticFiles(directory=dist / "assets"), name="webapp-assets")

    @app.get("/webapp/{path:path}", include_in_schema=False)
    async def serve_webapp(path: str):
        file_path = (dist / path).resolve()
        if dist.resolve() not in file_path.parents or not file_path.is_file():
            file_path = index
        return FileResponse(file_path)


WEBAPP_DIST = Path(__file__).resolve().parent.parent / "dist"
if (WEBAPP_DIST / "assets").is_dir():
    mount_frontend(app, WEBAPP_DIST)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "webapp.backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
