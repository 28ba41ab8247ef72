import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from vocalremix.config import Settings, settings
from vocalremix.routers import generation, songs, upload
from vocalremix.services.analysis import AudioAnalyzer
from vocalremix.services.orchestrator import GenerationOrchestrator
from vocalremix.storage.file_manager import FileManager
from vocalremix.storage.song_registry import SongRegistry

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(
    app_settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    app_settings = app_settings or settings
    registry = SongRegistry()
    orchestrator = GenerationOrchestrator(app_settings, registry, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        mode = "live" if orchestrator.live else "mock"
        logger.info(f"Starting VocalRemix API ({mode} generation)")
        yield
        await orchestrator.shutdown()

    app = FastAPI(title="VocalRemix API", version="0.1.0", lifespan=lifespan)

    app.state.settings = app_settings
    app.state.registry = registry
    app.state.orchestrator = orchestrator
    app.state.file_manager = FileManager(app_settings)
    app.state.analyzer = AudioAnalyzer(app_settings, transport=transport)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Covers fastapi.HTTPException too, and 404s for unknown routes
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(status_code=422, content={"success": False, "error": problems})

    app.include_router(upload.router)
    app.include_router(generation.router)
    app.include_router(songs.router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "mode": "live" if orchestrator.live else "mock"}

    app.mount(
        "/uploads",
        StaticFiles(directory=app_settings.upload_dir, check_dir=False),
        name="uploads",
    )
    return app


app = create_app()
