"""Main application entry point"""
import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import CORS_ORIGINS, DOWNLOADS_DIR, LOG_LEVEL, RETENTION_SECONDS, SWEEP_INTERVAL_SECONDS
from .errors import VidstashError
from .routers import api
from .services.extractor_service import Extractor, YtDlpExtractor
from .services.fetch_service import FetchCoordinator
from .services.store_service import StoreManager

logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=level,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    store: StoreManager = app.state.store
    coordinator: FetchCoordinator = app.state.coordinator

    # Cleanup old files on startup
    await run_in_threadpool(store.sweep)
    sweeper = asyncio.create_task(store.run_periodic(app.state.sweep_interval))
    logger.info("Serving downloads from %s", store.directory)

    yield

    sweeper.cancel()
    try:
        await sweeper
    except asyncio.CancelledError:
        pass
    if coordinator.active_writes:
        logger.warning("Shutting down with %d download(s) still writing", coordinator.active_writes)
    await coordinator.extractor.aclose()


async def handle_vidstash_error(request: Request, exc: VidstashError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def handle_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": "Invalid request body"})


def create_app(
    store: Optional[StoreManager] = None,
    extractor: Optional[Extractor] = None,
    sweep_interval: float = SWEEP_INTERVAL_SECONDS,
) -> FastAPI:
    if store is None:
        store = StoreManager(DOWNLOADS_DIR, RETENTION_SECONDS)
    if extractor is None:
        extractor = YtDlpExtractor()

    app = FastAPI(title="Video Downloader API", lifespan=lifespan)
    app.state.store = store
    app.state.coordinator = FetchCoordinator(store, extractor)
    app.state.sweep_interval = sweep_interval

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(VidstashError, handle_vidstash_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    # Include routers
    app.include_router(api.router)
    app.mount("/downloads", StaticFiles(directory=store.directory), name="downloads")

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(os.path.join(STATIC_DIR, "index.html"))

    return app


configure_logging()
app = create_app()


def run() -> None:
    import uvicorn
    from .config import API_HOST, API_PORT
    logger.info("Server running on port %d", API_PORT)
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    run()
