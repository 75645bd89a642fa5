"""API routes"""
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from ..models.schemas import (
    CleanupResponse,
    DownloadRequest,
    DownloadResponse,
    ErrorResponse
)
from ..services.fetch_service import FetchCoordinator
from ..services.store_service import StoreManager

router = APIRouter(prefix="/api", tags=["api"])


def get_coordinator(request: Request) -> FetchCoordinator:
    return request.app.state.coordinator


def get_store(request: Request) -> StoreManager:
    return request.app.state.store


@router.get("/")
async def root():
    return {"message": "Video Downloader API"}


@router.post(
    "/download",
    response_model=DownloadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def download_video(
    request: DownloadRequest,
    coordinator: FetchCoordinator = Depends(get_coordinator),
):
    """Start a download and return its link before the file is complete"""
    result = await coordinator.handle(request.videoUrl, request.format)
    return DownloadResponse(
        message="Download started",
        downloadUrl=result.reference_path,
        title=result.title,
    )


@router.post("/cleanup", response_model=CleanupResponse)
async def manual_cleanup(store: StoreManager = Depends(get_store)):
    """Run a sweep now instead of waiting for the next scheduled one"""
    removed = await run_in_threadpool(store.sweep)
    return CleanupResponse(success=True, removed=removed)
