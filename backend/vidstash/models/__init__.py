"""Models package"""
from .formats import OutputFormat
from .schemas import (
    DownloadRequest,
    DownloadResponse,
    ErrorResponse,
    CleanupResponse
)

__all__ = [
    "OutputFormat",
    "DownloadRequest",
    "DownloadResponse",
    "ErrorResponse",
    "CleanupResponse"
]
