"""Pydantic models for request/response validation"""
from pydantic import BaseModel, field_validator
from typing import Any, Optional


class DownloadRequest(BaseModel):
    videoUrl: Optional[str] = None
    format: Optional[str] = None

    @field_validator("format", mode="before")
    @classmethod
    def format_as_text(cls, v: Any) -> Optional[str]:
        # unknown formats, whatever their JSON type, fall back to combined output
        return None if v is None else str(v)


class DownloadResponse(BaseModel):
    message: str
    downloadUrl: str
    title: str


class ErrorResponse(BaseModel):
    message: str


class CleanupResponse(BaseModel):
    success: bool
    removed: int
