"""Errors surfaced to callers of the download endpoint"""
from typing import Optional


class VidstashError(Exception):
    """Base class for errors that map onto an HTTP error response"""

    status_code = 500
    message = "Download failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidInput(VidstashError):
    """The client sent a missing or unsupported video URL"""

    status_code = 400
    message = "Invalid video URL"


class ResolutionError(VidstashError):
    """The extractor could not resolve the URL into a media stream"""

    message = "Download failed: unable to resolve the requested video"


class InternalError(VidstashError):
    """Anything unexpected before the download started"""

    message = "Download failed: internal error"
