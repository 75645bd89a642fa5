"""Utils package"""
from .file_utils import (
    MAX_FILENAME_BYTES,
    sanitize_title,
    build_filename,
    download_url
)

__all__ = [
    "MAX_FILENAME_BYTES",
    "sanitize_title",
    "build_filename",
    "download_url"
]
