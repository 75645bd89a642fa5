"""Store for downloaded files with time-based eviction"""
import asyncio
import logging
import os
import secrets
import time
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from ..config import DOWNLOADS_DIR, RETENTION_SECONDS
from ..utils.file_utils import build_filename

logger = logging.getLogger(__name__)

# 8 bytes of entropy, 16 hex characters
ID_BYTES = 8


class StoreManager:
    """Owns the downloads directory.

    The directory listing is the only state: there is no index, and a file's
    modification time is its age. Files are named `<title>-<random id>.<ext>`
    and are never checked for collisions. The sweep shares the directory with
    in-flight writes without locking, on the assumption that the retention
    window is far longer than any single download.
    """

    def __init__(self, directory: str = DOWNLOADS_DIR, retention_seconds: float = RETENTION_SECONDS):
        self.directory = os.path.abspath(directory)
        self.retention_seconds = retention_seconds
        os.makedirs(self.directory, exist_ok=True)

    def allocate(self, display_name: str, ext: str) -> str:
        """Return a fresh path for a new file; the file is not created"""
        file_id = secrets.token_hex(ID_BYTES)
        return os.path.join(self.directory, build_filename(display_name, file_id, ext))

    def sweep(self, now: Optional[float] = None) -> int:
        """Remove files older than the retention window, return how many.

        Ages are measured against a single `now` taken when the scan starts.
        A file that cannot be inspected or removed is logged and skipped.
        """
        if now is None:
            now = time.time()

        try:
            with os.scandir(self.directory) as it:
                entries = list(it)
        except OSError as e:
            logger.error("Cannot list %s: %s", self.directory, e)
            return 0

        removed = 0
        for entry in entries:
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                age = now - entry.stat(follow_symlinks=False).st_mtime
                if age <= self.retention_seconds:
                    continue
                os.remove(entry.path)
            except OSError as e:
                logger.warning("Could not remove %s: %s", entry.name, e)
                continue
            removed += 1
            logger.info("Removed old file: %s (age: %.0fs)", entry.name, age)

        logger.info("Sweep finished: %d of %d file(s) removed", removed, len(entries))
        return removed

    async def run_periodic(self, interval: float) -> None:
        """Sweep every `interval` seconds until cancelled"""
        logger.info(
            "Sweeping %s every %ds (retention %ds)",
            self.directory, interval, self.retention_seconds,
        )
        while True:
            await asyncio.sleep(interval)
            try:
                await run_in_threadpool(self.sweep)
            except Exception:
                logger.exception("Sweep failed")
