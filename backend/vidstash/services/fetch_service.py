"""Fetch service: resolve a video and stream it into the store"""
import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional, Set

import anyio

from ..errors import InternalError, InvalidInput, VidstashError
from ..models.formats import OutputFormat
from ..utils.file_utils import download_url, sanitize_title
from .extractor_service import Extractor, MediaStream
from .store_service import StoreManager

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    reference_path: str
    title: str
    filename: str


class FetchCoordinator:
    """Starts downloads and answers before they finish.

    `handle` returns as soon as the target file has been opened. Whatever
    happens to the write afterwards is only logged; a failed download leaves
    its partial file for the store's sweep.
    """

    def __init__(self, store: StoreManager, extractor: Extractor):
        self.store = store
        self.extractor = extractor
        self._tasks: Set[asyncio.Task] = set()

    @property
    def active_writes(self) -> int:
        return len(self._tasks)

    async def handle(self, locator: Optional[str], format: Optional[str] = None) -> FetchResult:
        if not locator or not locator.strip():
            raise InvalidInput("Video URL is required")

        fmt = OutputFormat.parse(format)
        try:
            if not await self.extractor.validate(locator):
                raise InvalidInput()
            media = await self.extractor.resolve(locator, fmt)
        except VidstashError:
            raise
        except Exception as e:
            logger.exception("Unexpected error resolving %s", locator)
            raise InternalError() from e

        try:
            display_name = sanitize_title(media.title).strip() or "video"
            filepath = self.store.allocate(display_name, fmt.extension)
        except Exception as e:
            logger.exception("Unexpected error preparing download of %s", locator)
            await media.stream.aclose()
            raise InternalError() from e

        filename = os.path.basename(filepath)
        await self._start_write(filepath, media.stream)
        logger.info("Download started: %s (%s)", filename, fmt.value)

        return FetchResult(
            reference_path=download_url(filename),
            title=display_name,
            filename=filename,
        )

    async def _start_write(self, filepath: str, stream: MediaStream) -> None:
        started = asyncio.Event()
        task = asyncio.create_task(self._write(filepath, stream, started))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        await started.wait()

    async def _write(self, filepath: str, stream: MediaStream, started: asyncio.Event) -> None:
        filename = os.path.basename(filepath)
        written = 0
        try:
            try:
                fh = await anyio.open_file(filepath, "wb")
            finally:
                started.set()
            async with fh:
                async for chunk in stream.chunks():
                    await fh.write(chunk)
                    written += len(chunk)
        except Exception:
            logger.exception("Error writing file: %s (%d bytes written)", filename, written)
        else:
            logger.info("Download completed: %s (%d bytes)", filename, written)
        finally:
            await stream.aclose()

    async def join(self) -> None:
        """Wait for every write started so far"""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
