"""yt-dlp backed extraction: URL validation, metadata and media stream"""
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional, Protocol
from urllib.parse import urlparse

import httpx
import yt_dlp
from fastapi.concurrency import run_in_threadpool
from yt_dlp.extractor import gen_extractor_classes
from yt_dlp.utils import DownloadError, ExtractorError

from ..config import EXTRACTOR_RETRIES, HTTP_HEADERS
from ..errors import ResolutionError
from ..models.formats import OutputFormat

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

# Protocols whose `url` is the media itself rather than a playlist or manifest
DIRECT_PROTOCOLS = ('http', 'https')


class MediaStream(Protocol):
    def chunks(self) -> AsyncIterator[bytes]: ...

    async def aclose(self) -> None: ...


@dataclass
class ResolvedMedia:
    title: str
    stream: MediaStream


class Extractor(Protocol):
    async def validate(self, locator: str) -> bool: ...

    async def resolve(self, locator: str, fmt: OutputFormat) -> ResolvedMedia: ...

    async def aclose(self) -> None: ...


class HttpMediaStream:
    """Body of an already-sent streaming httpx response"""

    def __init__(self, response: httpx.Response):
        self._response = response

    async def chunks(self) -> AsyncIterator[bytes]:
        async for chunk in self._response.aiter_bytes(CHUNK_SIZE):
            yield chunk

    async def aclose(self) -> None:
        await self._response.aclose()


class YtDlpExtractor:
    """Extractor backed by yt-dlp for metadata and httpx for the bytes"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client or httpx.AsyncClient(
            follow_redirects=True,
            # no read timeout: a stalled upstream keeps the file open
            timeout=httpx.Timeout(30.0, read=None),
        )
        self._extractors = [ie for ie in gen_extractor_classes() if ie.ie_key() != 'Generic']

    def _build_opts(self, fmt: OutputFormat) -> Dict:
        return {
            'format': fmt.selector,
            'quiet': True,
            'no_warnings': True,
            'noplaylist': True,
            'http_headers': HTTP_HEADERS,
            # Additional options to avoid blocking - try multiple player clients
            'extractor_args': {
                'youtube': {
                    'player_client': ['android', 'ios', 'web'],
                }
            },
            'retries': EXTRACTOR_RETRIES,
        }

    def is_supported(self, locator: str) -> bool:
        parsed = urlparse(locator)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            return False
        return any(ie.suitable(locator) for ie in self._extractors)

    async def validate(self, locator: str) -> bool:
        return await run_in_threadpool(self.is_supported, locator)

    def _extract_info(self, locator: str, fmt: OutputFormat) -> Dict:
        with yt_dlp.YoutubeDL(self._build_opts(fmt)) as ydl:
            return ydl.extract_info(locator, download=False)

    async def resolve(self, locator: str, fmt: OutputFormat) -> ResolvedMedia:
        try:
            info = await run_in_threadpool(self._extract_info, locator, fmt)
        except (DownloadError, ExtractorError) as e:
            raise ResolutionError() from e

        if not info or not info.get('url'):
            raise ResolutionError("Download failed: no downloadable stream for this video")

        protocol = info.get('protocol')
        if protocol and protocol not in DIRECT_PROTOCOLS:
            logger.warning("Selected format for %s uses %s, not a direct download", locator, protocol)
            raise ResolutionError("Download failed: no downloadable stream for this video")

        request = self._client.build_request(
            'GET', info['url'], headers=info.get('http_headers') or HTTP_HEADERS
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise ResolutionError() from e

        if response.is_error:
            await response.aclose()
            logger.warning(
                "Stream request for %s answered %d", locator, response.status_code
            )
            raise ResolutionError()

        return ResolvedMedia(
            title=info.get('title') or 'video',
            stream=HttpMediaStream(response),
        )

    async def aclose(self) -> None:
        await self._client.aclose()
