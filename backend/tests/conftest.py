"""Shared fixtures: a temporary store and a scriptable extractor"""
import os
import tempfile

# Keep the module-level app in vidstash.main away from the working directory
os.environ.setdefault("DOWNLOADS_DIR", tempfile.mkdtemp(prefix="vidstash-test-"))

import pytest
from fastapi.testclient import TestClient

from vidstash.main import create_app
from vidstash.services.extractor_service import ResolvedMedia
from vidstash.services.store_service import StoreManager

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class FakeStream:
    def __init__(self, chunks, gate=None, fail_after=None):
        self._chunks = list(chunks)
        self._gate = gate
        self._fail_after = fail_after
        self.closed = False

    async def chunks(self):
        for index, chunk in enumerate(self._chunks):
            if self._gate is not None:
                await self._gate.wait()
            if self._fail_after is not None and index >= self._fail_after:
                raise ConnectionResetError("upstream went away")
            yield chunk

    async def aclose(self):
        self.closed = True


class FakeExtractor:
    def __init__(self, title="Never Gonna Give You Up!", valid=True, error=None,
                 chunks=(b"abc", b"def"), gate=None, fail_after=None):
        self.title = title
        self.valid = valid
        self.error = error
        self.chunks = chunks
        self.gate = gate
        self.fail_after = fail_after
        self.validate_calls = []
        self.resolve_calls = []
        self.streams = []
        self.closed = False

    async def validate(self, locator):
        self.validate_calls.append(locator)
        return self.valid

    async def resolve(self, locator, fmt):
        self.resolve_calls.append((locator, fmt))
        if self.error is not None:
            raise self.error
        stream = FakeStream(self.chunks, gate=self.gate, fail_after=self.fail_after)
        self.streams.append(stream)
        return ResolvedMedia(title=self.title, stream=stream)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def store(tmp_path):
    return StoreManager(str(tmp_path / "downloads"), retention_seconds=3600)


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def app(store, extractor):
    return create_app(store=store, extractor=extractor)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
