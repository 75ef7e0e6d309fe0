import itertools
import os
import sys

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from main import app  # noqa: E402
from routes.utils import get_autosave, get_history_store, get_renderer  # noqa: E402
from utils.autosave import AutoSaveCoordinator  # noqa: E402
from utils.history_store import HistoryStore  # noqa: E402
from utils.storage_backend import InMemoryBackend  # noqa: E402

FAKE_THUMBNAIL = "data:image/png;base64,iVBORw0KGgo="


class FakeRenderer:
    """Renderer-Attrappe: zählt Aufrufe, liefert feste Ergebnisse."""

    def __init__(self, fail: bool = False, empty: bool = False):
        self.fail = fail
        self.empty = empty
        self.thumbnails = []
        self.exports = []

    async def render_thumbnail(self, payload, colors, size_px):
        if self.fail:
            raise RuntimeError("renderer kaputt")
        self.thumbnails.append((payload, size_px))
        return FAKE_THUMBNAIL

    async def render_export(self, payload, colors, fmt, resolution=None):
        self.exports.append((payload, fmt, resolution))
        if self.empty:
            return b""
        return f"{fmt.value}:{payload}".encode("utf-8")


@pytest.fixture
def clock():
    """Streng steigende Millisekunden-Zeitstempel."""
    counter = itertools.count(1_700_000_000_000, 1000)
    return lambda: next(counter)


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def store(backend, renderer, clock):
    return HistoryStore(backend, renderer, clock=clock)


@pytest_asyncio.fixture
async def coordinator(store, renderer):
    autosave = AutoSaveCoordinator(store, renderer, delay=0.01)
    yield autosave
    await autosave.close()


@pytest_asyncio.fixture
async def client(store, renderer, coordinator):
    """Testclient mit In-Memory-Verlauf und Fake-Renderer."""
    app.dependency_overrides[get_history_store] = lambda: store
    app.dependency_overrides[get_renderer] = lambda: renderer
    app.dependency_overrides[get_autosave] = lambda: coordinator

    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
