"""Where deck text comes from.

A source exposes two async calls: `marker()` returns a cheap modification
marker (file mtime, HTTP Last-Modified) used by the reloader to decide whether
anything changed, and `fetch()` returns the full text together with the
marker it was read at.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)

SAMPLE_PRESENTATION = """
# Welcome to Slide Ship

## Loading Error

Could not load slides.md.

This is a fallback presentation.

---

# Getting Started

1. Create a slides.md file next to the server
2. Edit your slides in Markdown
3. Save and watch the deck reload

---

# Controls

- **Arrow keys** or **WASD** to fly
- **SPACE** to shoot lasers
- Fly off-screen edges to change slides
"""


class SourceUnavailable(RuntimeError):
    """The deck could not be read (missing file, bad status, transport error)."""


@dataclass(frozen=True, slots=True)
class Fetched:
    text: str
    marker: str | None


class SlideSource(Protocol):
    @property
    def location(self) -> str: ...

    async def marker(self) -> str | None: ...

    async def fetch(self) -> Fetched: ...


class FileSlideSource:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @property
    def location(self) -> str:
        return str(self.path)

    async def marker(self) -> str | None:
        try:
            return str(self.path.stat().st_mtime_ns)
        except OSError as e:
            raise SourceUnavailable(f"cannot stat {self.path}: {e}") from e

    async def fetch(self) -> Fetched:
        try:
            marker = str(self.path.stat().st_mtime_ns)
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceUnavailable(f"cannot read {self.path}: {e}") from e
        return Fetched(text=text, marker=marker)


class HttpSlideSource:
    """Deck served over HTTP; the marker is the `Last-Modified` header."""

    def __init__(self, url: str, *, client: httpx.AsyncClient | None = None) -> None:
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=10.0)
        self._owns_client = client is None

    @property
    def location(self) -> str:
        return self.url

    async def marker(self) -> str | None:
        response = await self._request("HEAD")
        return response.headers.get("last-modified")

    async def fetch(self) -> Fetched:
        response = await self._request("GET")
        return Fetched(text=response.text, marker=response.headers.get("last-modified"))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str) -> httpx.Response:
        try:
            response = await self._client.request(method, self.url, headers={"Cache-Control": "no-cache"})
        except httpx.HTTPError as e:
            raise SourceUnavailable(f"{method} {self.url} failed: {e}") from e
        if not response.is_success:
            raise SourceUnavailable(f"{method} {self.url} returned {response.status_code}")
        return response


def make_source(location: str, *, client: httpx.AsyncClient | None = None) -> SlideSource:
    if location.startswith(("http://", "https://")):
        return HttpSlideSource(location, client=client)
    return FileSlideSource(location)


async def load_initial(source: SlideSource) -> Fetched:
    """Fetch the deck, or fall back to the built-in sample presentation."""

    try:
        return await source.fetch()
    except SourceUnavailable as e:
        logger.warning("using sample presentation: %s", e)
        return Fetched(text=SAMPLE_PRESENTATION, marker=None)
