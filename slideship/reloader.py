from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from slideship.core.lifecycle import SlideManager
from slideship.core.objects import LiveObject
from slideship.sources import SlideSource, SourceUnavailable

logger = logging.getLogger(__name__)

ReloadCallback = Callable[[tuple[LiveObject, ...]], Awaitable[None]]


class DeckReloader:
    """Polls a slide source and reloads the manager when its marker changes.

    Contract:
      - a missing marker (e.g. no Last-Modified header) never triggers a reload.
      - nothing happens while a transition is in flight; the next poll retries.
      - fetch failures keep the current deck.
    """

    def __init__(
        self,
        manager: SlideManager,
        source: SlideSource,
        *,
        marker: str | None = None,
        interval_s: float = 2.0,
        on_reload: ReloadCallback | None = None,
    ) -> None:
        self.manager = manager
        self.source = source
        self.marker = marker
        self.interval_s = interval_s
        self.on_reload = on_reload
        self._stop = asyncio.Event()

    async def check_once(self) -> bool:
        """Run one poll. Returns True if the deck was reloaded."""

        if self.manager.is_transitioning:
            return False
        try:
            marker = await self.source.marker()
        except SourceUnavailable as e:
            logger.warning("poll of %s failed: %s", self.source.location, e)
            return False
        if marker is None or marker == self.marker:
            return False

        try:
            fetched = await self.source.fetch()
        except SourceUnavailable as e:
            logger.warning("reload of %s failed: %s", self.source.location, e)
            return False

        # A transition may have started while we were awaiting the fetch.
        if self.manager.is_transitioning:
            return False

        logger.info("%s changed, reloading", self.source.location)
        live = self.manager.reload(fetched.text)
        self.marker = fetched.marker or marker
        if self.on_reload is not None:
            await self.on_reload(live)
        return True

    async def run(self) -> None:
        self._stop.clear()
        while not self._stop.is_set():
            await self.check_once()
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval_s)
            except asyncio.TimeoutError:
                pass

    def stop(self) -> None:
        self._stop.set()
