from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable

import redis

from slideship.config import AppConfig
from slideship.core.lifecycle import DeferredRenderer, Direction, SlideManager, TransitionTrigger
from slideship.core.objects import LiveObject, ObjectEvent
from slideship.reloader import DeckReloader
from slideship.sources import SlideSource, load_initial, make_source
from slideship.streams import EventStream, publish_event
from slideship.websocket_hub import PresentationWebSocketHub

logger = logging.getLogger(__name__)


class PresentationBusy(RuntimeError):
    """A transition is in flight and the requested operation must wait."""


class PresentationSession:
    """One running presentation: manager, remote renderer bridge, reloader, outbox.

    The remote renderer drives transitions through `navigate()` and reports the
    end of its animation through `complete_transition()`. Every state change is
    broadcast to websocket clients and appended to the session's Redis stream.
    """

    def __init__(
        self,
        *,
        source: SlideSource,
        config: AppConfig = AppConfig(),
        redis_factory: Callable[[], redis.Redis] | None = None,
        session_id: str | None = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.config = config
        self.source = source
        self.renderer = DeferredRenderer()
        self.manager = SlideManager(renderer=self.renderer, config=config.canvas)
        self.hub = PresentationWebSocketHub()
        self.stream = EventStream(self.session_id)
        self.reloader: DeckReloader | None = None

        self._redis_factory = redis_factory
        self._redis: redis.Redis | None = None
        self._poll_task: asyncio.Task[None] | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> PresentationSession:
        return cls(
            source=make_source(config.source),
            config=config,
            redis_factory=lambda: redis.Redis.from_url(config.redis_url, decode_responses=True),
        )

    async def start(self) -> None:
        fetched = await load_initial(self.source)
        self.manager.load_document(fetched.text)
        self.manager.activate_current_slide()
        logger.info("session %s started with %d slides from %s", self.session_id, len(self.manager.document), self.source.location)

        if self.config.polling_enabled:
            self.reloader = DeckReloader(
                self.manager,
                self.source,
                marker=fetched.marker,
                interval_s=self.config.poll_interval_s,
                on_reload=self._on_polled_reload,
            )
            self._poll_task = asyncio.create_task(self.reloader.run())

    async def stop(self) -> None:
        if self.reloader is not None:
            self.reloader.stop()
        if self._poll_task is not None:
            await self._poll_task
            self._poll_task = None
        aclose = getattr(self.source, "aclose", None)
        if aclose is not None:
            await aclose()
        if self._redis is not None:
            self._redis.close()
            self._redis = None

    async def navigate(self, direction: Direction, trigger: TransitionTrigger, *, r: redis.Redis | None = None) -> bool:
        """Ask for a transition. Returns False when the request was dropped."""

        if self.manager.is_transitioning:
            return False
        self.manager.request_transition(direction, trigger=trigger)
        if not self.manager.is_transitioning:
            return False

        await self._emit(
            "transition_started",
            {"direction": direction.value, "trigger": trigger.value, "from_index": self.manager.current_index},
            r=r,
        )
        return True

    async def complete_transition(self, *, r: redis.Redis | None = None) -> bool:
        if not self.renderer.complete_pending():
            return False
        await self._emit("slide_changed", self._slide_fields(), r=r)
        return True

    async def reload(self, text: str, *, r: redis.Redis | None = None) -> tuple[LiveObject, ...]:
        if self.manager.is_transitioning:
            raise PresentationBusy("cannot reload while a transition is in flight")
        live = self.manager.reload(text)
        await self._emit("deck_reloaded", self._slide_fields(), r=r)
        return live

    async def object_event(
        self,
        handle: str,
        event: ObjectEvent,
        *,
        r: redis.Redis | None = None,
        now: float | None = None,
    ) -> tuple[LiveObject, bool] | None:
        """Apply a renderer event. Returns None for unknown or stale handles."""

        obj = self.manager.find_object(handle)
        if obj is None:
            return None
        self.manager.tick(now)
        changed = self.manager.dispatch(handle, event, now=now)
        if changed:
            await self._emit("object_changed", {"handle": handle, "event": event, "state": obj.state or ""}, r=r)
        return obj, changed

    def _slide_fields(self) -> dict[str, object]:
        return {
            "index": self.manager.current_index,
            "count": len(self.manager.document),
            "generation": self.manager.generation,
        }

    async def _on_polled_reload(self, live: tuple[LiveObject, ...]) -> None:
        await self._emit("deck_reloaded", self._slide_fields(), r=None)

    def _outbox(self, r: redis.Redis | None) -> redis.Redis | None:
        if r is not None:
            return r
        if self._redis is None and self._redis_factory is not None:
            self._redis = self._redis_factory()
        return self._redis

    async def _emit(self, event_type: str, fields: dict[str, object], *, r: redis.Redis | None) -> None:
        payload: dict[str, object] = {"type": event_type, "session_id": self.session_id, **fields}
        await self.hub.broadcast(payload)
        outbox = self._outbox(r)
        if outbox is not None:
            publish_event(r=outbox, stream=self.stream, fields=payload)
