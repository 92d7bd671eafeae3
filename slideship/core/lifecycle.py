from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from slideship.core.document import Document
from slideship.core.fsm import NavigationFSM
from slideship.core.layout import LayoutConfig, SlideLayout, layout
from slideship.core.objects import (
    CrystalObject,
    LiveObject,
    ObjectEvent,
    StaticImageObject,
    TableObject,
    TextObject,
)
from slideship.core.parser import parse
from slideship.core.table_layout import TextMeasurer
from slideship.core.theme import DEFAULT_THEME, Theme

logger = logging.getLogger(__name__)


class Direction(StrEnum):
    next = "next"
    prev = "prev"

    @property
    def step(self) -> int:
        return 1 if self is Direction.next else -1


class TransitionTrigger(StrEnum):
    """What asked for the transition. Only the renderer's animation differs."""

    edge = "edge"
    key = "key"


Continuation = Callable[[], None]
ReadyCallback = Callable[[tuple[LiveObject, ...]], None]


class TransitionRenderer(Protocol):
    def begin_transition(self, direction: Direction, trigger: TransitionTrigger, complete: Continuation) -> None:
        """Start the transition animation and call `complete` exactly once when done."""
        ...


class ImmediateRenderer:
    """Completes every transition synchronously (headless use, tests)."""

    def begin_transition(self, direction: Direction, trigger: TransitionTrigger, complete: Continuation) -> None:
        complete()


@dataclass(frozen=True, slots=True)
class PendingTransition:
    direction: Direction
    trigger: TransitionTrigger
    complete: Continuation


class DeferredRenderer:
    """Parks the continuation until a remote renderer reports its animation finished."""

    def __init__(self) -> None:
        self.pending: PendingTransition | None = None

    def begin_transition(self, direction: Direction, trigger: TransitionTrigger, complete: Continuation) -> None:
        self.pending = PendingTransition(direction=direction, trigger=trigger, complete=complete)

    def complete_pending(self) -> bool:
        pending, self.pending = self.pending, None
        if pending is None:
            return False
        pending.complete()
        return True


@dataclass(frozen=True, slots=True)
class NavigationState:
    slides: Document
    current_index: int
    is_transitioning: bool
    live_objects: tuple[LiveObject, ...]


class SlideManager:
    """Owns the active slide, the transition lock, and the live object generation.

    Exactly one generation of live objects exists at a time; it is replaced
    wholesale by `activate_current_slide()` and by nothing else.
    """

    def __init__(
        self,
        *,
        renderer: TransitionRenderer | None = None,
        config: LayoutConfig = LayoutConfig(),
        theme: Theme = DEFAULT_THEME,
        measurer: TextMeasurer | None = None,
    ) -> None:
        self.renderer: TransitionRenderer = renderer or ImmediateRenderer()
        self.config = config
        self.theme = theme
        self.measurer = measurer
        # Native image sizes reported by the renderer, keyed by image source.
        self.image_sizes: dict[str, tuple[int, int]] = {}

        self.document = Document()
        self.current_index = 0
        self._fsm = NavigationFSM()
        self._live: tuple[LiveObject, ...] = ()
        self._generation = 0

    @property
    def is_transitioning(self) -> bool:
        return self._fsm.is_transitioning

    @property
    def live_objects(self) -> tuple[LiveObject, ...]:
        return self._live

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> NavigationState:
        return NavigationState(
            slides=self.document,
            current_index=self.current_index,
            is_transitioning=self.is_transitioning,
            live_objects=self._live,
        )

    def load_document(self, text: str) -> Document:
        self.document = parse(text)
        return self.document

    def activate_current_slide(self) -> tuple[LiveObject, ...]:
        """Destroy the current generation and build the one for `current_index`."""

        self._generation += 1
        slide_layout: SlideLayout | None = None
        fresh: tuple[LiveObject, ...] = ()

        if len(self.document):
            slide_layout = layout(
                self.document[self.current_index],
                config=self.config,
                theme=self.theme,
                measurer=self.measurer,
                image_sizes=self.image_sizes,
            )
            fresh = self._spawn(slide_layout)

        for obj in self._live:
            obj.destroy()
        self._live = fresh

        logger.info(
            "activated slide %d/%d (generation %d, %d objects)",
            self.current_index + 1,
            len(self.document),
            self._generation,
            len(fresh),
        )
        return fresh

    def can_advance(self) -> bool:
        return self.current_index < len(self.document) - 1

    def can_retreat(self) -> bool:
        return self.current_index > 0

    def request_transition(
        self,
        direction: Direction,
        *,
        trigger: TransitionTrigger = TransitionTrigger.edge,
        on_ready: ReadyCallback | None = None,
    ) -> None:
        """Start a transition, or do nothing if locked or at the end of the deck."""

        allowed = self.can_advance() if direction is Direction.next else self.can_retreat()
        if self.is_transitioning or not allowed:
            logger.debug("dropping %s transition (transitioning=%s)", direction.value, self.is_transitioning)
            return

        self._fsm.start_transition()
        logger.info("transition %s via %s from slide %d", direction.value, trigger.value, self.current_index + 1)
        self.renderer.begin_transition(direction, trigger, self._continuation(direction, on_ready))

    def reload(self, text: str) -> tuple[LiveObject, ...]:
        """Swap in new source text and rebuild the active slide at the same index."""

        self.load_document(text)
        self.current_index = self._clamp(self.current_index)
        logger.info("reloaded deck: %d slides, showing %d", len(self.document), self.current_index + 1)
        return self.activate_current_slide()

    def find_object(self, handle: str) -> LiveObject | None:
        return next((obj for obj in self._live if obj.handle == handle), None)

    def dispatch(self, handle: str, event: ObjectEvent, *, now: float | None = None) -> bool:
        """Route a renderer event to a live object. Stale handles are ignored."""

        obj = self.find_object(handle)
        if obj is None:
            logger.debug("ignoring %s for unknown handle %s", event, handle)
            return False
        return obj.handle_event(event, now=time.monotonic() if now is None else now)

    def tick(self, now: float | None = None) -> list[LiveObject]:
        """Advance object timers; returns the objects whose state changed."""

        moment = time.monotonic() if now is None else now
        return [obj for obj in self._live if obj.tick(moment)]

    def _continuation(self, direction: Direction, on_ready: ReadyCallback | None) -> Continuation:
        fired = False

        def complete() -> None:
            nonlocal fired
            if fired:
                logger.warning("transition continuation invoked more than once; ignoring")
                return
            fired = True

            try:
                self.current_index = self._clamp(self.current_index + direction.step)
                live = self.activate_current_slide()
            finally:
                # The lock is released even if building the next slide fails.
                self._fsm.finish_transition()
            if on_ready is not None:
                on_ready(live)

        return complete

    def _clamp(self, index: int) -> int:
        return max(0, min(index, len(self.document) - 1))

    def _spawn(self, slide_layout: SlideLayout) -> tuple[LiveObject, ...]:
        gen = self._generation
        objects: list[LiveObject] = []
        for i, element in enumerate(slide_layout.elements):
            geometry = slide_layout.tables.get(i)
            if geometry is not None:
                objects.append(TableObject(f"g{gen}-table-{i}", element, geometry))
            else:
                objects.append(TextObject(f"g{gen}-text-{i}", element))
        for i, crystal in enumerate(slide_layout.crystals):
            objects.append(CrystalObject(f"g{gen}-crystal-{i}", crystal))
        for i, image in enumerate(slide_layout.static_images):
            objects.append(StaticImageObject(f"g{gen}-image-{i}", image))
        return tuple(objects)


def report_image_sizes(manager: SlideManager, sizes: Mapping[str, tuple[int, int]]) -> None:
    """Record native image sizes; they apply from the next activation on.

    Sizes with a non-positive dimension carry no aspect ratio and are skipped.
    """

    for source, (width, height) in sizes.items():
        if width <= 0 or height <= 0:
            logger.warning("ignoring native size %dx%d for %s", width, height, source)
            continue
        manager.image_sizes[source] = (width, height)
