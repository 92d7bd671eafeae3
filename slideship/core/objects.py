"""Live objects: one handle per displayed element, table, or image of the active slide.

Each handle carries the resolved layout the renderer draws plus, for text and
crystals, a small state machine driven by the renderer's "struck" and
"touched" reports. Time is passed in explicitly so the machines stay
deterministic under test.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import ClassVar, Literal

from statemachine.exceptions import TransitionNotAllowed

from slideship.core.fsm import CrystalFSM, TextFSM
from slideship.core.layout import LayoutElement, ResolvedCrystal, ResolvedStaticImage
from slideship.core.table_layout import TableGeometry

logger = logging.getLogger(__name__)

ObjectEvent = Literal["struck", "touched", "dismiss"]

# Hover highlight ends unless renewed within this window.
HIGHLIGHT_S = 0.1
FLASH_S = 0.3
FLASH_STEP_S = 0.05
FLASH_COLORS = ("#ffffff", "#00ffff", "#ff00ff", "#ffff00")

# Shatter + materialize; crystal events are ignored while it plays.
CRYSTAL_ANIMATION_S = 0.65
DISMISS_OFFSET = 5
DISMISS_HIT_RADIUS = 30


def brighten(color: str, amount: int = 60) -> str:
    hex_ = color.lstrip("#")
    channels = [min(255, int(hex_[i : i + 2], 16) + amount) for i in (0, 2, 4)]
    return "#" + "".join(f"{c:02x}" for c in channels)


class LiveObject:
    kind: ClassVar[str] = "object"

    def __init__(self, handle: str) -> None:
        self.handle = handle
        self.destroyed = False

    @property
    def state(self) -> str | None:
        return None

    def handle_event(self, event: ObjectEvent, *, now: float) -> bool:
        """Apply a renderer event. Returns True if the object's state changed."""

        return False

    def tick(self, now: float) -> bool:
        """Expire any running timers. Returns True if the object's state changed."""

        return False

    def destroy(self) -> None:
        self.destroyed = True


class TextObject(LiveObject):
    kind = "text"

    def __init__(self, handle: str, element: LayoutElement) -> None:
        super().__init__(handle)
        self.element = element
        self.fsm = TextFSM()
        self.highlight_until = 0.0
        self.flash_started = 0.0
        self.flash_until = 0.0

    @property
    def state(self) -> str:
        return str(self.fsm.current_state.id)

    def handle_event(self, event: ObjectEvent, *, now: float) -> bool:
        if event not in ("struck", "touched"):
            return False
        try:
            self.fsm.send(event)
        except TransitionNotAllowed:
            return False

        if event == "touched":
            self.highlight_until = now + HIGHLIGHT_S
        else:
            self.flash_started = now
            self.flash_until = now + FLASH_S
        return True

    def tick(self, now: float) -> bool:
        if self.fsm.highlighted.is_active and now >= self.highlight_until:
            self.fsm.expire()
            return True
        if self.fsm.flashing.is_active and now >= self.flash_until:
            self.fsm.expire()
            return True
        return False

    def display_color(self, now: float) -> str:
        if self.fsm.flashing.is_active:
            step = int((now - self.flash_started) / FLASH_STEP_S)
            return FLASH_COLORS[step % len(FLASH_COLORS)]
        if self.fsm.highlighted.is_active:
            return brighten(self.element.color)
        return self.element.color


class TableObject(LiveObject):
    kind = "table"

    def __init__(self, handle: str, element: LayoutElement, geometry: TableGeometry) -> None:
        super().__init__(handle)
        self.element = element
        self.geometry = geometry


class StaticImageObject(LiveObject):
    kind = "static_image"

    def __init__(self, handle: str, image: ResolvedStaticImage) -> None:
        super().__init__(handle)
        self.image = image


@dataclass(frozen=True, slots=True)
class RevealedContent:
    x: float
    y: float
    width: float
    height: float
    dismiss_x: float
    dismiss_y: float


class CrystalObject(LiveObject):
    kind = "crystal"

    def __init__(self, handle: str, crystal: ResolvedCrystal) -> None:
        super().__init__(handle)
        self.crystal = crystal
        self.revealed: RevealedContent | None = None
        self.busy_until = 0.0
        self.fsm = CrystalFSM(self)

    @property
    def state(self) -> str:
        return str(self.fsm.current_state.id)

    def handle_event(self, event: ObjectEvent, *, now: float) -> bool:
        if now < self.busy_until:
            logger.debug("crystal %s busy, dropping %s", self.handle, event)
            return False
        try:
            self.fsm.send(event)
        except TransitionNotAllowed:
            return False
        self.busy_until = now + CRYSTAL_ANIMATION_S
        return True

    def hits_dismiss(self, x: float, y: float) -> bool:
        if self.revealed is None:
            return False
        return math.dist((x, y), (self.revealed.dismiss_x, self.revealed.dismiss_y)) < DISMISS_HIT_RADIUS

    def build_revealed(self) -> None:
        c = self.crystal
        self.revealed = RevealedContent(
            x=c.x,
            y=c.y,
            width=c.width,
            height=c.height,
            dismiss_x=c.x + c.width / 2 + DISMISS_OFFSET,
            dismiss_y=c.y - c.height / 2 - DISMISS_OFFSET,
        )

    def teardown_revealed(self) -> None:
        self.revealed = None

    def destroy(self) -> None:
        self.teardown_revealed()
        super().destroy()
