from __future__ import annotations

from typing import TYPE_CHECKING

from statemachine import State, StateMachine

if TYPE_CHECKING:
    from slideship.core.objects import CrystalObject


class NavigationFSM(StateMachine):
    """Transition lock for slide navigation.

    - idle: navigation requests are accepted.
    - transitioning: a transition is in flight; requests are dropped until the
      renderer invokes the completion continuation.
    """

    idle = State("Idle", initial=True)
    transitioning = State("Transitioning")

    start_transition = idle.to(transitioning)
    finish_transition = transitioning.to(idle)

    @property
    def is_transitioning(self) -> bool:
        return self.transitioning.is_active


class CrystalFSM(StateMachine):
    """Reveal state of one crystal image.

    Entering `revealed` builds the revealed content (image box + dismiss
    affordance) on the owning object; leaving it tears that content down.
    """

    dormant = State("Dormant", initial=True)
    revealed = State("Revealed")

    struck = dormant.to(revealed) | revealed.to(dormant)
    touched = dormant.to(revealed) | revealed.to(dormant)
    dismiss = revealed.to(dormant)

    def __init__(self, crystal: CrystalObject):
        self.crystal = crystal
        super().__init__()

    def on_enter_revealed(self) -> None:
        self.crystal.build_revealed()

    def on_exit_revealed(self) -> None:
        self.crystal.teardown_revealed()


class TextFSM(StateMachine):
    """Highlight state of one text obstacle.

    - touched: enter or renew a short highlight (the owner keeps the deadline).
    - struck: one-shot flash, ignored while a flash is already running.
    - expire: deadline reached, restore the resting look.
    """

    resting = State("Resting", initial=True)
    highlighted = State("Highlighted")
    flashing = State("Flashing")

    touched = resting.to(highlighted) | highlighted.to.itself()
    struck = resting.to(flashing) | highlighted.to(flashing)
    expire = highlighted.to(resting) | flashing.to(resting)
