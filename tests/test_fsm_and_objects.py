from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from slideship.core.fsm import NavigationFSM, TextFSM
from slideship.core.layout import LayoutElement, ResolvedCrystal
from slideship.core.objects import (
    CRYSTAL_ANIMATION_S,
    FLASH_COLORS,
    FLASH_S,
    HIGHLIGHT_S,
    CrystalObject,
    TextObject,
    brighten,
)


def _text(color: str = "#aaccff") -> TextObject:
    element = LayoutElement(
        x=80, y=100, content="hello", font_size=24, color=color, font_family="Revalia", element_type="paragraph"
    )
    return TextObject("g1-text-0", element)


def _crystal() -> CrystalObject:
    crystal = ResolvedCrystal(source="gem.png", x=300, y=200, width=100, height=80, icon_x=300, icon_y=200)
    return CrystalObject("g1-crystal-0", crystal)


def test_navigation_fsm_is_a_strict_lock() -> None:
    fsm = NavigationFSM()
    assert not fsm.is_transitioning
    fsm.start_transition()
    assert fsm.is_transitioning
    with pytest.raises(TransitionNotAllowed):
        fsm.start_transition()
    fsm.finish_transition()
    assert not fsm.is_transitioning
    with pytest.raises(TransitionNotAllowed):
        fsm.finish_transition()


def test_text_fsm_ignores_struck_while_flashing() -> None:
    fsm = TextFSM()
    fsm.struck()
    assert fsm.flashing.is_active
    with pytest.raises(TransitionNotAllowed):
        fsm.struck()


def test_touch_highlights_and_renews() -> None:
    obj = _text()
    assert obj.handle_event("touched", now=0.0)
    assert obj.state == "highlighted"
    assert obj.display_color(0.0) == brighten("#aaccff")

    # Renewed before the deadline, so the first deadline does not expire it.
    assert obj.handle_event("touched", now=0.08)
    assert not obj.tick(0.0 + HIGHLIGHT_S)
    assert obj.state == "highlighted"

    assert obj.tick(0.08 + HIGHLIGHT_S)
    assert obj.state == "resting"
    assert obj.display_color(1.0) == "#aaccff"


def test_struck_flashes_then_restores() -> None:
    obj = _text()
    assert obj.handle_event("struck", now=10.0)
    assert obj.state == "flashing"
    assert obj.display_color(10.0) == FLASH_COLORS[0]
    assert obj.display_color(10.06) == FLASH_COLORS[1]

    # A second strike during the flash is ignored.
    assert not obj.handle_event("struck", now=10.1)
    assert not obj.handle_event("touched", now=10.1)

    assert obj.tick(10.0 + FLASH_S)
    assert obj.state == "resting"


def test_text_ignores_dismiss() -> None:
    obj = _text()
    assert not obj.handle_event("dismiss", now=0.0)
    assert obj.state == "resting"


def test_brighten_clamps_channels() -> None:
    assert brighten("#000000") == "#3c3c3c"
    assert brighten("#f0ff10") == "#ffff4c"


def test_crystal_reveal_builds_and_tears_down_content() -> None:
    obj = _crystal()
    assert obj.state == "dormant"
    assert obj.revealed is None

    assert obj.handle_event("struck", now=0.0)
    assert obj.state == "revealed"
    assert obj.revealed is not None
    assert (obj.revealed.dismiss_x, obj.revealed.dismiss_y) == (300 + 50 + 5, 200 - 40 - 5)

    assert obj.handle_event("touched", now=CRYSTAL_ANIMATION_S)
    assert obj.state == "dormant"
    assert obj.revealed is None


def test_crystal_ignores_events_during_animation() -> None:
    obj = _crystal()
    assert obj.handle_event("touched", now=0.0)
    assert not obj.handle_event("touched", now=CRYSTAL_ANIMATION_S / 2)
    assert obj.state == "revealed"


def test_crystal_dismiss_only_from_revealed() -> None:
    obj = _crystal()
    assert not obj.handle_event("dismiss", now=0.0)
    assert obj.handle_event("struck", now=0.0)
    assert obj.hits_dismiss(355, 155)
    assert not obj.hits_dismiss(300, 200)
    assert obj.handle_event("dismiss", now=1.0)
    assert obj.state == "dormant"


def test_destroy_tears_down_revealed_content() -> None:
    obj = _crystal()
    obj.handle_event("struck", now=0.0)
    obj.destroy()
    assert obj.destroyed
    assert obj.revealed is None
