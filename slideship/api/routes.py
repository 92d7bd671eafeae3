from __future__ import annotations

import time
from enum import StrEnum

import redis
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from slideship.api.deps import get_redis, get_session
from slideship.api.models import (
    DeckView,
    ImageSizesRequest,
    NavigationResponse,
    ObjectEventResponse,
    ReloadRequest,
    SlideView,
    deck_view,
    live_object_view,
    slide_view,
)
from slideship.core.lifecycle import Direction, TransitionTrigger, report_image_sizes
from slideship.session import PresentationBusy, PresentationSession

router = APIRouter()


class ObjectEventName(StrEnum):
    struck = "struck"
    touched = "touched"
    dismiss = "dismiss"


@router.websocket("/ws/presentation")
async def presentation_updates_ws(websocket: WebSocket) -> None:
    session: PresentationSession = websocket.app.state.session
    await session.hub.connect(websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await session.hub.disconnect(websocket)
    except Exception:
        await session.hub.disconnect(websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/deck", response_model=DeckView)
async def get_deck_route(session: PresentationSession = Depends(get_session)) -> DeckView:
    return deck_view(session.manager, session_id=session.session_id)


@router.get("/slides/current", response_model=SlideView)
async def get_current_slide_route(session: PresentationSession = Depends(get_session)) -> SlideView:
    now = time.monotonic()
    session.manager.tick(now)
    return slide_view(session.manager, now=now)


@router.post("/navigation/complete", response_model=DeckView)
async def complete_navigation_route(
    session: PresentationSession = Depends(get_session),
    r: redis.Redis = Depends(get_redis),
) -> DeckView:
    if not await session.complete_transition(r=r):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No transition in progress")
    return deck_view(session.manager, session_id=session.session_id)


@router.post("/navigation/{direction}", response_model=NavigationResponse, status_code=status.HTTP_202_ACCEPTED)
async def navigate_route(
    direction: Direction,
    trigger: TransitionTrigger = TransitionTrigger.edge,
    session: PresentationSession = Depends(get_session),
    r: redis.Redis = Depends(get_redis),
) -> NavigationResponse:
    started = await session.navigate(direction, trigger, r=r)
    return NavigationResponse(started=started, deck=deck_view(session.manager, session_id=session.session_id))


@router.post("/objects/{handle}/events/{event}", response_model=ObjectEventResponse)
async def object_event_route(
    handle: str,
    event: ObjectEventName,
    session: PresentationSession = Depends(get_session),
    r: redis.Redis = Depends(get_redis),
) -> ObjectEventResponse:
    now = time.monotonic()
    result = await session.object_event(handle, event.value, r=r, now=now)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found")
    obj, changed = result
    return ObjectEventResponse(changed=changed, object=live_object_view(obj, now=now))


@router.post("/deck/reload", response_model=DeckView)
async def reload_deck_route(
    payload: ReloadRequest,
    session: PresentationSession = Depends(get_session),
    r: redis.Redis = Depends(get_redis),
) -> DeckView:
    try:
        await session.reload(payload.text, r=r)
    except PresentationBusy as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return deck_view(session.manager, session_id=session.session_id)


@router.post("/images/sizes", status_code=status.HTTP_204_NO_CONTENT)
async def report_image_sizes_route(
    payload: ImageSizesRequest,
    session: PresentationSession = Depends(get_session),
) -> None:
    report_image_sizes(session.manager, payload.sizes)
