from __future__ import annotations

import asyncio
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status

from roundtable.api.deps import get_registry
from roundtable.api.models import (
    ActionAccepted,
    ActionRequest,
    MatchCreateRequest,
    MatchListResponse,
    MatchSnapshot,
    PendingActionsResponse,
)
from roundtable.core.errors import IllegalConfiguration
from roundtable.match_setup import MatchConfig
from roundtable.match_store import MatchRegistry, MatchSession

router = APIRouter()

# How long an action request waits for the worker to open its next prompt.
PROMPT_WAIT_SECONDS = 2.0


def _require_session(registry: MatchRegistry, match_id: UUID) -> MatchSession:
    session = registry.get(match_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
    return session


def _latest(session: MatchSession) -> MatchSnapshot:
    snap = session.presenter.latest()
    if snap is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Match is not ready")
    return snap


@router.websocket("/ws/match/{match_id}")
async def match_updates_ws(websocket: WebSocket, match_id: UUID, registry: MatchRegistry = Depends(get_registry)) -> None:
    mid = str(match_id)
    session = registry.get(match_id)
    snap = session.presenter.latest() if session is not None else None
    greeting = {"type": "snapshot", "snapshot": snap.model_dump(mode="json")} if snap is not None else None
    await registry.hub.connect(mid, websocket, greeting=greeting)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await registry.hub.disconnect(mid, websocket)
    except Exception:
        await registry.hub.disconnect(mid, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/match", response_model=MatchSnapshot, status_code=status.HTTP_201_CREATED)
async def create_match_route(payload: MatchCreateRequest, registry: MatchRegistry = Depends(get_registry)) -> MatchSnapshot:
    try:
        session = registry.create(MatchConfig.from_request(payload), event_loop=asyncio.get_running_loop())
    except IllegalConfiguration as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return _latest(session)


@router.get("/match", response_model=MatchListResponse)
async def list_matches_route(registry: MatchRegistry = Depends(get_registry)) -> MatchListResponse:
    snaps = [s.presenter.latest() for s in registry.sessions()]
    return MatchListResponse(matches=[s for s in snaps if s is not None])


@router.get("/match/{match_id}", response_model=MatchSnapshot)
async def get_match_route(match_id: UUID, registry: MatchRegistry = Depends(get_registry)) -> MatchSnapshot:
    return _latest(_require_session(registry, match_id))


@router.get("/match/{match_id}/pending", response_model=PendingActionsResponse)
async def pending_actions_route(match_id: UUID, registry: MatchRegistry = Depends(get_registry)) -> PendingActionsResponse:
    session = _require_session(registry, match_id)
    return PendingActionsResponse(match_id=match_id, legal_actions=session.presenter.pending_actions())


@router.post("/match/{match_id}/action", response_model=ActionAccepted)
async def submit_action_route(
    match_id: UUID,
    payload: ActionRequest,
    registry: MatchRegistry = Depends(get_registry),
) -> ActionAccepted:
    session = _require_session(registry, match_id)
    snap = _latest(session)
    if snap.is_terminal:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Match is over")

    presenter = session.presenter
    await asyncio.to_thread(presenter.wait_for_prompt, PROMPT_WAIT_SECONDS)
    snap = _latest(session)
    try:
        accepted = presenter.submit(payload.action)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    if not accepted:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No action pending")

    return ActionAccepted(match_id=match_id, action=payload.action, turn=snap.turn)


@router.post("/match/{match_id}/restart", response_model=MatchSnapshot)
async def restart_match_route(match_id: UUID, registry: MatchRegistry = Depends(get_registry)) -> MatchSnapshot:
    loop = asyncio.get_running_loop()
    session = await asyncio.to_thread(registry.restart, match_id, event_loop=loop)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
    return _latest(session)


@router.delete("/match/{match_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_match_route(match_id: UUID, registry: MatchRegistry = Depends(get_registry)) -> Response:
    if not await asyncio.to_thread(registry.cancel, match_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
    await registry.hub.close_match(str(match_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
