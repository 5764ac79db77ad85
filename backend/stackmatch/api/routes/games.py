"""Game play API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ...config import Settings
from ...models.level import GameRules
from ...models.schemas import (
    NewGameRequest,
    RestartRequest,
    ClickRequest,
    ClickResponse,
    GameStateResponse,
    RuleOverrides,
    ErrorResponse,
)
from ...core.session import GameSession, SessionManager
from ..deps import get_app_settings, get_sessions

router = APIRouter(prefix="/api/games", tags=["games"])

NOT_FOUND = {404: {"model": ErrorResponse}}


def build_rules(settings: Settings, overrides: Optional[RuleOverrides]) -> GameRules:
    """Configured rules with request overrides applied. Raises 400 on invalid rules."""
    values = overrides.model_dump(exclude_none=True) if overrides else {}
    try:
        return GameRules.from_settings(settings, **values)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid rules: {str(e)}")


def _require(sessions: SessionManager, session_id: str) -> GameSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Game not found: {session_id}")
    return session


@router.post("", response_model=GameStateResponse)
async def create_game(
    request: NewGameRequest,
    settings: Settings = Depends(get_app_settings),
    sessions: SessionManager = Depends(get_sessions),
) -> GameStateResponse:
    """
    Start a new game.

    Args:
        request: NewGameRequest with optional seed and rule overrides.
        settings: Application settings dependency.
        sessions: SessionManager dependency.

    Returns:
        GameStateResponse for the new game.
    """
    rules = build_rules(settings, request.rules)
    session = sessions.create(rules, seed=request.seed)
    return GameStateResponse(**session.to_dict())


@router.get("/{session_id}", response_model=GameStateResponse, responses=NOT_FOUND)
async def get_game(
    session_id: str,
    sessions: SessionManager = Depends(get_sessions),
) -> GameStateResponse:
    """Get the current state of a game."""
    session = _require(sessions, session_id)
    return GameStateResponse(**session.to_dict())


@router.post("/{session_id}/click", response_model=ClickResponse, responses=NOT_FOUND)
async def click(
    session_id: str,
    request: ClickRequest,
    sessions: SessionManager = Depends(get_sessions),
) -> ClickResponse:
    """
    Resolve a click at a point in layer coordinates.

    Clicks on a finished game are accepted and reported as "ignored".
    """
    session = _require(sessions, session_id)
    result = session.engine.handle_click(request.x, request.y)
    return ClickResponse(
        outcome=result.outcome.value,
        piece_id=result.piece_id,
        color=result.color.value if result.color else None,
        drained=result.drained,
        state=GameStateResponse(**session.to_dict()),
    )


@router.post("/{session_id}/new", response_model=GameStateResponse, responses=NOT_FOUND)
async def new_game(
    session_id: str,
    request: Optional[RestartRequest] = None,
    sessions: SessionManager = Depends(get_sessions),
) -> GameStateResponse:
    """Replace the game's level with a freshly generated one."""
    seed = request.seed if request else None
    session = sessions.new_game(session_id, seed=seed)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Game not found: {session_id}")
    return GameStateResponse(**session.to_dict())


@router.delete("/{session_id}", responses=NOT_FOUND)
async def delete_game(
    session_id: str,
    sessions: SessionManager = Depends(get_sessions),
):
    """Discard a game."""
    if not sessions.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Game not found: {session_id}")
    return {"deleted": session_id}
