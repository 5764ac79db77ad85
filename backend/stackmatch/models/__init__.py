"""Data models package.

This package contains domain data models and API schemas.
"""
from .level import (
    PieceColor,
    GameStatus,
    RefreshPolicyType,
    Rect,
    Piece,
    Layer,
    GameRules,
    PushResult,
    ClickOutcome,
    ClickResult,
    SimulationResult,
)
from .schemas import (
    RuleOverrides,
    NewGameRequest,
    RestartRequest,
    ClickRequest,
    ClickResponse,
    GameStateResponse,
    SimulateRequest,
    SimulateResponse,
    ErrorResponse,
)

__all__ = [
    # Level models
    "PieceColor",
    "GameStatus",
    "RefreshPolicyType",
    "Rect",
    "Piece",
    "Layer",
    "GameRules",
    "PushResult",
    "ClickOutcome",
    "ClickResult",
    "SimulationResult",
    # API schemas
    "RuleOverrides",
    "NewGameRequest",
    "RestartRequest",
    "ClickRequest",
    "ClickResponse",
    "GameStateResponse",
    "SimulateRequest",
    "SimulateResponse",
    "ErrorResponse",
]
