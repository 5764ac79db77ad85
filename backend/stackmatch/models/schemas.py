"""Pydantic schemas for API request/response validation."""
from pydantic import BaseModel, Field
from typing import Dict, List, Any, Optional

from .level import MIN_CANVAS_SIZE


class RuleOverrides(BaseModel):
    """Optional per-game overrides of the configured rules."""
    canvas_width: Optional[int] = Field(default=None, ge=MIN_CANVAS_SIZE, description="Canvas width")
    canvas_height: Optional[int] = Field(default=None, ge=MIN_CANVAS_SIZE, description="Canvas height")
    layer_count: Optional[int] = Field(default=None, ge=1, le=50, description="Number of layers")
    slots_per_lane: Optional[int] = Field(default=None, ge=1, description="Slots per lane")
    queue_capacity: Optional[int] = Field(default=None, ge=1, description="Holding queue capacity")
    clickable_threshold: Optional[float] = Field(
        default=None, gt=0, le=1, description="Coverage ratio a piece must stay below"
    )
    palette_size: Optional[int] = Field(default=None, ge=1, le=8, description="Distinct colors")
    piece_radius: Optional[float] = Field(default=None, gt=0, description="Piece hit radius")
    refresh_policy: Optional[str] = Field(default=None, description="Lane refresh policy (module/random)")
    empty_layers_occlude: Optional[bool] = Field(
        default=None, description="Whether emptied layers still cover lower layers"
    )


class NewGameRequest(BaseModel):
    """Request schema for starting a game."""
    seed: Optional[int] = Field(default=None, description="Random seed for a reproducible level")
    rules: Optional[RuleOverrides] = Field(default=None, description="Rule overrides")


class RestartRequest(BaseModel):
    """Request schema for replacing a game's level."""
    seed: Optional[int] = Field(default=None, description="Random seed for the new level")


class ClickRequest(BaseModel):
    """Request schema for a click."""
    x: float = Field(..., description="Click x coordinate")
    y: float = Field(..., description="Click y coordinate")


class GameStateResponse(BaseModel):
    """Response schema for a game snapshot."""
    session_id: str = Field(..., description="Game session ID")
    round: int = Field(..., description="Round number within the session")
    seed: Optional[int] = Field(default=None, description="Seed of the current level")
    status: str = Field(..., description="Game status (playing/won/lost)")
    clicks: int = Field(..., description="Clicks handled this round")
    rules: Dict[str, Any] = Field(..., description="Rules in effect")
    layers: List[Dict[str, Any]] = Field(..., description="Layers back to front")
    lanes: Dict[str, Any] = Field(..., description="Left and right lane state")
    queue: Dict[str, Any] = Field(..., description="Holding queue snapshot")
    counts: Dict[str, int] = Field(..., description="Piece accounting")
    modules: Dict[str, Any] = Field(default={}, description="Remaining pieces and modules per color")
    events: List[str] = Field(default=[], description="Notifications raised this round (win/fail)")


class ClickResponse(BaseModel):
    """Response schema for a click."""
    outcome: str = Field(..., description="Click outcome")
    piece_id: Optional[int] = Field(default=None, description="Piece that was hit")
    color: Optional[str] = Field(default=None, description="Color of the piece that was hit")
    drained: int = Field(default=0, description="Queued pieces moved into lanes")
    state: GameStateResponse = Field(..., description="Game state after the click")


class SimulateRequest(BaseModel):
    """Request schema for level simulation."""
    iterations: int = Field(default=100, ge=1, le=5000, description="Number of levels to play")
    strategy: str = Field(default="greedy", description="Simulation strategy (random/greedy)")
    seed: Optional[int] = Field(default=None, description="Base random seed")
    rules: Optional[RuleOverrides] = Field(default=None, description="Rule overrides")


class SimulateResponse(BaseModel):
    """Response schema for level simulation."""
    clear_rate: float = Field(..., ge=0, le=1, description="Clear rate (0-1)")
    avg_clicks: float = Field(..., description="Average clicks used")
    min_clicks: int = Field(..., description="Minimum clicks used")
    max_clicks: int = Field(..., description="Maximum clicks used")
    iterations: int = Field(..., description="Levels played")
    strategy: str = Field(..., description="Strategy used")
    fail_count: int = Field(default=0, description="Levels lost to queue overflow")
    stuck_count: int = Field(default=0, description="Levels that ended with no productive click")


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(default=None, description="Detailed error information")
