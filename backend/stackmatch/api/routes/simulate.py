"""Level simulation API routes."""
from fastapi import APIRouter, Depends, HTTPException

from ...config import Settings
from ...models.schemas import SimulateRequest, SimulateResponse
from ...core.simulator import LevelSimulator, SimulationStrategy
from ..deps import get_app_settings, get_level_simulator
from .games import build_rules

router = APIRouter(prefix="/api", tags=["simulate"])


@router.post("/simulate", response_model=SimulateResponse)
async def simulate_levels(
    request: SimulateRequest,
    settings: Settings = Depends(get_app_settings),
    simulator: LevelSimulator = Depends(get_level_simulator),
) -> SimulateResponse:
    """
    Play generated levels automatically and report how often they clear.

    Args:
        request: SimulateRequest with iterations, strategy, seed and rule overrides.
        settings: Application settings dependency.
        simulator: LevelSimulator dependency.

    Returns:
        SimulateResponse with simulation statistics.
    """
    valid_strategies = [s.value for s in SimulationStrategy]
    if request.strategy not in valid_strategies:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid strategy. Must be one of: {valid_strategies}",
        )

    rules = build_rules(settings, request.rules)
    result = simulator.simulate(
        rules=rules,
        iterations=request.iterations,
        strategy=request.strategy,
        seed=request.seed,
    )
    return SimulateResponse(**result.to_dict())
