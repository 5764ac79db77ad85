"""Core business logic package.

This package contains the puzzle rules engine: occlusion, palette
accounting, the holding queue, the lane set, click resolution and
simulation.
"""
from .occlusion import LayerStack, OcclusionEvaluator, rect_coverage_ratio
from .palette import ColorPool, generate_triplet_palette
from .holding_queue import HoldingQueue
from .lanes import (
    Lane,
    LaneSet,
    ModuleRefreshPolicy,
    RandomRefreshPolicy,
    RefreshContext,
    get_refresh_policy,
)
from .generator import LevelGenerator, get_generator
from .level_state import Level
from .engine import GameEngine
from .simulator import LevelSimulator, get_simulator
from .session import SessionManager, get_session_manager

__all__ = [
    "LayerStack",
    "OcclusionEvaluator",
    "rect_coverage_ratio",
    "ColorPool",
    "generate_triplet_palette",
    "HoldingQueue",
    "Lane",
    "LaneSet",
    "ModuleRefreshPolicy",
    "RandomRefreshPolicy",
    "RefreshContext",
    "get_refresh_policy",
    "LevelGenerator",
    "get_generator",
    "Level",
    "GameEngine",
    "LevelSimulator",
    "get_simulator",
    "SessionManager",
    "get_session_manager",
]
