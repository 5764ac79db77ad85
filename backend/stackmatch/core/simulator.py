"""Level simulation engine: plays generated levels through GameEngine."""
import random
import statistics
from typing import List, Optional
from enum import Enum

from ..models.level import ClickOutcome, GameRules, GameStatus, Piece, SimulationResult
from .engine import GameEngine
from .level_state import Level


class SimulationStrategy(str, Enum):
    """Simulation strategy enumeration."""
    RANDOM = "random"
    GREEDY = "greedy"


class LevelSimulator:
    """Plays levels click by click with a simple strategy."""

    def simulate(
        self,
        rules: Optional[GameRules] = None,
        iterations: int = 100,
        strategy: str = "greedy",
        seed: Optional[int] = None,
    ) -> SimulationResult:
        """
        Run Monte Carlo simulation over freshly generated levels.

        Args:
            rules: Level rules. Defaults to GameRules().
            iterations: Number of levels to play.
            strategy: Strategy to use (random/greedy).
            seed: Base seed; level i uses seed + i.

        Returns:
            SimulationResult with statistics.
        """
        rules = rules or GameRules()
        strategy_type = SimulationStrategy(strategy)
        base_rng = random.Random(seed)

        cleared = 0
        failed = 0
        stuck = 0
        clicks: List[int] = []

        for i in range(iterations):
            level_seed = seed + i if seed is not None else base_rng.randrange(2 ** 31)
            engine = self.play(Level.create(rules, level_seed), strategy_type, random.Random(level_seed))
            clicks.append(engine.clicks)
            if engine.status == GameStatus.WON:
                cleared += 1
            elif engine.status == GameStatus.LOST:
                failed += 1
            else:
                stuck += 1

        return SimulationResult(
            clear_rate=cleared / iterations if iterations else 0.0,
            avg_clicks=statistics.mean(clicks) if clicks else 0,
            min_clicks=min(clicks) if clicks else 0,
            max_clicks=max(clicks) if clicks else 0,
            iterations=iterations,
            strategy=strategy_type.value,
            fail_count=failed,
            stuck_count=stuck,
        )

    def play(
        self,
        level: Level,
        strategy: SimulationStrategy,
        rng: random.Random,
    ) -> GameEngine:
        """Play one level to the end. Returns the finished engine."""
        engine = GameEngine(level)
        # Each productive click removes one piece, so this bounds the game
        max_turns = level.total_pieces + 1

        for _ in range(max_turns):
            if engine.is_over:
                break
            candidates = level.clickable_pieces()
            if not candidates:
                break
            ordered = self._order_candidates(candidates, level, strategy, rng)
            if not self._click_first_productive(engine, ordered):
                break

        return engine

    def _click_first_productive(self, engine: GameEngine, pieces: List[Piece]) -> bool:
        """Click piece centers in order until one changes the game state."""
        for piece in pieces:
            result = engine.handle_click(piece.x, piece.y)
            if result.changed_state:
                return True
            if result.outcome == ClickOutcome.IGNORED:
                return False
        return False

    def _order_candidates(
        self,
        candidates: List[Piece],
        level: Level,
        strategy: SimulationStrategy,
        rng: random.Random,
    ) -> List[Piece]:
        ordered = list(candidates)
        rng.shuffle(ordered)
        if strategy == SimulationStrategy.RANDOM:
            return ordered

        queued = set(level.queue.snapshot())
        scores = {p.piece_id: self._score_piece(p, level, queued) for p in ordered}
        # Stable sort keeps the shuffled order among equal scores
        ordered.sort(key=lambda p: scores[p.piece_id], reverse=True)
        return ordered

    def _score_piece(self, piece: Piece, level: Level, queued: set) -> float:
        """Score a piece based on how safely it can be collected."""
        score = 0.0

        # HIGH PRIORITY: goes straight into a lane
        if level.lanes.can_place(piece.color):
            score += 10.0
        elif level.queue.size() >= level.queue.capacity - 1:
            score -= 5.0  # Risk of overflow

        if piece.color in queued:
            score += 1.0

        # Prefer colors that still have many pieces on the board
        score += level.color_pool.remaining(piece.color) * 0.1
        return score


# Singleton instance
_simulator = None


def get_simulator() -> LevelSimulator:
    """Get or create simulator singleton instance."""
    global _simulator
    if _simulator is None:
        _simulator = LevelSimulator()
    return _simulator
