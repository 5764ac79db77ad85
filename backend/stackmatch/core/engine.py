"""Click resolution engine (playing / won / lost state machine)."""
import logging
from typing import Any, Callable, Dict, Optional

from ..models.level import ClickOutcome, ClickResult, GameStatus
from .level_state import Level

logger = logging.getLogger(__name__)


class GameEngine:
    """Resolves clicks against a Level.

    Every click runs to completion (placement, queue drain, lane refreshes,
    win/loss check) before the next one is accepted. Once the status is WON
    or LOST, further clicks are ignored until a new Level is used.
    """

    def __init__(
        self,
        level: Level,
        on_win: Optional[Callable[[], None]] = None,
        on_fail: Optional[Callable[[], None]] = None,
    ):
        self.level = level
        self._on_win = on_win
        self._on_fail = on_fail
        self._status = GameStatus.PLAYING
        self.clicks = 0

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def is_over(self) -> bool:
        return self._status != GameStatus.PLAYING

    def handle_click(self, x: float, y: float) -> ClickResult:
        """
        Resolve a click at (x, y).

        Args:
            x: Click x coordinate in layer space.
            y: Click y coordinate in layer space.

        Returns:
            ClickResult describing what happened.
        """
        if self.is_over:
            return ClickResult(outcome=ClickOutcome.IGNORED, status=self._status)

        level = self.level
        self.clicks += 1

        piece = level.stack.hit_test(x, y, level.rules.piece_radius)
        if piece is None:
            return ClickResult(outcome=ClickOutcome.MISS, status=self._status)

        holder = level.stack.find_holder(piece)
        above = level.layers_above(holder)
        if not level.evaluator.is_clickable(piece, above):
            logger.debug("Piece %d on layer %d is covered", piece.piece_id, holder.index)
            return ClickResult(
                outcome=ClickOutcome.BLOCKED,
                status=self._status,
                piece_id=piece.piece_id,
                color=piece.color,
            )

        color = piece.color

        if level.lanes.can_place(color):
            # Take the piece off the board first so the lane refresh sees
            # the post-click pool and geometry.
            level.stack.remove_piece(piece)
            level.color_pool.decrement(color)
            level.lanes.try_place(color)
            level.absorbed += 1
            outcome = ClickOutcome.PLACED
        else:
            result = level.queue.push(color)
            if result.overflow:
                logger.debug("Holding queue full (%d/%d)", result.size, result.capacity)
                self._lose()
                return ClickResult(
                    outcome=ClickOutcome.OVERFLOW,
                    status=self._status,
                    piece_id=piece.piece_id,
                    color=color,
                )
            level.stack.remove_piece(piece)
            level.color_pool.decrement(color)
            outcome = ClickOutcome.QUEUED

        drained = self.drain_queue()
        logger.debug(
            "Click (%s, %s): piece %d %s -> %s, drained %d",
            x, y, piece.piece_id, color.value, outcome.value, drained,
        )
        self.check_win()

        return ClickResult(
            outcome=outcome,
            status=self._status,
            piece_id=piece.piece_id,
            color=color,
            drained=drained,
        )

    def drain_queue(self) -> int:
        """
        Move queued colors into the lanes.

        Scans from the head and places the first color some lane accepts,
        then rescans from the (new) head. Blocked colors keep their position,
        so a blocked head stays at the head. Stops once no queued color fits.

        Returns:
            Number of queued pieces absorbed.
        """
        level = self.level
        drained = 0
        while True:
            color = level.queue.take_first(level.lanes.can_place)
            if color is None:
                break
            level.lanes.try_place(color)
            level.absorbed += 1
            drained += 1
        return drained

    def check_win(self) -> bool:
        """Move to WON when everything is cleared. Notifies at most once."""
        if self._status != GameStatus.PLAYING:
            return self._status == GameStatus.WON
        if not self.level.is_cleared():
            return False

        self._status = GameStatus.WON
        logger.info("Level cleared after %d clicks", self.clicks)
        if self._on_win is not None:
            self._on_win()
        return True

    def _lose(self) -> None:
        self._status = GameStatus.LOST
        logger.info(
            "Holding queue overflow after %d clicks (%d pieces left)",
            self.clicks, self.level.resident_count(),
        )
        if self._on_fail is not None:
            self._on_fail()

    def snapshot(self) -> Dict[str, Any]:
        """Level state plus engine status, for presentation."""
        data = self.level.to_dict()
        data["status"] = self._status.value
        data["clicks"] = self.clicks
        return data
