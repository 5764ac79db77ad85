"""Tests for click resolution."""
import random

import pytest
from stackmatch.core.engine import GameEngine
from stackmatch.core.lanes import LaneSet
from stackmatch.core.level_state import Level
from stackmatch.models.level import (
    ClickOutcome,
    GameRules,
    GameStatus,
    Layer,
    Piece,
    PieceColor,
    Rect,
)

C0, C1, C2, C3, C4, C5 = list(PieceColor)[:6]


def row_layer(rect, colors, start_id=0, y=50, x0=50, step=50):
    """Layer with pieces laid out in a row, spaced well beyond the hit radius."""
    pieces = [
        Piece(piece_id=start_id + i, x=x0 + i * step, y=y, color=color)
        for i, color in enumerate(colors)
    ]
    return Layer(rect=rect, pieces=pieces)


def build_level(layers, left, right, **rule_values):
    """Level over hand-made layers with fixed starting lane colors."""
    level = Level(rules=GameRules(**rule_values), rng=random.Random(0), layers=layers)
    level.lanes = LaneSet(
        left,
        right,
        slots_per_lane=level.rules.slots_per_lane,
        policy=level.policy,
        context_provider=level.refresh_context,
    )
    return level


class Recorder:
    """Counts notifications."""

    def __init__(self):
        self.wins = 0
        self.fails = 0

    def win(self):
        self.wins += 1

    def fail(self):
        self.fails += 1


@pytest.fixture
def recorder():
    return Recorder()


def make_engine(level, recorder):
    return GameEngine(level, on_win=recorder.win, on_fail=recorder.fail)


class TestClickResolution:
    """Test cases for GameEngine.handle_click."""

    def test_miss(self, recorder):
        level = build_level([row_layer(Rect(0, 0, 400, 100), [C0])], C0, C1)
        engine = make_engine(level, recorder)

        result = engine.handle_click(700, 500)

        assert result.outcome == ClickOutcome.MISS
        assert not result.changed_state
        assert engine.status == GameStatus.PLAYING
        assert level.resident_count() == 1

    def test_blocked_piece_is_left_alone(self, recorder):
        bottom = row_layer(Rect(0, 0, 400, 100), [C0])
        top = row_layer(Rect(0, 0, 120, 120), [C1], start_id=1, y=100, x0=100)
        level = build_level([bottom, top], C0, C1)
        engine = make_engine(level, recorder)

        result = engine.handle_click(50, 50)

        assert result.outcome == ClickOutcome.BLOCKED
        assert result.piece_id == 0
        assert level.resident_count() == 2
        assert level.lanes.left_count() == 0
        assert level.color_pool.remaining(C0) == 1

    def test_placed_then_won_once(self, recorder):
        level = build_level([row_layer(Rect(0, 0, 400, 100), [C0, C0, C0])], C0, C1)
        engine = make_engine(level, recorder)

        first = engine.handle_click(50, 50)
        assert first.outcome == ClickOutcome.PLACED
        assert first.color == C0
        assert level.lanes.left_count() == 1
        assert level.color_pool.remaining(C0) == 2

        engine.handle_click(100, 50)
        last = engine.handle_click(150, 50)

        assert last.outcome == ClickOutcome.PLACED
        assert last.status == GameStatus.WON
        assert engine.status == GameStatus.WON
        assert level.absorbed == 3
        assert level.lanes.left_count() == 0
        assert recorder.wins == 1

        # A second check notifies nobody
        assert engine.check_win()
        assert recorder.wins == 1

    def test_clicks_after_end_are_ignored(self, recorder):
        level = build_level([row_layer(Rect(0, 0, 400, 100), [C0, C0, C0])], C0, C1)
        engine = make_engine(level, recorder)
        for x in (50, 100, 150):
            engine.handle_click(x, 50)

        result = engine.handle_click(50, 50)

        assert result.outcome == ClickOutcome.IGNORED
        assert engine.clicks == 3
        assert recorder.wins == 1

    def test_unplaceable_piece_is_queued(self, recorder):
        level = build_level([row_layer(Rect(0, 0, 400, 100), [C2, C0])], C0, C1)
        engine = make_engine(level, recorder)

        result = engine.handle_click(50, 50)

        assert result.outcome == ClickOutcome.QUEUED
        assert level.queue.snapshot() == (C2,)
        assert level.resident_count() == 1
        assert level.color_pool.remaining(C2) == 0
        assert level.is_conserved()

    def test_overflow_loses(self, recorder):
        level = build_level(
            [row_layer(Rect(0, 0, 400, 100), [C2, C3, C0])], C0, C1, queue_capacity=1
        )
        engine = make_engine(level, recorder)

        assert engine.handle_click(50, 50).outcome == ClickOutcome.QUEUED
        result = engine.handle_click(100, 50)

        assert result.outcome == ClickOutcome.OVERFLOW
        assert result.status == GameStatus.LOST
        assert recorder.fails == 1
        # The overflowing piece stays on the board
        assert level.resident_count() == 2
        assert level.color_pool.remaining(C3) == 1
        assert level.queue.size() == 1
        assert level.is_conserved()

        assert engine.handle_click(150, 50).outcome == ClickOutcome.IGNORED
        assert recorder.fails == 1
        assert recorder.wins == 0

    def test_refresh_then_drain(self, recorder):
        # One C1 goes to the queue; filling the left lane refreshes it to C1,
        # which then takes the queued piece in the same click.
        layer = row_layer(Rect(0, 0, 400, 100), [C1, C0, C1, C1, C1])
        level = build_level([layer], C0, C5)
        level.lanes.left.count = 2
        engine = make_engine(level, recorder)

        assert engine.handle_click(50, 50).outcome == ClickOutcome.QUEUED
        result = engine.handle_click(100, 50)

        assert result.outcome == ClickOutcome.PLACED
        assert result.drained == 1
        assert level.lanes.left_color() == C1
        assert level.lanes.left_count() == 1
        assert level.queue.is_empty()
        assert level.is_conserved()


class TestQueueDrain:
    """Test cases for GameEngine.drain_queue."""

    def test_blocked_head_stays_at_head(self, recorder):
        level = build_level([row_layer(Rect(0, 0, 400, 100), [C0])], C0, C2)
        level.queue.push(C1)
        level.queue.push(C2)
        engine = make_engine(level, recorder)

        drained = engine.drain_queue()

        assert drained == 1
        assert level.queue.snapshot() == (C1,)
        assert level.lanes.right_count() == 1

    def test_drains_in_queue_order(self, recorder):
        level = build_level([row_layer(Rect(0, 0, 400, 100), [C0])], C0, C2)
        for color in (C2, C3, C2):
            level.queue.push(color)
        engine = make_engine(level, recorder)

        assert engine.drain_queue() == 2
        assert level.queue.snapshot() == (C3,)
        assert level.lanes.right_count() == 2

    def test_nothing_to_drain(self, recorder):
        level = build_level([row_layer(Rect(0, 0, 400, 100), [C0])], C0, C2)
        level.queue.push(C4)
        engine = make_engine(level, recorder)

        assert engine.drain_queue() == 0
        assert level.queue.snapshot() == (C4,)


class TestEmptyLayers:
    """Test cases for emptied layers above a piece."""

    def layers(self):
        bottom = row_layer(Rect(0, 0, 400, 200), [C0])
        top = row_layer(Rect(0, 0, 120, 120), [C1], start_id=1, y=80, x0=80)
        return [bottom, top]

    def test_emptied_layer_still_covers(self, recorder):
        level = build_level(self.layers(), C0, C1)
        engine = make_engine(level, recorder)

        assert engine.handle_click(80, 80).outcome == ClickOutcome.PLACED
        assert level.is_layer_empty(1)
        assert engine.handle_click(50, 50).outcome == ClickOutcome.BLOCKED

    def test_emptied_layer_can_stop_covering(self, recorder):
        level = build_level(self.layers(), C0, C1, empty_layers_occlude=False)
        engine = make_engine(level, recorder)

        engine.handle_click(80, 80)
        result = engine.handle_click(50, 50)

        assert result.outcome == ClickOutcome.PLACED
        assert engine.status == GameStatus.WON


class TestGeneratedGames:
    """Invariants over generated levels played to the end."""

    @pytest.mark.parametrize("seed", range(8))
    def test_invariants_hold_every_click(self, seed):
        level = Level.create(GameRules(), seed=seed)
        engine = GameEngine(level)
        slots = level.rules.slots_per_lane

        assert level.total_pieces % 3 == 0
        radius = level.rules.piece_radius
        for _ in range(level.total_pieces + 1):
            # A piece center can sit under a higher piece's hit circle
            candidates = [
                p for p in level.clickable_pieces()
                if level.stack.hit_test(p.x, p.y, radius) is p
            ]
            if engine.is_over or not candidates:
                break
            piece = candidates[0]
            result = engine.handle_click(piece.x, piece.y)
            assert result.changed_state

            assert level.is_conserved()
            assert level.queue.size() <= level.queue.capacity
            assert 0 <= level.lanes.left_count() < slots
            assert 0 <= level.lanes.right_count() < slots
            assert level.color_pool.total_remaining == level.resident_count()

    def test_snapshot(self):
        engine = GameEngine(Level.create(GameRules(), seed=3))
        data = engine.snapshot()

        assert data["status"] == "playing"
        assert data["clicks"] == 0
        assert len(data["layers"]) == 7
        assert data["counts"]["resident"] == data["counts"]["total"]
        assert data["queue"]["capacity"] == 4
        top_pieces = data["layers"][-1]["pieces"]
        assert top_pieces and all(p["clickable"] for p in top_pieces)
