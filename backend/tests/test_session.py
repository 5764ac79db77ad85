"""Tests for the live game store and settings."""
import pytest
from stackmatch.config import Settings
from stackmatch.core.session import SessionManager
from stackmatch.models.level import GameRules, Layer, Piece, PieceColor, Rect
from stackmatch.core.lanes import LaneSet
from stackmatch.core.level_state import Level


@pytest.fixture
def manager():
    return SessionManager(max_sessions=3)


class TestSessionManager:
    """Test cases for SessionManager."""

    def test_create_and_get(self, manager):
        session = manager.create(GameRules(), seed=1)

        assert manager.get(session.session_id) is session
        assert session.round == 1
        assert session.to_dict()["status"] == "playing"
        assert len(manager) == 1

    def test_single_slot_store_keeps_newest(self):
        manager = SessionManager(max_sessions=1)
        first = manager.create(GameRules(), seed=1)
        second = manager.create(GameRules(), seed=2)

        assert manager.get(second.session_id) is second
        assert manager.get(first.session_id) is None

    @pytest.mark.parametrize("max_sessions", [0, -1])
    def test_invalid_capacity_raises(self, max_sessions):
        with pytest.raises(ValueError):
            SessionManager(max_sessions=max_sessions)

    def test_get_unknown(self, manager):
        assert manager.get("missing") is None
        assert manager.new_game("missing") is None
        assert not manager.delete("missing")

    def test_new_game_replaces_engine(self, manager):
        session = manager.create(GameRules(), seed=1)
        old_engine = session.engine
        session.events.append("fail")

        replaced = manager.new_game(session.session_id, seed=2)

        assert replaced is session
        assert session.engine is not old_engine
        assert session.round == 2
        assert session.seed == 2
        assert session.events == []

    def test_oldest_session_evicted(self, manager):
        ids = [manager.create(GameRules(), seed=i).session_id for i in range(4)]

        assert len(manager) == 3
        assert manager.get(ids[0]) is None
        assert manager.get(ids[3]) is not None

    def test_recent_access_protects_from_eviction(self, manager):
        ids = [manager.create(GameRules(), seed=i).session_id for i in range(3)]
        manager.get(ids[0])
        manager.create(GameRules(), seed=9)

        assert manager.get(ids[0]) is not None
        assert manager.get(ids[1]) is None

    def test_win_recorded_as_event(self, manager):
        session = manager.create(GameRules(), seed=1)
        # Swap in a one-triplet level so a win takes three clicks
        pieces = [Piece(piece_id=i, x=50 + i * 50, y=50, color=PieceColor.C0) for i in range(3)]
        level = Level(rules=GameRules(), layers=[Layer(rect=Rect(0, 0, 400, 100), pieces=list(pieces))])
        level.lanes = LaneSet(
            PieceColor.C0, PieceColor.C1,
            policy=level.policy, context_provider=level.refresh_context,
        )
        session.engine.level = level

        for piece in list(pieces):
            session.engine.handle_click(piece.x, piece.y)

        assert session.events == ["win"]
        assert session.to_dict()["status"] == "won"


class TestSettings:
    """Test cases for Settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.queue_capacity == 4
        assert settings.refresh_policy == "module"

    def test_cors_origins_comma_separated(self):
        settings = Settings(cors_origins="http://a.test, http://b.test")
        assert settings.get_cors_origins() == ["http://a.test", "http://b.test"]

    def test_cors_origins_json(self):
        settings = Settings(cors_origins='["http://a.test"]')
        assert settings.get_cors_origins() == ["http://a.test"]

    def test_invalid_refresh_policy(self):
        with pytest.raises(ValueError):
            Settings(refresh_policy="adaptive")

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            Settings(clickable_threshold=0)

    def test_invalid_max_sessions(self):
        with pytest.raises(ValueError):
            Settings(max_sessions=0)
