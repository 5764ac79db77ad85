"""API dependencies."""
from ..config import Settings, get_settings
from ..core.session import get_session_manager, SessionManager
from ..core.simulator import get_simulator, LevelSimulator


def get_app_settings() -> Settings:
    """Dependency for application settings."""
    return get_settings()


def get_sessions() -> SessionManager:
    """Dependency for the live game store."""
    return get_session_manager()


def get_level_simulator() -> LevelSimulator:
    """Dependency for level simulator."""
    return get_simulator()
