"""Level data models and structures."""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional
from enum import Enum


class PieceColor(str, Enum):
    """Logical piece colors. Declaration order is the stable tie-break order."""
    C0 = "c0"
    C1 = "c1"
    C2 = "c2"
    C3 = "c3"
    C4 = "c4"
    C5 = "c5"
    C6 = "c6"
    C7 = "c7"

    @classmethod
    def palette(cls, size: int) -> List["PieceColor"]:
        """Get the first `size` logical colors in declaration order."""
        return list(cls)[:size]

    @property
    def order(self) -> int:
        """Position of this color in the fixed color ordering."""
        return COLOR_ORDER[self]


COLOR_ORDER: Dict[PieceColor, int] = {c: i for i, c in enumerate(PieceColor)}

# Smallest canvas side that still fits one padded layer inside the margins
MIN_CANVAS_SIZE = 100


class GameStatus(str, Enum):
    """Game status enumeration. WON and LOST are terminal."""
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class RefreshPolicyType(str, Enum):
    """Lane refresh policy enumeration."""
    MODULE = "module"   # module-pool and reachability driven
    RANDOM = "random"   # uniform random, avoiding the sibling lane color


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle, origin at the top-left corner."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def around(cls, cx: float, cy: float, half: float) -> "Rect":
        """Square of side 2*half centered on (cx, cy)."""
        return cls(cx - half, cy - half, half * 2, half * 2)

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    def intersection_area(self, other: "Rect") -> float:
        """Area of the overlap with another rectangle (0 when disjoint)."""
        w = min(self.x + self.width, other.x + other.width) - max(self.x, other.x)
        h = min(self.y + self.height, other.y + other.height) - max(self.y, other.y)
        if w <= 0 or h <= 0:
            return 0.0
        return w * h

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(eq=False)
class Piece:
    """A single collectible piece.

    Pieces compare by identity: two pieces at the same spot with the same
    color are still different pieces.
    """
    piece_id: int
    x: float
    y: float
    color: PieceColor

    def contains(self, px: float, py: float, radius: float) -> bool:
        """Check whether a point lies inside the circular hit region."""
        dx = px - self.x
        dy = py - self.y
        return dx * dx + dy * dy <= radius * radius

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.piece_id,
            "x": self.x,
            "y": self.y,
            "color": self.color.value,
        }


@dataclass(eq=False)
class Layer:
    """A rectangular region in the stack holding zero or more pieces."""
    rect: Rect
    pieces: List[Piece] = field(default_factory=list)
    index: int = -1  # assigned when pushed onto a LayerStack

    @property
    def is_empty(self) -> bool:
        return not self.pieces

    def remove(self, piece: Piece) -> bool:
        """Remove a piece by identity. Returns False if it is not resident here."""
        for i, resident in enumerate(self.pieces):
            if resident is piece:
                del self.pieces[i]
                return True
        return False

    def holds(self, piece: Piece) -> bool:
        return any(resident is piece for resident in self.pieces)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "index": self.index,
            "rect": self.rect.to_dict(),
            "empty": self.is_empty,
            "pieces": [p.to_dict() for p in self.pieces],
        }


@dataclass
class GameRules:
    """Per-level rule set. Invalid values fail fast at construction."""
    canvas_width: int = 800
    canvas_height: int = 600
    layer_count: int = 7
    slots_per_lane: int = 3
    queue_capacity: int = 4
    clickable_threshold: float = 0.5  # exclusive: coverage must be strictly below
    palette_size: int = 8
    piece_radius: float = 9.0
    refresh_policy: str = RefreshPolicyType.MODULE.value
    empty_layers_occlude: bool = True  # emptied layers keep covering lower ones

    def __post_init__(self):
        """Validate rule values."""
        positive = {
            "layer_count": self.layer_count,
            "slots_per_lane": self.slots_per_lane,
            "queue_capacity": self.queue_capacity,
            "palette_size": self.palette_size,
            "piece_radius": self.piece_radius,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ValueError(f"'{name}' must be positive, got {value}")

        for name in ("canvas_width", "canvas_height"):
            value = getattr(self, name)
            if value < MIN_CANVAS_SIZE:
                raise ValueError(
                    f"'{name}' must be at least {MIN_CANVAS_SIZE}, got {value}"
                )

        if self.palette_size > len(PieceColor):
            raise ValueError(
                f"'palette_size' must be at most {len(PieceColor)}, got {self.palette_size}"
            )
        if not 0 < self.clickable_threshold <= 1:
            raise ValueError(
                f"'clickable_threshold' must be in (0, 1], got {self.clickable_threshold}"
            )
        valid_policies = [p.value for p in RefreshPolicyType]
        if self.refresh_policy not in valid_policies:
            raise ValueError(
                f"Invalid refresh policy '{self.refresh_policy}'. Must be one of: {valid_policies}"
            )

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> "GameRules":
        """Build rules from application settings, applying any overrides."""
        values = {
            "canvas_width": settings.canvas_width,
            "canvas_height": settings.canvas_height,
            "layer_count": settings.layer_count,
            "slots_per_lane": settings.slots_per_lane,
            "queue_capacity": settings.queue_capacity,
            "clickable_threshold": settings.clickable_threshold,
            "palette_size": settings.palette_size,
            "piece_radius": settings.piece_radius,
            "refresh_policy": settings.refresh_policy,
            "empty_layers_occlude": settings.empty_layers_occlude,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "canvas_width": self.canvas_width,
            "canvas_height": self.canvas_height,
            "layer_count": self.layer_count,
            "slots_per_lane": self.slots_per_lane,
            "queue_capacity": self.queue_capacity,
            "clickable_threshold": self.clickable_threshold,
            "palette_size": self.palette_size,
            "piece_radius": self.piece_radius,
            "refresh_policy": self.refresh_policy,
            "empty_layers_occlude": self.empty_layers_occlude,
        }


@dataclass(frozen=True)
class PushResult:
    """Result of pushing a color onto the holding queue."""
    accepted: bool
    size: int
    capacity: int

    @property
    def overflow(self) -> bool:
        return not self.accepted


class ClickOutcome(str, Enum):
    """What a single click resolved to."""
    IGNORED = "ignored"     # game already over
    MISS = "miss"           # no piece under the point
    BLOCKED = "blocked"     # topmost piece too covered to select
    PLACED = "placed"       # went straight into a lane
    QUEUED = "queued"       # went into the holding queue
    OVERFLOW = "overflow"   # holding queue was full, round lost


@dataclass
class ClickResult:
    """Result of resolving one click."""
    outcome: ClickOutcome
    status: GameStatus
    piece_id: Optional[int] = None
    color: Optional[PieceColor] = None
    drained: int = 0  # queued pieces moved into lanes during this click

    @property
    def changed_state(self) -> bool:
        return self.outcome in (ClickOutcome.PLACED, ClickOutcome.QUEUED, ClickOutcome.OVERFLOW)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "outcome": self.outcome.value,
            "status": self.status.value,
            "piece_id": self.piece_id,
            "color": self.color.value if self.color else None,
            "drained": self.drained,
        }


@dataclass
class SimulationResult:
    """Result of level simulation."""
    clear_rate: float
    avg_clicks: float
    min_clicks: int
    max_clicks: int
    iterations: int
    strategy: str
    fail_count: int = 0
    stuck_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "clear_rate": round(self.clear_rate, 3),
            "avg_clicks": round(self.avg_clicks, 2),
            "min_clicks": self.min_clicks,
            "max_clicks": self.max_clicks,
            "iterations": self.iterations,
            "strategy": self.strategy,
            "fail_count": self.fail_count,
            "stuck_count": self.stuck_count,
        }
