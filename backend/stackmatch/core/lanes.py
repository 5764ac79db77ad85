"""Dual collection lanes and their color refresh policies."""
import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from ..models.level import PieceColor, RefreshPolicyType

logger = logging.getLogger(__name__)


@dataclass
class Lane:
    """A collection lane: one current color and a fill count in [0, slots]."""
    color: PieceColor
    slots: int
    count: int = 0

    @property
    def is_full(self) -> bool:
        return self.count >= self.slots

    def accepts(self, color: PieceColor) -> bool:
        return color == self.color and self.count < self.slots

    def reset(self, color: PieceColor) -> None:
        self.color = color
        self.count = 0

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {"color": self.color.value, "filled": self.count, "slots": self.slots}


@dataclass(frozen=True)
class RefreshContext:
    """Inputs to a refresh decision: module counts and reachable colors."""
    modules: Dict[PieceColor, int] = field(default_factory=dict)
    reachable: FrozenSet[PieceColor] = frozenset()


def pick_random_excluding(
    rng: random.Random,
    palette: List[PieceColor],
    exclude: Optional[PieceColor] = None,
) -> PieceColor:
    """Uniform random palette color, different from `exclude` when possible."""
    candidates = [c for c in palette if c != exclude]
    if not candidates:
        candidates = list(palette)
    return rng.choice(candidates)


class ModuleRefreshPolicy:
    """
    Module-pool-driven lane color selection.

    Preference order for a new color:
    1. reachable colors with modules left, most modules first, then color order
    2. unreachable colors with modules left, same ranking
    3. the excluded (sibling) color, if it still has modules
    4. a random palette color different from the sibling
    """

    name = RefreshPolicyType.MODULE

    def __init__(self, rng: random.Random, palette: Optional[List[PieceColor]] = None):
        self._rng = rng
        self._palette = list(palette) if palette else list(PieceColor)

    def pick(
        self,
        modules: Dict[PieceColor, int],
        reachable: FrozenSet[PieceColor],
        excluded: Optional[PieceColor] = None,
    ) -> Optional[PieceColor]:
        """Best module color, or None if no color has modules left."""
        preferred: List[PieceColor] = []
        fallback: List[PieceColor] = []

        for color, count in modules.items():
            if count <= 0 or color == excluded:
                continue
            if color in reachable:
                preferred.append(color)
            else:
                fallback.append(color)

        def rank(c: PieceColor) -> Tuple[int, int]:
            return (-modules[c], c.order)

        if preferred:
            return min(preferred, key=rank)
        if fallback:
            return min(fallback, key=rank)
        if excluded is not None and modules.get(excluded, 0) > 0:
            return excluded
        return None

    def choose(
        self,
        refresh_left: bool,
        refresh_right: bool,
        left_color: Optional[PieceColor],
        right_color: Optional[PieceColor],
        context: RefreshContext,
    ) -> Tuple[Optional[PieceColor], Optional[PieceColor]]:
        """
        Pick new colors for the lanes being refreshed.

        When both lanes refresh, the left pick is made first and one of its
        modules is provisionally taken out of a local copy of the pool before
        the right pick, so the two lanes tend not to share a color.

        Returns:
            (new_left, new_right); a lane that is not refreshed keeps its color.
        """
        modules = dict(context.modules)
        new_left, new_right = left_color, right_color

        if refresh_left and refresh_right:
            c0 = self.pick(modules, context.reachable)
            if c0 is not None:
                modules[c0] = max(0, modules.get(c0, 0) - 1)
            c1 = self.pick(modules, context.reachable, excluded=c0)
            new_left = c0 if c0 is not None else pick_random_excluding(
                self._rng, self._palette, right_color
            )
            new_right = c1 if c1 is not None else pick_random_excluding(
                self._rng, self._palette, new_left
            )
        elif refresh_left:
            c = self.pick(modules, context.reachable, excluded=right_color)
            if c is None:
                c = pick_random_excluding(self._rng, self._palette, right_color)
            new_left = c
        elif refresh_right:
            c = self.pick(modules, context.reachable, excluded=left_color)
            if c is None:
                c = pick_random_excluding(self._rng, self._palette, left_color)
            new_right = c

        return new_left, new_right


class RandomRefreshPolicy:
    """Easy-mode selection: any palette color other than the sibling's."""

    name = RefreshPolicyType.RANDOM

    def __init__(self, rng: random.Random, palette: Optional[List[PieceColor]] = None):
        self._rng = rng
        self._palette = list(palette) if palette else list(PieceColor)

    def choose(
        self,
        refresh_left: bool,
        refresh_right: bool,
        left_color: Optional[PieceColor],
        right_color: Optional[PieceColor],
        context: RefreshContext,
    ) -> Tuple[Optional[PieceColor], Optional[PieceColor]]:
        new_left, new_right = left_color, right_color
        if refresh_left:
            new_left = pick_random_excluding(self._rng, self._palette, right_color)
        if refresh_right:
            new_right = pick_random_excluding(self._rng, self._palette, new_left)
        return new_left, new_right


def get_refresh_policy(
    name: str,
    rng: random.Random,
    palette: Optional[List[PieceColor]] = None,
):
    """Create a refresh policy by name."""
    policy_type = RefreshPolicyType(name)
    if policy_type == RefreshPolicyType.RANDOM:
        return RandomRefreshPolicy(rng, palette)
    return ModuleRefreshPolicy(rng, palette)


class LaneSet:
    """Exactly two lanes, left and right.

    A lane that reaches its slot count is reset and recolored inside the same
    `try_place` call, so callers never observe a full lane.
    """

    def __init__(
        self,
        left_color: PieceColor,
        right_color: PieceColor,
        slots_per_lane: int = 3,
        policy=None,
        context_provider: Optional[Callable[[], RefreshContext]] = None,
    ):
        if slots_per_lane <= 0:
            raise ValueError(f"slots_per_lane must be positive, got {slots_per_lane}")
        if policy is None:
            raise ValueError("policy is required; build it on the level's random source")
        self.left = Lane(left_color, slots_per_lane)
        self.right = Lane(right_color, slots_per_lane)
        self._policy = policy
        self._context_provider = context_provider
        self.refresh_count = 0

    @property
    def slots_per_lane(self) -> int:
        return self.left.slots

    def can_place(self, color: PieceColor) -> bool:
        """Whether `try_place(color)` would succeed, without changing state."""
        return self.left.accepts(color) or self.right.accepts(color)

    def try_place(self, color: PieceColor) -> bool:
        """
        Place one piece of `color` into a matching lane with room.

        The left lane is tried before the right. A lane filled by this
        placement is refreshed before returning.

        Returns:
            False if neither lane accepts the color.
        """
        if self.left.accepts(color):
            self.left.count += 1
        elif self.right.accepts(color):
            self.right.count += 1
        else:
            return False

        if self.left.is_full or self.right.is_full:
            self.refresh_lanes(self.left.is_full, self.right.is_full)
        return True

    def refresh_lanes(self, refresh_left: bool, refresh_right: bool) -> None:
        """Reset the given lanes and assign new colors via the policy."""
        if not (refresh_left or refresh_right):
            return

        context = self._context_provider() if self._context_provider else RefreshContext()
        new_left, new_right = self._policy.choose(
            refresh_left, refresh_right, self.left.color, self.right.color, context
        )
        if refresh_left:
            self.left.reset(new_left)
        if refresh_right:
            self.right.reset(new_right)
        self.refresh_count += 1

        logger.debug(
            "Lane refresh #%d: left=%s%s right=%s%s",
            self.refresh_count,
            self.left.color.value, " (new)" if refresh_left else "",
            self.right.color.value, " (new)" if refresh_right else "",
        )

    def left_full(self) -> bool:
        return self.left.is_full

    def right_full(self) -> bool:
        return self.right.is_full

    def left_color(self) -> PieceColor:
        return self.left.color

    def right_color(self) -> PieceColor:
        return self.right.color

    def left_count(self) -> int:
        return self.left.count

    def right_count(self) -> int:
        return self.right.count

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {"left": self.left.to_dict(), "right": self.right.to_dict()}
