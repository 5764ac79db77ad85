"""Triplet palette generation and per-color remaining-piece accounting."""
import random
from typing import Dict, Iterable, List, Optional

from ..models.level import PieceColor

# Pieces per module (a complete same-color triplet)
MODULE_SIZE = 3


def round_up_to_module(total: int) -> int:
    """Smallest multiple of MODULE_SIZE that is >= total."""
    return ((total + MODULE_SIZE - 1) // MODULE_SIZE) * MODULE_SIZE


def generate_triplet_palette(
    total_pieces: int,
    rng: random.Random,
    palette: Optional[List[PieceColor]] = None,
) -> List[PieceColor]:
    """
    Build a shuffled color sequence made of same-color triplets.

    The length is rounded up to the next multiple of 3. Colors are taken in
    palette order, three at a time, cycling when more triplets are needed
    than there are colors.

    Args:
        total_pieces: Number of pieces that need a color.
        rng: Random source used for the final shuffle.
        palette: Colors to draw from. Defaults to all logical colors.

    Returns:
        Shuffled list whose length is a multiple of 3 and >= total_pieces,
        where every color appears a multiple of 3 times.

    Raises:
        ValueError: If total_pieces is negative or the palette is empty.
    """
    if total_pieces < 0:
        raise ValueError(f"total_pieces must be non-negative, got {total_pieces}")
    colors = list(palette) if palette is not None else list(PieceColor)
    if not colors:
        raise ValueError("palette must contain at least one color")

    adjusted = round_up_to_module(total_pieces)
    pool: List[PieceColor] = []
    index = 0
    while len(pool) < adjusted:
        color = colors[index % len(colors)]
        pool.extend([color] * MODULE_SIZE)
        index += 1

    rng.shuffle(pool)
    return pool


class ColorPool:
    """Remaining piece count per color.

    Module counts are always derived from the remaining count, never tracked
    separately.
    """

    def __init__(self, counts: Optional[Dict[PieceColor, int]] = None):
        self._remaining: Dict[PieceColor, int] = {}
        for color, count in (counts or {}).items():
            if count < 0:
                raise ValueError(f"Negative count for {color.value}: {count}")
            if count:
                self._remaining[color] = count

    @classmethod
    def from_assignment(cls, colors: Iterable[PieceColor]) -> "ColorPool":
        """Count occurrences per color in a piece color assignment."""
        counts: Dict[PieceColor, int] = {}
        for color in colors:
            counts[color] = counts.get(color, 0) + 1
        return cls(counts)

    def remaining(self, color: PieceColor) -> int:
        return self._remaining.get(color, 0)

    def module_count(self, color: PieceColor) -> int:
        return self.remaining(color) // MODULE_SIZE

    def module_counts(self) -> Dict[PieceColor, int]:
        """Colors that still have at least one full module, with their counts."""
        modules = {}
        for color, count in self._remaining.items():
            m = count // MODULE_SIZE
            if m > 0:
                modules[color] = m
        return modules

    def decrement(self, color: PieceColor) -> int:
        """Take one piece of `color` out of the pool (floored at 0)."""
        left = max(0, self.remaining(color) - 1)
        if left:
            self._remaining[color] = left
        else:
            self._remaining.pop(color, None)
        return left

    @property
    def total_remaining(self) -> int:
        return sum(self._remaining.values())

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        """Convert to dictionary, colors in fixed order."""
        ordered = sorted(self._remaining, key=lambda c: c.order)
        return {
            c.value: {"remaining": self._remaining[c], "modules": self._remaining[c] // MODULE_SIZE}
            for c in ordered
        }
