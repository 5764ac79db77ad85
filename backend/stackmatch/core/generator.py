"""Random level layout generator."""
import logging
import random
from typing import List, Optional

from ..models.level import GameRules, Layer, Piece, PieceColor, Rect
from .palette import MODULE_SIZE, generate_triplet_palette

logger = logging.getLogger(__name__)


def _rand_range(rng: random.Random, lo: int, hi: int) -> int:
    """Inclusive random int; collapses to `lo` when the range is empty."""
    if hi <= lo:
        return lo
    return rng.randint(lo, hi)


def _clamp(value: int, lo: int, hi: int) -> int:
    if hi < lo:
        return lo
    return max(lo, min(hi, value))


class LevelGenerator:
    """Generates stacked layers with pieces and a triplet color assignment."""

    # Layer rectangle sizing, relative to the canvas
    MARGIN = 24
    MIN_LAYER_WIDTH = 120
    MIN_LAYER_HEIGHT = 70
    # Pieces per layer before padding
    MIN_PIECES = 3
    MAX_PIECES = 6
    # Keep piece centers this far inside their layer
    PIECE_PADDING = 10

    def generate_layers(
        self,
        rules: GameRules,
        rng: random.Random,
        palette: Optional[List[PieceColor]] = None,
    ) -> List[Layer]:
        """
        Generate `rules.layer_count` layers, bottom first.

        Every layer gets 3..6 pieces; extra pieces are then dropped on random
        layers until the total is a multiple of 3, and colors are dealt from
        a shuffled triplet palette.

        Args:
            rules: Level rules (canvas extents, layer count, palette size).
            rng: Random source for positions and the color shuffle.
            palette: Colors to use. Defaults to the first `palette_size` colors.

        Returns:
            List of layers ordered back to front.
        """
        colors = palette or PieceColor.palette(rules.palette_size)
        layers = [self._random_layer(rules, rng) for _ in range(rules.layer_count)]

        total = sum(len(layer.pieces) for layer in layers)
        need = (MODULE_SIZE - total % MODULE_SIZE) % MODULE_SIZE
        for _ in range(need):
            layer = rng.choice(layers)
            layer.pieces.append(self._random_piece(layer.rect, rng))
        total += need

        assignment = generate_triplet_palette(total, rng, colors)
        piece_id = 0
        for layer in layers:
            for piece in layer.pieces:
                piece.piece_id = piece_id
                piece.color = assignment[piece_id]
                piece_id += 1

        logger.debug(
            "Generated %d layers with %d pieces over %d colors",
            len(layers), total, len(colors),
        )
        return layers

    def _random_layer(self, rules: GameRules, rng: random.Random) -> Layer:
        """Random rectangle inside the canvas with 3..6 pieces (colors assigned later)."""
        w, h = rules.canvas_width, rules.canvas_height
        margin = min(self.MARGIN, w // 4, h // 4)

        min_w = max(self.MIN_LAYER_WIDTH, w // 7)
        max_w = max(min_w + 40, w // 3)
        min_h = max(self.MIN_LAYER_HEIGHT, h // 12)
        max_h = max(min_h + 30, h // 5)

        bw = _clamp(_rand_range(rng, min_w, max_w), 1, max(1, w - 2 * margin))
        bh = _clamp(_rand_range(rng, min_h, max_h), 1, max(1, h - 2 * margin))

        # Lower bound on y spreads layers down the canvas so they overlap more
        x = _clamp(_rand_range(rng, margin, w - margin - bw), margin, w - margin - bw)
        y = _clamp(_rand_range(rng, h // 5, h - margin - bh), margin, h - margin - bh)

        layer = Layer(rect=Rect(x, y, bw, bh))
        count = _rand_range(rng, self.MIN_PIECES, self.MAX_PIECES)
        for _ in range(count):
            layer.pieces.append(self._random_piece(layer.rect, rng))
        return layer

    def _random_piece(self, rect: Rect, rng: random.Random) -> Piece:
        pad = self.PIECE_PADDING
        x0, y0 = int(rect.x), int(rect.y)
        x1, y1 = int(rect.x + rect.width), int(rect.y + rect.height)
        px = _rand_range(rng, x0 + pad, x1 - pad)
        py = _rand_range(rng, y0 + pad, y1 - pad)
        # id and color are filled in once all pieces exist
        return Piece(piece_id=-1, x=px, y=py, color=PieceColor.C0)


# Singleton instance
_generator = None


def get_generator() -> LevelGenerator:
    """Get or create generator singleton instance."""
    global _generator
    if _generator is None:
        _generator = LevelGenerator()
    return _generator
