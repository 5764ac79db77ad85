"""Layer stacking, hit testing and occlusion (visibility) evaluation."""
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ..models.level import Layer, Piece, PieceColor, Rect


def rect_coverage_ratio(box: Rect, covering: Iterable[Rect]) -> float:
    """
    Fraction of `box` covered by the given rectangles.

    Each covering rectangle contributes its overlap independently, so
    overlapping covers are counted more than once. The sum is clamped to 1.0.

    Args:
        box: Rectangle being covered.
        covering: Rectangles lying above it.

    Returns:
        Coverage ratio in [0, 1]. A degenerate box counts as fully covered.
    """
    total = box.area
    if total <= 0:
        return 1.0

    covered = 0.0
    for rect in covering:
        covered += box.intersection_area(rect)

    return min(1.0, covered / total)


class OcclusionEvaluator:
    """Decides whether a piece is exposed enough to be selected."""

    def __init__(self, radius: float, threshold: float = 0.5):
        self.radius = radius
        self.threshold = threshold

    def bounding_box(self, piece: Piece) -> Rect:
        """Square of side 2*radius approximating the piece."""
        return Rect.around(piece.x, piece.y, self.radius)

    def coverage_ratio(self, piece: Piece, layers_above: Iterable[Layer]) -> float:
        """Coverage of the piece by the rectangles of every layer above its owner."""
        return rect_coverage_ratio(
            self.bounding_box(piece), (layer.rect for layer in layers_above)
        )

    def is_clickable(
        self,
        piece: Piece,
        layers_above: Iterable[Layer],
        threshold: Optional[float] = None,
    ) -> bool:
        """True iff coverage is strictly below the threshold."""
        limit = self.threshold if threshold is None else threshold
        return self.coverage_ratio(piece, layers_above) < limit


class LayerStack:
    """Ordered layers; index order is stacking order (last is topmost).

    Layers stay in the stack after they are emptied so indices never shift.
    By default an empty layer still counts as "above" for lower layers.
    """

    def __init__(self, layers: Optional[Iterable[Layer]] = None):
        self._layers: List[Layer] = []
        for layer in layers or []:
            self.add(layer)

    def add(self, layer: Layer) -> Layer:
        """Push a layer on top of the stack and stamp its index."""
        layer.index = len(self._layers)
        self._layers.append(layer)
        return layer

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def __getitem__(self, index: int) -> Layer:
        return self._layers[index]

    def layers_above(self, layer: Layer, include_empty: bool = True) -> List[Layer]:
        """Layers with a greater stack index. Empty ones count unless excluded."""
        above = self._layers[layer.index + 1:]
        if include_empty:
            return above
        return [other for other in above if not other.is_empty]

    def hit_test(self, x: float, y: float, radius: float) -> Optional[Piece]:
        """
        Find the topmost piece whose hit circle contains the point.

        Layers are scanned from topmost down; the first match wins even when
        several hit circles overlap the point.
        """
        for layer in reversed(self._layers):
            for piece in reversed(layer.pieces):
                if piece.contains(x, y, radius):
                    return piece
        return None

    def find_holder(self, piece: Piece) -> Optional[Layer]:
        """Get the layer that currently owns the piece."""
        for layer in self._layers:
            if layer.holds(piece):
                return layer
        return None

    def remove_piece(self, piece: Piece) -> Optional[Layer]:
        """Remove a piece from its owning layer. Returns that layer, if any."""
        for layer in self._layers:
            if layer.remove(piece):
                return layer
        return None

    def resident_count(self) -> int:
        return sum(len(layer.pieces) for layer in self._layers)

    def all_cleared(self) -> bool:
        return all(layer.is_empty for layer in self._layers)

    def active_layers(self) -> List[Layer]:
        """Layers that still hold pieces."""
        return [layer for layer in self._layers if not layer.is_empty]

    def resident_colors(self) -> Dict[PieceColor, int]:
        """Count resident pieces per color."""
        counts: Dict[PieceColor, int] = {}
        for layer in self._layers:
            for piece in layer.pieces:
                counts[piece.color] = counts.get(piece.color, 0) + 1
        return counts

    def clickable_pieces(
        self, evaluator: OcclusionEvaluator, include_empty: bool = True
    ) -> List[Piece]:
        """All resident pieces that pass the clickability test, top layer first."""
        result = []
        for layer in reversed(self._layers):
            if layer.is_empty:
                continue
            above = self.layers_above(layer, include_empty)
            for piece in layer.pieces:
                if evaluator.is_clickable(piece, above):
                    result.append(piece)
        return result

    def reachable_colors(
        self, evaluator: OcclusionEvaluator, include_empty: bool = True
    ) -> Set[PieceColor]:
        """Colors with at least one clickable resident piece."""
        return {piece.color for piece in self.clickable_pieces(evaluator, include_empty)}
