"""Level aggregate: layers, color pool, holding queue, lanes and the random source."""
import logging
import random
from typing import Any, Dict, List, Optional

from ..models.level import GameRules, Layer, Piece, PieceColor
from .generator import get_generator
from .holding_queue import HoldingQueue
from .lanes import LaneSet, RefreshContext, get_refresh_policy
from .occlusion import LayerStack, OcclusionEvaluator
from .palette import ColorPool

logger = logging.getLogger(__name__)


class Level:
    """
    One round of play.

    Owns the layer stack, the color pool, the holding queue, the lane set and
    the random source used for both generation and lane refreshes. A new game
    builds a new Level; nothing here is shared between levels.

    The color pool counts pieces still resident in layers, so it always
    agrees with the stack and is decremented once per piece, when the piece
    leaves its layer.
    """

    def __init__(
        self,
        rules: Optional[GameRules] = None,
        rng: Optional[random.Random] = None,
        layers: Optional[List[Layer]] = None,
    ):
        self.rules = rules or GameRules()
        self.rng = rng if rng is not None else random.Random()
        self.palette: List[PieceColor] = PieceColor.palette(self.rules.palette_size)

        if layers is None:
            layers = get_generator().generate_layers(self.rules, self.rng, self.palette)

        self.stack = LayerStack(layers)
        self.evaluator = OcclusionEvaluator(
            self.rules.piece_radius, self.rules.clickable_threshold
        )
        self.color_pool = ColorPool.from_assignment(
            piece.color for layer in self.stack for piece in layer.pieces
        )
        self.queue = HoldingQueue(self.rules.queue_capacity)
        self.total_pieces = self.stack.resident_count()
        self.absorbed = 0

        self.policy = get_refresh_policy(self.rules.refresh_policy, self.rng, self.palette)
        left, right = self.policy.choose(True, True, None, None, self.refresh_context())
        self.lanes = LaneSet(
            left,
            right,
            slots_per_lane=self.rules.slots_per_lane,
            policy=self.policy,
            context_provider=self.refresh_context,
        )

        logger.info(
            "Level created: %d layers, %d pieces, lanes %s/%s, policy=%s",
            len(self.stack), self.total_pieces, left.value, right.value,
            self.rules.refresh_policy,
        )

    @classmethod
    def create(cls, rules: Optional[GameRules] = None, seed: Optional[int] = None) -> "Level":
        """Generate a level with its own seeded random source."""
        return cls(rules=rules, rng=random.Random(seed))

    def refresh_context(self) -> RefreshContext:
        """Module counts and currently reachable colors for a lane refresh."""
        return RefreshContext(
            modules=self.color_pool.module_counts(),
            reachable=frozenset(
                self.stack.reachable_colors(self.evaluator, self.rules.empty_layers_occlude)
            ),
        )

    def layers_above(self, layer: Layer) -> List[Layer]:
        """Layers that count as covering `layer` under the current rules."""
        return self.stack.layers_above(layer, self.rules.empty_layers_occlude)

    def clickable_pieces(self) -> List[Piece]:
        return self.stack.clickable_pieces(self.evaluator, self.rules.empty_layers_occlude)

    def resident_count(self) -> int:
        return self.stack.resident_count()

    def queued_count(self) -> int:
        return self.queue.size()

    def is_conserved(self) -> bool:
        """Resident + queued + absorbed always equals the generated total."""
        return (
            self.resident_count() + self.queued_count() + self.absorbed
            == self.total_pieces
        )

    def is_cleared(self) -> bool:
        """All layers empty and nothing left waiting in the queue."""
        return self.stack.all_cleared() and self.queue.is_empty()

    def is_layer_empty(self, index: int) -> bool:
        return self.stack[index].is_empty

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot for presentation."""
        clickable_ids = {p.piece_id for p in self.clickable_pieces()}
        layers = []
        for layer in self.stack:
            data = layer.to_dict()
            for piece_data in data["pieces"]:
                piece_data["clickable"] = piece_data["id"] in clickable_ids
            layers.append(data)

        return {
            "rules": self.rules.to_dict(),
            "layers": layers,
            "lanes": self.lanes.to_dict(),
            "queue": self.queue.to_dict(),
            "counts": {
                "total": self.total_pieces,
                "resident": self.resident_count(),
                "queued": self.queued_count(),
                "absorbed": self.absorbed,
            },
            "modules": self.color_pool.to_dict(),
        }
