"""Tests for triplet palette generation and the color pool."""
import random
from collections import Counter

import pytest
from stackmatch.core.palette import ColorPool, generate_triplet_palette, round_up_to_module
from stackmatch.models.level import PieceColor


class TestGenerateTripletPalette:
    """Test cases for generate_triplet_palette."""

    @pytest.mark.parametrize("total", range(40))
    def test_length_and_triplets(self, total):
        colors = generate_triplet_palette(total, random.Random(total))

        assert len(colors) == round_up_to_module(total)
        assert len(colors) >= total
        assert len(colors) - total < 3
        for count in Counter(colors).values():
            assert count % 3 == 0

    def test_zero_pieces(self):
        assert generate_triplet_palette(0, random.Random(1)) == []

    def test_colors_cycle_in_palette_order(self):
        # 10 triplets over 8 colors: the first two colors get a second triplet
        counts = Counter(generate_triplet_palette(30, random.Random(7)))

        assert counts[PieceColor.C0] == 6
        assert counts[PieceColor.C1] == 6
        for color in list(PieceColor)[2:]:
            assert counts[color] == 3

    def test_restricted_palette(self):
        palette = [PieceColor.C3, PieceColor.C5]
        counts = Counter(generate_triplet_palette(12, random.Random(3), palette))

        assert counts == {PieceColor.C3: 6, PieceColor.C5: 6}

    def test_deterministic_with_seed(self):
        a = generate_triplet_palette(27, random.Random(42))
        b = generate_triplet_palette(27, random.Random(42))
        assert a == b

    def test_negative_total_raises(self):
        with pytest.raises(ValueError):
            generate_triplet_palette(-1, random.Random(1))

    def test_empty_palette_raises(self):
        with pytest.raises(ValueError):
            generate_triplet_palette(3, random.Random(1), [])


class TestColorPool:
    """Test cases for ColorPool."""

    @pytest.fixture
    def pool(self):
        return ColorPool.from_assignment([PieceColor.C0] * 6 + [PieceColor.C1] * 4)

    def test_counts_and_modules(self, pool):
        assert pool.remaining(PieceColor.C0) == 6
        assert pool.remaining(PieceColor.C1) == 4
        assert pool.module_count(PieceColor.C0) == 2
        assert pool.module_count(PieceColor.C1) == 1
        assert pool.module_count(PieceColor.C2) == 0
        assert pool.total_remaining == 10

    def test_module_counts_skip_incomplete_colors(self, pool):
        assert pool.module_counts() == {PieceColor.C0: 2, PieceColor.C1: 1}

        pool.decrement(PieceColor.C1)
        pool.decrement(PieceColor.C1)
        assert pool.module_counts() == {PieceColor.C0: 2}

    def test_decrement(self, pool):
        assert pool.decrement(PieceColor.C1) == 3
        assert pool.remaining(PieceColor.C1) == 3
        assert pool.module_count(PieceColor.C1) == 1

    def test_decrement_floors_at_zero(self, pool):
        assert pool.decrement(PieceColor.C7) == 0
        assert pool.remaining(PieceColor.C7) == 0
        assert pool.total_remaining == 10

    def test_negative_count_raises(self):
        with pytest.raises(ValueError):
            ColorPool({PieceColor.C0: -1})

    def test_to_dict_is_ordered(self):
        pool = ColorPool({PieceColor.C4: 3, PieceColor.C1: 5})
        data = pool.to_dict()

        assert list(data) == ["c1", "c4"]
        assert data["c1"] == {"remaining": 5, "modules": 1}
        assert data["c4"] == {"remaining": 3, "modules": 1}
