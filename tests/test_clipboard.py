"""Tests for clipboard.py - in-memory voxel region."""

import pytest
from nbtlib.tag import Compound, Int, String

from spongeschem.clipboard import AIR_BLOCK, BaseBlock, BlockVector, Clipboard, CuboidRegion
from spongeschem.palette import BlockState

STONE = BlockState("minecraft:stone")


class TestCuboidRegion:
    def test_from_size(self):
        region = CuboidRegion.from_size((10, 5, 0), (3, 2, 4))
        assert region.minimum == (10, 5, 0)
        assert region.maximum == (12, 6, 3)
        assert region.size == (3, 2, 4)
        assert region.volume == 24

    def test_contains(self):
        region = CuboidRegion.from_size((0, 0, 0), (2, 2, 2))
        assert region.contains((1, 1, 1))
        assert not region.contains((2, 0, 0))
        assert not region.contains((0, -1, 0))


class TestClipboard:
    """Test block access and equality."""

    def test_defaults_to_air(self):
        clipboard = Clipboard(CuboidRegion.from_size((0, 0, 0), (2, 3, 4)))
        assert clipboard.origin == clipboard.minimum
        assert all(block == AIR_BLOCK for _, block in clipboard.iter_blocks())

    def test_set_get_absolute(self):
        clipboard = Clipboard(CuboidRegion.from_size((10, 64, 10), (3, 2, 3)))
        clipboard.set_block((11, 65, 12), STONE)

        assert clipboard.get_block((11, 65, 12)) == BaseBlock(STONE)
        assert clipboard.get_relative((1, 1, 2)) == BaseBlock(STONE)

    def test_outside_region(self):
        clipboard = Clipboard(CuboidRegion.from_size((0, 0, 0), (2, 2, 2)))
        with pytest.raises(IndexError):
            clipboard.set_block((2, 0, 0), STONE)
        with pytest.raises(IndexError):
            clipboard.get_relative((-1, 0, 0))

    def test_iteration_order(self):
        """Test Y outermost, then Z, then X."""
        clipboard = Clipboard(CuboidRegion.from_size((0, 0, 0), (2, 2, 2)))
        positions = [pos for pos, _ in clipboard.iter_blocks()]
        assert positions[:4] == [(0, 0, 0), (1, 0, 0), (0, 0, 1), (1, 0, 1)]
        assert positions[4] == BlockVector(0, 1, 0)

    def test_invalid_dimensions(self):
        with pytest.raises(ValueError, match="dimensions"):
            Clipboard(CuboidRegion(BlockVector(0, 0, 0), BlockVector(-1, 0, 0)))
        with pytest.raises(ValueError, match="dimensions"):
            Clipboard(CuboidRegion.from_size((0, 0, 0), (70000, 1, 1)))

    def test_equality(self):
        region = CuboidRegion.from_size((0, 0, 0), (2, 1, 1))
        a = Clipboard(region)
        b = Clipboard(region)
        assert a == b

        a.set_relative((1, 0, 0), STONE)
        assert a != b
        b.set_relative((1, 0, 0), STONE)
        assert a == b

        c = Clipboard(region, origin=(5, 5, 5))
        assert c != Clipboard(region)

    def test_nbt_must_be_compound(self):
        with pytest.raises(ValueError, match="Compound"):
            BaseBlock(STONE, Int(1))

    def test_nbt_without_pos(self):
        """Test that a block cannot carry a Pos entry of its own."""
        with pytest.raises(ValueError, match="Pos"):
            BaseBlock(STONE, Compound({"id": String("minecraft:chest"), "Pos": Int(1)}))

    def test_tile_entity_count(self):
        clipboard = Clipboard(CuboidRegion.from_size((0, 0, 0), (2, 1, 1)))
        chest = BaseBlock(BlockState("minecraft:chest"), Compound({"id": String("minecraft:chest")}))
        clipboard.set_relative((0, 0, 0), chest)
        assert clipboard.tile_entity_count() == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
