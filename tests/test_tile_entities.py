"""Tests for tile_entities.py and compat.py - tile entity records and rewrites."""

import pytest
from nbtlib.tag import Compound, Int, IntArray, List, String

from spongeschem.clipboard import BaseBlock, Clipboard, CuboidRegion
from spongeschem.compat import CompatibilityHandler, CompatibilityPipeline
from spongeschem.errors import MissingOrWrongTypeTag, TileEntityOutOfBounds, TileEntityParseError
from spongeschem.palette import BlockState
from spongeschem.tile_entities import read_tile_entities, to_block_nbt, to_record, write_tile_entities

CHEST = BlockState.of("minecraft:chest", facing="west")
SIGN = BlockState("minecraft:oak_sign")


def _record(pos, block_id="minecraft:chest", **extra):
    values = Compound({"Pos": IntArray(pos), "Id": String(block_id)})
    values.update(extra)
    return values


def _schematic(*records):
    return Compound({"TileEntities": List[Compound](list(records))})


class AppendText(CompatibilityHandler):
    """Appends a marker to the Text entry of affected blocks."""

    def __init__(self, block_id, marker):
        self.block_id = block_id
        self.marker = marker

    def applies(self, state):
        return state.block_id == self.block_id

    def rewrite(self, state, values):
        old = values.get("Text", String(""))
        values["Text"] = String(old + self.marker)
        return values


class TestReadTileEntities:
    """Test collecting records by position."""

    def test_basic(self):
        records = read_tile_entities(_schematic(_record([1, 0, 2]), _record([0, 0, 0])), (2, 1, 3))
        assert set(records) == {(1, 0, 2), (0, 0, 0)}
        assert records[(1, 0, 2)]["Id"] == "minecraft:chest"

    def test_empty(self):
        assert read_tile_entities(_schematic(), (1, 1, 1)) == {}

    def test_one_past_max_x(self):
        """Test Pos=(width, 0, 0) is out of bounds."""
        with pytest.raises(TileEntityOutOfBounds) as excinfo:
            read_tile_entities(_schematic(_record([2, 0, 0])), (2, 1, 1))
        assert excinfo.value.pos == (2, 0, 0)

    def test_negative_position(self):
        with pytest.raises(TileEntityOutOfBounds):
            read_tile_entities(_schematic(_record([0, -1, 0])), (2, 1, 1))

    def test_short_pos(self):
        with pytest.raises(TileEntityParseError, match="3 elements"):
            read_tile_entities(_schematic(_record([0, 0])), (2, 1, 1))

    def test_missing_pos(self):
        record = Compound({"Id": String("minecraft:chest")})
        with pytest.raises(TileEntityParseError) as excinfo:
            read_tile_entities(_schematic(record), (2, 1, 1))
        assert isinstance(excinfo.value.cause, MissingOrWrongTypeTag)

    def test_duplicate_position(self):
        with pytest.raises(TileEntityParseError, match="Duplicate"):
            read_tile_entities(_schematic(_record([0, 0, 0]), _record([0, 0, 0])), (2, 1, 1))

    def test_missing_list(self):
        with pytest.raises(TileEntityParseError):
            read_tile_entities(Compound(), (1, 1, 1))

    def test_list_of_wrong_kind(self):
        schematic = Compound({"TileEntities": List[Int]([Int(1)])})
        with pytest.raises(TileEntityParseError, match="Compounds"):
            read_tile_entities(schematic, (1, 1, 1))


class TestRecordConversion:
    """Test record <-> block NBT conversion."""

    def test_to_block_nbt(self):
        """Test Id renamed to id and Pos dropped."""
        record = _record([1, 2, 3], Items=List[Compound]())
        nbt = to_block_nbt(CHEST, record, CompatibilityPipeline())

        assert isinstance(nbt, Compound)
        assert set(nbt) == {"id", "Items"}
        assert nbt["id"] == "minecraft:chest"
        # The source record is untouched
        assert set(record) == {"Pos", "Id", "Items"}

    def test_to_record(self):
        """Test id renamed to Id and Pos added."""
        nbt = Compound({"id": String("minecraft:chest"), "Lock": String("")})
        record = to_record((1, 0, 2), nbt)

        assert set(record) == {"Id", "Lock", "Pos"}
        assert record["Id"] == "minecraft:chest"
        assert record["Pos"].tolist() == [1, 0, 2]
        assert set(nbt) == {"id", "Lock"}

    def test_position_entries_kept(self):
        """Test x/y/z in block NBT are ordinary entries in both directions."""
        nbt = Compound({"id": String("minecraft:sign"), "x": Int(7), "y": Int(64), "z": Int(-3)})

        record = to_record((0, 1, 0), nbt)
        assert record["x"] == 7 and record["y"] == 64 and record["z"] == -3

        restored = to_block_nbt(SIGN, record, CompatibilityPipeline())
        assert restored == nbt

    def test_to_record_rejects_pos(self):
        """Test that a Pos entry is never silently replaced."""
        nbt = Compound({"id": String("minecraft:chest"), "Pos": Int(1)})
        with pytest.raises(ValueError, match="Pos"):
            to_record((0, 0, 0), nbt)

    def test_write_tile_entities(self):
        clipboard = Clipboard(CuboidRegion.from_size((10, 10, 10), (2, 1, 2)))
        nbt = Compound({"id": String("minecraft:chest")})
        clipboard.set_relative((1, 0, 1), BaseBlock(CHEST, nbt))
        clipboard.set_relative((0, 0, 0), BaseBlock(SIGN))

        entities = write_tile_entities(clipboard)

        assert isinstance(entities, List)
        assert len(entities) == 1
        assert isinstance(entities[0], Compound)
        assert entities[0]["Pos"].tolist() == [1, 0, 1]


class TestCompatibilityPipeline:
    """Test ordered handler application."""

    def test_empty_by_default(self):
        pipeline = CompatibilityPipeline()
        values = Compound({"Text": String("x")})
        assert len(pipeline) == 0
        assert pipeline.apply(SIGN, values) == {"Text": "x"}

    def test_registration_order(self):
        """Test each handler sees the previous one's output."""
        pipeline = CompatibilityPipeline([AppendText("minecraft:oak_sign", "a")])
        pipeline.register(AppendText("minecraft:oak_sign", "b"))

        values = pipeline.apply(SIGN, Compound())

        assert values["Text"] == "ab"

    def test_only_applicable(self):
        pipeline = CompatibilityPipeline([
            AppendText("minecraft:chest", "chest"),
            AppendText("minecraft:oak_sign", "sign"),
        ])
        assert pipeline.apply(SIGN, Compound())["Text"] == "sign"

    def test_register_rejects_other_types(self):
        with pytest.raises(TypeError):
            CompatibilityPipeline().register(lambda state: True)

    def test_runs_before_rename(self):
        """Test handlers see the on-disk record with Id and Pos."""
        seen = []

        class Recorder(CompatibilityHandler):
            def applies(self, state):
                return True

            def rewrite(self, state, values):
                seen.append(sorted(values))
                return values

        to_block_nbt(CHEST, _record([0, 0, 0]), CompatibilityPipeline([Recorder()]))
        assert seen == [["Id", "Pos"]]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
