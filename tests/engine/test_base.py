"""
Rolling Fiefdoms - Base Classes Tests

Tests for dataclasses, enums, and validation utilities.
"""

import pytest

from fiefdoms.engine.base import (
    BUILDING_RULES,
    TERRAIN_LAYOUT,
    VALUE_TO_BUILDING,
    Board,
    Building,
    BuildingCategory,
    Cell,
    Die,
    GuildType,
    Terrain,
)
from fiefdoms.engine.validators import validate_die_face, validate_grid


class TestBuildingRules:
    """Tests for the static rule tables."""

    def test_every_building_has_a_rule(self):
        assert set(BUILDING_RULES) == set(Building)

    def test_value_table_covers_one_to_ten(self):
        assert sorted(VALUE_TO_BUILDING) == list(range(1, 11))
        assert all(code in BUILDING_RULES for code in VALUE_TO_BUILDING.values())

    @pytest.mark.parametrize("code,requirement", [
        (Building.COTTAGE, 0),
        (Building.FARM, 2),
        (Building.MARKET, 3),
        (Building.SPRINGHOUSE, 0),
        (Building.TOWNHALL, 4),
        (Building.GUILD, 4),
    ])
    def test_requirements(self, code, requirement):
        assert BUILDING_RULES[code].requirement == requirement

    def test_advanced_category(self):
        advanced = {code for code, rule in BUILDING_RULES.items()
                    if rule.category is BuildingCategory.ADVANCED}
        assert advanced == {Building.TOWNHALL, Building.UNIVERSITY, Building.ALMSHOUSE, Building.GUILD}

    def test_building_codes_compare_as_strings(self):
        assert Building.FARM == "F"
        assert str(Building.GUILD) == "G"


class TestGuildType:
    """Tests for GuildType enum."""

    def test_targets(self):
        assert GuildType.FARMERS.target is Building.FARM
        assert GuildType.QUARRYMEN.target is Building.QUARRY
        assert GuildType.WINDMILLERS.target is Building.WINDMILL
        assert GuildType.MERCHANTS.target is Building.MARKET

    def test_from_label_is_case_insensitive(self):
        assert GuildType.from_label("gm") is GuildType.MERCHANTS

    @pytest.mark.parametrize("label", [None, "", "G", "GX"])
    def test_from_label_unknown(self, label):
        assert GuildType.from_label(label) is None


class TestDie:
    """Tests for Die dataclass."""

    def test_numeric_face(self):
        die = Die.from_face("N1", 3)
        assert die.resolved == 3
        assert die.choices == ()
        assert not die.is_split

    def test_split_face_resolves_to_first_choice(self):
        die = Die.from_face("N1", "1/2")
        assert die.choices == (1, 2)
        assert die.resolved == 1
        assert die.is_split

    def test_forfeit_face(self):
        die = Die.from_face("X1", "X")
        assert die.is_forfeit
        assert die.resolved is None

    def test_numbered_label(self):
        assert Die.from_face("N2", 4).is_numbered
        assert not Die.from_face("X2", 4).is_numbered

    def test_resolve_returns_copy(self):
        die = Die.from_face("N2", "4/5")
        resolved = die.resolve(5)
        assert resolved.resolved == 5
        assert die.resolved == 4

    def test_resolve_outside_choices_raises(self):
        with pytest.raises(ValueError, match="not one of"):
            Die.from_face("N1", "1/2").resolve(3)

    def test_forfeit_face_cannot_resolve(self):
        with pytest.raises(ValueError, match="forfeit face"):
            Die(label="X1", face="X", resolved=2)

    def test_numeric_face_must_resolve_to_itself(self):
        with pytest.raises(ValueError, match="must resolve to itself"):
            Die(label="N1", face=3, resolved=4)

    @pytest.mark.parametrize("face", [0, 6, "2/3", "?"])
    def test_invalid_face_raises(self, face):
        with pytest.raises(ValueError, match="Invalid die face"):
            validate_die_face(face)

    def test_str(self):
        assert str(Die.from_face("N1", "1/2")) == "N1:1/2"


class TestCell:
    """Tests for Cell dataclass."""

    def test_empty_cell_is_open(self):
        assert Cell().is_open

    def test_label_defaults_to_code(self):
        cell = Cell(building="F")
        assert cell.building is Building.FARM
        assert cell.building_label == "F"

    def test_guild_type_from_label(self):
        assert Cell(building="G", building_label="GW").guild_type is GuildType.WINDMILLERS
        assert Cell(building="F").guild_type is None

    def test_built_and_forfeited_is_invalid(self):
        with pytest.raises(ValueError, match="both built and forfeited"):
            Cell(building="F", forfeited=True)

    def test_negative_spring_boost_is_invalid(self):
        with pytest.raises(ValueError, match="Spring boost"):
            Cell(spring_boost=-1)

    def test_unknown_building_code_is_invalid(self):
        with pytest.raises(ValueError):
            Cell(building="Z")


class TestBoard:
    """Tests for Board dataclass."""

    def test_empty_board_uses_terrain_layout(self, empty_board):
        assert empty_board.rows == 5
        assert empty_board.cols == 5
        assert empty_board.cells[0][0].terrain is Terrain.MOUNTAIN
        assert empty_board.cells[2][2].terrain is Terrain.VILLAGE
        assert empty_board.cells[0][4].terrain is Terrain.SEA
        assert len(TERRAIN_LAYOUT) == 5

    def test_update_cell_returns_new_board(self, empty_board):
        updated = empty_board.update_cell(1, 2, building="Q")
        assert updated.cells[1][2].building is Building.QUARRY
        assert empty_board.cells[1][2].building is None

    def test_is_open_out_of_range(self, empty_board):
        assert empty_board.is_open(0, 0)
        assert not empty_board.is_open(-1, 0)
        assert not empty_board.is_open(0, 5)

    def test_cell_out_of_range_raises(self, empty_board):
        with pytest.raises(IndexError):
            empty_board.cell(5, 0)

    def test_neighbors_are_cardinal(self, empty_board):
        assert sorted(empty_board.neighbors(0, 0)) == [(0, 1), (1, 0)]
        assert len(empty_board.neighbors(2, 2)) == 4

    def test_is_edge(self, empty_board):
        assert empty_board.is_edge(0, 2)
        assert empty_board.is_edge(4, 4)
        assert not empty_board.is_edge(2, 2)

    def test_is_full(self, empty_board, full_board, build):
        assert not empty_board.is_full()
        assert full_board.is_full()
        almost = build({(r, c): "C" for r in range(5) for c in range(5) if (r, c) != (3, 3)})
        assert not almost.is_full()
        assert build(forfeited=[(3, 3)], board=almost).is_full()

    def test_count(self, build):
        board = build({(0, 0): "F", (4, 4): "F", (2, 2): "GF"})
        assert board.count(Building.FARM) == 2
        assert board.count(Building.GUILD) == 1

    def test_dict_round_trip(self, build):
        board = build({(0, 0): "GQ", (1, 1): "S"}, forfeited=[(4, 4)], spring_boost={(0, 0): 1})
        data = board.to_dict()
        assert data["cells"][0][0]["building"] == "G"
        assert data["cells"][0][0]["building_label"] == "GQ"
        assert Board.from_dict(data) == board

    def test_ragged_board_raises(self):
        with pytest.raises(ValueError, match="row 1 has"):
            Board(cells=((Cell(), Cell()), (Cell(),)))


class TestValidateGrid:
    """Tests for grid validation."""

    def test_normalizes_to_tuples(self):
        assert validate_grid([[0, 1], [2, 3]]) == ((0, 1), (2, 3))

    def test_ragged_grid_raises(self):
        with pytest.raises(ValueError, match="row 1 has 1 entries"):
            validate_grid([[0, 1], [2]])

    def test_negative_entry_raises(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            validate_grid([[0, -1]])
