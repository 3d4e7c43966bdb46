"""
Rolling Fiefdoms - Population Engine Tests

Tests for the population lattice and node placement.
"""

import pytest

from fiefdoms.engine.population import PopulationEngine


class TestLattice:
    """Tests for lattice geometry."""

    def test_empty_grid_shape(self, empty_pop):
        assert len(empty_pop) == 4
        assert all(row == (0, 0, 0, 0) for row in empty_pop)

    def test_corner_plot_touches_one_node(self, empty_pop):
        assert PopulationEngine.nodes_for_cell(0, 0, empty_pop) == [(0, 0)]
        assert PopulationEngine.nodes_for_cell(4, 4, empty_pop) == [(3, 3)]

    def test_edge_plot_touches_two_nodes(self, empty_pop):
        assert PopulationEngine.nodes_for_cell(0, 2, empty_pop) == [(0, 1), (0, 2)]

    def test_interior_plot_touches_four_nodes(self, empty_pop):
        assert PopulationEngine.nodes_for_cell(2, 2, empty_pop) == [(1, 1), (1, 2), (2, 1), (2, 2)]

    def test_population_around(self, pop):
        grid = pop({(1, 1): 3, (2, 2): 5, (0, 0): 4})
        assert PopulationEngine.population_around(2, 2, grid) == 8
        assert PopulationEngine.population_around(0, 0, grid) == 4

    def test_open_nodes(self, pop):
        grid = pop({(1, 1): 3})
        assert PopulationEngine.open_nodes_for_cell(2, 2, grid) == [(1, 2), (2, 1), (2, 2)]

    def test_total_population(self, pop):
        assert PopulationEngine.total_population(pop({(0, 0): 4, (3, 3): 5})) == 9

    def test_from_rows_rejects_negative(self):
        with pytest.raises(ValueError):
            PopulationEngine.from_rows([[0, -2], [0, 0]])


class TestAllocatePopulation:
    """Tests for placing population on a node."""

    def test_places_on_empty_node(self, empty_pop):
        result = PopulationEngine.allocate_population_to_node(empty_pop, 1, 1, 4)
        assert result.placed == 4
        assert result.grid[1][1] == 4

    def test_used_node_is_refused(self, empty_pop):
        first = PopulationEngine.allocate_population_to_node(empty_pop, 1, 1, 4)
        second = PopulationEngine.allocate_population_to_node(first.grid, 1, 1, 2)
        assert second.placed == 0
        assert second.grid is first.grid
        assert second.grid[1][1] == 4

    def test_capped_at_node_capacity(self, empty_pop):
        result = PopulationEngine.allocate_population_to_node(empty_pop, 0, 3, 8)
        assert result.placed == 5
        assert result.grid[0][3] == 5
        assert PopulationEngine.total_population(result.grid) == 5

    def test_custom_capacity(self, empty_pop):
        result = PopulationEngine.allocate_population_to_node(empty_pop, 0, 0, 4, cap=2)
        assert result.placed == 2

    @pytest.mark.parametrize("row,col", [(-1, 0), (4, 0), (0, 4), (2, -1)])
    def test_off_lattice_is_refused(self, empty_pop, row, col):
        result = PopulationEngine.allocate_population_to_node(empty_pop, row, col, 3)
        assert result.placed == 0
        assert result.grid is empty_pop

    def test_input_not_mutated(self):
        rows = [[0] * 4 for _ in range(4)]
        PopulationEngine.allocate_population_to_node(rows, 2, 2, 3)
        assert rows[2][2] == 0

    def test_zero_amount_places_nothing(self, empty_pop):
        result = PopulationEngine.allocate_population_to_node(empty_pop, 0, 0, 0)
        assert result.placed == 0
        assert PopulationEngine.total_population(result.grid) == 0
