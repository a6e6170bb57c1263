from __future__ import annotations

from anthill.sim.core.occupancy import OccupancyGrid
from anthill.sim.core.position import Position


def test_buckets_keep_first_occupied_order_and_insertion_order():
    grid = OccupancyGrid()
    positions = [Position(1, 1), Position(0, 0), Position(1, 1), Position(0, 0), Position(2, 2)]
    for index, position in enumerate(positions):
        grid.insert(index, position)

    assert list(grid.buckets()) == [((1, 1), [0, 2]), ((0, 0), [1, 3]), ((2, 2), [4])]
    assert len(grid) == 3
    assert grid.max_occupancy() == 2


def test_clear_leaves_no_stale_entries():
    grid = OccupancyGrid()
    grid.insert(0, Position(0, 0))
    grid.insert(1, Position(3, 3))
    grid.clear()

    assert len(grid) == 0
    assert list(grid.buckets()) == []
    assert grid.max_occupancy() == 0

    grid.insert(0, Position(3, 3))
    assert list(grid.buckets()) == [((3, 3), [0])]


def test_cells_left_behind_are_forgotten():
    grid = OccupancyGrid()
    for tick in range(50):
        grid.clear()
        grid.insert(0, Position(tick, 0))
        grid.insert(1, Position(-tick, tick))

    assert [key for key, _ in grid.buckets()] == [(49, 0), (-49, 49)]
    assert len(grid._cells) == 2
