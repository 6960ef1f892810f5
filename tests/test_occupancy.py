import pytest

from tile_errors import AlreadyOccupied, OutOfRange
from tile_occupancy import OccupancyTracker
from tile_settings import GridConfig


def test_fresh_grid_is_empty():
    occ = OccupancyTracker(GridConfig.square(3))
    assert occ.capacity_remaining() == 9
    assert not any(occ.is_occupied(c) for c in range(1, 10))
    assert occ.occupied_cells() == []


def test_occupy_marks_cell_and_counts():
    occ = OccupancyTracker(GridConfig.square(3))
    occ.occupy(4)
    occ.occupy(9)
    assert occ.is_occupied(4) and occ.is_occupied(9)
    assert not occ.is_occupied(5)
    assert occ.occupied_count == 2
    assert occ.capacity_remaining() == 7
    assert occ.occupied_cells() == [4, 9]


def test_occupy_twice_is_an_invariant_violation():
    occ = OccupancyTracker(GridConfig.square(2))
    occ.occupy(1)
    with pytest.raises(AlreadyOccupied):
        occ.occupy(1)
    assert occ.occupied_count == 1


@pytest.mark.parametrize("cell", [0, -1, 5, 400, True, "1"])
def test_out_of_range_cells_rejected(cell):
    occ = OccupancyTracker(GridConfig.square(2))
    with pytest.raises(OutOfRange):
        occ.is_occupied(cell)
    with pytest.raises(OutOfRange):
        occ.occupy(cell)


def test_bitmap_is_msb_first():
    occ = OccupancyTracker(GridConfig(width=5, height=2))
    occ.occupy(1)
    occ.occupy(10)
    assert occ.bitmap() == bytes([0x80, 0x40])


def test_snapshot_restore():
    occ = OccupancyTracker(GridConfig.square(2))
    occ.occupy(2)
    snap = occ.snapshot()
    occ.occupy(3)
    occ.restore(snap)
    assert occ.occupied_cells() == [2]
    assert occ.capacity_remaining() == 3
