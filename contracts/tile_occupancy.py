# contracts/tile_occupancy.py
# Plaintext cell occupancy. Who owns a cell is never recorded here.
from tile_settings import GridConfig
from tile_errors import AlreadyOccupied


class OccupancyTracker:
    def __init__(self, grid: GridConfig):
        self.grid = grid
        self._taken = bytearray(grid.total_cells + 1)  # index 0 unused; cells are 1-based
        self._count = 0

    @property
    def occupied_count(self) -> int:
        return self._count

    def is_occupied(self, cell: int) -> bool:
        return bool(self._taken[self.grid.check(cell)])

    def occupy(self, cell: int) -> None:
        if self.is_occupied(cell):
            raise AlreadyOccupied(f"cell {cell} is already occupied")
        self._taken[cell] = 1
        self._count += 1

    def capacity_remaining(self) -> int:
        return self.grid.total_cells - self._count

    def occupied_cells(self) -> list[int]:
        return [c for c in range(1, self.grid.total_cells + 1) if self._taken[c]]

    def bitmap(self) -> bytes:
        """Cell c is bit (c - 1), most significant bit first."""
        out = bytearray((self.grid.total_cells + 7) // 8)
        for c in self.occupied_cells():
            out[(c - 1) // 8] |= 0x80 >> ((c - 1) % 8)
        return bytes(out)

    def snapshot(self) -> tuple[bytes, int]:
        return bytes(self._taken), self._count

    def restore(self, snap: tuple[bytes, int]) -> None:
        taken, count = snap
        self._taken = bytearray(taken)
        self._count = count
