# contracts/tile_settings.py
# Grid geometry + environment-driven settings for the tile engine
import os
from dataclasses import dataclass

from tile_errors import OutOfRange

MAP_SIZE = 20                       # square map, 20 x 20
TOTAL_TILES = MAP_SIZE * MAP_SIZE   # 400
DECRYPT_DURATION_DAYS = 10          # validity window for decrypt authorizations


@dataclass(frozen=True)
class GridConfig:
    width: int
    height: int

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"grid must be at least 1x1, got {self.width}x{self.height}")

    @classmethod
    def square(cls, size: int = MAP_SIZE) -> "GridConfig":
        return cls(width=size, height=size)

    @classmethod
    def from_env(cls) -> "GridConfig":
        return Settings.from_env().grid

    @property
    def total_cells(self) -> int:
        return self.width * self.height

    def check(self, cell: int) -> int:
        if not isinstance(cell, int) or isinstance(cell, bool) or not 1 <= cell <= self.total_cells:
            raise OutOfRange(f"cell {cell!r} outside [1, {self.total_cells}]")
        return cell

    def coordinates(self, cell: int) -> tuple[int, int]:
        """Row-major (row, col), both 0-based."""
        offset = self.check(cell) - 1
        return divmod(offset, self.width)


@dataclass(frozen=True)
class Settings:
    grid: GridConfig
    relayer_url: str
    relayer_token: str
    paillier_bits: int
    decrypt_duration_days: int

    @classmethod
    def from_env(cls) -> "Settings":
        size = int(os.getenv("CIPHERLANDS_MAP_SIZE", str(MAP_SIZE)))
        return cls(
            grid=GridConfig.square(size),
            relayer_url=os.getenv("CIPHERLANDS_RELAYER_URL", "http://localhost:7077").rstrip("/"),
            relayer_token=os.getenv("CIPHERLANDS_RELAYER_TOKEN", ""),
            paillier_bits=int(os.getenv("CIPHERLANDS_PAILLIER_BITS", "2048")),
            decrypt_duration_days=int(
                os.getenv("CIPHERLANDS_DECRYPT_DURATION_DAYS", str(DECRYPT_DURATION_DAYS))
            ),
        )
