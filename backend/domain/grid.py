"""
Grid model and the occupancy check used by every player.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple

from .constants import GRID_WIDTH, GRID_HEIGHT, CELL_SIZE, DIRECTION_OFFSETS, DIRECTION_ORDER

Cell = Tuple[int, int]


@dataclass(frozen=True)
class Grid:
    """
    A fixed-size board measured in pixels.

    Attributes:
        width, height: board size in pixels
        cell_size: edge length of one cell; every cell coordinate is a multiple of it
    """
    width: int = GRID_WIDTH
    height: int = GRID_HEIGHT
    cell_size: int = CELL_SIZE

    @property
    def columns(self) -> int:
        return self.width // self.cell_size

    @property
    def rows(self) -> int:
        return self.height // self.cell_size

    @property
    def cell_count(self) -> int:
        return self.columns * self.rows

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def is_aligned(self, cell: Cell) -> bool:
        x, y = cell
        return x % self.cell_size == 0 and y % self.cell_size == 0

    def vector(self, direction: str) -> Cell:
        """Return the pixel offset for one step in the given direction."""
        dx, dy = DIRECTION_OFFSETS[direction]
        return (dx * self.cell_size, dy * self.cell_size)

    def step(self, cell: Cell, direction: str) -> Cell:
        dx, dy = self.vector(direction)
        return (cell[0] + dx, cell[1] + dy)

    def neighbors(self, cell: Cell) -> List[Cell]:
        """In-bounds orthogonal neighbours, in direction enumeration order."""
        result = []
        for direction in DIRECTION_ORDER:
            nxt = self.step(cell, direction)
            if self.in_bounds(nxt):
                result.append(nxt)
        return result

    def cells(self) -> Iterator[Cell]:
        """Yield every grid-aligned cell, row by row from the top left."""
        for y in range(0, self.rows * self.cell_size, self.cell_size):
            for x in range(0, self.columns * self.cell_size, self.cell_size):
                yield (x, y)

    def cell_at(self, column: int, row: int) -> Cell:
        return (column * self.cell_size, row * self.cell_size)


def is_safe(cell: Cell, body: Iterable[Cell], grid: Grid) -> bool:
    """
    A cell is safe when it lies on the board and no body segment occupies it.
    """
    if not grid.in_bounds(cell):
        return False
    return cell not in set(body)


def validate_body(body: Sequence[Cell], grid: Grid) -> None:
    """
    Raise ValueError unless body is a non-empty, in-bounds, grid-aligned
    chain of distinct orthogonally adjacent cells.
    """
    if not body:
        raise ValueError("Snake body must contain at least one cell.")
    if len(set(body)) != len(body):
        raise ValueError(f"Snake body overlaps itself: {list(body)}")
    for x, y in body:
        if not grid.in_bounds((x, y)):
            raise ValueError(f"Snake segment out of bounds at {(x, y)}.")
        if not grid.is_aligned((x, y)):
            raise ValueError(f"Snake segment {(x, y)} is not aligned to cell size {grid.cell_size}.")
    for (ax, ay), (bx, by) in zip(body, body[1:]):
        if abs(ax - bx) + abs(ay - by) != grid.cell_size:
            raise ValueError(f"Snake segments {(ax, ay)} and {(bx, by)} are not adjacent.")
