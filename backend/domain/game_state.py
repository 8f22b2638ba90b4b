"""
GameState entity - an immutable snapshot of the game at a point in time.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from .constants import IDLE, RUNNING, ZERO_VECTOR
from .grid import Cell, Grid


@dataclass(frozen=True)
class Decision:
    """
    What a player wants to do this tick.

    Attributes:
        vector: pixel offset to add to the head, or ZERO_VECTOR when trapped
        rationale: human-readable explanation; never read by game logic
        direction: name of the chosen direction, None when trapped
    """
    vector: Cell
    rationale: str
    direction: Optional[str] = None

    @property
    def trapped(self) -> bool:
        return self.vector == ZERO_VECTOR


@dataclass(frozen=True)
class GameState:
    """
    A snapshot of the game at a specific tick.

    Attributes:
        body: tuple of (x, y) from head at index 0 to tail at the end
        food: (x, y) of the food, or None once the board is full
        score: points collected so far
        last_food_ms: clock reading of the last meal (or of game start)
        tick_number: how many ticks have been applied
        status: IDLE or RUNNING
        rationale: explanation attached to the most recent decision
    """
    body: Tuple[Cell, ...]
    food: Optional[Cell]
    score: int = 0
    last_food_ms: int = 0
    tick_number: int = 0
    status: str = IDLE
    rationale: str = field(default="", compare=False)

    @property
    def head(self) -> Cell:
        """Return the head position (first element)."""
        return self.body[0]

    @property
    def running(self) -> bool:
        return self.status == RUNNING

    def with_status(self, status: str) -> "GameState":
        return replace(self, status=status)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation handed to renderers."""
        return {
            "body": [list(cell) for cell in self.body],
            "food": list(self.food) if self.food is not None else None,
            "score": self.score,
            "length": len(self.body),
            "tick_number": self.tick_number,
            "status": self.status,
            "rationale": self.rationale,
        }

    def print_board(self, grid: Grid) -> str:
        """
        Returns a string representation of the board with:
        . = empty space
        F = food
        H = snake head
        S = snake body
        Rows are printed top to bottom, matching the canvas orientation.
        """
        board = [['.' for _ in range(grid.columns)] for _ in range(grid.rows)]

        if self.food is not None:
            fx, fy = self.food
            board[fy // grid.cell_size][fx // grid.cell_size] = 'F'

        for idx, (x, y) in enumerate(self.body):
            board[y // grid.cell_size][x // grid.cell_size] = 'H' if idx == 0 else 'S'

        result = [f"{row:2d} {' '.join(cells)}" for row, cells in enumerate(board)]
        result.append("   " + " ".join(str(col % 10) for col in range(grid.columns)))
        return "\n".join(result)

    def __repr__(self):
        return (
            f"<GameState tick={self.tick_number}, status={self.status}, "
            f"length={len(self.body)}, food={self.food}, score={self.score}>"
        )


@dataclass(frozen=True)
class TickResult:
    """
    Everything one tick produced, for the driver and the presentation layer.

    Attributes:
        state: the committed state after the tick
        rationale: the player's explanation for this tick
        grew: True when the head landed on the food
        points: score increment (0 without growth)
        trapped: True when no safe move existed and nothing moved
        grid_full: True when food could not be placed because the body covers the board
    """
    state: GameState
    rationale: str
    grew: bool = False
    points: int = 0
    trapped: bool = False
    grid_full: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.to_dict(),
            "rationale": self.rationale,
            "grew": self.grew,
            "points": self.points,
            "trapped": self.trapped,
            "grid_full": self.grid_full,
        }
