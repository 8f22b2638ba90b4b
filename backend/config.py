"""
Runtime configuration for the snake engine.

Values come from environment variables (a local .env file is loaded first).
Every setting has a default matching the browser game, so an empty
environment gives a 400x400 board with 20px cells ticking every 100ms.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from domain.constants import CELL_SIZE, GRID_HEIGHT, GRID_WIDTH, TICK_INTERVAL_MS
from domain.grid import Grid

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

# Smallest board (in cells per side) the initial two-cell snake fits on
MIN_CELLS_PER_SIDE = 3


@dataclass(frozen=True)
class GameConfig:
    grid_width: int = GRID_WIDTH
    grid_height: int = GRID_HEIGHT
    cell_size: int = CELL_SIZE
    tick_ms: int = TICK_INTERVAL_MS
    seed: Optional[int] = None
    player: str = "pathfinding"
    allowed_origins: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))

    def __post_init__(self):
        for name in ("grid_width", "grid_height", "cell_size", "tick_ms"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.grid_width % self.cell_size or self.grid_height % self.cell_size:
            raise ValueError(
                f"Grid {self.grid_width}x{self.grid_height} is not a multiple of cell size {self.cell_size}"
            )
        if min(self.grid_width, self.grid_height) // self.cell_size < MIN_CELLS_PER_SIDE:
            raise ValueError(
                f"Grid must be at least {MIN_CELLS_PER_SIDE} cells on each side"
            )

    @property
    def grid(self) -> Grid:
        return Grid(self.grid_width, self.grid_height, self.cell_size)


def _int_env(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from None


def load_config() -> GameConfig:
    """
    Build a GameConfig from the environment.

    Uses environment variables:
    - SNAKE_GRID_WIDTH, SNAKE_GRID_HEIGHT: board size in pixels
    - SNAKE_CELL_SIZE: cell edge in pixels
    - SNAKE_TICK_MS: tick period in milliseconds
    - SNAKE_SEED: optional RNG seed for food placement
    - SNAKE_PLAYER: player variant key
    - CORS_ALLOWED_ORIGINS: comma-separated origins for the API

    Raises:
        ValueError: If a variable is malformed or the board is inconsistent
    """
    load_dotenv()

    origins_env = os.getenv("CORS_ALLOWED_ORIGINS")
    if origins_env:
        origins = [o.strip() for o in origins_env.split(",") if o.strip()]
    else:
        origins = list(DEFAULT_ALLOWED_ORIGINS)

    config = GameConfig(
        grid_width=_int_env("SNAKE_GRID_WIDTH", GRID_WIDTH),
        grid_height=_int_env("SNAKE_GRID_HEIGHT", GRID_HEIGHT),
        cell_size=_int_env("SNAKE_CELL_SIZE", CELL_SIZE),
        tick_ms=_int_env("SNAKE_TICK_MS", TICK_INTERVAL_MS),
        seed=_int_env("SNAKE_SEED", None),
        player=os.getenv("SNAKE_PLAYER", "pathfinding").strip() or "pathfinding",
        allowed_origins=origins,
    )
    logger.info(
        f"Loaded config: grid {config.grid_width}x{config.grid_height}, "
        f"cell {config.cell_size}, tick {config.tick_ms}ms, player {config.player}"
    )
    return config
