"""
Random player implementation - picks random safe moves.
"""

import random
from typing import List, Optional

from domain.constants import DIRECTION_ORDER, TRAPPED_RATIONALE, ZERO_VECTOR
from domain.game_state import Decision, GameState
from domain.grid import Grid, is_safe
from .base import Player


class RandomPlayer(Player):
    """
    A random AI that picks a direction that avoids walls and self-collisions.
    """

    def __init__(self, grid: Grid, rng: Optional[random.Random] = None):
        super().__init__(grid)
        self.rng = rng or random.Random()

    def get_move(self, game_state: GameState) -> Decision:
        body = game_state.body
        head = game_state.head

        valid_moves: List[str] = [
            direction for direction in DIRECTION_ORDER
            if is_safe(self.grid.step(head, direction), body, self.grid)
        ]

        if not valid_moves:
            return Decision(ZERO_VECTOR, TRAPPED_RATIONALE)

        direction = self.rng.choice(valid_moves)
        return Decision(
            self.grid.vector(direction),
            f"Moving {direction} at random ({len(valid_moves)} safe options).",
            direction,
        )
