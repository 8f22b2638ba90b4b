"""
Pathfinding player - the snake's autopilot.

Each tick the player:
  1) Enumerates the four directions in a fixed order (RIGHT, LEFT, DOWN, UP)
  2) Drops any whose next cell is off the board or on the body
  3) Ranks the survivors by BFS distance to the food, then straight-line
     distance, then enumeration order
  4) Returns the winner with a rationale, or the zero vector when trapped

There is no randomness here: the same body, food and grid always give the
same decision.
"""

import logging
from typing import List, NamedTuple

from domain.constants import DIRECTION_ORDER, TRAPPED_RATIONALE, ZERO_VECTOR
from domain.game_state import Decision, GameState
from domain.grid import Cell, is_safe
from domain.pathfinding import (
    UNREACHABLE,
    format_distance,
    path_length,
    straight_line_distance,
)
from .base import Player

logger = logging.getLogger(__name__)


class Candidate(NamedTuple):
    direction: str
    cell: Cell
    path: float
    straight: float
    order: int


class PathfindingPlayer(Player):
    """
    Chooses the safe neighbouring cell closest to the food by path length.
    """

    def candidates(self, game_state: GameState) -> List[Candidate]:
        """Return the safe moves from the current head, ranked best first."""
        body = game_state.body
        head = game_state.head
        food = game_state.food

        result: List[Candidate] = []
        for order, direction in enumerate(DIRECTION_ORDER):
            nxt = self.grid.step(head, direction)
            if not is_safe(nxt, body, self.grid):
                continue
            if food is None:
                path, straight = UNREACHABLE, UNREACHABLE
            else:
                path = path_length(body, nxt, food, self.grid)
                straight = straight_line_distance(nxt, food)
            result.append(Candidate(direction, nxt, path, straight, order))

        result.sort(key=lambda c: (c.path, c.straight, c.order))
        return result

    def get_move(self, game_state: GameState) -> Decision:
        ranked = self.candidates(game_state)

        if not ranked:
            logger.debug(f"No safe move from {game_state.head}")
            return Decision(ZERO_VECTOR, TRAPPED_RATIONALE)

        best = ranked[0]
        if best.path == 0:
            rationale = f"Moving {best.direction}: eating the food."
        elif best.path == UNREACHABLE:
            rationale = (
                f"Moving {best.direction}: food is unreachable from every safe cell, "
                f"{len(ranked)} safe option(s)."
            )
        else:
            rationale = (
                f"Moving {best.direction}: food is {format_distance(best.path)} away "
                f"({best.straight:.1f}px straight line), {len(ranked)} safe option(s)."
            )

        logger.debug(rationale)
        return Decision(self.grid.vector(best.direction), rationale, best.direction)
