"""
Base player interface for the game engine.
"""

from domain.game_state import Decision, GameState
from domain.grid import Grid


class Player:
    """
    Base class/interface for player logic.

    A player looks at the current game state and decides which way the
    snake's head moves next. Players hold no game state of their own.
    """

    def __init__(self, grid: Grid):
        self.grid = grid

    def get_move(self, game_state: GameState) -> Decision:
        """
        Return a movement decision given the current game state.

        Args:
            game_state: Current state of the game

        Returns:
            Decision with a unit vector, or the zero vector when trapped
        """
        raise NotImplementedError
