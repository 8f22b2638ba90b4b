"""
Domain entities for the self-driving snake.

This module contains the grid model, the pathfinding primitives and the
immutable game state values. Nothing in here knows about timers, HTTP or
drawing.
"""

from .constants import (
    RIGHT, LEFT, DOWN, UP, DIRECTION_ORDER, ZERO_VECTOR,
    IDLE, RUNNING,
)
from .grid import Grid, is_safe
from .pathfinding import UNREACHABLE, path_length, straight_line_distance
from .game_state import GameState, Decision, TickResult

__all__ = [
    'RIGHT', 'LEFT', 'DOWN', 'UP', 'DIRECTION_ORDER', 'ZERO_VECTOR',
    'IDLE', 'RUNNING',
    'Grid', 'is_safe',
    'UNREACHABLE', 'path_length', 'straight_line_distance',
    'GameState', 'Decision', 'TickResult',
]
