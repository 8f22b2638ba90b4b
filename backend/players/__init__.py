"""
Player implementations for the self-driving snake.

This module contains the player abstraction and the implementations
that decide which way the snake moves each tick.
"""

from .base import Player
from .pathfinding_player import PathfindingPlayer
from .random_player import RandomPlayer
from .variant_registry import get_player_class, create_player, list_variants, AVAILABLE_VARIANTS

__all__ = [
    'Player',
    'PathfindingPlayer',
    'RandomPlayer',
    'get_player_class',
    'create_player',
    'list_variants',
    'AVAILABLE_VARIANTS',
]
