"""
Registry for player variants.

Maps variant keys (e.g., 'pathfinding', 'random') to player classes so the
CLI, the API and the config layer can pick a player by name.
"""

from typing import Dict, List, Optional, Type

from .base import Player
from .pathfinding_player import PathfindingPlayer
from .random_player import RandomPlayer

DEFAULT_VARIANT = "pathfinding"

PLAYER_VARIANTS: Dict[str, Type[Player]] = {
    "pathfinding": PathfindingPlayer,
    "random": RandomPlayer,
}

# Canonical list of available variant keys (for API exposure)
AVAILABLE_VARIANTS = list(PLAYER_VARIANTS.keys())


def get_player_class(variant_key: Optional[str] = None) -> Type[Player]:
    """
    Get the player class for a given variant key.

    Args:
        variant_key: One of AVAILABLE_VARIANTS. If None or empty, returns the default.

    Returns:
        The player class (subclass of Player).

    Raises:
        ValueError: If variant_key is not recognized.
    """
    if not variant_key or variant_key.strip() == "":
        variant_key = DEFAULT_VARIANT

    variant_key = variant_key.strip().lower()

    if variant_key not in PLAYER_VARIANTS:
        available = ", ".join(AVAILABLE_VARIANTS)
        raise ValueError(
            f"Unknown player variant '{variant_key}'. Available variants: {available}"
        )

    return PLAYER_VARIANTS[variant_key]


def list_variants() -> List[dict]:
    """
    Return metadata about all available player variants.

    Returns:
        List of dicts with 'key' and 'description' for each variant.
    """
    return [
        {"key": "pathfinding", "description": "BFS distance to food with straight-line tie-break (default)"},
        {"key": "random", "description": "Uniformly random safe move; baseline for comparison"},
    ]


def create_player(variant_key: Optional[str], grid, rng=None) -> Player:
    """
    Instantiate a player for the given variant on the given grid.

    The random player shares the caller's RNG so seeded runs stay reproducible.
    """
    player_cls = get_player_class(variant_key)
    if issubclass(player_cls, RandomPlayer):
        return player_cls(grid, rng=rng)
    return player_cls(grid)
