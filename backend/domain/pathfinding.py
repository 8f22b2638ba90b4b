"""
Breadth-first distance estimates over the board.

The snake's own body is the only obstacle. The tail cell is treated as
passable because it moves out of the way before any path of one or more
steps can reach it.
"""

import math
from collections import deque
from typing import Sequence, Set

from .grid import Cell, Grid

# Returned when the goal cannot be reached; compares greater than any distance
UNREACHABLE = math.inf


def path_length(body: Sequence[Cell], start: Cell, goal: Cell, grid: Grid) -> float:
    """
    Return the number of steps on the shortest path from start to goal.

    Args:
        body: snake body, head first
        start: cell the search begins from (usually a candidate next head)
        goal: target cell (usually the food)
        grid: board dimensions

    Returns:
        Edge count of the shortest path, or UNREACHABLE.
    """
    if start == goal:
        return 0

    tail = body[-1] if body else None
    blocked: Set[Cell] = set(body)
    if tail is not None:
        blocked.discard(tail)

    visited: Set[Cell] = {start}
    queue = deque([(start, 0)])
    while queue:
        cell, distance = queue.popleft()
        for nxt in grid.neighbors(cell):
            if nxt in visited or nxt in blocked:
                continue
            if nxt == goal:
                return distance + 1
            visited.add(nxt)
            queue.append((nxt, distance + 1))

    return UNREACHABLE


def straight_line_distance(a: Cell, b: Cell) -> float:
    """Euclidean distance in pixels."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def format_distance(distance: float) -> str:
    if distance == UNREACHABLE:
        return "unreachable"
    steps = int(distance)
    return f"{steps} step" if steps == 1 else f"{steps} steps"

