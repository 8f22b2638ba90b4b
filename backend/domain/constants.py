"""
Game constants for the self-driving snake.
"""

# Board settings (pixels, matching the browser canvas)
GRID_WIDTH = 400
GRID_HEIGHT = 400
CELL_SIZE = 20
TICK_INTERVAL_MS = 100

# Movement directions, in enumeration order used for tie-breaking
RIGHT = "RIGHT"
LEFT = "LEFT"
DOWN = "DOWN"
UP = "UP"
DIRECTION_ORDER = (RIGHT, LEFT, DOWN, UP)

# Unit offsets in grid steps; y grows downward like the canvas
DIRECTION_OFFSETS = {
    RIGHT: (1, 0),
    LEFT:  (-1, 0),
    DOWN:  (0, 1),
    UP:    (0, -1),
}

ZERO_VECTOR = (0, 0)

# Starting layout
INITIAL_BODY = ((160, 160), (140, 160))
INITIAL_FOOD = (300, 300)

# Scoring: points = max(MIN_POINTS, SCORE_NUMERATOR // (elapsed_ms + 1))
MIN_POINTS = 10
SCORE_NUMERATOR = 10000

# Driver states
IDLE = "idle"
RUNNING = "running"

TRAPPED_RATIONALE = "Trapped! No safe moves available."
