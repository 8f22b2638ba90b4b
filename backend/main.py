import argparse
import json
import logging
import math
import os
import random
import time
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from config import GameConfig, load_config
from domain.constants import (
    INITIAL_BODY,
    INITIAL_FOOD,
    MIN_POINTS,
    RUNNING,
    IDLE,
    SCORE_NUMERATOR,
)
from domain.game_state import GameState, TickResult
from domain.grid import Cell, Grid, is_safe, validate_body
from players import Player, create_player

logger = logging.getLogger(__name__)

NOT_RUNNING_RATIONALE = "Game is not running."

Clock = Callable[[], int]
GrowthListener = Callable[[TickResult], None]


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


# -------------------------------
# Pure transition helpers
# -------------------------------

def compute_points(elapsed_ms: int) -> int:
    """
    Points for eating food elapsed_ms after the previous meal.

    Faster meals score more; the award never drops below MIN_POINTS.
    """
    elapsed_ms = max(0, elapsed_ms)
    return max(MIN_POINTS, math.floor(SCORE_NUMERATOR / (elapsed_ms + 1)))


def place_food(body: Sequence[Cell], grid: Grid, rng: random.Random) -> Optional[Cell]:
    """
    Return a random cell not occupied by the body, or None when the board is full.

    Samples at random up to one attempt per grid cell. If every sample hits
    the body, picks from the list of free cells instead, so a free cell is
    always found when one exists.
    """
    occupied = set(body)
    if len(occupied) >= grid.cell_count:
        return None

    for _ in range(grid.cell_count):
        cell = grid.cell_at(rng.randrange(grid.columns), rng.randrange(grid.rows))
        if is_safe(cell, occupied, grid):
            return cell

    free = [cell for cell in grid.cells() if cell not in occupied]
    if not free:
        return None
    return rng.choice(free)


def default_body(grid: Grid) -> Tuple[Cell, ...]:
    """The browser game's starting snake, or a centred one if it does not fit."""
    if all(grid.in_bounds(cell) for cell in INITIAL_BODY):
        return INITIAL_BODY
    head = grid.cell_at(grid.columns // 2, grid.rows // 2)
    return (head, (head[0] - grid.cell_size, head[1]))


def initial_state(
    grid: Grid,
    rng: random.Random,
    body: Optional[Sequence[Cell]] = None,
    food: Optional[Cell] = INITIAL_FOOD,
    now_ms: int = 0,
) -> GameState:
    """
    Build the Idle starting state.

    Raises:
        ValueError: If the body is not a valid snake on this grid
    """
    body = tuple(tuple(cell) for cell in body) if body is not None else default_body(grid)
    validate_body(body, grid)

    food = tuple(food) if food is not None else None
    if food is None or not grid.is_aligned(food) or not is_safe(food, body, grid):
        food = place_food(body, grid, rng)

    return GameState(body=body, food=food, last_food_ms=now_ms, status=IDLE)


def tick(
    state: GameState,
    player: Player,
    grid: Grid,
    now_ms: int,
    rng: random.Random,
) -> TickResult:
    """
    Advance the game by one tick and return the new state.

    Execute one tick:
      1) If the game is Idle, nothing happens
      2) Ask the player for a decision
      3) Trapped: body and food stay put
      4) Move the head; on food, keep the tail, score and relocate the food
      5) Otherwise drop the tail
    The input state is never modified.
    """
    if not state.running:
        return TickResult(state=state, rationale=NOT_RUNNING_RATIONALE)

    decision = player.get_move(state)

    if decision.trapped:
        new_state = replace(state, tick_number=state.tick_number + 1, rationale=decision.rationale)
        return TickResult(state=new_state, rationale=decision.rationale, trapped=True)

    dx, dy = decision.vector
    hx, hy = state.head
    head = (hx + dx, hy + dy)
    new_body = (head,) + state.body

    if head == state.food:
        # grow: keep the tail
        points = compute_points(now_ms - state.last_food_ms)
        food = place_food(new_body, grid, rng)
        new_state = replace(
            state,
            body=new_body,
            food=food,
            score=state.score + points,
            last_food_ms=now_ms,
            tick_number=state.tick_number + 1,
            status=state.status if food is not None else IDLE,
            rationale=decision.rationale,
        )
        return TickResult(
            state=new_state,
            rationale=decision.rationale,
            grew=True,
            points=points,
            grid_full=food is None,
        )

    # normal move: drop the tail
    new_state = replace(
        state,
        body=new_body[:-1],
        tick_number=state.tick_number + 1,
        rationale=decision.rationale,
    )
    return TickResult(state=new_state, rationale=decision.rationale)


# -------------------------------
# Game driver
# -------------------------------

class SnakeGame:
    """
    Manages:
      - The single current GameState
      - The player that steers the snake
      - Idle/Running gating
      - Growth listeners (sound cues and the like)
      - History for replay
    """

    def __init__(
        self,
        grid: Grid,
        player: Player,
        rng: Optional[random.Random] = None,
        clock: Clock = monotonic_ms,
        tick_ms: int = 100,
        game_id: Optional[str] = None,
        body: Optional[Sequence[Cell]] = None,
        food: Optional[Cell] = INITIAL_FOOD,
    ):
        self.grid = grid
        self.player = player
        self.rng = rng or random.Random()
        self.clock = clock
        self.tick_ms = tick_ms
        self.game_id = game_id or str(uuid.uuid4())
        self.start_time = time.time()
        self._initial_body = body
        self._initial_food = food

        self.state = initial_state(grid, self.rng, body=body, food=food, now_ms=self.clock())
        self.history: List[GameState] = [self.state]
        self.last_result: Optional[TickResult] = None
        self.outcome: Optional[str] = None
        self._growth_listeners: List[GrowthListener] = []

        logger.info(f"Game {self.game_id} created on {grid.columns}x{grid.rows} cells")

    @property
    def running(self) -> bool:
        return self.state.running

    def add_growth_listener(self, listener: GrowthListener) -> None:
        self._growth_listeners.append(listener)

    def start(self) -> GameState:
        if self.state.running:
            return self.state
        if self.state.food is None:
            logger.info(f"Game {self.game_id} cannot start: the board is full")
            return self.state
        updates = {"status": RUNNING}
        if self.state.tick_number == 0:
            updates["last_food_ms"] = self.clock()
        self.state = replace(self.state, **updates)
        self.outcome = None
        logger.info(f"Game {self.game_id} started")
        return self.state

    def stop(self) -> GameState:
        if self.state.running:
            self.state = self.state.with_status(IDLE)
            logger.info(f"Game {self.game_id} stopped at tick {self.state.tick_number}")
        return self.state

    def reset(self) -> GameState:
        self.state = initial_state(
            self.grid, self.rng, body=self._initial_body, food=self._initial_food, now_ms=self.clock()
        )
        self.history = [self.state]
        self.last_result = None
        self.outcome = None
        logger.info(f"Game {self.game_id} reset")
        return self.state

    def step(self) -> TickResult:
        """Run one tick against the current state and commit the result."""
        result = tick(self.state, self.player, self.grid, self.clock(), self.rng)
        if result.state is self.state:
            return result

        self.state = result.state
        self.last_result = result
        self.history.append(result.state)

        if result.trapped:
            logger.info(f"Game {self.game_id}: snake is trapped at {self.state.head}")
        if result.grew:
            logger.info(
                f"Game {self.game_id}: ate food for {result.points} points "
                f"(score {self.state.score}, length {len(self.state.body)})"
            )
            self._notify_growth(result)
        if result.grid_full:
            self.outcome = "grid_full"
            logger.info(f"Game {self.game_id}: the snake fills the board. Game won.")
        return result

    def _notify_growth(self, result: TickResult) -> None:
        for listener in self._growth_listeners:
            try:
                listener(result)
            except Exception as e:
                logger.error(f"Growth listener {listener!r} failed: {e}")

    def run(
        self,
        max_ticks: Optional[int] = None,
        realtime: bool = True,
        max_trapped_ticks: int = 1,
        on_tick: Optional[Callable[[TickResult], None]] = None,
    ) -> Optional[str]:
        """
        Tick until the game stops, the board fills, the snake stays trapped
        for max_trapped_ticks ticks in a row, or max_ticks ticks have run.

        Returns:
            The outcome: 'grid_full', 'trapped', 'max_ticks' or 'stopped'.

        Raises:
            ValueError: If max_trapped_ticks is less than 1
        """
        if max_trapped_ticks < 1:
            raise ValueError(f"max_trapped_ticks must be at least 1, got {max_trapped_ticks}")

        self.start()
        ticks = 0
        trapped_in_a_row = 0

        while self.running:
            if max_ticks is not None and ticks >= max_ticks:
                self.outcome = "max_ticks"
                break

            result = self.step()
            ticks += 1
            if on_tick is not None:
                on_tick(result)

            trapped_in_a_row = trapped_in_a_row + 1 if result.trapped else 0
            if trapped_in_a_row >= max_trapped_ticks:
                self.outcome = "trapped"
                break

            if realtime and self.running:
                time.sleep(self.tick_ms / 1000)

        if self.outcome is None:
            self.outcome = "stopped"
        self.stop()
        return self.outcome

    def print_board(self):
        """
        Prints a visual representation of the current board state.
        """
        print("\n" + self.state.print_board(self.grid) + "\n")

    def serialize_history(self) -> List[Dict]:
        """
        Convert the list of GameState objects to a JSON-serializable list of dicts.
        """
        return [state.to_dict() for state in self.history]

    def save_history_to_json(self, filename: Optional[str] = None, directory: str = "completed_games") -> str:
        if filename is None:
            filename = f"snake_game_{self.game_id}.json"

        metadata = {
            "game_id": self.game_id,
            "start_time": datetime.fromtimestamp(self.start_time, tz=timezone.utc).isoformat(),
            "end_time": datetime.now(timezone.utc).isoformat(),
            "player": self.player.__class__.__name__,
            "grid": {
                "width": self.grid.width,
                "height": self.grid.height,
                "cell_size": self.grid.cell_size,
            },
            "outcome": self.outcome,
            "final_score": self.state.score,
            "final_length": len(self.state.body),
            "actual_ticks": self.state.tick_number,
        }

        data = {
            "metadata": metadata,
            "rounds": self.serialize_history(),
        }

        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, filename)
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Saved replay for game {self.game_id} to {path}")
        return path


def build_game(config: GameConfig, clock: Clock = monotonic_ms, game_id: Optional[str] = None) -> SnakeGame:
    """Wire a SnakeGame from configuration."""
    grid = config.grid
    rng = random.Random(config.seed)
    player = create_player(config.player, grid, rng=rng)
    return SnakeGame(grid, player, rng=rng, clock=clock, tick_ms=config.tick_ms, game_id=game_id)


# -------------------------------
# Simulation Function
# -------------------------------

def run_simulation(
    config: GameConfig,
    max_ticks: Optional[int] = 1000,
    realtime: bool = False,
    save_replay: bool = False,
    verbose: bool = False,
) -> Dict:
    """
    Runs a single self-driving snake game.

    Args:
        config: board, timing, seed and player settings
        max_ticks: stop after this many ticks (None for no limit)
        realtime: sleep tick_ms between ticks like the browser timer
        save_replay: write a replay JSON under completed_games/
        verbose: print the board after every tick

    Returns:
        A dictionary summarizing the game (game_id, outcome, score, length, ticks).
    """
    game = build_game(config)

    on_tick = None
    if verbose:
        game.add_growth_listener(lambda result: print(f"*munch* +{result.points} points"))

        def print_tick(result: TickResult) -> None:
            game.print_board()
            print(result.rationale)

        on_tick = print_tick

    game.run(max_ticks=max_ticks, realtime=realtime, on_tick=on_tick)

    replay_path = game.save_history_to_json() if save_replay else None

    return {
        "game_id": game.game_id,
        "outcome": game.outcome,
        "score": game.state.score,
        "length": len(game.state.body),
        "ticks": game.state.tick_number,
        "replay_path": replay_path,
    }


# -------------------------------
# Main Entry Point
# -------------------------------
def main(argv: Optional[Sequence[str]] = None):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    defaults = load_config()

    parser = argparse.ArgumentParser(
        description="Run the self-driving snake without a browser."
    )
    parser.add_argument("--width", type=int, default=defaults.grid_width,
                        help="Board width in pixels")
    parser.add_argument("--height", type=int, default=defaults.grid_height,
                        help="Board height in pixels")
    parser.add_argument("--cell_size", type=int, default=defaults.cell_size,
                        help="Cell size in pixels")
    parser.add_argument("--tick_ms", type=int, default=defaults.tick_ms,
                        help="Tick period in milliseconds (used with --realtime)")
    parser.add_argument("--max_ticks", type=int, default=1000,
                        help="Maximum number of ticks")
    parser.add_argument("--seed", type=int, default=defaults.seed,
                        help="Random seed for food placement")
    parser.add_argument("--player", type=str, default=defaults.player,
                        help="Player variant (pathfinding, random)")
    parser.add_argument("--realtime", action="store_true",
                        help="Sleep between ticks like the browser timer")
    parser.add_argument("--save_replay", action="store_true",
                        help="Write a replay JSON to completed_games/")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Print the board every tick")

    args = parser.parse_args(argv)

    try:
        config = GameConfig(
            grid_width=args.width,
            grid_height=args.height,
            cell_size=args.cell_size,
            tick_ms=args.tick_ms,
            seed=args.seed,
            player=args.player,
            allowed_origins=defaults.allowed_origins,
        )
    except ValueError as e:
        parser.error(str(e))

    result = run_simulation(
        config,
        max_ticks=args.max_ticks,
        realtime=args.realtime,
        save_replay=args.save_replay,
        verbose=args.verbose,
    )

    print("\nSimulation Result Summary:")
    print(json.dumps(result, indent=2))
    return result


if __name__ == "__main__":
    main()
