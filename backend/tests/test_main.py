"""
Tests for main.py - tick transition, food placement, scoring and the driver.
"""

import json
import os
import random
import sys
from unittest.mock import Mock

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import GameConfig  # noqa: E402
from domain.constants import IDLE, INITIAL_BODY, INITIAL_FOOD, RUNNING  # noqa: E402
from domain.game_state import GameState  # noqa: E402
from domain.grid import Grid, is_safe, validate_body  # noqa: E402
from main import (  # noqa: E402
    NOT_RUNNING_RATIONALE,
    SnakeGame,
    build_game,
    compute_points,
    initial_state,
    main,
    place_food,
    run_simulation,
    tick,
)
from players import PathfindingPlayer  # noqa: E402

GRID = Grid()
SMALL = Grid(60, 60, 20)

CORNER_TRAP = ((0, 0), (20, 0), (20, 20), (0, 20), (0, 40))

# Eight cells of a 3x3 board; the head is next to the only free cell (40, 40)
ALMOST_FULL = ((20, 40), (0, 40), (0, 20), (20, 20), (40, 20), (40, 0), (20, 0), (0, 0))


class FakeClock:
    """Returns a fixed millisecond reading that tests can move forward."""

    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


class StuckRandom(random.Random):
    """Always samples the top-left cell."""

    def randrange(self, *args, **kwargs):
        return 0


def running_state(body, food, last_food_ms=0):
    return GameState(body=tuple(body), food=food, last_food_ms=last_food_ms, status=RUNNING)


class TestComputePoints:
    """Tests for the time-decayed score bonus."""

    @pytest.mark.parametrize("elapsed, expected", [
        (0, 10000),
        (99, 100),
        (999, 10),
        (5000, 10),
    ])
    def test_values(self, elapsed, expected):
        assert compute_points(elapsed) == expected

    def test_faster_meals_never_score_less(self):
        elapsed = [0, 1, 10, 50, 99, 100, 500, 999, 1000, 10_000, 1_000_000]
        points = [compute_points(e) for e in elapsed]
        assert points == sorted(points, reverse=True)
        assert min(points) >= 10

    def test_negative_elapsed_clamped(self):
        assert compute_points(-50) == compute_points(0)


class TestPlaceFood:
    """Tests for bounded food relocation."""

    def test_food_is_always_safe(self):
        rng = random.Random(42)
        body = [(160, 160), (140, 160), (120, 160)]
        for _ in range(200):
            food = place_food(body, GRID, rng)
            assert is_safe(food, body, GRID)
            assert food[0] % 20 == 0 and food[1] % 20 == 0

    def test_full_grid_returns_none(self):
        body = ALMOST_FULL + ((40, 40),)
        assert place_food(body, SMALL, random.Random(0)) is None

    def test_last_free_cell_found(self):
        assert place_food(ALMOST_FULL, SMALL, random.Random(0)) == (40, 40)

    def test_falls_back_when_sampling_keeps_missing(self):
        """Sampling that only ever hits the body still ends with a free cell."""
        assert place_food(ALMOST_FULL, SMALL, StuckRandom()) == (40, 40)


class TestInitialState:
    """Tests for the starting layout."""

    def test_browser_layout_on_default_grid(self):
        state = initial_state(GRID, random.Random(0))
        assert state.body == INITIAL_BODY
        assert state.food == INITIAL_FOOD
        assert state.status == IDLE
        assert state.score == 0
        assert state.tick_number == 0

    def test_small_grid_gets_centred_snake_and_random_food(self):
        state = initial_state(SMALL, random.Random(0))
        assert state.body == ((20, 20), (0, 20))
        assert is_safe(state.food, state.body, SMALL)

    def test_food_on_body_is_relocated(self):
        state = initial_state(GRID, random.Random(0), food=(160, 160))
        assert state.food != (160, 160)
        assert is_safe(state.food, state.body, GRID)

    def test_off_grid_food_is_relocated(self):
        """Food between cells can never be reached, so it is moved onto the grid."""
        state = initial_state(GRID, random.Random(0), food=(305, 300))
        assert state.food != (305, 300)
        assert GRID.is_aligned(state.food)
        assert is_safe(state.food, state.body, GRID)

    def test_invalid_body_rejected(self):
        with pytest.raises(ValueError):
            initial_state(GRID, random.Random(0), body=[(160, 160), (100, 160)])


class TestTick:
    """Tests for the pure tick transition."""

    def test_idle_state_is_not_advanced(self):
        state = GameState(body=INITIAL_BODY, food=INITIAL_FOOD)
        result = tick(state, PathfindingPlayer(GRID), GRID, 500, random.Random(0))
        assert result.state is state
        assert result.rationale == NOT_RUNNING_RATIONALE
        assert result.grew is False

    def test_eating_food_grows_and_scores(self):
        """Food straight ahead: the head moves onto it and the tail stays."""
        state = running_state(INITIAL_BODY, (180, 160))
        result = tick(state, PathfindingPlayer(GRID), GRID, 99, random.Random(0))

        new = result.state
        assert result.grew is True
        assert result.points == 100
        assert new.body == ((180, 160), (160, 160), (140, 160))
        assert new.score == 100
        assert new.last_food_ms == 99
        assert new.tick_number == 1
        assert new.status == RUNNING
        assert is_safe(new.food, new.body, GRID)

    def test_plain_move_shifts_tail(self):
        state = running_state(INITIAL_BODY, (300, 300))
        result = tick(state, PathfindingPlayer(GRID), GRID, 99, random.Random(0))

        assert result.grew is False
        assert result.points == 0
        assert len(result.state.body) == len(state.body)
        assert result.state.body == ((180, 160), (160, 160))
        assert result.state.food == (300, 300)
        assert result.state.last_food_ms == 0

    def test_trapped_tick_leaves_body_and_food(self):
        state = running_state(CORNER_TRAP, (300, 300))
        result = tick(state, PathfindingPlayer(GRID), GRID, 99, random.Random(0))

        assert result.trapped is True
        assert result.state.body == state.body
        assert result.state.food == state.food
        assert result.state.score == state.score
        assert result.state.tick_number == 1
        assert "Trapped" in result.rationale

    def test_filling_the_board_signals_grid_full(self):
        state = running_state(ALMOST_FULL, (40, 40))
        result = tick(state, PathfindingPlayer(SMALL), SMALL, 10, random.Random(0))

        assert result.grew is True
        assert result.grid_full is True
        assert result.state.food is None
        assert result.state.status == IDLE
        assert len(result.state.body) == SMALL.cell_count

    def test_input_state_untouched(self):
        state = running_state(INITIAL_BODY, (180, 160))
        before = GameState(**{f: getattr(state, f) for f in state.__dataclass_fields__})
        tick(state, PathfindingPlayer(GRID), GRID, 99, random.Random(0))
        assert state == before
        assert state.body == INITIAL_BODY


class TestSnakeGame:
    """Tests for the SnakeGame driver."""

    def make_game(self, grid=GRID, clock=None, **kwargs):
        return SnakeGame(
            grid,
            PathfindingPlayer(grid),
            rng=random.Random(5),
            clock=clock or FakeClock(),
            **kwargs,
        )

    def test_starts_idle(self):
        game = self.make_game()
        assert game.running is False
        assert game.state.status == IDLE
        assert len(game.history) == 1

    def test_step_while_idle_does_nothing(self):
        game = self.make_game()
        result = game.step()
        assert result.rationale == NOT_RUNNING_RATIONALE
        assert len(game.history) == 1

    def test_start_stop(self):
        clock = FakeClock(1000)
        game = self.make_game(clock=clock)
        clock.now = 2500
        game.start()
        assert game.running is True
        assert game.state.last_food_ms == 2500

        game.stop()
        assert game.running is False
        assert game.state.status == IDLE

    def test_step_commits_state_and_history(self):
        game = self.make_game()
        game.start()
        result = game.step()
        assert game.state is result.state
        assert game.last_result is result
        assert game.history[-1] is result.state
        assert game.state.tick_number == 1

    def test_growth_listener_notified(self):
        clock = FakeClock(0)
        game = self.make_game(clock=clock, food=(180, 160))
        listener = Mock()
        game.add_growth_listener(listener)
        game.start()
        clock.now = 1999

        result = game.step()

        listener.assert_called_once_with(result)
        assert result.points == 10
        assert game.state.score == 10

    def test_failing_listener_does_not_stop_game(self):
        game = self.make_game(food=(180, 160))
        game.add_growth_listener(Mock(side_effect=RuntimeError("no audio device")))
        game.start()

        result = game.step()
        assert result.grew is True
        assert game.running is True

    def test_run_until_board_full(self):
        game = self.make_game(grid=SMALL, body=ALMOST_FULL, food=(40, 40))
        outcome = game.run(realtime=False)

        assert outcome == "grid_full"
        assert game.state.food is None
        assert len(game.state.body) == SMALL.cell_count
        assert game.running is False

    def test_run_stops_when_trapped(self):
        game = self.make_game(body=CORNER_TRAP)
        outcome = game.run(realtime=False)

        assert outcome == "trapped"
        assert game.state.body == CORNER_TRAP
        assert game.running is False

    def test_run_tolerates_several_trapped_ticks(self):
        game = self.make_game(body=CORNER_TRAP)
        ticks = []
        outcome = game.run(realtime=False, max_trapped_ticks=3, on_tick=ticks.append)

        assert outcome == "trapped"
        assert game.state.tick_number == 3
        assert game.state.body == CORNER_TRAP
        assert all(result.trapped for result in ticks)
        assert len(ticks) == 3

    @pytest.mark.parametrize("limit", [0, -1])
    def test_run_rejects_non_positive_trapped_limit(self, limit):
        game = self.make_game()
        with pytest.raises(ValueError, match="max_trapped_ticks"):
            game.run(realtime=False, max_trapped_ticks=limit)
        assert game.running is False
        assert game.state.tick_number == 0

    def test_off_grid_food_is_eaten_after_relocation(self):
        game = self.make_game(food=(305, 300))
        game.run(max_ticks=200, realtime=False)
        assert game.state.score > 0
        assert len(game.state.body) > 2

    def test_run_respects_max_ticks(self):
        game = self.make_game()
        ticks = []
        outcome = game.run(max_ticks=5, realtime=False, on_tick=ticks.append)

        assert outcome == "max_ticks"
        assert game.state.tick_number == 5
        assert len(ticks) == 5

    def test_long_run_never_collides(self):
        """Every committed body stays on the board without overlapping itself."""
        game = self.make_game()
        game.run(max_ticks=400, realtime=False)

        for state in game.history:
            validate_body(state.body, GRID)
            if state.food is not None:
                assert state.food not in state.body
        assert len(game.state.body) > 2

    def test_reset(self):
        game = self.make_game()
        game.run(max_ticks=3, realtime=False)
        state = game.reset()

        assert state.body == INITIAL_BODY
        assert state.tick_number == 0
        assert game.history == [state]
        assert game.outcome is None

    def test_save_history_to_json(self, tmp_path):
        game = self.make_game(game_id="test-game")
        game.run(max_ticks=4, realtime=False)
        path = game.save_history_to_json(directory=str(tmp_path))

        with open(path) as f:
            data = json.load(f)

        assert os.path.basename(path) == "snake_game_test-game.json"
        assert data["metadata"]["game_id"] == "test-game"
        assert data["metadata"]["outcome"] == "max_ticks"
        assert data["metadata"]["player"] == "PathfindingPlayer"
        assert data["metadata"]["actual_ticks"] == 4
        assert len(data["rounds"]) == len(game.history)
        assert data["rounds"][0]["body"] == [[160, 160], [140, 160]]


class TestSimulation:
    """Tests for build_game, run_simulation and the CLI entry point."""

    def test_build_game_uses_config(self):
        game = build_game(GameConfig(grid_width=200, grid_height=100, seed=3, player="random"))
        assert game.grid == Grid(200, 100, 20)
        assert game.player.__class__.__name__ == "RandomPlayer"

    def test_seeded_runs_are_reproducible(self):
        config = GameConfig(seed=9)
        first = run_simulation(config, max_ticks=200)
        second = run_simulation(config, max_ticks=200)

        assert first["length"] == second["length"]
        assert first["ticks"] == second["ticks"]
        assert first["replay_path"] is None

    def test_save_replay(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = run_simulation(GameConfig(seed=1), max_ticks=10, save_replay=True)
        assert os.path.exists(tmp_path / result["replay_path"])

    def test_verbose_prints_board(self, capsys):
        run_simulation(GameConfig(seed=1), max_ticks=2, verbose=True)
        out = capsys.readouterr().out
        assert "H" in out
        assert "Moving" in out

    def test_main_cli(self, monkeypatch, capsys):
        for name in ("SNAKE_GRID_WIDTH", "SNAKE_GRID_HEIGHT", "SNAKE_CELL_SIZE",
                     "SNAKE_TICK_MS", "SNAKE_SEED", "SNAKE_PLAYER"):
            monkeypatch.delenv(name, raising=False)
        result = main(["--max_ticks", "3", "--seed", "2", "--width", "200", "--height", "200"])

        assert result["ticks"] == 3
        assert result["outcome"] == "max_ticks"
        assert "Simulation Result Summary" in capsys.readouterr().out

    def test_main_cli_rejects_bad_board(self, monkeypatch, capsys):
        """A board that is not a multiple of the cell size is a usage error."""
        for name in ("SNAKE_GRID_WIDTH", "SNAKE_GRID_HEIGHT", "SNAKE_CELL_SIZE",
                     "SNAKE_TICK_MS", "SNAKE_SEED", "SNAKE_PLAYER"):
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(SystemExit) as exc_info:
            main(["--width", "410"])

        assert exc_info.value.code == 2
        assert "not a multiple of cell size" in capsys.readouterr().err
