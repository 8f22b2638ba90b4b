import os
import logging
import threading

from flask import Flask, jsonify, request
from flask_cors import CORS

from config import GameConfig, load_config
from main import SnakeGame, build_game
from players import list_variants, AVAILABLE_VARIANTS

config = load_config()

app = Flask(__name__)
logging.basicConfig(level=logging.INFO)

# Enable CORS for API routes so the browser renderer (different origin) can call Flask
CORS(app, resources={r"/api/*": {"origins": config.allowed_origins}})

# One game per process; the lock keeps every tick atomic for readers
_game_lock = threading.Lock()
game: SnakeGame = build_game(config)


def _replace_game(new_config: GameConfig) -> SnakeGame:
    """Swap in a fresh game built from new_config. Caller holds _game_lock."""
    global game, config
    config = new_config
    game = build_game(new_config)
    return game


def init_game(new_config: GameConfig) -> SnakeGame:
    """Replace the running game with a fresh one built from new_config."""
    with _game_lock:
        return _replace_game(new_config)


def _snapshot():
    return {
        "game_id": game.game_id,
        "grid": {
            "width": game.grid.width,
            "height": game.grid.height,
            "cell_size": game.grid.cell_size,
        },
        "tick_ms": game.tick_ms,
        "player": game.player.__class__.__name__,
        "outcome": game.outcome,
        "state": game.state.to_dict(),
    }


@app.route("/api/game", methods=["GET"])
def get_game():
    """
    Get the current game snapshot for the renderer.

    Returns grid dimensions, tick period and the committed state.
    """
    try:
        with _game_lock:
            return jsonify(_snapshot())
    except Exception as error:
        logging.error(f"Error fetching game state: {error}")
        return jsonify({"error": "Failed to load game state"}), 500


@app.route("/api/game/start", methods=["POST"])
def start_game():
    try:
        with _game_lock:
            game.start()
            if not game.running:
                return jsonify({"error": "Game cannot start: the board is full"}), 409
            return jsonify(_snapshot())
    except Exception as error:
        logging.error(f"Error starting game: {error}")
        return jsonify({"error": "Failed to start game"}), 500


@app.route("/api/game/stop", methods=["POST"])
def stop_game():
    try:
        with _game_lock:
            game.stop()
            return jsonify(_snapshot())
    except Exception as error:
        logging.error(f"Error stopping game: {error}")
        return jsonify({"error": "Failed to stop game"}), 500


@app.route("/api/game/tick", methods=["POST"])
def tick_game():
    """
    Advance the game by one tick.

    The browser's timer calls this every tick_ms while the game is running.
    Returns the tick result (state, rationale, grew, points, trapped, grid_full).
    """
    try:
        with _game_lock:
            if not game.running:
                return jsonify({"error": "Game is not running"}), 409
            result = game.step()
            return jsonify(result.to_dict())
    except Exception as error:
        logging.error(f"Error advancing game: {error}")
        return jsonify({"error": "Failed to advance game"}), 500


@app.route("/api/game/reset", methods=["POST"])
def reset_game():
    """
    Start over from the initial layout.

    Optional JSON body:
    - player: switch to another player variant
    - seed: reseed food placement
    """
    payload = request.get_json(silent=True) or {}
    player = payload.get("player")
    seed = payload.get("seed")

    if player is not None:
        if not isinstance(player, str) or player.strip().lower() not in AVAILABLE_VARIANTS:
            return jsonify({"error": f"Unknown player '{player}'"}), 400
        player = player.strip().lower()
    # bool is an int subclass; JSON true/false is not a seed
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        return jsonify({"error": "seed must be an integer"}), 400

    try:
        with _game_lock:
            if player is None and seed is None:
                game.reset()
            else:
                _replace_game(GameConfig(
                    grid_width=config.grid_width,
                    grid_height=config.grid_height,
                    cell_size=config.cell_size,
                    tick_ms=config.tick_ms,
                    seed=seed if seed is not None else config.seed,
                    player=player or config.player,
                    allowed_origins=config.allowed_origins,
                ))
            return jsonify(_snapshot())
    except Exception as error:
        logging.error(f"Error resetting game: {error}")
        return jsonify({"error": "Failed to reset game"}), 500


@app.route("/api/players", methods=["GET"])
def get_players():
    with _game_lock:
        current = config.player
    return jsonify({"players": list_variants(), "current": current})


if __name__ == "__main__":
    # Run the Flask app in debug mode.
    app.run(debug=os.getenv("FLASK_DEBUG"))
