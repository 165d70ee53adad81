"""
game_loader.py
Auto-discovers game handler classes from the Games/ directory.

Any .py file in Games/<GameFolder>/ that contains a subclass of BaseGame is
automatically registered.  A broken handler is logged and skipped so one bad
file doesn't take the rest down.

Uses spec_from_file_location so folder names with spaces (e.g. "Skyrim VR")
work without needing a valid dotted module path.

Usage:
    from Utils.game_loader import get_game
    sse = get_game(GameType.SKYRIM_SE)
"""

import importlib.util
import inspect
import logging
import sys
from pathlib import Path

from Games.base_game import BaseGame, GameType

log = logging.getLogger(__name__)

_GAMES_DIR = Path(__file__).resolve().parent.parent / "Games"

_games_cache: dict[GameType, BaseGame] | None = None


def discover_games(games_dir: Path | None = None) -> dict[GameType, BaseGame]:
    """
    Scan Games/<GameFolder>/*.py, load each module from its file path, find
    BaseGame subclasses, instantiate them, and return {game.game_type: instance}.
    """
    games: dict[GameType, BaseGame] = {}
    games_dir = games_dir or _GAMES_DIR
    for py_file in sorted(games_dir.glob("*/*.py")):
        module_name = f"Games._loaded_{py_file.stem}"
        try:
            spec = importlib.util.spec_from_file_location(module_name, str(py_file))
            if spec is None or spec.loader is None:
                continue
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)
        except Exception as exc:
            log.warning("Skipping game handler %s: %s", py_file, exc)
            continue
        for _, cls in inspect.getmembers(module, inspect.isclass):
            if cls is BaseGame or not issubclass(cls, BaseGame) or inspect.isabstract(cls):
                continue
            if cls.__module__ != module_name:
                continue
            instance = cls()
            games[instance.game_type] = instance
    return games


def get_game(game_type: GameType) -> BaseGame:
    """Return the handler registered for game_type.

    Raises KeyError if no handler in Games/ serves it.
    """
    global _games_cache
    if _games_cache is None:
        _games_cache = discover_games()
    try:
        return _games_cache[game_type]
    except KeyError:
        raise KeyError(f"No game handler registered for {game_type.value}") from None
