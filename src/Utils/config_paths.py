"""
config_paths.py
Central helpers for resolving config locations.

Follows the XDG Base Directory Specification:
  Config lives in $XDG_CONFIG_HOME/ParallaxGen  (default: ~/.config/ParallaxGen)

The bundled default rule set ships inside the program at Utils/cfg/default.json
and is never written to.
"""

import os
from pathlib import Path

APP_NAME = "ParallaxGen"

_DEFAULT_CONFIG = Path(__file__).resolve().parent / "cfg" / "default.json"


def get_config_dir() -> Path:
    """Return the app config directory, creating it if it doesn't exist.

    Respects $XDG_CONFIG_HOME; falls back to ~/.config/ParallaxGen.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    config_dir = base / APP_NAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_game_config_path(game_name: str) -> Path:
    """Return the paths.json path for a given game, creating parent dirs as needed.

    Result: ~/.config/ParallaxGen/games/<game_name>/paths.json
    """
    path = get_config_dir() / "games" / game_name / "paths.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def get_log_path() -> Path:
    """Return the default log file location.

    Result: ~/.config/ParallaxGen/logs/parallaxgen.log
    """
    path = get_config_dir() / "logs" / "parallaxgen.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def get_default_config_path() -> Path:
    """Return the bundled default.json rule set.

    $PARALLAXGEN_DEFAULT_CONFIG points at a replacement file when set.
    """
    env = os.environ.get("PARALLAXGEN_DEFAULT_CONFIG")
    if env:
        return Path(env)
    return _DEFAULT_CONFIG
