"""
heroic_finder.py
Utilities for locating game installations managed by Heroic Games Launcher.

Heroic covers the Epic (Legendary) and GOG (heroic-gogdl) releases of a game.
It can be installed as a Flatpak (most common on Steam Deck) or natively.

No game-specific knowledge: callers pass the store identifiers.
"""

from __future__ import annotations

import json
from pathlib import Path

_HOME = Path.home()

_HEROIC_CONFIG_CANDIDATES: list[Path] = [
    _HOME / ".var" / "app" / "com.heroicgameslauncher.hgl" / "config" / "heroic",  # Flatpak
    _HOME / ".config" / "heroic",  # Native / AppImage
]


def _find_heroic_config_roots() -> list[Path]:
    """Return all Heroic config directories that exist on disk."""
    return [p for p in _HEROIC_CONFIG_CANDIDATES if p.is_dir()]


def _load_json(path: Path):
    """Parse a Heroic JSON file; None if it is missing or unreadable."""
    if not path.is_file():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8", errors="replace"))
    except (OSError, json.JSONDecodeError):
        return None


def _existing_dir(raw) -> Path | None:
    if not raw:
        return None
    p = Path(str(raw))
    return p if p.is_dir() else None


def _find_epic_game(heroic_root: Path, app_names: list[str]) -> Path | None:
    """Look the game up in legendaryConfig/legendary/installed.json."""
    installed = _load_json(heroic_root / "legendaryConfig" / "legendary" / "installed.json")
    if not isinstance(installed, dict):
        return None
    for app_name in app_names:
        entry = installed.get(app_name)
        if isinstance(entry, dict):
            found = _existing_dir(entry.get("install_path"))
            if found:
                return found
    return None


def _find_gog_game(heroic_root: Path, app_names: list[str]) -> Path | None:
    """
    Look the game up in store_cache/gog_library.json by product ID or title.

    The is_installed field in this file is unreliable; the install_path is
    checked on disk instead.
    """
    data = _load_json(heroic_root / "store_cache" / "gog_library.json")
    if isinstance(data, dict):
        data = data.get("games", [])
    if not isinstance(data, list):
        return None
    wanted = {n.lower() for n in app_names}
    for entry in data:
        if not isinstance(entry, dict):
            continue
        entry_id = str(entry.get("app_name") or entry.get("appName") or "").lower()
        entry_title = str(entry.get("title") or "").lower()
        if entry_id in wanted or entry_title in wanted:
            found = _existing_dir(entry.get("install_path"))
            if found:
                return found
    return None


def _find_prefix_for_app(heroic_root: Path, app_name: str) -> Path | None:
    """
    Resolve the Wine prefix Heroic uses for one game: the per-game
    GamesConfig/<appName>.json, then the global defaultWinePrefix, then
    ~/Games/Heroic/Prefixes/<appName>.
    """
    game_cfg = _load_json(heroic_root / "GamesConfig" / f"{app_name}.json")
    if isinstance(game_cfg, dict):
        settings = game_cfg.get(app_name, game_cfg)
        if isinstance(settings, dict):
            found = _existing_dir(settings.get("winePrefix"))
            if found:
                return found

    global_cfg = _load_json(heroic_root / "config.json")
    if isinstance(global_cfg, dict):
        settings = global_cfg.get("defaultSettings", global_cfg)
        if isinstance(settings, dict) and settings.get("defaultWinePrefix"):
            found = _existing_dir(Path(settings["defaultWinePrefix"]) / app_name)
            if found:
                return found

    return _existing_dir(_HOME / "Games" / "Heroic" / "Prefixes" / app_name)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def find_heroic_game(app_names: list[str]) -> Path | None:
    """
    Search every Heroic config root for a game matching any of app_names
    (Epic appName, GOG product ID or GOG title).  Epic is checked before GOG.
    """
    if not app_names:
        return None
    for heroic_root in _find_heroic_config_roots():
        result = _find_epic_game(heroic_root, app_names) or _find_gog_game(heroic_root, app_names)
        if result:
            return result
    return None


def find_heroic_prefix(app_names: list[str]) -> Path | None:
    """Return the Wine prefix of the first of app_names Heroic knows about."""
    for heroic_root in _find_heroic_config_roots():
        for app_name in app_names:
            result = _find_prefix_for_app(heroic_root, app_name)
            if result:
                return result
    return None
