"""
steam_finder.py
Utilities for locating Steam game installations across all configured library paths.
No game-specific knowledge: callers pass the Steam App ID and executable name.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

# ---------------------------------------------------------------------------
# Known Steam base directories for different install methods
# ---------------------------------------------------------------------------
_HOME = Path.home()

_STEAM_CANDIDATES: list[Path] = [
    _HOME / ".local" / "share" / "Steam",                                          # Standard
    _HOME / ".var" / "app" / "com.valvesoftware.Steam" / ".local" / "share" / "Steam",  # Flatpak
    _HOME / "snap" / "steam" / "common" / ".local" / "share" / "Steam",            # Snap
    _HOME / ".steam" / "steam",                                                     # Symlink fallback
    Path(os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)")) / "Steam",  # Windows
]

_VDF_FILENAME = "libraryfolders.vdf"
_PATH_RE = re.compile(r'"path"\s+"([^"]+)"')
_INSTALLDIR_RE = re.compile(r'"installdir"\s+"([^"]+)"')


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def find_steam_libraries() -> list[Path]:
    """
    Parse libraryfolders.vdf from all known Steam install locations.
    Returns a deduplicated list of existing library roots (the folders that
    contain steamapps/).
    """
    seen: set[Path] = set()
    libraries: list[Path] = []

    for steam_root in _STEAM_CANDIDATES:
        vdf_path = steam_root / "steamapps" / _VDF_FILENAME
        if not vdf_path.is_file():
            continue
        for library in parse_vdf_libraries(vdf_path):
            resolved = library.resolve()
            if resolved not in seen:
                seen.add(resolved)
                libraries.append(library)

    return libraries


def parse_vdf_libraries(vdf_path: Path) -> list[Path]:
    """
    Return every library root named in a libraryfolders.vdf that has a
    steamapps/ folder on disk.

    The VDF format contains lines like:
        "path"    "C:\\\\Program Files (x86)\\\\Steam"
    Backslashes are escaped inside VDF strings.
    """
    try:
        text = vdf_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return []

    libraries: list[Path] = []
    for match in _PATH_RE.finditer(text):
        root = Path(match.group(1).replace("\\\\", "\\"))
        if (root / "steamapps").is_dir():
            libraries.append(root)
    return libraries


def read_app_install_dir(library: Path, steam_id: str) -> Path | None:
    """
    Read steamapps/appmanifest_<steam_id>.acf in a library and return the
    game's install directory if the manifest exists and the folder is on disk.
    """
    manifest = library / "steamapps" / f"appmanifest_{steam_id}.acf"
    if not manifest.is_file():
        return None
    try:
        text = manifest.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    match = _INSTALLDIR_RE.search(text)
    if match is None:
        return None
    game_dir = library / "steamapps" / "common" / match.group(1)
    return game_dir if game_dir.is_dir() else None


def find_game_in_libraries(libraries: list[Path], exe_name: str) -> Path | None:
    """
    Search each library's steamapps/common/* subfolder for exe_name.
    Checks one level deep: <library>/steamapps/common/<GameFolder>/<exe_name>
    Returns the game root directory (the <GameFolder>) or None if not found.

    The search is case-insensitive on the exe name to handle Linux/Proton layouts.
    """
    exe_lower = exe_name.lower()

    for library in libraries:
        common = library / "steamapps" / "common"
        try:
            for game_dir in common.iterdir():
                if not game_dir.is_dir():
                    continue
                for entry in game_dir.iterdir():
                    if entry.name.lower() == exe_lower and entry.is_file():
                        return game_dir
        except OSError:
            continue

    return None


def find_steam_game(steam_id: str, exe_name: str) -> Path | None:
    """
    Locate a Steam game: app manifests first (authoritative), then a scan of
    every library for the game's executable.
    """
    libraries = find_steam_libraries()
    if steam_id:
        for library in libraries:
            game_dir = read_app_install_dir(library, steam_id)
            if game_dir is not None:
                return game_dir
    if exe_name:
        return find_game_in_libraries(libraries, exe_name)
    return None


def find_prefix(steam_id: str) -> Path | None:
    """
    Locate the Steam compatibility prefix directory for a given App ID.

    Steam stores per-game Proton prefixes under:
        <steam_root>/steamapps/compatdata/<steam_id>/pfx/

    Returns the first pfx/ directory that exists on disk, or None.
    """
    if not steam_id:
        return None

    for steam_root in _STEAM_CANDIDATES:
        pfx = steam_root / "steamapps" / "compatdata" / steam_id / "pfx"
        if pfx.is_dir():
            return pfx

    for library in find_steam_libraries():
        pfx = library / "steamapps" / "compatdata" / steam_id / "pfx"
        if pfx.is_dir():
            return pfx

    return None
