"""
plugins.py
Read the game's loadorder.txt.

Format (one plugin per line):
  Skyrim.esm
  Update.esm
  # lines starting with '#' and blank lines are ignored

Order in the file defines load order (line 0 = first loaded, lowest
priority).  loadorder.txt lists every plugin the game knows about, vanilla
masters included.
"""

from __future__ import annotations

import logging
from pathlib import Path

from Games.base_game import GameInstallation

log = logging.getLogger(__name__)

LOADORDER_FILENAME = "loadorder.txt"


def _trim_extension(name: str) -> str:
    """'Dawnguard.esm' -> 'Dawnguard'.  Names without a dot are kept whole."""
    stem, dot, _ext = name.rpartition(".")
    return stem if dot else name


def read_loadorder(path: Path, trim_extension: bool = False) -> list[str]:
    """Read loadorder.txt and return plugin names in order.

    trim_extension drops each name's final extension, which is how archives
    are matched to plugins.  Raises OSError if the file can't be opened.
    """
    names: list[str] = []
    with path.open("r", encoding="utf-8-sig", errors="replace") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            names.append(_trim_extension(line) if trim_extension else line)
    return names


def get_plugin_load_order(install: GameInstallation, trim_extension: bool = False) -> list[str]:
    """Load order of the given installation, from <appdata>/loadorder.txt."""
    load_order = read_loadorder(install.appdata_path / LOADORDER_FILENAME, trim_extension)
    log.debug("Plugin Load Order: %s", ",".join(load_order))
    return load_order
