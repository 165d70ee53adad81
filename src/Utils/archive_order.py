"""
archive_order.py
Work out which BSA archives the game loads, and in what order.

The engine loads the archives named in the INI [Archive] section first, then
walks the plugin load order and loads the archives that belong to each
plugin:
  <Plugin>.bsa              always, ahead of that plugin's other archives
  <Plugin> - <Suffix>.bsa   e.g. "Dawnguard - Textures.bsa"
  <Plugin><digit>….bsa      e.g. "3DNPC0.bsa"
An archive that can't be tied to the INI or to a plugin is left out: there
is no way to tell where the game would slot it in.

The returned list is lowest priority first; a later archive overwrites an
earlier one's files.
"""

from __future__ import annotations

import configparser
import logging
from pathlib import Path

from Games.base_game import BaseGame, GameInstallation
from Utils.plugins import get_plugin_load_order

log = logging.getLogger(__name__)

ARCHIVE_EXTENSION = ".bsa"

INI_ARCHIVE_SECTION = "Archive"

# Read in this order; each holds a comma-separated list of archive names
INI_ARCHIVE_FIELDS = (
    "sResourceArchiveList",
    "sResourceArchiveList2",
    "sResourceArchiveMemoryCacheList",
)


# ---------------------------------------------------------------------------
# INI declared archives
# ---------------------------------------------------------------------------

def find_file_case_insensitive(directory: Path, name: str) -> Path | None:
    """Return directory/name, matching the file name case-insensitively."""
    exact = directory / name
    if exact.is_file():
        return exact
    name_lower = name.lower()
    try:
        for entry in directory.iterdir():
            if entry.name.lower() == name_lower and entry.is_file():
                return entry
    except OSError:
        pass
    return None


def _load_ini(parser: configparser.ConfigParser, ini_path: Path) -> bool:
    """Merge one INI into parser (later files override earlier keys)."""
    try:
        text = ini_path.read_text(encoding="utf-8-sig", errors="replace")
        parser.read_string(text, source=str(ini_path))
    except (OSError, configparser.Error) as exc:
        log.warning("Unable to read game ini %s: %s", ini_path, exc)
        return False
    return True


def read_ini_archives(ini_paths: list[Path]) -> list[str]:
    """
    Collect the archive names declared in the [Archive] section of ini_paths.

    Files are read in order, so a later INI (e.g. SkyrimCustom.ini) overrides
    a field set by an earlier one.  Names are trimmed; duplicates and empty
    entries are dropped.  A missing field is only logged.
    """
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        allow_no_value=True,
        delimiters=("=",),
        comment_prefixes=(";", "#"),
    )
    for ini_path in ini_paths:
        _load_ini(parser, ini_path)

    # Section names are case-sensitive in configparser; the game's are not
    section = next(
        (s for s in parser.sections() if s.lower() == INI_ARCHIVE_SECTION.lower()),
        None,
    )

    archives: list[str] = []
    for field in INI_ARCHIVE_FIELDS:
        if section is None or not parser.has_option(section, field):
            log.info("Unable to find %s in [%s] section in game ini: Ignoring.",
                     field, INI_ARCHIVE_SECTION)
            continue
        value = parser.get(section, field) or ""
        for name in value.split(","):
            name = name.strip()
            if name and name not in archives:
                archives.append(name)
    return archives


def get_ini_archives(install: GameInstallation, game: BaseGame) -> list[str]:
    """Archives declared by the game INI and custom INI of an installation."""
    ini_paths: list[Path] = []
    for ini_name, required in ((game.ini_name, True), (game.custom_ini_name, False)):
        found = find_file_case_insensitive(install.document_path, ini_name)
        if found is not None:
            ini_paths.append(found)
        elif required:
            log.warning("Game ini not found: %s", install.document_path / ini_name)
    return read_ini_archives(ini_paths)


# ---------------------------------------------------------------------------
# Plugin matched archives
# ---------------------------------------------------------------------------

def list_archives_in_directory(data_path: Path) -> list[str]:
    """Return the names of all .bsa files directly inside data_path, sorted."""
    archives: list[str] = []
    for entry in data_path.iterdir():
        if entry.is_file() and entry.suffix.lower() == ARCHIVE_EXTENSION:
            archives.append(entry.name)
    return sorted(archives, key=str.lower)


def find_plugin_archives(archives: list[str], plugin: str) -> list[str]:
    """
    Return the archives in archives that the game loads for plugin (a name
    without extension).  <plugin>.bsa comes first, the rest keep list order.
    """
    found: list[str] = []
    primary = plugin + ARCHIVE_EXTENSION
    for archive in archives:
        if not archive.startswith(plugin):
            continue
        if archive == primary:
            found.insert(0, archive)
            continue

        rest = archive[len(plugin):]
        # "Plugin Extra.bsa" most likely belongs to a plugin called "Plugin Extra"
        if rest.startswith(" ") and not rest.startswith(" -"):
            continue
        if not rest.startswith(" ") and not rest[:1].isdigit():
            continue
        found.append(archive)
    return found


def resolve_archive_order(
    ini_archives: list[str],
    load_order: list[str],
    archives: list[str],
) -> list[str]:
    """
    Build the final archive priority list (lowest priority first).

    ini_archives seed the list, then each plugin's archives are appended in
    load order.  An archive already placed is never moved.  Archives from
    archives that end up unplaced are reported and left out.
    """
    order: list[str] = []
    for archive in ini_archives:
        if archive not in order:
            order.append(archive)

    for plugin in load_order:
        for archive in find_plugin_archives(archives, plugin):
            if archive not in order:
                order.append(archive)

    log.debug("BSA Load Order: %s", ",".join(order))

    placed = set(order)
    for archive in archives:
        if archive not in placed:
            log.warning("BSA file %s not loaded by any plugin.", archive)
    return order


def get_archive_priority_list(install: GameInstallation, game: BaseGame) -> list[str]:
    """
    Archive load order for an installation.  Raises OSError if
    loadorder.txt can't be read.
    """
    ini_archives = get_ini_archives(install, game)
    load_order = get_plugin_load_order(install, trim_extension=True)
    archives = list_archives_in_directory(install.data_path)
    return resolve_archive_order(ini_archives, load_order, archives)
