"""
base_game.py
Abstract base class that all game handlers must subclass.

To add support for a new game:
  1. Add a member to GameType
  2. Create Games/<Title>/<title>.py with a BaseGame subclass
  3. It will be auto-discovered by Utils/game_loader.py

A handler is a table of constants (executable, store IDs, folder and INI
names) plus locate(), which turns them into a GameInstallation.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from Utils.config_paths import get_game_config_path
from Utils.heroic_finder import find_heroic_game, find_heroic_prefix
from Utils.steam_finder import find_prefix, find_steam_game

log = logging.getLogger(__name__)


class GameType(Enum):
    SKYRIM_SE = "skyrim_se"
    SKYRIM_VR = "skyrim_vr"
    SKYRIM = "skyrim"


class GameNotFoundError(FileNotFoundError):
    """No installation of the requested game could be located."""


@dataclass(frozen=True)
class GameInstallation:
    """Resolved locations for one installed game.

    Attributes:
        game_type:     Which title this is.
        game_path:     Install root, e.g. .../steamapps/common/Skyrim Special Edition
        data_path:     <game_path>/Data: plugins, archives and loose files.
        document_path: My Games/<title>: holds the game INIs.
        appdata_path:  AppData/Local/<title>: holds loadorder.txt / plugins.txt.
    """
    game_type: GameType
    game_path: Path
    data_path: Path
    document_path: Path
    appdata_path: Path


# Windows user profile inside a Proton prefix
_PROTON_USER = "steamuser"


def _prefix_user_dir(prefix: Path) -> Path | None:
    """Return drive_c/users/<user> inside a Wine prefix."""
    users = prefix / "drive_c" / "users"
    if (users / _PROTON_USER).is_dir():
        return users / _PROTON_USER
    try:
        for entry in sorted(users.iterdir()):
            if entry.is_dir() and entry.name.lower() != "public":
                return entry
    except OSError:
        pass
    return None


class BaseGame(ABC):

    # -----------------------------------------------------------------------
    # Identity
    # -----------------------------------------------------------------------

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Human-readable display name, e.g. 'Skyrim Special Edition'.
        Must match the subfolder name under Games/.
        """

    @property
    @abstractmethod
    def game_type(self) -> GameType:
        """The GameType member this handler serves."""

    @property
    @abstractmethod
    def exe_name(self) -> str:
        """
        The game's executable filename used to locate it in Steam libraries.
        e.g. 'SkyrimSE.exe'
        """

    @property
    @abstractmethod
    def my_games_folder(self) -> str:
        """Folder under Documents/My Games that holds the game's INI files."""

    @property
    def appdata_folder(self) -> str:
        """Folder under AppData/Local that holds loadorder.txt."""
        return self.my_games_folder

    @property
    @abstractmethod
    def ini_name(self) -> str:
        """Main game INI, e.g. 'Skyrim.ini'."""

    @property
    @abstractmethod
    def custom_ini_name(self) -> str:
        """User override INI read after the main one, e.g. 'SkyrimCustom.ini'."""

    @property
    def data_folder(self) -> str:
        return "Data"

    @property
    def steam_id(self) -> str:
        """Steam App ID, e.g. '489830'.  Empty for non-Steam games."""
        return ""

    @property
    def heroic_app_names(self) -> list[str]:
        """
        Heroic Games Launcher identifiers (Epic appName, GOG product ID or
        GOG title).  Used when the game is not found in Steam libraries.
        """
        return []

    # -----------------------------------------------------------------------
    # Saved configuration
    # -----------------------------------------------------------------------

    @property
    def _paths_file(self) -> Path:
        """~/.config/ParallaxGen/games/<game_name>/paths.json"""
        return get_game_config_path(self.name)

    def load_saved_game_path(self) -> Path | None:
        """Return the install path remembered by save_game_path(), if still valid."""
        paths_file = self._paths_file
        if not paths_file.is_file():
            return None
        try:
            data = json.loads(paths_file.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            log.warning("Ignoring unreadable %s: %s", paths_file, exc)
            return None
        raw = data.get("game_path", "") if isinstance(data, dict) else ""
        if raw and Path(raw).is_dir():
            return Path(raw)
        return None

    def save_game_path(self, path: Path | str | None) -> None:
        """Remember the install path for the next run.  None clears it."""
        data = {"game_path": str(path) if path else ""}
        self._paths_file.write_text(json.dumps(data, indent=2), encoding="utf-8")

    # -----------------------------------------------------------------------
    # Paths
    # -----------------------------------------------------------------------

    def find_game_path(self) -> Path | None:
        """Look the game up in the saved config, Steam, then Heroic."""
        saved = self.load_saved_game_path()
        if saved is not None:
            return saved
        found = find_steam_game(self.steam_id, self.exe_name)
        if found is not None:
            log.debug("Found %s in Steam library: %s", self.name, found)
            return found
        found = find_heroic_game(self.heroic_app_names)
        if found is not None:
            log.debug("Found %s through Heroic: %s", self.name, found)
        return found

    def find_user_dirs(self) -> tuple[Path, Path]:
        """
        Return (Documents, AppData/Local) for the user profile the game runs
        under.  On Windows that is the current user; elsewhere it is the
        user inside the game's Proton or Heroic Wine prefix.
        """
        if sys.platform == "win32":
            profile = Path(os.environ.get("USERPROFILE", str(Path.home())))
            local = os.environ.get("LOCALAPPDATA")
            return profile / "Documents", Path(local) if local else profile / "AppData" / "Local"

        prefix = find_prefix(self.steam_id) or find_heroic_prefix(self.heroic_app_names)
        user_dir = _prefix_user_dir(prefix) if prefix is not None else None
        if user_dir is None:
            log.warning(
                "No Proton/Wine prefix found for %s; falling back to the home directory", self.name
            )
            user_dir = Path.home()
        return user_dir / "Documents", user_dir / "AppData" / "Local"

    def locate(
        self,
        game_path: Path | str | None = None,
        document_path: Path | str | None = None,
        appdata_path: Path | str | None = None,
    ) -> GameInstallation:
        """
        Resolve every location the indexer needs.

        Explicit arguments win over discovery.  Raises GameNotFoundError when
        no install (or no Data folder inside it) can be found.
        """
        if game_path is not None:
            root = Path(game_path)
            if not root.is_dir():
                raise GameNotFoundError(f"Game path does not exist: {root}")
        else:
            root = self.find_game_path()
            if root is None:
                raise GameNotFoundError(
                    f"Unable to locate {self.name}. Pass the install folder explicitly."
                )

        data_path = root / self.data_folder
        if not data_path.is_dir():
            raise GameNotFoundError(f"Data folder does not exist: {data_path}")

        if document_path is None or appdata_path is None:
            documents, local = self.find_user_dirs()
            if document_path is None:
                document_path = documents / "My Games" / self.my_games_folder
            if appdata_path is None:
                appdata_path = local / self.appdata_folder

        install = GameInstallation(
            game_type=self.game_type,
            game_path=root,
            data_path=data_path,
            document_path=Path(document_path),
            appdata_path=Path(appdata_path),
        )
        log.info("Using %s at %s", self.name, install.game_path)
        log.debug("Documents: %s  AppData: %s", install.document_path, install.appdata_path)
        return install
