"""
skyrim_se.py
Game handler for Skyrim Special Edition / Anniversary Edition.

Archives are BSA v105 (LZ4).  INIs live in My Games/Skyrim Special Edition,
loadorder.txt in AppData/Local/Skyrim Special Edition.
"""

from Games.base_game import BaseGame, GameType


class SkyrimSE(BaseGame):

    @property
    def name(self) -> str:
        return "Skyrim Special Edition"

    @property
    def game_type(self) -> GameType:
        return GameType.SKYRIM_SE

    @property
    def exe_name(self) -> str:
        return "SkyrimSE.exe"

    @property
    def steam_id(self) -> str:
        return "489830"

    @property
    def heroic_app_names(self) -> list[str]:
        # GOG Anniversary Edition
        return ["1711230643", "The Elder Scrolls V: Skyrim Anniversary Edition"]

    @property
    def my_games_folder(self) -> str:
        return "Skyrim Special Edition"

    @property
    def ini_name(self) -> str:
        return "Skyrim.ini"

    @property
    def custom_ini_name(self) -> str:
        return "SkyrimCustom.ini"
