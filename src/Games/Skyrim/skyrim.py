"""
skyrim.py
Game handler for the original (2011) Skyrim / Legendary Edition.

Archives are BSA v104 (zlib).
"""

from Games.base_game import BaseGame, GameType


class Skyrim(BaseGame):

    @property
    def name(self) -> str:
        return "Skyrim"

    @property
    def game_type(self) -> GameType:
        return GameType.SKYRIM

    @property
    def exe_name(self) -> str:
        return "TESV.exe"

    @property
    def steam_id(self) -> str:
        return "72850"

    @property
    def my_games_folder(self) -> str:
        return "Skyrim"

    @property
    def ini_name(self) -> str:
        return "Skyrim.ini"

    @property
    def custom_ini_name(self) -> str:
        return "SkyrimCustom.ini"
