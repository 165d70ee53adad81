"""
skyrim_vr.py
Game handler for Skyrim VR.

Steam-only release; shares the SE archive format but keeps its own
My Games / AppData folders and SkyrimVR.ini.
"""

from Games.base_game import BaseGame, GameType


class SkyrimVR(BaseGame):

    @property
    def name(self) -> str:
        return "Skyrim VR"

    @property
    def game_type(self) -> GameType:
        return GameType.SKYRIM_VR

    @property
    def exe_name(self) -> str:
        return "SkyrimVR.exe"

    @property
    def steam_id(self) -> str:
        return "611670"

    @property
    def my_games_folder(self) -> str:
        return "Skyrim VR"

    @property
    def ini_name(self) -> str:
        return "SkyrimVR.ini"

    @property
    def custom_ini_name(self) -> str:
        return "SkyrimCustom.ini"
