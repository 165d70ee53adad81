"""
pg_directory.py
ParallaxGenDirectory: the data directory plus the rule set and the lists of
meshes, height maps, complex material maps and TruePBR configs that the
patcher works from.

Typical use:
    pgd = ParallaxGenDirectory.from_installation(install, game)
    pgd.populate()
    pgd.load_config()
    pgd.find_meshes()
    pgd.find_height_maps()
    pgd.find_complex_material_maps()
    pgd.find_truepbr_configs()
"""

from __future__ import annotations

import json
import logging
from pathlib import Path, PurePath

from bsa import BsaError
from Games.base_game import BaseGame, GameInstallation
from Utils.archive_order import get_archive_priority_list
from Utils.dds_check import is_complex_material
from Utils.filemap import DataDirectory, normalize_path
from Utils.lookup_rules import LookupRule, find_files_by_suffix
from Utils.pg_config import load_pg_config

log = logging.getLogger(__name__)

# Config sections, one per category
PARALLAX_LOOKUP = "parallax_lookup"
COMPLEX_MATERIAL_LOOKUP = "complexmaterial_lookup"
NIF_LOOKUP = "nif_lookup"
TRUEPBR_CFG_LOOKUP = "truepbr_cfg_lookup"

HEIGHT_MAP_SUFFIX = "_p.dds"
ENV_MASK_SUFFIX = "_m.dds"
MESH_SUFFIX = ".nif"
TRUEPBR_CFG_SUFFIX = ".json"

DEFAULT_CUBEMAP_PATH = "textures/cubemaps/dynamic1pxcubemap_black.dds"


def _add_unique(items: dict[str, None], path: str | PurePath) -> None:
    items.setdefault(normalize_path(path))


class ParallaxGenDirectory(DataDirectory):

    def __init__(
        self,
        data_path: Path | str,
        archive_order: list[str] | None = None,
        default_config_path: Path | None = None,
        load_default_config: bool = True,
    ) -> None:
        super().__init__(data_path, archive_order)
        self.default_config_path = default_config_path
        self.load_default_config = load_default_config
        self.config: dict = {}
        # Insertion-ordered sets of normalized paths
        self._meshes: dict[str, None] = {}
        self._height_maps: dict[str, None] = {}
        self._complex_material_maps: dict[str, None] = {}
        self._truepbr_configs: list[dict] = []

    @classmethod
    def from_installation(
        cls, install: GameInstallation, game: BaseGame, **kwargs,
    ) -> "ParallaxGenDirectory":
        """Directory for an installed game, archives in the order the game loads them."""
        archive_order = get_archive_priority_list(install, game)
        return cls(install.data_path, archive_order, **kwargs)

    # -----------------------------------------------------------------------
    # Config
    # -----------------------------------------------------------------------

    def load_config(self) -> dict:
        log.info("Loading ParallaxGen configs from load order")
        self.config = load_pg_config(
            self, self.default_config_path, load_default=self.load_default_config,
        )
        return self.config

    def _rule(self, key: str) -> LookupRule:
        return LookupRule.from_config(self.config, key)

    # -----------------------------------------------------------------------
    # Classification
    # -----------------------------------------------------------------------

    def find_meshes(self) -> None:
        log.info("Finding meshes")
        for path in find_files_by_suffix(self, MESH_SUFFIX, self._rule(NIF_LOOKUP)):
            self.add_mesh(path)
        log.info("Found %d meshes", len(self._meshes))

    def find_height_maps(self) -> None:
        log.info("Finding parallax height maps")
        for path in find_files_by_suffix(self, HEIGHT_MAP_SUFFIX, self._rule(PARALLAX_LOOKUP)):
            self.add_height_map(path)
        log.info("Found %d height maps", len(self._height_maps))

    def find_complex_material_maps(self) -> None:
        """Keep the _m.dds candidates whose alpha channel carries height data."""
        log.info("Finding complex material maps")
        rule = self._rule(COMPLEX_MATERIAL_LOOKUP)
        for path in find_files_by_suffix(self, ENV_MASK_SUFFIX, rule):
            try:
                data = self.get_file(path)
            except (OSError, BsaError) as exc:
                log.warning("Unable to read %s: %s - skipping", path, exc)
                continue
            if is_complex_material(data, path):
                log.debug("Adding %s as a complex material map", path)
                self.add_complex_material_map(path)
        log.info("Found %d complex material maps", len(self._complex_material_maps))

    def find_truepbr_configs(self) -> None:
        """Collect every entry of the TruePBR config files (each a JSON array)."""
        log.info("Finding TruePBR configs")
        self._truepbr_configs.clear()
        rule = self._rule(TRUEPBR_CFG_LOOKUP)
        for path in find_files_by_suffix(self, TRUEPBR_CFG_SUFFIX, rule):
            try:
                entries = json.loads(self.get_file(path).decode("utf-8-sig"))
            except (OSError, BsaError, ValueError) as exc:
                log.error("Unable to parse TruePBR config file %s: %s", path, exc)
                continue
            if not isinstance(entries, list):
                log.error("Unable to parse TruePBR config file %s: expected a list", path)
                continue
            for entry in entries:
                if not isinstance(entry, dict):
                    continue
                if "texture" in entry:
                    entry["match_diffuse"] = entry["texture"]
                self._truepbr_configs.append(entry)
        log.info("Found %d TruePBR entries", len(self._truepbr_configs))

    # -----------------------------------------------------------------------
    # Classified sets
    # -----------------------------------------------------------------------

    def add_mesh(self, path: str | PurePath) -> None:
        _add_unique(self._meshes, path)

    def add_height_map(self, path: str | PurePath) -> None:
        _add_unique(self._height_maps, path)

    def add_complex_material_map(self, path: str | PurePath) -> None:
        _add_unique(self._complex_material_maps, path)

    def is_mesh(self, path: str | PurePath) -> bool:
        return normalize_path(path) in self._meshes

    def is_height_map(self, path: str | PurePath) -> bool:
        return normalize_path(path) in self._height_maps

    def is_complex_material_map(self, path: str | PurePath) -> bool:
        return normalize_path(path) in self._complex_material_maps

    def get_meshes(self) -> list[str]:
        return list(self._meshes)

    def get_height_maps(self) -> list[str]:
        return list(self._height_maps)

    def get_complex_material_maps(self) -> list[str]:
        return list(self._complex_material_maps)

    def get_truepbr_configs(self) -> list[dict]:
        return list(self._truepbr_configs)

    def def_cubemap_exists(self) -> bool:
        """True if the black 1px cubemap used by patched shaders is present."""
        return self.is_file(DEFAULT_CUBEMAP_PATH)
