"""
Build the ParallaxGen view of a Skyrim install and report what it found.

  parallaxgen                                        # auto-detect Skyrim SE
  parallaxgen --game-type skyrim_vr
  parallaxgen --game-dir "/games/Skyrim Special Edition" --save-path
  parallaxgen --documents-dir D --appdata-dir A      # explicit INI / loadorder.txt folders
  parallaxgen --config extra.json -v                 # merge an extra rule file, debug log
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Allow running as python src/parallaxgen.py from the repo root
if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).resolve().parent))

from Games.base_game import GameNotFoundError, GameType
from Utils.app_log import app_log, setup_logging
from Utils.config_paths import get_log_path
from Utils.game_loader import get_game
from Utils.pg_config import merge_json_smart, replace_forward_slashes
from Utils.pg_directory import DEFAULT_CUBEMAP_PATH, ParallaxGenDirectory

log = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="parallaxgen",
        description="Index a Bethesda game's Data folder and classify parallax assets.",
    )
    ap.add_argument(
        "--game-type", choices=[t.value for t in GameType], default=GameType.SKYRIM_SE.value,
        help="Which game to index (default: skyrim_se)",
    )
    ap.add_argument("--game-dir", type=Path, help="Game install folder (the one holding Data/)")
    ap.add_argument("--documents-dir", type=Path, help="Folder holding the game INIs")
    ap.add_argument("--appdata-dir", type=Path, help="Folder holding loadorder.txt")
    ap.add_argument("--config", type=Path, action="append", default=[], metavar="JSON",
                    help="Extra rule file merged after the load-order configs (repeatable)")
    ap.add_argument("--no-default-config", action="store_true",
                    help="Don't load the bundled default.json")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="Debug logging")
    ap.add_argument("--log-file", type=Path, nargs="?", const=get_log_path,
                    help="Also write the log to a file (default location if no path given)")
    ap.add_argument("--save-path", action="store_true",
                    help="Remember --game-dir for future runs")
    return ap


def _merge_extra_configs(pgd: ParallaxGenDirectory, paths: list[Path]) -> None:
    for path in paths:
        with path.open("r", encoding="utf-8-sig") as f:
            extra = json.load(f)
        if not isinstance(extra, dict):
            raise ValueError(f"{path} must contain a JSON object")
        merge_json_smart(pgd.config, replace_forward_slashes(extra))
        log.info("Merged extra config %s", path)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    log_file = args.log_file() if callable(args.log_file) else args.log_file
    setup_logging(args.verbose, log_file)

    try:
        game = get_game(GameType(args.game_type))
        if args.save_path:
            if args.game_dir is None:
                log.error("--save-path requires --game-dir")
                return 1
            game.save_game_path(args.game_dir.resolve())
        install = game.locate(args.game_dir, args.documents_dir, args.appdata_dir)

        pgd = ParallaxGenDirectory.from_installation(
            install, game, load_default_config=not args.no_default_config,
        )
        pgd.populate()
        pgd.load_config()
        _merge_extra_configs(pgd, args.config)

        pgd.find_meshes()
        pgd.find_height_maps()
        pgd.find_complex_material_maps()
        pgd.find_truepbr_configs()
    except GameNotFoundError as exc:
        log.error("%s", exc)
        return 1
    except (OSError, ValueError, KeyError) as exc:
        log.error("Aborting: %s", exc)
        return 1

    app_log(f"Indexed {len(pgd.file_map)} files from {len(pgd.archive_order)} archives")
    app_log(
        f"{len(pgd.get_meshes())} meshes, {len(pgd.get_height_maps())} height maps, "
        f"{len(pgd.get_complex_material_maps())} complex material maps, "
        f"{len(pgd.get_truepbr_configs())} TruePBR entries"
    )
    if not pgd.def_cubemap_exists():
        log.warning("Default cubemap %s not found in data directory", DEFAULT_CUBEMAP_PATH)
    return 0


if __name__ == "__main__":
    sys.exit(main())
