"""
pg_config.py
Load the ParallaxGen rule set: the bundled default.json, then every JSON
fragment that mods ship under parallaxgen/ in the data directory.

Fragments are merged in order with merge_json_smart():
  object + object  merged key by key
  array  + array   union; target order kept, new source items appended
  anything else    source replaces target
Merging the same fragment twice is a no-op.  After all fragments are merged,
forward slashes in every string value become the platform separator.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path

from bsa import BsaError
from Utils.config_paths import get_default_config_path
from Utils.filemap import DataDirectory
from Utils.lookup_rules import LookupRule, find_files_by_suffix

log = logging.getLogger(__name__)

# Mods drop extra rules in here
LO_CONFIG_PREFIX = "parallaxgen/"
LO_CONFIG_RULE = LookupRule.from_lists(allowlist=[LO_CONFIG_PREFIX + "*"])


def _json_equal(a, b) -> bool:
    """Value equality that doesn't treat True as 1 or False as 0."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(_json_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(_json_equal(a[k], b[k]) for k in a)
    return a == b


def _merge_array(target: list, source: list) -> None:
    for item in source:
        if not any(_json_equal(item, existing) for existing in target):
            target.append(copy.deepcopy(item))


def merge_json_smart(target: dict, source: dict) -> dict:
    """Merge source into target in place and return target."""
    for key, value in source.items():
        current = target.get(key)
        if isinstance(value, dict):
            if not isinstance(current, dict):
                current = target[key] = {}
            merge_json_smart(current, value)
        elif isinstance(value, list):
            if not isinstance(current, list):
                current = target[key] = []
            _merge_array(current, value)
        else:
            target[key] = value
    return target


def replace_forward_slashes(node):
    """Return a copy of node with '/' replaced by os.sep in every string value."""
    if isinstance(node, dict):
        return {key: replace_forward_slashes(value) for key, value in node.items()}
    if isinstance(node, list):
        return [replace_forward_slashes(value) for value in node]
    if isinstance(node, str):
        return node.replace("/", os.sep)
    return node


def _load_default_config(path: Path) -> dict:
    if not path.is_file():
        log.error("Default config not found at %s", path)
        raise FileNotFoundError(f"Default config not found: {path}")
    try:
        with path.open("r", encoding="utf-8-sig") as f:
            config = json.load(f)
    except ValueError as exc:
        log.error("Default config %s is not valid JSON: %s", path, exc)
        raise ValueError(f"Invalid default config {path}: {exc}") from exc
    if not isinstance(config, dict):
        raise ValueError(f"Default config {path} must be a JSON object")
    return config


def load_pg_config(
    directory: DataDirectory,
    default_path: Path | None = None,
    load_default: bool = True,
) -> dict:
    """
    Build the merged rule set for directory.

    Raises FileNotFoundError if the default config is missing and ValueError
    if it is malformed.  A load-order fragment that can't be read or parsed
    is logged and skipped.
    """
    config: dict = {}
    if load_default:
        default_path = default_path or get_default_config_path()
        merge_json_smart(config, _load_default_config(default_path))

    loaded = 0
    for path in find_files_by_suffix(directory, ".json", LO_CONFIG_RULE):
        try:
            fragment = json.loads(directory.get_file(path).decode("utf-8-sig"))
        except (OSError, BsaError, ValueError) as exc:
            log.warning("Failed to parse ParallaxGen config file %s: %s", path, exc)
            continue
        if not isinstance(fragment, dict):
            log.warning("Ignoring ParallaxGen config file %s: top level is not an object", path)
            continue
        log.debug("Merging ParallaxGen config %s", path)
        merge_json_smart(config, fragment)
        loaded += 1

    config = replace_forward_slashes(config)
    log.info("Loaded %d ParallaxGen configs from load order", loaded)
    return config
