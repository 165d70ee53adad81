"""
lookup_rules.py
Allow/block rules that narrow the data directory down to the files one
category cares about.

Each category section in the config holds three lists:
  allowlist          glob patterns; when non-empty a path must match one
  blocklist          glob patterns; a match excludes the path
  archive_blocklist  archive names; files owned by these archives are excluded

"*" is the only wildcard and matches any run of characters, "/" included;
"[" and "?" are literal, as in mod folders like "textures/[mod]/".  Patterns
are compared case-insensitively against normalized paths, so
"Textures\\Architecture\\*" and "textures/architecture/*" are the same rule.
"""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass
from typing import Iterable

from Utils.filemap import DataDirectory, normalize_path

ALLOWLIST_KEY = "allowlist"
BLOCKLIST_KEY = "blocklist"
ARCHIVE_BLOCKLIST_KEY = "archive_blocklist"

_FNMATCH_SPECIAL = re.compile(r"([\[?])")


def _string_items(value) -> list[str]:
    """Strings from a JSON array; anything else in the array is ignored."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _normalize_pattern(pattern: str) -> str:
    """Normalize like a path; "[" and "?" match themselves, only "*" is a wildcard."""
    return _FNMATCH_SPECIAL.sub(r"[\1]", normalize_path(pattern.strip()))


def _matches_any(path: str, patterns: tuple[str, ...]) -> bool:
    return any(fnmatch.fnmatchcase(path, pattern) for pattern in patterns)


@dataclass(frozen=True)
class LookupRule:
    allowlist: tuple[str, ...] = ()
    blocklist: tuple[str, ...] = ()
    archive_blocklist: tuple[str, ...] = ()

    @classmethod
    def from_lists(
        cls,
        allowlist: Iterable[str] = (),
        blocklist: Iterable[str] = (),
        archive_blocklist: Iterable[str] = (),
    ) -> "LookupRule":
        return cls(
            allowlist=tuple(_normalize_pattern(p) for p in allowlist),
            blocklist=tuple(_normalize_pattern(p) for p in blocklist),
            archive_blocklist=tuple(a.strip().lower() for a in archive_blocklist),
        )

    @classmethod
    def from_config(cls, config: dict, key: str) -> "LookupRule":
        """Build the rule for config[key]; missing lists are empty."""
        section = config.get(key)
        if not isinstance(section, dict):
            section = {}
        return cls.from_lists(
            _string_items(section.get(ALLOWLIST_KEY)),
            _string_items(section.get(BLOCKLIST_KEY)),
            _string_items(section.get(ARCHIVE_BLOCKLIST_KEY)),
        )

    def accepts(self, path: str, source: str | None = None) -> bool:
        """True if path (owned by archive source) passes all three lists."""
        key = normalize_path(path)
        if self.allowlist and not _matches_any(key, self.allowlist):
            return False
        if self.blocklist and _matches_any(key, self.blocklist):
            return False
        if source is not None and source.lower() in self.archive_blocklist:
            return False
        return True


def find_files_by_suffix(
    directory: DataDirectory,
    suffix: str,
    rule: LookupRule | None = None,
) -> list[str]:
    """Return the sorted paths in directory ending in suffix that rule accepts."""
    suffix = suffix.lower()
    rule = rule or LookupRule()
    return [
        path for path, source in directory.iter_files()
        if path.endswith(suffix) and rule.accepts(path, source)
    ]
