"""
filemap.py
Build the merged view of a game's Data folder.

Algorithm: walk archives from lowest priority to highest priority, then the
loose files under Data/.  For each file, record (normalized_path, source).
Later sources overwrite earlier entries, so a loose file beats every archive
and a later archive beats an earlier one; no conflicts remain in the map.

Keys are lower-case with forward slashes so that lookups behave the same
on case-sensitive filesystems as in the (case-insensitive) game engine.
Values are the archive file name, or LOOSE_FILES for files in Data/.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePath
from types import MappingProxyType
from typing import Iterator

from bsa import BsaError, BsaReader

log = logging.getLogger(__name__)

# Sentinel source name for files that sit directly in Data/
LOOSE_FILES = "[Loose_Files]"

# Archives and plugins are never loose assets
_SKIP_LOOSE_EXTENSIONS = frozenset({".bsa", ".esp", ".esl", ".esm"})

# Archive directories are read in parallel; results are still applied in order
_POOL = ThreadPoolExecutor(max_workers=8)


def normalize_path(path: str | PurePath) -> str:
    """Lower-case, forward slashes, no empty or '.' segments."""
    parts = str(path).replace("\\", "/").lower().split("/")
    return "/".join(p for p in parts if p and p != ".")


def _open_archive(archive_path: Path) -> BsaReader:
    """Parse one archive's directory.  Pure function, safe to call from any thread."""
    reader = BsaReader(archive_path)
    reader.open()
    return reader


def _scan_loose_files(data_dir: str) -> dict[str, str]:
    """Walk data_dir with os.scandir and return {key: relative path as on disk}."""
    result: dict[str, str] = {}
    stack = [("", data_dir)]
    while stack:
        prefix, current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    if entry.is_dir(follow_symlinks=True):
                        stack.append((prefix + entry.name + "/", entry.path))
                    elif entry.is_file(follow_symlinks=True):
                        if os.path.splitext(entry.name)[1].lower() in _SKIP_LOOSE_EXTENSIONS:
                            continue
                        rel_str = prefix + entry.name
                        result[normalize_path(rel_str)] = rel_str
        except OSError as exc:
            log.warning("Unable to scan %s: %s", current, exc)
    return result


class DataDirectory:
    """Merged, read-only view of a Data folder and the archives it loads."""

    def __init__(self, data_path: Path | str, archive_order: list[str] | None = None) -> None:
        self.data_path = Path(data_path)
        self.archive_order: list[str] = list(archive_order or [])
        self._file_map: dict[str, str] = {}
        self._archives: dict[str, BsaReader] = {}
        self._loose_files: dict[str, str] = {}

    # -----------------------------------------------------------------------
    # Building
    # -----------------------------------------------------------------------

    def populate(self) -> None:
        """(Re)build the file map from archive_order and the loose files."""
        log.info('Opening Data Folder "%s"', self.data_path)
        self._file_map.clear()
        self._archives.clear()
        self._loose_files.clear()

        on_disk: dict[str, Path] = {}
        try:
            for entry in self.data_path.iterdir():
                if entry.is_file():
                    on_disk.setdefault(entry.name.lower(), entry)
        except OSError as exc:
            log.warning("Unable to list %s: %s", self.data_path, exc)

        futures = []
        for archive in self.archive_order:
            archive_path = on_disk.get(archive.lower())
            if archive_path is None:
                # Happens when an archive is named in the INI but not shipped
                log.warning("Skipping BSA %s because it doesn't exist", self.data_path / archive)
                continue
            futures.append((archive, _POOL.submit(_open_archive, archive_path)))

        for archive, future in futures:
            try:
                reader = future.result()
            except (OSError, BsaError) as exc:
                log.warning("Skipping BSA %s: %s", archive, exc)
                continue
            self._add_archive(archive, reader)

        self._add_loose_files()
        log.info("Indexed %d files (%d archives loaded)", len(self._file_map), len(self._archives))

    def _add_archive(self, archive: str, reader: BsaReader) -> None:
        log.debug("Reading file tree from %s.", archive)
        self._archives[archive] = reader
        for rel_path in reader.iter_paths():
            self._file_map[normalize_path(rel_path)] = archive

    def _add_loose_files(self) -> None:
        self._loose_files = _scan_loose_files(str(self.data_path))
        for key in self._loose_files:
            self._file_map[key] = LOOSE_FILES

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    @property
    def file_map(self) -> Mapping[str, str]:
        """Read-only {normalized path: source} view."""
        return MappingProxyType(self._file_map)

    def is_file(self, path: str | PurePath) -> bool:
        return normalize_path(path) in self._file_map

    def get_source(self, path: str | PurePath) -> str | None:
        """Archive name owning path, LOOSE_FILES, or None if not indexed."""
        return self._file_map.get(normalize_path(path))

    def is_loose_file(self, path: str | PurePath) -> bool:
        return self.get_source(path) == LOOSE_FILES

    def iter_files(self) -> Iterator[tuple[str, str]]:
        """Yield (path, source) pairs sorted by path."""
        for key in sorted(self._file_map):
            yield key, self._file_map[key]

    def get_file(self, path: str | PurePath) -> bytes:
        """Return the bytes of path from whichever source owns it.

        Raises FileNotFoundError if path is not in the file map.
        """
        key = normalize_path(path)
        source = self._file_map.get(key)
        if source is None:
            raise FileNotFoundError(f"File not found in data directory: {path}")
        if source == LOOSE_FILES:
            return (self.data_path / self._loose_files[key]).read_bytes()
        return self._archives[source].read_file(key)
