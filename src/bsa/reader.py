"""
reader.py
BSA archive reader for Oblivion, Fallout 3/New Vegas and Skyrim.

All integers little-endian.  Layout:
  Header (36 bytes):
     4B  file id          b"BSA\\0"
     4B  version          103 Oblivion, 104 FO3/FNV/Skyrim LE, 105 Skyrim SE
     4B  folder records offset (always 36)
     4B  archive flags    (ARCHIVE_* below)
     4B  folder count
     4B  file count
     4B  total folder name length
     4B  total file name length
     4B  file flags
  Folder records:  hash(8) count(4) offset(4)           v103/v104
                   hash(8) count(4) pad(4) offset(8)    v105
  File record blocks, one per folder:
     [bzstring folder name]    if ARCHIVE_DIRECTORY_NAMES
     count x (hash(8) size(4) offset(4))
  File name block: NUL-terminated names in file record order.
  File data:
     [bstring full path]       if ARCHIVE_EMBED_NAMES (v104+)
     [4B original size]        if compressed
     data                      zlib (v103/v104) or LZ4 frame (v105)

Bit 30 of a file record's size flips the archive's default compression for
that one file.
"""

from __future__ import annotations

import struct
import zlib
from pathlib import Path
from typing import BinaryIO, Iterator, NamedTuple

import lz4.frame

BSA_MAGIC = b"BSA\x00"

VERSION_OBLIVION = 103
VERSION_FALLOUT = 104
VERSION_SSE = 105
_SUPPORTED_VERSIONS = frozenset({VERSION_OBLIVION, VERSION_FALLOUT, VERSION_SSE})

ARCHIVE_DIRECTORY_NAMES = 0x001
ARCHIVE_FILE_NAMES = 0x002
ARCHIVE_COMPRESSED = 0x004
ARCHIVE_EMBED_NAMES = 0x100

_SIZE_COMPRESSION_TOGGLE = 0x40000000
_SIZE_MASK = 0x3FFFFFFF

_HEADER = struct.Struct("<4sIIIIIIII")
_FOLDER_RECORD = struct.Struct("<QII")
_FOLDER_RECORD_SSE = struct.Struct("<QIIQ")
_FILE_RECORD = struct.Struct("<QII")


class BsaError(ValueError):
    """Raised when an archive is malformed or uses an unsupported layout."""


class BsaEntry(NamedTuple):
    """Single file entry in a BSA archive (directory only)."""
    name: str          # folder/file, forward slashes, case as stored
    offset: int        # absolute offset of the file data
    size: int          # bytes on disk, including any embedded name
    compressed: bool


def _decode_name(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def _entry_key(name: str) -> str:
    return name.replace("\\", "/").lower().lstrip("/")


def _read_exact(f: BinaryIO, size: int, what: str) -> bytes:
    data = f.read(size)
    if len(data) < size:
        raise BsaError(f"Truncated archive while reading {what}")
    return data


def _read_bzstring(f: BinaryIO) -> str:
    """Length-prefixed, NUL-terminated string (length includes the NUL)."""
    (length,) = _read_exact(f, 1, "folder name length")
    return _decode_name(_read_exact(f, length, "folder name").rstrip(b"\x00"))


class BsaReader:
    """Read a BSA archive: list entries and extract files."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.version: int = 0
        self.flags: int = 0
        self._entries: dict[str, BsaEntry] = {}
        self._opened = False

    def open(self) -> None:
        """Parse the archive directory. Call before list_entries() or read_file()."""
        self._entries.clear()
        with self.path.open("rb") as f:
            header = f.read(_HEADER.size)
            if len(header) < _HEADER.size:
                raise BsaError(f"File too small to be a BSA archive: {self.path}")
            (magic, version, folders_offset, flags, folder_count, file_count,
             _folder_names_len, file_names_len, _file_flags) = _HEADER.unpack(header)
            if magic != BSA_MAGIC:
                raise BsaError(f"Not a BSA file (bad signature {magic!r}): {self.path}")
            if version not in _SUPPORTED_VERSIONS:
                raise BsaError(f"Unsupported BSA version {version}: {self.path}")
            if not flags & ARCHIVE_FILE_NAMES:
                raise BsaError(f"BSA has no file name table: {self.path}")

            # -- Folder records ---------------------------------------------
            record = _FOLDER_RECORD_SSE if version == VERSION_SSE else _FOLDER_RECORD
            f.seek(folders_offset)
            counts = [
                record.unpack(_read_exact(f, record.size, "folder records"))[1]
                for _ in range(folder_count)
            ]

            # -- File record blocks -----------------------------------------
            folders: list[tuple[str, list[tuple[int, int]]]] = []
            for count in counts:
                folder = _read_bzstring(f) if flags & ARCHIVE_DIRECTORY_NAMES else ""
                files = []
                for _ in range(count):
                    _hash, size, offset = _FILE_RECORD.unpack(
                        _read_exact(f, _FILE_RECORD.size, "file records")
                    )
                    files.append((size, offset))
                folders.append((folder, files))

            # -- File names -------------------------------------------------
            names = _read_exact(f, file_names_len, "file names").split(b"\x00")
            if len(names) < file_count:
                raise BsaError(f"File name table is short ({len(names)} < {file_count}): {self.path}")

        default_compressed = bool(flags & ARCHIVE_COMPRESSED)
        index = 0
        for folder, files in folders:
            for size, offset in files:
                file_name = _decode_name(names[index])
                index += 1
                name = f"{folder}\\{file_name}" if folder else file_name
                name = name.replace("\\", "/")
                compressed = default_compressed != bool(size & _SIZE_COMPRESSION_TOGGLE)
                self._entries[_entry_key(name)] = BsaEntry(
                    name=name, offset=offset, size=size & _SIZE_MASK, compressed=compressed,
                )

        self.version = version
        self.flags = flags
        self._opened = True

    def _ensure_open(self) -> None:
        if not self._opened:
            self.open()

    def list_entries(self) -> list[BsaEntry]:
        """Return directory entries in archive order."""
        self._ensure_open()
        return list(self._entries.values())

    def iter_paths(self) -> Iterator[str]:
        """Yield the relative path of every file in the archive."""
        self._ensure_open()
        for entry in self._entries.values():
            yield entry.name

    def __contains__(self, name: str) -> bool:
        self._ensure_open()
        return _entry_key(name) in self._entries

    def read_file(self, name: str) -> bytes:
        """Read and decompress one file by its relative path (case-insensitive)."""
        self._ensure_open()
        entry = self._entries.get(_entry_key(name))
        if entry is None:
            raise FileNotFoundError(f"{name} not found in {self.path.name}")
        with self.path.open("rb") as f:
            f.seek(entry.offset)
            raw = f.read(entry.size)
        if len(raw) < entry.size:
            raise BsaError(f"Truncated data for {entry.name} in {self.path.name}")
        return self._unpack(raw, entry)

    def _unpack(self, raw: bytes, entry: BsaEntry) -> bytes:
        pos = 0
        if self.version >= VERSION_FALLOUT and self.flags & ARCHIVE_EMBED_NAMES:
            if not raw:
                raise BsaError(f"Missing embedded name for {entry.name} in {self.path.name}")
            pos = 1 + raw[0]
        if not entry.compressed:
            return raw[pos:]

        if len(raw) < pos + 4:
            raise BsaError(f"Compressed data for {entry.name} in {self.path.name} is too short")
        (original_size,) = struct.unpack_from("<I", raw, pos)
        packed = raw[pos + 4:]
        try:
            if self.version == VERSION_SSE:
                data = lz4.frame.decompress(packed)
            else:
                data = zlib.decompress(packed)
        except (zlib.error, RuntimeError) as exc:
            raise BsaError(f"Failed to decompress {entry.name} in {self.path.name}: {exc}") from exc
        if len(data) != original_size:
            raise BsaError(
                f"{entry.name} in {self.path.name} decompressed to {len(data)} bytes, "
                f"expected {original_size}"
            )
        return data


def list_bsa(path: Path | str) -> list[BsaEntry]:
    """List entries in a BSA file."""
    reader = BsaReader(path)
    reader.open()
    return reader.list_entries()
