"""Shared fixtures: tiny BSA archives, DDS textures and fake game installs built on the fly."""

from __future__ import annotations

import struct
import zlib
from collections import defaultdict
from pathlib import Path

import lz4.frame
import pytest

from Games.base_game import GameInstallation, GameType

_ARCHIVE_DIRECTORY_NAMES = 0x001
_ARCHIVE_FILE_NAMES = 0x002
_ARCHIVE_COMPRESSED = 0x004
_ARCHIVE_EMBED_NAMES = 0x100


def _write_bsa(
    path: Path,
    files: dict[str, bytes],
    *,
    version: int = 105,
    compress: bool = False,
    embed_names: bool = False,
    verbatim: bool = False,
) -> Path:
    """Write a BSA holding files ({"textures/rocks/rock.dds": b"..."}).

    verbatim writes each payload as given, even when the archive is flagged
    compressed or with embedded names, to build broken archives.
    """
    folders: dict[str, list[tuple[str, bytes]]] = defaultdict(list)
    for rel_path, data in files.items():
        folder, _, name = rel_path.replace("/", "\\").rpartition("\\")
        folders[folder].append((name, data))

    flags = _ARCHIVE_DIRECTORY_NAMES | _ARCHIVE_FILE_NAMES
    if compress:
        flags |= _ARCHIVE_COMPRESSED
    if embed_names:
        flags |= _ARCHIVE_EMBED_NAMES

    folder_record_size = 24 if version == 105 else 16
    blocks_size = sum(1 + len(folder) + 1 + 16 * len(entries) for folder, entries in folders.items())
    names = b"".join(name.encode() + b"\x00" for entries in folders.values() for name, _ in entries)
    data_offset = 36 + folder_record_size * len(folders) + blocks_size + len(names)

    folder_records = b""
    blocks = b""
    payloads = b""
    for folder, entries in folders.items():
        if version == 105:
            folder_records += struct.pack("<QIIQ", 0, len(entries), 0, 0)
        else:
            folder_records += struct.pack("<QII", 0, len(entries), 0)
        encoded = folder.encode()
        blocks += bytes([len(encoded) + 1]) + encoded + b"\x00"
        for name, data in entries:
            payload = data
            if not verbatim:
                if compress:
                    packed = lz4.frame.compress(data) if version == 105 else zlib.compress(data)
                    payload = struct.pack("<I", len(data)) + packed
                if embed_names:
                    full = f"{folder}\\{name}".encode()
                    payload = bytes([len(full)]) + full + payload
            blocks += struct.pack("<QII", 0, len(payload), data_offset + len(payloads))
            payloads += payload

    folder_names_len = sum(len(folder) + 1 for folder in folders)
    header = struct.pack(
        "<4sIIIIIIII", b"BSA\x00", version, 36, flags,
        len(folders), len(files), folder_names_len, len(names), 0,
    )
    path.write_bytes(header + folder_records + blocks + names + payloads)
    return path


def _dds_rgba(alpha: list[int], width: int = 2, height: int = 2) -> bytes:
    """Uncompressed 32-bit BGRA DDS; alpha gives one value per pixel."""
    header = struct.pack(
        "<4s7I44x8I5I",
        b"DDS ", 124, 0x100F, height, width, width * 4, 0, 0,
        32, 0x41, 0, 32, 0x00FF0000, 0x0000FF00, 0x000000FF, 0xFF000000,
        0x1000, 0, 0, 0, 0,
    )
    pixels = b"".join(bytes([0x40, 0x80, 0xC0, a]) for a in alpha)
    assert len(alpha) == width * height
    return header + pixels


@pytest.fixture
def make_bsa():
    return _write_bsa


@pytest.fixture
def make_dds():
    return _dds_rgba


@pytest.fixture
def game_dirs(tmp_path):
    """An empty install: game root with Data/, plus Documents and AppData folders."""
    game_path = tmp_path / "Skyrim Special Edition"
    data_path = game_path / "Data"
    document_path = tmp_path / "Documents" / "My Games" / "Skyrim Special Edition"
    appdata_path = tmp_path / "AppData" / "Local" / "Skyrim Special Edition"
    for folder in (data_path, document_path, appdata_path):
        folder.mkdir(parents=True)
    return GameInstallation(
        game_type=GameType.SKYRIM_SE,
        game_path=game_path,
        data_path=data_path,
        document_path=document_path,
        appdata_path=appdata_path,
    )


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path, monkeypatch):
    """Keep saved game paths and logs out of the real ~/.config."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
