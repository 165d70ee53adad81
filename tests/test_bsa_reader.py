"""Tests for the BSA reader, using archives written by the make_bsa fixture."""

import pytest

from bsa import BsaError, BsaReader, list_bsa

FILES = {
    "textures/rocks/rock_p.dds": b"height map bytes",
    "textures/rocks/rock.dds": b"diffuse" * 50,
    "meshes/rocks/rock01.nif": b"Gamebryo File Format",
}


@pytest.mark.parametrize("version", [103, 104, 105])
@pytest.mark.parametrize("compress", [False, True])
def test_read_every_file(tmp_path, make_bsa, version, compress):
    path = make_bsa(tmp_path / "Test.bsa", FILES, version=version, compress=compress)
    reader = BsaReader(path)
    reader.open()
    assert sorted(reader.iter_paths()) == sorted(FILES)
    for name, data in FILES.items():
        assert reader.read_file(name) == data


def test_embedded_names_are_skipped(tmp_path, make_bsa):
    path = make_bsa(tmp_path / "Test.bsa", FILES, version=105, compress=True, embed_names=True)
    reader = BsaReader(path)
    assert reader.read_file("meshes/rocks/rock01.nif") == FILES["meshes/rocks/rock01.nif"]


def test_lookup_is_case_and_separator_insensitive(tmp_path, make_bsa):
    path = make_bsa(tmp_path / "Test.bsa", FILES)
    reader = BsaReader(path)
    assert "Textures\\Rocks\\Rock_P.dds" in reader
    assert reader.read_file("TEXTURES/ROCKS/ROCK_P.DDS") == b"height map bytes"


def test_entries_keep_stored_case(tmp_path, make_bsa):
    path = make_bsa(tmp_path / "Test.bsa", {"Textures/Rocks/Rock.dds": b"x"})
    entries = list_bsa(path)
    assert [e.name for e in entries] == ["Textures/Rocks/Rock.dds"]
    assert entries[0].size == 1
    assert not entries[0].compressed


def test_missing_file_raises(tmp_path, make_bsa):
    reader = BsaReader(make_bsa(tmp_path / "Test.bsa", FILES))
    with pytest.raises(FileNotFoundError):
        reader.read_file("textures/missing.dds")


def test_bad_signature(tmp_path):
    path = tmp_path / "Bad.bsa"
    path.write_bytes(b"BTDX" + b"\x00" * 40)
    with pytest.raises(BsaError):
        BsaReader(path).open()


def test_too_small(tmp_path):
    path = tmp_path / "Empty.bsa"
    path.write_bytes(b"")
    with pytest.raises(BsaError):
        BsaReader(path).open()


def test_unsupported_version(tmp_path, make_bsa):
    path = make_bsa(tmp_path / "Test.bsa", FILES, version=106)
    with pytest.raises(BsaError, match="Unsupported"):
        BsaReader(path).open()


def test_corrupt_data_raises_bsa_error(tmp_path, make_bsa):
    path = make_bsa(tmp_path / "Test.bsa", {"a/b.txt": b"hello world"}, version=104, compress=True)
    raw = bytearray(path.read_bytes())
    # Clobber the zlib stream that follows the 4-byte size prefix
    raw[-8:] = b"\xff" * 8
    path.write_bytes(bytes(raw))
    with pytest.raises(BsaError):
        BsaReader(path).read_file("a/b.txt")


def test_short_compressed_entry_raises_bsa_error(tmp_path, make_bsa):
    path = make_bsa(tmp_path / "Short.bsa", {"textures/x_m.dds": b"\x01\x02"},
                    version=104, compress=True, verbatim=True)
    with pytest.raises(BsaError, match="too short"):
        BsaReader(path).read_file("textures/x_m.dds")


def test_empty_entry_with_embedded_names_raises_bsa_error(tmp_path, make_bsa):
    path = make_bsa(tmp_path / "Empty.bsa", {"textures/x_m.dds": b""},
                    version=104, embed_names=True, verbatim=True)
    with pytest.raises(BsaError, match="embedded name"):
        BsaReader(path).read_file("textures/x_m.dds")
