"""Tests for rule set merging and loading."""

import copy
import json
import logging
import os

import pytest

from Utils.filemap import DataDirectory
from Utils.pg_config import load_pg_config, merge_json_smart, replace_forward_slashes


def test_merge_objects_recurse():
    target = {"a": {"x": 1, "y": 2}}
    merge_json_smart(target, {"a": {"y": 3, "z": 4}})
    assert target == {"a": {"x": 1, "y": 3, "z": 4}}


def test_merge_arrays_union_in_order():
    target = {"list": ["a", "b"]}
    merge_json_smart(target, {"list": ["c", "a", "d"]})
    assert target == {"list": ["a", "b", "c", "d"]}


def test_merge_scalars_and_type_mismatch_replace():
    target = {"s": 1, "t": [1, 2], "u": {"k": 1}}
    merge_json_smart(target, {"s": "two", "t": "scalar", "u": 5})
    assert target == {"s": "two", "t": "scalar", "u": 5}


def test_merge_into_missing_keys():
    target = {}
    merge_json_smart(target, {"obj": {"k": [1, 1, 2]}, "arr": ["x", "x"]})
    assert target == {"obj": {"k": [1, 2]}, "arr": ["x"]}


def test_merge_bool_is_not_int():
    target = {"list": [1, 0]}
    merge_json_smart(target, {"list": [True, False, 1]})
    assert target == {"list": [1, 0, True, False]}


def test_merge_is_idempotent():
    fragment = {
        "nif_lookup": {"allowlist": ["meshes/*"], "blocklist": ["meshes/lod/*"]},
        "flag": True,
        "objects": [{"a": 1}, {"b": [1, 2]}],
    }
    target = copy.deepcopy(fragment)
    merge_json_smart(target, copy.deepcopy(fragment))
    assert target == fragment
    merge_json_smart(target, fragment)
    assert target == fragment


def test_merge_does_not_alias_source():
    source = {"list": [{"a": 1}]}
    target = {}
    merge_json_smart(target, source)
    target["list"][0]["a"] = 2
    assert source == {"list": [{"a": 1}]}


def test_replace_forward_slashes_values_only():
    tree = {"a/b": ["x/y", 1, {"k": "p/q"}], "n": None}
    result = replace_forward_slashes(tree)
    sep = os.sep
    assert result == {"a/b": [f"x{sep}y", 1, {"k": f"p{sep}q"}], "n": None}
    assert tree["a/b"][0] == "x/y"


# ---------------------------------------------------------------------------
# load_pg_config
# ---------------------------------------------------------------------------

def _write_json(path, value):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(value), encoding="utf-8")


@pytest.fixture
def default_config(tmp_path):
    path = tmp_path / "cfg" / "default.json"
    _write_json(path, {"parallax_lookup": {"allowlist": ["textures/*"], "blocklist": []}})
    return path


def _directory(tmp_path):
    data = tmp_path / "Data"
    data.mkdir(exist_ok=True)
    return data


def test_load_merges_fragments_in_order(tmp_path, default_config):
    data = _directory(tmp_path)
    _write_json(data / "ParallaxGen" / "a.json", {"parallax_lookup": {"blocklist": ["textures/a/*"]}})
    _write_json(data / "ParallaxGen" / "b.json", {"parallax_lookup": {"blocklist": ["textures/b/*"]}})
    _write_json(data / "Other" / "c.json", {"parallax_lookup": {"blocklist": ["ignored"]}})
    directory = DataDirectory(data)
    directory.populate()

    config = load_pg_config(directory, default_config)

    sep = os.sep
    assert config["parallax_lookup"]["allowlist"] == [f"textures{sep}*"]
    assert config["parallax_lookup"]["blocklist"] == [f"textures{sep}a{sep}*", f"textures{sep}b{sep}*"]


def test_bad_fragment_is_skipped(tmp_path, default_config, caplog):
    data = _directory(tmp_path)
    (data / "parallaxgen").mkdir()
    (data / "parallaxgen" / "broken.json").write_text("{not json", encoding="utf-8")
    _write_json(data / "parallaxgen" / "list.json", ["not", "an", "object"])
    _write_json(data / "parallaxgen" / "good.json", {"extra": 1})
    directory = DataDirectory(data)
    directory.populate()

    with caplog.at_level(logging.WARNING):
        config = load_pg_config(directory, default_config)

    assert config["extra"] == 1
    assert "broken.json" in caplog.text
    assert "list.json" in caplog.text


def test_missing_default_is_fatal(tmp_path):
    directory = DataDirectory(_directory(tmp_path))
    directory.populate()
    with pytest.raises(FileNotFoundError):
        load_pg_config(directory, tmp_path / "nope.json")


def test_malformed_default_is_fatal(tmp_path):
    bad = tmp_path / "default.json"
    bad.write_text("[", encoding="utf-8")
    directory = DataDirectory(_directory(tmp_path))
    directory.populate()
    with pytest.raises(ValueError):
        load_pg_config(directory, bad)


def test_skip_default(tmp_path):
    directory = DataDirectory(_directory(tmp_path))
    directory.populate()
    assert load_pg_config(directory, tmp_path / "nope.json", load_default=False) == {}


def test_bundled_default_config_loads(tmp_path):
    directory = DataDirectory(_directory(tmp_path))
    directory.populate()
    config = load_pg_config(directory)
    for key in ("parallax_lookup", "complexmaterial_lookup", "nif_lookup", "truepbr_cfg_lookup"):
        assert set(config[key]) == {"allowlist", "blocklist", "archive_blocklist"}
