"""Tests for allow/block rules and suffix lookups."""

from Utils.filemap import LOOSE_FILES, DataDirectory
from Utils.lookup_rules import LookupRule, find_files_by_suffix


def test_empty_rule_accepts_everything():
    assert LookupRule().accepts("anything/at/all.dds")


def test_allowlist_glob():
    rule = LookupRule.from_lists(allowlist=["textures/*"])
    assert rule.accepts("textures/rock_p.dds")
    assert rule.accepts("Textures\\Architecture\\Wall_P.dds")
    assert not rule.accepts("meshes/rock.nif")


def test_blocklist_wins_over_allowlist():
    rule = LookupRule.from_lists(allowlist=["textures/*"], blocklist=["textures/effects/*"])
    assert rule.accepts("textures/rock_p.dds")
    assert not rule.accepts("textures/effects/fire_p.dds")


def test_patterns_are_normalized():
    rule = LookupRule.from_lists(blocklist=["Textures\\Effects\\*"])
    assert not rule.accepts("textures/effects/fire_p.dds")


def test_archive_blocklist():
    rule = LookupRule.from_lists(archive_blocklist=["Skyrim - Textures0.bsa"])
    assert not rule.accepts("textures/a.dds", "skyrim - textures0.bsa")
    assert rule.accepts("textures/a.dds", "Update.bsa")
    assert rule.accepts("textures/a.dds", LOOSE_FILES)
    assert rule.accepts("textures/a.dds")


def test_from_config_ignores_bad_items_and_missing_keys():
    config = {
        "parallax_lookup": {
            "allowlist": ["textures/*", 5, None],
            "blocklist": "not a list",
        },
    }
    rule = LookupRule.from_config(config, "parallax_lookup")
    assert rule == LookupRule(allowlist=("textures/*",))
    assert LookupRule.from_config(config, "nif_lookup") == LookupRule()


def test_find_files_by_suffix(tmp_path):
    for rel in ("Textures/Rock_P.dds", "Textures/Rock.dds", "Textures/Effects/Fire_p.dds",
                "Meshes/Rock_p.dds"):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")
    directory = DataDirectory(tmp_path)
    directory.populate()

    rule = LookupRule.from_lists(allowlist=["textures/*"], blocklist=["textures/effects/*"])
    assert find_files_by_suffix(directory, "_P.DDS", rule) == ["textures/rock_p.dds"]
    assert find_files_by_suffix(directory, "_p.dds") == [
        "meshes/rock_p.dds",
        "textures/effects/fire_p.dds",
        "textures/rock_p.dds",
    ]


def test_brackets_and_question_marks_are_literal():
    rule = LookupRule.from_lists(blocklist=["textures/[mod]/*", "textures/a?/*"])
    assert not rule.accepts("textures/[mod]/rock_p.dds")
    assert rule.accepts("textures/m/rock_p.dds")
    assert not rule.accepts("textures/a?/rock_p.dds")
    assert rule.accepts("textures/ab/rock_p.dds")
