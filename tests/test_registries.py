import json

import pytest

from skillfinder.registries import (
    enabled_sources,
    load_preferences,
    load_registries,
    normalize_github_url,
    registry_id,
)


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://github.com/anthropics/skills", "anthropics/skills"),
        ("https://github.com/anthropics/skills.git", "anthropics/skills"),
        ("git@github.com:anthropics/skills.git", "anthropics/skills"),
        ("https://github.com/ComposioHQ/awesome-claude-skills/tree/main", "ComposioHQ/awesome-claude-skills"),
        ("anthropics/skills", "anthropics/skills"),
        ("  anthropics/skills.git  ", "anthropics/skills"),
    ],
)
def test_normalize_github_url(url, expected):
    assert normalize_github_url(url) == expected


def test_registry_id():
    assert registry_id("ComposioHQ/awesome-claude-skills") == "composiohq-awesome-claude-skills"


def _paths(tmp_path):
    return {
        "config_path": tmp_path / "config.yaml",
        "registries_path": tmp_path / "registries.json",
        "local_path": tmp_path / "registries.local.json",
    }


def test_yaml_config(tmp_path):
    paths = _paths(tmp_path)
    paths["config_path"].write_text(
        "registries:\n"
        "  - url: https://github.com/anthropics/skills\n"
        "    name: Anthropic Skills\n"
        "  - url: travisvn/awesome-claude-skills\n"
        "    enabled: false\n"
        "  - name: no url, ignored\n",
        encoding="utf-8",
    )
    regs = load_registries(**paths)

    assert [r.locator for r in regs] == ["anthropics/skills", "travisvn/awesome-claude-skills"]
    assert regs[0].name == "Anthropic Skills"
    assert regs[0].id == "anthropics-skills"
    assert regs[1].name == "travisvn/awesome-claude-skills"
    assert [r.locator for r in enabled_sources(regs)] == ["anthropics/skills"]


def test_yaml_wins_over_json(tmp_path):
    paths = _paths(tmp_path)
    paths["config_path"].write_text("registries:\n  - url: a/b\n", encoding="utf-8")
    paths["registries_path"].write_text(json.dumps({"registries": [{"repo": "c/d"}]}), encoding="utf-8")
    assert [r.locator for r in load_registries(**paths)] == ["a/b"]


def test_json_with_local_override(tmp_path):
    paths = _paths(tmp_path)
    paths["registries_path"].write_text(
        json.dumps({"registries": [
            {"id": "one", "repo": "a/b", "name": "One"},
            {"id": "two", "repo": "c/d"},
        ]}),
        encoding="utf-8",
    )
    paths["local_path"].write_text(
        json.dumps({"registries": [
            {"id": "one", "repo": "a/b", "enabled": False},
            {"repo": "https://github.com/e/f"},
        ]}),
        encoding="utf-8",
    )
    regs = load_registries(**paths)

    assert [r.id for r in regs] == ["one", "two", "e-f"]
    assert regs[0].enabled is False
    assert regs[2].locator == "e/f"


def test_broken_yaml_falls_back_to_json(tmp_path):
    paths = _paths(tmp_path)
    paths["config_path"].write_text("registries: [unclosed\n", encoding="utf-8")
    paths["registries_path"].write_text(json.dumps({"registries": [{"repo": "c/d"}]}), encoding="utf-8")
    assert [r.locator for r in load_registries(**paths)] == ["c/d"]


def test_broken_json_is_skipped(tmp_path):
    paths = _paths(tmp_path)
    paths["registries_path"].write_text("{not json", encoding="utf-8")
    paths["local_path"].write_text(json.dumps({"registries": [{"repo": "c/d"}]}), encoding="utf-8")
    assert [r.locator for r in load_registries(**paths)] == ["c/d"]


def test_nothing_configured(tmp_path):
    assert load_registries(**_paths(tmp_path)) == []


def test_preferences_read_from_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("preferences:\n  install_method: git\nregistries: []\n", encoding="utf-8")
    assert load_preferences(path) == {"install_method": "git"}


@pytest.mark.parametrize("content", ["registries: []\n", "preferences: {}\n", "preferences: [unclosed\n"])
def test_preferences_unset_or_unreadable(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")
    assert load_preferences(path) is None


def test_preferences_missing_file(tmp_path):
    assert load_preferences(tmp_path / "config.yaml") is None
