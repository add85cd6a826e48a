from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from stencil.adapters.fs_template_repo import FSTemplateRepository
from stencil.domain.template import TEMPLATE_CONFIG_FILE, TemplateDescriptor

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="directory symlinks need POSIX")


def test_empty_storage_discovers_nothing(template_root: Path) -> None:
    repo = FSTemplateRepository(template_root)
    assert repo.discover_all() == []
    assert repo.skipped == []


def test_missing_storage_discovers_nothing(tmp_path: Path) -> None:
    repo = FSTemplateRepository(tmp_path / "absent")
    assert repo.discover_all() == []
    assert repo.ensure_storage().is_dir()


def test_discovers_nested_templates_sorted_by_identity(template_root: Path, make_template) -> None:
    make_template(template_root, "rust/cli", 'name = "rust-cli"\n')
    make_template(template_root, "python", "")
    make_template(template_root, "go/web/api", 'language = "go"\n')
    (template_root / "notes.txt").write_text("ignored", encoding="utf-8")
    (template_root / "empty" / "dir").mkdir(parents=True)

    templates = FSTemplateRepository(template_root).discover_all()
    assert [t.identity for t in templates] == ["go/web/api", "python", "rust/cli"]
    assert templates[0].path == template_root / "go" / "web" / "api"
    assert templates[2].display_name == "rust-cli"


def test_does_not_descend_into_templates(template_root: Path, make_template) -> None:
    make_template(template_root, "outer", "")
    make_template(template_root, "outer/inner", "")
    templates = FSTemplateRepository(template_root).discover_all()
    assert [t.identity for t in templates] == ["outer"]


def test_storage_root_is_never_a_template(template_root: Path, make_template) -> None:
    (template_root / TEMPLATE_CONFIG_FILE).write_text('name = "root"\n', encoding="utf-8")
    make_template(template_root, "child", 'name = "child"\n')
    repo = FSTemplateRepository(template_root)
    assert [t.identity for t in repo.discover_all()] == ["child"]
    assert repo.find("root") is None


@posix_only
def test_follows_symlinked_template_directories(tmp_path: Path, template_root: Path, make_template) -> None:
    shared = make_template(tmp_path / "elsewhere", "tpl", 'name = "shared"\n')
    os.symlink(shared, template_root / "tpl")
    make_template(tmp_path / "elsewhere", "group/inner", "")
    os.symlink(tmp_path / "elsewhere" / "group", template_root / "linked-group")

    templates = FSTemplateRepository(template_root).discover_all()
    assert [t.identity for t in templates] == ["linked-group/inner", "tpl"]
    assert templates[1].path == template_root / "tpl"
    assert templates[1].display_name == "shared"


@posix_only
def test_symlink_cycles_are_walked_once(template_root: Path, make_template) -> None:
    make_template(template_root, "a/tpl", "")
    os.symlink(template_root, template_root / "a" / "loop")
    os.symlink(template_root / "a", template_root / "b")

    templates = FSTemplateRepository(template_root).discover_all()
    assert [t.identity for t in templates] == ["a/tpl"]


def test_malformed_descriptor_is_skipped(template_root: Path, make_template) -> None:
    make_template(template_root, "good", 'name = "good"\n')
    make_template(template_root, "bad", "name = [unterminated\n")
    repo = FSTemplateRepository(template_root)
    templates = repo.discover_all()
    assert [t.identity for t in templates] == ["good"]
    assert [entry.identity for entry in repo.skipped] == ["bad"]
    assert repo.skipped[0].config_path == template_root / "bad" / TEMPLATE_CONFIG_FILE


def test_find_by_identity_and_name(template_root: Path, make_template) -> None:
    make_template(template_root, "web/react", 'name = "react-app"\n')
    repo = FSTemplateRepository(template_root)
    assert repo.find("web/react").identity == "web/react"
    assert repo.find("web\\react").identity == "web/react"
    assert repo.find("react-app").identity == "web/react"
    assert repo.find("react") is None


def test_identity_match_wins_over_name_match(template_root: Path, make_template) -> None:
    make_template(template_root, "a/b", "")
    make_template(template_root, "c/d", 'name = "a/b"\n')
    found = FSTemplateRepository(template_root).find("a/b")
    assert found is not None
    assert found.identity == "a/b"


def test_identity_match_wins_even_when_name_match_sorts_first(template_root: Path, make_template) -> None:
    make_template(template_root, "a", 'name = "z/y"\n')
    make_template(template_root, "z/y", "")
    found = FSTemplateRepository(template_root).find("z/y")
    assert found is not None
    assert found.identity == "z/y"


def test_name_match_uses_raw_query(template_root: Path, make_template) -> None:
    make_template(template_root, "x", 'name = "win\\\\style"\n')
    repo = FSTemplateRepository(template_root)
    found = repo.find("win\\style")
    assert found is not None
    assert found.identity == "x"


def test_first_name_match_in_identity_order(template_root: Path, make_template) -> None:
    make_template(template_root, "b", 'name = "dup"\n')
    make_template(template_root, "a", 'name = "dup"\n')
    assert FSTemplateRepository(template_root).find("dup").identity == "a"


def test_save_descriptor_writes_config(tmp_path: Path) -> None:
    repo = FSTemplateRepository(tmp_path / "templates")
    target = tmp_path / "templates" / "fresh"
    target.mkdir(parents=True)
    config = repo.save_descriptor(TemplateDescriptor(name="fresh", tags=("a",)), target)
    assert config == target / TEMPLATE_CONFIG_FILE
    assert repo.load(target).descriptor.name == "fresh"
