from __future__ import annotations

from pathlib import Path

from stencil.domain.template import Template, TemplateDescriptor, filter_by_language


def _template(identity: str, language: str | None) -> Template:
    return Template(
        identity=identity,
        path=Path("/templates") / identity,
        descriptor=TemplateDescriptor(language=language),
    )


def test_descriptor_keeps_unknown_keys_as_metadata() -> None:
    descriptor = TemplateDescriptor.from_dict(
        {"name": "api", "tags": ["web", "rest"], "license": "MIT", "extra": {"ci": True}}
    )
    assert descriptor.name == "api"
    assert descriptor.tags == ("web", "rest")
    assert descriptor.metadata == {"license": "MIT", "extra": {"ci": True}}
    assert descriptor.to_dict() == {
        "name": "api",
        "tags": ["web", "rest"],
        "license": "MIT",
        "extra": {"ci": True},
    }


def test_empty_descriptor_is_valid() -> None:
    descriptor = TemplateDescriptor.from_dict({})
    assert descriptor.to_dict() == {}
    template = Template(identity="a/b", path=Path("/t/a/b"), descriptor=descriptor)
    assert template.display_name == "a/b"
    assert template.language_display is None


def test_language_filter_matches_aliases_case_insensitively() -> None:
    templates = [_template("a", "js"), _template("b", "javascript"), _template("c", "Go")]
    selected = filter_by_language(templates, "JavaScript")
    assert [t.identity for t in selected] == ["a", "b"]


def test_language_filter_unknown_and_unrecognized() -> None:
    templates = [_template("a", None), _template("b", "cobol-ish"), _template("c", "rust")]
    assert [t.identity for t in filter_by_language(templates, "unknown")] == ["a"]
    assert [t.identity for t in filter_by_language(templates, "unrecognized")] == ["b"]
    assert [t.identity for t in filter_by_language(templates, "rs")] == ["c"]


def test_language_filter_with_unlisted_query_compares_raw_tags() -> None:
    templates = [_template("a", "Cobol-ish"), _template("b", "rust")]
    assert [t.identity for t in filter_by_language(templates, "cobol-ish")] == ["a"]
