"""Domain model for templates stored on disk."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from stencil.domain import languages

TEMPLATE_CONFIG_FILE = ".template.toml"

DESCRIPTOR_FIELDS = (
    "name",
    "language",
    "description",
    "author",
    "version",
    "tags",
    "min_tool_version",
)


@dataclass(frozen=True)
class TemplateDescriptor:
    """Metadata read from a template's ``.template.toml``; every field is optional."""

    name: str | None = None
    language: str | None = None
    description: str | None = None
    author: str | None = None
    version: str | None = None
    tags: Tuple[str, ...] | None = None
    min_tool_version: str | None = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TemplateDescriptor":
        tags = data.get("tags")
        return cls(
            name=data.get("name"),
            language=data.get("language"),
            description=data.get("description"),
            author=data.get("author"),
            version=data.get("version"),
            tags=tuple(tags) if tags is not None else None,
            min_tool_version=data.get("min_tool_version"),
            metadata={key: value for key, value in data.items() if key not in DESCRIPTOR_FIELDS},
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for key in DESCRIPTOR_FIELDS:
            value = getattr(self, key)
            if value is None:
                continue
            payload[key] = list(value) if key == "tags" else value
        for key, value in self.metadata.items():
            payload.setdefault(key, value)
        return payload


@dataclass(frozen=True)
class Template:
    """A discovered template; ``identity`` is its ``/``-separated path under the storage root."""

    identity: str
    path: Path
    descriptor: TemplateDescriptor

    @property
    def display_name(self) -> str:
        return self.descriptor.name or self.identity

    @property
    def language(self) -> str | None:
        return self.descriptor.language

    @property
    def language_display(self) -> str | None:
        if self.descriptor.language is None:
            return None
        return languages.canonicalize(self.descriptor.language)

    @property
    def config_path(self) -> Path:
        return self.path / TEMPLATE_CONFIG_FILE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identity": self.identity,
            "name": self.display_name,
            "path": self.path.as_posix(),
            "language": self.language_display,
            "descriptor": self.descriptor.to_dict(),
        }


def is_template_dir(path: Path) -> bool:
    return (path / TEMPLATE_CONFIG_FILE).exists()


UNKNOWN_LANGUAGE = "unknown"
UNRECOGNIZED_LANGUAGE = "unrecognized"


def filter_by_language(templates: Iterable[Template], query: str) -> List[Template]:
    """Select templates by language.

    ``unknown`` selects templates without a language tag, ``unrecognized``
    those whose tag is not in the language catalog. Any other query matches
    templates whose tag has the same canonical name, so aliases match each
    other (``js`` finds templates tagged ``javascript``).
    """
    token = query.strip()
    if token.lower() == UNKNOWN_LANGUAGE:
        return [template for template in templates if not template.language]
    if token.lower() == UNRECOGNIZED_LANGUAGE:
        return [
            template
            for template in templates
            if template.language and not languages.is_known(template.language)
        ]
    wanted = languages.canonicalize(token).lower()
    return [
        template
        for template in templates
        if template.language and languages.canonicalize(template.language).lower() == wanted
    ]


__all__ = [
    "DESCRIPTOR_FIELDS",
    "TEMPLATE_CONFIG_FILE",
    "Template",
    "TemplateDescriptor",
    "UNKNOWN_LANGUAGE",
    "UNRECOGNIZED_LANGUAGE",
    "filter_by_language",
    "is_template_dir",
]
