"""TOML codec for ``.template.toml`` descriptors."""

from __future__ import annotations

import json
import tomllib
from functools import lru_cache
from importlib import resources
from typing import Any, Iterator, Tuple

import tomli_w
from jsonschema import Draft202012Validator

from stencil.domain.errors import DescriptorCodecError
from stencil.domain.template import TemplateDescriptor

_SCHEMA_PACKAGE = "stencil.resources"
_SCHEMA_RESOURCE = "descriptor.schema.json"


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    resource = resources.files(_SCHEMA_PACKAGE) / _SCHEMA_RESOURCE
    with resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


def iter_schema_errors(data: dict[str, Any]) -> Iterator[Tuple[str, str]]:
    """Yield (path, message) pairs for schema issues in a decoded descriptor."""
    for error in _validator().iter_errors(data):
        path = ".".join(str(item) for item in error.absolute_path)
        yield path, error.message


def parse_descriptor(text: str) -> TemplateDescriptor:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise DescriptorCodecError(f"invalid TOML: {exc}") from exc
    errors = sorted(iter_schema_errors(data))
    if errors:
        details = "; ".join(f"{path or '<root>'}: {message}" for path, message in errors)
        raise DescriptorCodecError(f"invalid descriptor: {details}")
    return TemplateDescriptor.from_dict(data)


def serialize_descriptor(descriptor: TemplateDescriptor) -> str:
    try:
        return tomli_w.dumps(descriptor.to_dict())
    except TypeError as exc:
        raise DescriptorCodecError(f"descriptor cannot be encoded as TOML: {exc}") from exc


__all__ = ["iter_schema_errors", "parse_descriptor", "serialize_descriptor"]
