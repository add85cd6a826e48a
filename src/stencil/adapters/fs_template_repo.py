"""Filesystem-backed template repository."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Set

from stencil.adapters.toml_codec import parse_descriptor, serialize_descriptor
from stencil.domain.errors import DescriptorCodecError, StorageIOError
from stencil.domain.template import (
    TEMPLATE_CONFIG_FILE,
    Template,
    TemplateDescriptor,
    is_template_dir,
)
from stencil.ports.template_repo import TemplateRepository


@dataclass(frozen=True)
class SkippedTemplate:
    """A template directory left out of discovery because its descriptor could not be read."""

    identity: str
    config_path: Path
    reason: str


def normalize_identity(value: str) -> str:
    return value.replace("\\", "/")


class FSTemplateRepository(TemplateRepository):
    def __init__(self, base_dir: Path) -> None:
        self._base_dir = base_dir
        self.skipped: List[SkippedTemplate] = []

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def ensure_storage(self) -> Path:
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageIOError(f"Unable to create template storage {self._base_dir}: {exc}") from exc
        return self._base_dir

    def discover_all(self) -> List[Template]:
        self.skipped = []
        templates: List[Template] = []
        if self._base_dir.is_dir():
            # The storage root itself is never a template; classification starts at its children.
            visited = {os.path.realpath(self._base_dir)}
            for child in self._subdirectories(self._base_dir):
                self._walk(child, templates, visited)
        templates.sort(key=lambda template: template.identity)
        return templates

    def find(self, query: str) -> Template | None:
        templates = self.discover_all()
        normalized = normalize_identity(query)
        for template in templates:
            if template.identity == normalized:
                return template
        for template in templates:
            if template.descriptor.name == query:
                return template
        return None

    def save_descriptor(self, descriptor: TemplateDescriptor, directory: Path) -> Path:
        config_path = directory / TEMPLATE_CONFIG_FILE
        content = serialize_descriptor(descriptor)
        try:
            config_path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise StorageIOError(f"Unable to write {config_path}: {exc}") from exc
        return config_path

    def load(self, directory: Path) -> Template:
        """Parse the template rooted at ``directory`` (which must hold a config file)."""
        config_path = directory / TEMPLATE_CONFIG_FILE
        try:
            text = config_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DescriptorCodecError(f"unable to read {config_path}: {exc}") from exc
        descriptor = parse_descriptor(text)
        return Template(identity=self._identity_for(directory), path=directory, descriptor=descriptor)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _walk(self, directory: Path, templates: List[Template], visited: Set[str]) -> None:
        # Directory symlinks are followed; each real directory is walked once.
        real = os.path.realpath(directory)
        if real in visited:
            return
        visited.add(real)
        if is_template_dir(directory):
            try:
                templates.append(self.load(directory))
            except DescriptorCodecError as exc:
                self.skipped.append(
                    SkippedTemplate(
                        identity=self._identity_for(directory),
                        config_path=directory / TEMPLATE_CONFIG_FILE,
                        reason=str(exc),
                    )
                )
            return
        for child in self._subdirectories(directory):
            self._walk(child, templates, visited)

    def _subdirectories(self, directory: Path) -> List[Path]:
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as exc:
            raise StorageIOError(f"Unable to read template directory {directory}: {exc}") from exc
        return [Path(entry.path) for entry in entries if entry.is_dir()]

    def _identity_for(self, directory: Path) -> str:
        return directory.relative_to(self._base_dir).as_posix()


__all__ = ["FSTemplateRepository", "SkippedTemplate", "normalize_identity"]
