"""Application service behind the ``author``, ``list``, ``init`` and ``new`` commands."""

from __future__ import annotations

import getpass
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from packaging.version import InvalidVersion, Version

from stencil.adapters.fs_template_repo import FSTemplateRepository, SkippedTemplate
from stencil.app.sync_service import SyncPlanner
from stencil.domain.errors import (
    AlreadyExistsError,
    InvalidTargetError,
    StorageIOError,
    TemplateNotFoundError,
)
from stencil.domain.sync import SyncMode, SyncResult
from stencil.domain.template import (
    TEMPLATE_CONFIG_FILE,
    Template,
    TemplateDescriptor,
    filter_by_language,
)
from stencil.settings import RuntimeSettings
from stencil.utils.paths import resolve_path
from stencil.utils.telemetry import record_event

DEFAULT_TEMPLATE_VERSION = "1.0.0"
DEFAULT_TAGS = ("project", "template")


@dataclass(frozen=True)
class AuthorResult:
    name: str
    path: Path
    config_path: Path
    created_dir: bool


@dataclass(frozen=True)
class ListResult:
    templates: List[Template]
    skipped: List[SkippedTemplate] = field(default_factory=list)


@dataclass(frozen=True)
class MaterializeResult:
    template: Template
    target: Path
    sync: SyncResult
    warnings: List[str] = field(default_factory=list)


def default_author() -> str:
    author = os.environ.get("STENCIL_AUTHOR")
    if author:
        return author.strip()
    try:
        return getpass.getuser()
    except Exception:  # noqa: BLE001
        return "unknown"


def version_warnings(template: Template, cli_version: str) -> List[str]:
    required = template.descriptor.min_tool_version
    if not required:
        return []
    try:
        needed = Version(required)
    except InvalidVersion:
        return [f"Template '{template.display_name}' declares an invalid min_tool_version '{required}'"]
    try:
        current = Version(cli_version)
    except InvalidVersion:
        return []
    if current < needed:
        return [
            f"Template '{template.display_name}' requires stencil >= {needed} (running {current})"
        ]
    return []


class TemplateService:
    def __init__(
        self,
        repository: FSTemplateRepository,
        planner: SyncPlanner,
        settings: RuntimeSettings,
        *,
        invocation_dir: Path | None = None,
    ) -> None:
        self._repo = repository
        self._planner = planner
        self._settings = settings
        self._invocation_dir = invocation_dir

    @property
    def repository(self) -> FSTemplateRepository:
        return self._repo

    def resolve(self, raw: str) -> Path:
        return Path(resolve_path(raw, self._invocation_dir))

    def list_templates(self, language: str | None = None) -> ListResult:
        self._repo.ensure_storage()
        templates = self._repo.discover_all()
        skipped = list(self._repo.skipped)
        self._record_skipped(skipped)
        if language:
            templates = filter_by_language(templates, language)
        record_event(
            self._settings,
            "template.list",
            {"count": len(templates), "language": language, "skipped": len(skipped)},
        )
        return ListResult(templates=templates, skipped=skipped)

    def find(self, query: str) -> Template:
        self._repo.ensure_storage()
        template = self._repo.find(query)
        self._record_skipped(self._repo.skipped)
        if template is None:
            raise TemplateNotFoundError(f"Template '{query}' not found in {self._repo.base_dir}")
        return template

    def author(
        self,
        raw_path: str,
        name: str | None = None,
        *,
        language: str | None = None,
        description: str | None = None,
    ) -> AuthorResult:
        target = self.resolve(raw_path)
        template_name = name or target.name
        if not template_name:
            raise InvalidTargetError(f"Could not determine template name from path: {target}")

        created_dir = False
        if not target.exists():
            try:
                target.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageIOError(f"Unable to create {target}: {exc}") from exc
            created_dir = True
        elif not target.is_dir():
            raise InvalidTargetError(f"Path exists but is not a directory: {target}")

        if (target / TEMPLATE_CONFIG_FILE).exists():
            raise AlreadyExistsError(f"Template already exists at {target}")

        descriptor = TemplateDescriptor(
            name=template_name,
            language=language,
            description=description or f"A template for {template_name}",
            author=default_author(),
            version=DEFAULT_TEMPLATE_VERSION,
            tags=DEFAULT_TAGS,
            min_tool_version=self._settings.cli_version,
        )
        config_path = self._repo.save_descriptor(descriptor, target)
        record_event(
            self._settings,
            "template.author",
            {"name": template_name, "path": str(target), "created_dir": created_dir},
        )
        return AuthorResult(name=template_name, path=target, config_path=config_path, created_dir=created_dir)

    def init(self, query: str, raw_path: str | None, mode: SyncMode) -> MaterializeResult:
        template = self.find(query)
        target = self.resolve(raw_path or ".")
        sync = self._planner.materialize_into_existing(template, target, mode)
        return self._finish("init", template, target, mode, sync)

    def new(self, query: str, raw_path: str, mode: SyncMode) -> MaterializeResult:
        template = self.find(query)
        target = self.resolve(raw_path)
        sync = self._planner.materialize_into_new(template, target, mode)
        return self._finish("new", template, target, mode, sync)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _finish(
        self,
        command: str,
        template: Template,
        target: Path,
        mode: SyncMode,
        sync: SyncResult,
    ) -> MaterializeResult:
        record_event(
            self._settings,
            "template.sync",
            {
                "command": command,
                "template": template.identity,
                "target": str(target),
                "dry_run": mode.dry_run,
                "force": mode.force,
                "delete": mode.delete,
                "changed": sync.changed,
                "executor": sync.executor,
            },
        )
        return MaterializeResult(
            template=template,
            target=target,
            sync=sync,
            warnings=version_warnings(template, self._settings.cli_version),
        )

    def _record_skipped(self, skipped: List[SkippedTemplate]) -> None:
        for entry in skipped:
            record_event(
                self._settings,
                "template.skipped",
                {"identity": entry.identity, "reason": entry.reason},
                level="warn",
            )


__all__ = [
    "AuthorResult",
    "ListResult",
    "MaterializeResult",
    "TemplateService",
    "default_author",
    "version_warnings",
]
