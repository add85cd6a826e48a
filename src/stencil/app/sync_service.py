"""Application service materializing a template into a target directory."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from stencil.domain.errors import InvalidTargetError, StorageIOError, SyncError, TargetNotFoundError
from stencil.domain.sync import CopySpec, SyncMode, SyncResult
from stencil.domain.template import Template
from stencil.ports.copy_executor import CopyExecutor


class SyncPlanner:
    """Plan and run the copy of a template's contents into a target directory.

    The template config file is never copied. Whether existing files are
    overwritten, extraneous target entries removed, or nothing is touched at
    all is decided by the :class:`SyncMode`; the executor only carries the
    resulting :class:`CopySpec` out.
    """

    def __init__(self, executor: CopyExecutor) -> None:
        self._executor = executor

    @property
    def executor(self) -> CopyExecutor:
        return self._executor

    def plan(self, source: Path, target: Path, mode: SyncMode) -> CopySpec:
        return CopySpec(source=source, target=target, mode=mode)

    def execute(self, spec: CopySpec) -> SyncResult:
        outcome = self._executor.run(spec)
        if outcome.returncode != 0:
            raise SyncError(outcome.stderr or outcome.stdout, returncode=outcome.returncode)
        changes = tuple(line.rstrip() for line in outcome.stdout.splitlines() if line.strip())
        return SyncResult(
            changed=bool(changes),
            changes=changes,
            summary="\n".join(changes) if changes else None,
            dry_run=spec.mode.dry_run,
            executor=self._executor.name,
        )

    def materialize_into_existing(self, template: Template, target: Path, mode: SyncMode) -> SyncResult:
        """Copy ``template`` into ``target``, which must already be a directory."""
        if not target.exists():
            raise TargetNotFoundError(f"Target directory does not exist: {target}")
        if not target.is_dir():
            raise InvalidTargetError(f"Path exists but is not a directory: {target}")
        return self.execute(self.plan(template.path, target, mode))

    def materialize_into_new(self, template: Template, target: Path, mode: SyncMode) -> SyncResult:
        """Copy ``template`` into ``target``, creating it first unless this is a dry run."""
        created = False
        if target.exists():
            if not target.is_dir():
                raise InvalidTargetError(f"Path exists but is not a directory: {target}")
        else:
            created = True
            if not mode.dry_run:
                try:
                    target.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    raise StorageIOError(f"Unable to create {target}: {exc}") from exc
        result = self.execute(self.plan(template.path, target, mode))
        return replace(result, created_target=created)


__all__ = ["SyncPlanner"]
