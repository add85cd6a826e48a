"""Value objects describing a template synchronization."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from stencil.domain.template import TEMPLATE_CONFIG_FILE

# Copy every entry recursively, keep symlinks as links and permission bits,
# but give copied files fresh timestamps. Timestamps are never kept, so files
# are compared by content to decide whether they changed.
BASE_FLAGS: Tuple[str, ...] = ("-r", "-l", "-p", "--no-times", "--checksum", "--itemize-changes")


@dataclass(frozen=True)
class SyncMode:
    """How a template is written into its target; every combination is valid."""

    dry_run: bool = False
    force: bool = False
    delete: bool = False


def mode_flags(mode: SyncMode) -> List[str]:
    flags: List[str] = []
    if mode.dry_run:
        flags.append("--dry-run")
    if not mode.force:
        flags.append("--ignore-existing")
    if mode.delete:
        flags.append("--delete")
    return flags


@dataclass(frozen=True)
class CopySpec:
    source: Path
    target: Path
    mode: SyncMode
    excludes: Tuple[str, ...] = (TEMPLATE_CONFIG_FILE,)

    def arguments(self) -> List[str]:
        """Ordered copy-tool arguments; source and target carry a trailing separator
        so the source's contents, not the directory itself, are copied."""
        args = list(BASE_FLAGS)
        args.extend(f"--exclude={pattern}" for pattern in self.excludes)
        args.extend(mode_flags(self.mode))
        args.append(_with_trailing_sep(self.source))
        args.append(_with_trailing_sep(self.target))
        return args


def _with_trailing_sep(path: Path) -> str:
    text = str(path)
    if text.endswith(("/", "\\")):
        return text
    return text + "/"


@dataclass(frozen=True)
class SyncResult:
    changed: bool
    changes: Tuple[str, ...] = ()
    summary: str | None = None
    dry_run: bool = False
    created_target: bool = False
    executor: str = ""

    def to_dict(self) -> dict:
        return {
            "changed": self.changed,
            "changes": list(self.changes),
            "summary": self.summary,
            "dry_run": self.dry_run,
            "created_target": self.created_target,
            "executor": self.executor,
        }


__all__ = ["BASE_FLAGS", "CopySpec", "SyncMode", "SyncResult", "mode_flags"]
