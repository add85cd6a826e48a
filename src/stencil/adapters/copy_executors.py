"""Copy executors: ``rsync`` in a subprocess, or the same flag table done in-process."""

from __future__ import annotations

import filecmp
import fnmatch
import os
import shutil
import stat
import subprocess
from pathlib import Path
from typing import List, Sequence

from stencil.domain.sync import CopySpec, SyncMode
from stencil.ports.copy_executor import CopyExecutor, CopyOutcome
from stencil.settings import RuntimeSettings

# rsync's exit code for "some files could not be transferred".
PARTIAL_TRANSFER = 23
COMMAND_NOT_FOUND = 127


class RsyncExecutor:
    name = "rsync"

    def __init__(self, binary: str = "rsync") -> None:
        self._binary = binary

    def command(self, spec: CopySpec) -> List[str]:
        return [self._binary, *spec.arguments()]

    def run(self, spec: CopySpec) -> CopyOutcome:
        try:
            result = subprocess.run(
                self.command(spec),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            return CopyOutcome(returncode=COMMAND_NOT_FOUND, stderr=f"{self._binary}: {exc}")
        return CopyOutcome(returncode=result.returncode, stdout=result.stdout, stderr=result.stderr)


class NativeExecutor:
    """In-process implementation of the copy flag table.

    Output lines use rsync's ``--itemize-changes`` notation so both executors
    report changes the same way.
    """

    name = "native"

    def run(self, spec: CopySpec) -> CopyOutcome:
        run = _NativeRun(spec)
        if not spec.mode.dry_run and not spec.target.is_dir():
            try:
                spec.target.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                return CopyOutcome(returncode=PARTIAL_TRANSFER, stderr=f"mkdir {spec.target}: {exc}\n")
        run.sync_dir(spec.source, spec.target, "")
        return CopyOutcome(
            returncode=PARTIAL_TRANSFER if run.errors else 0,
            stdout="".join(f"{line}\n" for line in run.lines),
            stderr="".join(f"{line}\n" for line in run.errors),
        )


class _NativeRun:
    def __init__(self, spec: CopySpec) -> None:
        self.mode: SyncMode = spec.mode
        self.excludes: Sequence[str] = spec.excludes
        self.lines: List[str] = []
        self.errors: List[str] = []

    def excluded(self, name: str) -> bool:
        return any(fnmatch.fnmatch(name, pattern) for pattern in self.excludes)

    def sync_dir(self, source: Path, target: Path, rel: str) -> None:
        try:
            entries = sorted(
                (entry for entry in os.scandir(source) if not self.excluded(entry.name)),
                key=lambda entry: entry.name,
            )
        except OSError as exc:
            self.errors.append(f"opendir {source}: {exc}")
            return

        for entry in entries:
            rel_path = f"{rel}{entry.name}"
            destination = target / entry.name
            try:
                if entry.is_symlink():
                    self.sync_link(Path(entry.path), destination, rel_path)
                elif entry.is_dir(follow_symlinks=False):
                    if self.prepare_dir(destination, rel_path):
                        self.sync_dir(Path(entry.path), destination, f"{rel_path}/")
                else:
                    self.sync_file(Path(entry.path), destination, rel_path)
            except OSError as exc:
                self.errors.append(f"{rel_path}: {exc}")

        if self.mode.delete:
            self.delete_extraneous(target, rel, {entry.name for entry in entries})

    def prepare_dir(self, destination: Path, rel_path: str) -> bool:
        if destination.is_dir() and not destination.is_symlink():
            return True
        if _lexists(destination):
            if not self.mode.force:
                return False
            self.lines.append(f"cd+++++++++ {rel_path}/")
            if not self.mode.dry_run:
                _remove(destination)
                destination.mkdir()
            return True
        self.lines.append(f"cd+++++++++ {rel_path}/")
        if not self.mode.dry_run:
            destination.mkdir()
        return True

    def sync_file(self, source: Path, destination: Path, rel_path: str) -> None:
        if _lexists(destination):
            if not self.mode.force:
                return
            if _same_file(source, destination):
                if _same_permissions(source, destination):
                    return
                self.lines.append(f".f...p..... {rel_path}")
                if not self.mode.dry_run:
                    shutil.copymode(source, destination)
                return
            self.lines.append(f">f.st...... {rel_path}")
            if not self.mode.dry_run:
                _remove(destination)
                _copy_file(source, destination)
            return
        self.lines.append(f">f+++++++++ {rel_path}")
        if not self.mode.dry_run:
            _copy_file(source, destination)

    def sync_link(self, source: Path, destination: Path, rel_path: str) -> None:
        link_target = os.readlink(source)
        if _lexists(destination):
            if not self.mode.force:
                return
            if destination.is_symlink() and os.readlink(destination) == link_target:
                return
            self.lines.append(f"cL.st...... {rel_path} -> {link_target}")
            if not self.mode.dry_run:
                _remove(destination)
                os.symlink(link_target, destination)
            return
        self.lines.append(f"cL+++++++++ {rel_path} -> {link_target}")
        if not self.mode.dry_run:
            os.symlink(link_target, destination)

    def delete_extraneous(self, target: Path, rel: str, keep: set[str]) -> None:
        if not target.is_dir() or target.is_symlink():
            return
        try:
            extraneous = sorted(
                entry
                for entry in os.listdir(target)
                if entry not in keep and not self.excluded(entry)
            )
        except OSError as exc:
            self.errors.append(f"opendir {target}: {exc}")
            return
        for name in extraneous:
            path = target / name
            suffix = "/" if path.is_dir() and not path.is_symlink() else ""
            self.lines.append(f"*deleting   {rel}{name}{suffix}")
            if self.mode.dry_run:
                continue
            try:
                _remove(path)
            except OSError as exc:
                self.errors.append(f"delete {rel}{name}: {exc}")


def _lexists(path: Path) -> bool:
    return os.path.lexists(path)


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _copy_file(source: Path, destination: Path) -> None:
    # copyfile + copymode keep permission bits but not timestamps.
    shutil.copyfile(source, destination)
    shutil.copymode(source, destination)


def _same_file(source: Path, destination: Path) -> bool:
    if destination.is_symlink() or not destination.is_file():
        return False
    return filecmp.cmp(source, destination, shallow=False)


def _same_permissions(source: Path, destination: Path) -> bool:
    return stat.S_IMODE(source.stat().st_mode) == stat.S_IMODE(destination.stat().st_mode)


def select_executor(settings: RuntimeSettings) -> CopyExecutor:
    if settings.copy_backend == "native":
        return NativeExecutor()
    if settings.copy_backend == "rsync" or shutil.which(settings.rsync_binary):
        return RsyncExecutor(settings.rsync_binary)
    return NativeExecutor()


__all__ = ["NativeExecutor", "RsyncExecutor", "select_executor"]
