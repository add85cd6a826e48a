"""Port for the external recursive-copy primitive."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from stencil.domain.sync import CopySpec


@dataclass(frozen=True)
class CopyOutcome:
    returncode: int
    stdout: str = ""
    stderr: str = ""


class CopyExecutor(Protocol):
    name: str

    def run(self, spec: CopySpec) -> CopyOutcome:
        """Carry out ``spec`` and report the primitive's exit status and output."""
