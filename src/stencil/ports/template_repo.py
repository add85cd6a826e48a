"""Port definitions for template storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from stencil.domain.template import Template, TemplateDescriptor


class TemplateRepository(ABC):
    @abstractmethod
    def discover_all(self) -> List[Template]:
        """Return every template under the storage root, sorted by identity."""

    @abstractmethod
    def find(self, query: str) -> Template | None:
        """Return the template whose identity or descriptor name matches ``query``."""

    @abstractmethod
    def save_descriptor(self, descriptor: TemplateDescriptor, directory: Path) -> Path:
        """Write ``descriptor`` as the template config inside ``directory``."""
