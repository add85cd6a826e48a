"""Error taxonomy shared by services, adapters and the CLI."""

from __future__ import annotations


class StencilError(RuntimeError):
    """Base class for failures reported at the command boundary."""


class StorageIOError(StencilError):
    """Raised when the filesystem cannot be read or written."""


class PathExpansionError(StencilError):
    """Raised when ``~`` or an environment reference cannot be expanded."""


class DescriptorCodecError(StencilError):
    """Raised when a ``.template.toml`` descriptor is malformed."""


class NotFoundError(StencilError):
    pass


class TemplateNotFoundError(NotFoundError):
    """Raised when no template matches a user query."""


class TargetNotFoundError(NotFoundError):
    """Raised when an existing target directory was required but is missing."""


class AlreadyExistsError(StencilError):
    pass


class InvalidTargetError(StencilError):
    """Raised when a target path exists but is not a directory."""


class ConfigError(StencilError):
    pass


class SyncError(StencilError):
    """Raised when the copy primitive reports failure; ``detail`` is its diagnostic output."""

    def __init__(self, detail: str, *, returncode: int | None = None) -> None:
        self.detail = detail
        self.returncode = returncode
        message = " ".join(detail.split()) or "copy failed"
        if returncode is not None:
            message = f"copy failed (exit {returncode}): {message}"
        super().__init__(message)


__all__ = [
    "AlreadyExistsError",
    "ConfigError",
    "DescriptorCodecError",
    "InvalidTargetError",
    "NotFoundError",
    "PathExpansionError",
    "StencilError",
    "StorageIOError",
    "SyncError",
    "TargetNotFoundError",
    "TemplateNotFoundError",
]
