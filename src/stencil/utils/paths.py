"""Resolution of user-supplied path strings.

``resolve_path`` expands ``~`` and ``$VAR`` / ``${VAR}`` / ``${VAR:-default}``
references first and only then decides whether the result is absolute: the
unexpanded forms are never absolute on their own. Relative results are joined
onto a base directory syntactically, so ``..`` segments and symlinks are left
for the caller to interpret.
"""

from __future__ import annotations

import os
import re
from pathlib import Path, PurePath
from typing import Mapping, Type

from stencil.domain.errors import PathExpansionError

STORAGE_DIRNAME = ".stencil"

_VAR_PATTERN = re.compile(
    r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))"
)


def _home_dir(environ: Mapping[str, str]) -> str:
    home = environ.get("HOME") or environ.get("USERPROFILE")
    if home:
        return home
    try:
        return str(Path.home())
    except RuntimeError as exc:
        raise PathExpansionError(f"Unable to determine home directory: {exc}") from exc


def expand_user(raw: str, environ: Mapping[str, str] | None = None) -> str:
    """Expand a leading ``~`` when it stands alone or is followed by a separator."""
    env = os.environ if environ is None else environ
    if raw == "~" or raw.startswith("~/") or raw.startswith("~\\"):
        return _home_dir(env) + raw[1:]
    return raw


def expand_vars(raw: str, environ: Mapping[str, str] | None = None) -> str:
    """Expand ``$NAME``, ``${NAME}`` and ``${NAME:-default}``; undefined names are errors."""
    env = os.environ if environ is None else environ

    def _substitute(match: re.Match[str]) -> str:
        name = match.group("braced") or match.group("bare")
        value = env.get(name)
        if value is not None and (value or match.group("default") is None):
            return value
        if match.group("default") is not None:
            return match.group("default")
        raise PathExpansionError(f"Environment variable '{name}' is not defined (in '{raw}')")

    return _VAR_PATTERN.sub(_substitute, raw)


def expand(raw: str, environ: Mapping[str, str] | None = None) -> str:
    return expand_vars(expand_user(raw, environ), environ)


def _current_dir(path_type: Type[PurePath]) -> PurePath:
    try:
        return path_type(os.getcwd())
    except OSError:
        return path_type(".")


def resolve_path(
    raw: str,
    base: PurePath | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    path_type: Type[PurePath] = Path,
) -> PurePath:
    """Turn ``raw`` into an absolute path, relative to ``base`` or the working directory.

    ``path_type`` selects the path convention (``Path`` for the host,
    ``PureWindowsPath`` / ``PurePosixPath`` to apply a specific one).
    """
    text = raw.strip()
    if text == ".":
        return path_type(base) if base is not None else _current_dir(path_type)

    expanded = expand(text, environ)
    candidate = path_type(expanded)
    if candidate.is_absolute():
        return candidate

    base_dir = path_type(base) if base is not None else _current_dir(path_type)
    if expanded.startswith("./") or expanded.startswith(".\\"):
        expanded = expanded[2:]
    return base_dir / expanded


def storage_root(environ: Mapping[str, str] | None = None) -> Path:
    """Default storage root, ``~/.stencil``."""
    return Path(resolve_path(f"~/{STORAGE_DIRNAME}", environ=environ))


__all__ = ["expand", "expand_user", "expand_vars", "resolve_path", "storage_root"]
