"""Runtime settings for the stencil CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from stencil import __version__
from stencil.domain.errors import ConfigError, PathExpansionError
from stencil.utils.paths import STORAGE_DIRNAME, resolve_path, storage_root

CONFIG_FILENAME = "config.yaml"
COPY_BACKENDS = ("auto", "rsync", "native")

_DISABLE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    template_dir: Path
    log_dir: Path
    copy_backend: str = "auto"
    rsync_binary: str = "rsync"
    telemetry: bool = True
    cli_version: str = __version__

    @property
    def config_file(self) -> Path:
        return self.home_dir / CONFIG_FILENAME

    @property
    def telemetry_file(self) -> Path:
        return self.log_dir / "telemetry.jsonl"


def _default_home_dir(environ: Mapping[str, str]) -> Path:
    override = environ.get("STENCIL_HOME")
    try:
        if override:
            return Path(resolve_path(override, environ=environ))
        return storage_root(environ)
    except PathExpansionError as exc:
        raise ConfigError(f"Invalid STENCIL_HOME: {exc}") from exc


def _default_settings(base: Path) -> RuntimeSettings:
    return RuntimeSettings(home_dir=base, template_dir=base / "templates", log_dir=base / "logs")


def _read_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    return data


def _config_path(value: Any, base: Path, environ: Mapping[str, str], key: str) -> Path:
    try:
        return Path(resolve_path(str(value), base, environ=environ))
    except PathExpansionError as exc:
        raise ConfigError(f"Invalid '{key}' in configuration: {exc}") from exc


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() not in _DISABLE_VALUES
    raise ConfigError(f"'{key}' must be a boolean")


def load_settings(environ: Mapping[str, str] | None = None) -> RuntimeSettings:
    """Build settings from ``STENCIL_HOME``, its ``config.yaml`` and env overrides."""
    env = os.environ if environ is None else environ
    settings = _default_settings(_default_home_dir(env))
    data = _read_config(settings.config_file)

    overrides: dict[str, Any] = {}
    for key in ("template_dir", "log_dir"):
        if key in data:
            overrides[key] = _config_path(data[key], settings.home_dir, env, key)
    if "copy_backend" in data:
        overrides["copy_backend"] = str(data["copy_backend"]).strip().lower()
    if "rsync_binary" in data:
        overrides["rsync_binary"] = str(data["rsync_binary"])
    if "telemetry" in data:
        overrides["telemetry"] = _as_bool(data["telemetry"], "telemetry")

    if env.get("STENCIL_COPY_BACKEND"):
        overrides["copy_backend"] = env["STENCIL_COPY_BACKEND"].strip().lower()
    if env.get("STENCIL_TELEMETRY"):
        overrides["telemetry"] = _as_bool(env["STENCIL_TELEMETRY"], "STENCIL_TELEMETRY")

    settings = replace(settings, **overrides)
    if settings.copy_backend not in COPY_BACKENDS:
        raise ConfigError(
            f"Unknown copy backend '{settings.copy_backend}' (expected one of: {', '.join(COPY_BACKENDS)})"
        )
    return settings


SETTINGS_ERROR: ConfigError | None = None
try:
    SETTINGS = load_settings()
except ConfigError as _exc:
    # Reported by the CLI before any command runs.
    SETTINGS_ERROR = _exc
    SETTINGS = _default_settings(Path(STORAGE_DIRNAME))
