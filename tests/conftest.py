from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = Path(tempfile.mkdtemp(prefix="stencil-home-"))
os.environ["STENCIL_HOME"] = str(SANDBOX_HOME)
os.environ.setdefault("STENCIL_TELEMETRY", "0")
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from stencil.domain.template import TEMPLATE_CONFIG_FILE  # noqa: E402
from stencil.settings import RuntimeSettings  # noqa: E402


def write_template(root: Path, identity: str, descriptor: str = "", files: dict[str, str] | None = None) -> Path:
    directory = root.joinpath(*identity.split("/"))
    directory.mkdir(parents=True, exist_ok=True)
    (directory / TEMPLATE_CONFIG_FILE).write_text(descriptor, encoding="utf-8")
    for relative, content in (files or {}).items():
        target = directory / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return directory


@pytest.fixture()
def runtime_settings(tmp_path: Path) -> RuntimeSettings:
    home = tmp_path / "stencil-home"
    template_dir = home / "templates"
    log_dir = home / "logs"
    return RuntimeSettings(
        home_dir=home,
        template_dir=template_dir,
        log_dir=log_dir,
        copy_backend="native",
        telemetry=True,
    )


@pytest.fixture()
def make_template():
    return write_template


@pytest.fixture()
def template_root(runtime_settings: RuntimeSettings) -> Path:
    runtime_settings.template_dir.mkdir(parents=True, exist_ok=True)
    return runtime_settings.template_dir
