"""GlossConfig: project-local config for a gloss corpus.

Default layout (all relative to the project root):

    gloss.toml            # project config
    data/
        gloss/
            <language>/
                <slug>.json

gloss.toml example:

    [gloss]
    name = "my-corpus"
    data_root = "data"
    native_language = "eng"

    [logging]
    level = "warning"

GLOSS_DATA_ROOT in the environment overrides [gloss].data_root.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_CONFIG_FILENAME = "gloss.toml"
_DEFAULT_DATA_ROOT = "data"
_DEFAULT_NATIVE_LANGUAGE = "eng"
_DEFAULT_LOG_LEVEL = "warning"
_DATA_ROOT_ENV = "GLOSS_DATA_ROOT"


@dataclass
class LoggingConfig:
    level: str = _DEFAULT_LOG_LEVEL


@dataclass
class GlossConfig:
    """Resolved configuration for a gloss corpus."""

    root: Path                      # directory that contains gloss.toml
    name: str = ""
    data_root: Path = field(default_factory=Path)
    native_language: str = _DEFAULT_NATIVE_LANGUAGE
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_path(self) -> Path:
        return self.root / _CONFIG_FILENAME

    def ensure_dirs(self) -> None:
        (self.data_root / "gloss").mkdir(parents=True, exist_ok=True)


def load_config(root: Path | str | None = None) -> GlossConfig:
    """Load gloss.toml from root (or search upward from cwd if root is None)."""
    root_path = _find_root(Path(root) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            try:
                raw = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {config_path}: {exc}"
                raise ValueError(msg) from exc

    gloss_section = raw.get("gloss", {})
    log_section = raw.get("logging", {})

    data_rel = os.environ.get(_DATA_ROOT_ENV) or gloss_section.get("data_root", _DEFAULT_DATA_ROOT)

    return GlossConfig(
        root=root_path,
        name=gloss_section.get("name", root_path.name),
        data_root=root_path / data_rel,   # absolute data_rel wins over root_path
        native_language=str(gloss_section.get("native_language", _DEFAULT_NATIVE_LANGUAGE)),
        logging=LoggingConfig(
            level=str(log_section.get("level", _DEFAULT_LOG_LEVEL)),
        ),
    )


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for gloss.toml."""
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def init_config(root: Path, name: str | None = None) -> Path:
    """Write a default gloss.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"gloss.toml already exists at {config_path}"
        raise FileExistsError(msg)

    project_name = name or root.name
    content = f"""\
[gloss]
name = "{project_name}"
# data_root = "data"          # default; GLOSS_DATA_ROOT overrides
# native_language = "eng"     # default language for translation notes

# [logging]
# level = "warning"           # debug | info | warning | error
"""
    config_path.write_text(content)
    return config_path
