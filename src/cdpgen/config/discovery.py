"""Config file discovery and the project root it implies.

Walk-up finder locates cdpgen.toml, similar to how git finds .git/.
Supports CDPGEN_CONFIG env var and --config CLI flag overrides.

The directory holding the config file becomes the project root: the
cache directory and the output path in ``cdpgen.toml`` are written
relative to it, so ``cdpgen generate`` produces the same file from any
subdirectory of the crate.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

CONFIG_FILENAME = "cdpgen.toml"
CONFIG_ENV_VAR = "CDPGEN_CONFIG"

logger = logging.getLogger(__name__)


class ConfigFileError(click.ClickException):
    """The config file named on the command line is missing or not valid TOML."""


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for cdpgen.toml.

    Returns the path to the config file, or None if not found.
    Checks CDPGEN_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path).expanduser()
        if p.is_file():
            return p
        logger.warning("%s points to missing file %s; using defaults", CONFIG_ENV_VAR, p)
        return None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


@dataclass(frozen=True)
class ConfigLocation:
    """The config file in effect (if any) and the root relative paths resolve against."""

    path: Path | None
    root: Path

    def resolve(self, value: str | Path) -> Path:
        """Resolve *value* against :attr:`root` unless absolute (``~`` expanded)."""
        path = Path(value).expanduser()
        return path if path.is_absolute() else self.root / path

    def read(self) -> dict[str, Any]:
        """Parsed TOML tables, or ``{}`` without a config file.

        Raises:
            ConfigFileError: The file is not valid TOML.
        """
        if self.path is None:
            return {}
        try:
            return tomllib.loads(self.path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {self.path}: {exc}"
            raise ConfigFileError(msg) from exc


def locate(
    config_path: str | Path | None = None,
    *,
    start: Path | None = None,
    project_root: Path | None = None,
) -> ConfigLocation:
    """Decide which config file applies and where the project root is.

    An explicit *config_path* must exist. Otherwise the file is
    discovered from *start* (default: *project_root*, then cwd). The root
    is *project_root* when given, else the config file's directory, else
    the starting directory.

    Raises:
        ConfigFileError: *config_path* names a file that does not exist.
    """
    path: Path | None
    if config_path:
        path = Path(config_path).expanduser()
        if not path.is_file():
            msg = f"Config file not found: {path}"
            raise ConfigFileError(msg)
    else:
        path = find_config(start or project_root)

    if project_root is not None:
        root = project_root
    elif path is not None:
        root = path.parent.resolve()
    else:
        root = start or Path.cwd()
    logger.debug("Config %s, project root %s", path or "(defaults)", root)
    return ConfigLocation(path=path, root=root)
