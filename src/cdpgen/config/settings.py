"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``CDPGEN_*`` prefix
  3. TOML file    — ``cdpgen.toml`` found by :func:`cdpgen.config.discovery.locate`
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` fed
by the already-parsed config tables.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from cdpgen.config.discovery import ConfigLocation, locate
from cdpgen.config.models import GeneratorConfig, OutputConfig, SourcesConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Expose the tables of ``cdpgen.toml`` as a settings source."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._data = data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for the parsed TOML tables during construction.
_tls = threading.local()


class CdpSettings(BaseSettings):
    """Unified settings for the cdpgen CLI.

    Stored on :class:`~cdpgen.commands._context.AppContext` at the CLI
    root level and handed to every service.

    Attributes:
        project_root: Directory relative paths resolve against (parent of
            ``cdpgen.toml``, or CWD if no config found).
        config_path: The config file in effect, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CDPGEN_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        data = getattr(_tls, "toml_data", None) or {}
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, data),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> CdpSettings:
        """Construct settings from a CLI invocation.

        Locates ``cdpgen.toml`` (explicit *config_path*, ``CDPGEN_CONFIG``,
        or walk-up), takes the project root from it, and merges CLI flags
        as highest-priority overrides.

        Raises:
            ConfigFileError: The config file is missing or not valid TOML.
        """
        location = locate(config_path, project_root=project_root)
        _tls.toml_data = location.read()
        try:
            return cls(
                project_root=location.root,
                config_path=location.path,
                **cli_flags,
            )
        finally:
            _tls.toml_data = None

    @property
    def location(self) -> ConfigLocation:
        return ConfigLocation(path=self.config_path, root=self.project_root)

    def resolve_path(self, value: str | Path) -> Path:
        """Resolve *value* against :attr:`project_root` unless absolute."""
        return self.location.resolve(value)

    @property
    def cache_dir(self) -> Path:
        return self.resolve_path(self.sources.cache_dir)

    @property
    def output_path(self) -> Path | None:
        """``[output].path`` resolved against the project root, if set."""
        return self.resolve_path(self.output.path) if self.output.path else None
