"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, cdpgen.toml only contains overrides.
An empty (or absent) cdpgen.toml generates the upstream protocol as-is.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_SOURCE_URLS: list[str] = [
    "https://raw.githubusercontent.com/ChromeDevTools/devtools-protocol/master/json/browser_protocol.json",
    "https://raw.githubusercontent.com/ChromeDevTools/devtools-protocol/master/json/js_protocol.json",
]


class GeneratorConfig(BaseModel):
    """[generator] section."""

    model_config = {"frozen": True}

    derive_default: bool = True
    emit_dependency_imports: bool = True
    inline_enum_domain_prefix: bool = False
    skip_serializing_none: bool = True
    experimental_notes: bool = True
    protocol_root: list[str] = Field(default_factory=lambda: ["crate", "protocol"])
    util_root: list[str] = Field(default_factory=lambda: ["crate", "util"])
    derives: list[str] = Field(
        default_factory=lambda: ["Debug", "Clone", "serde::Serialize", "serde::Deserialize"]
    )
    lint_allows: list[str] = Field(
        default_factory=lambda: ["deprecated", "unused_imports", "clippy::enum_variant_names"]
    )
    title: str = "Chrome DevTools Protocol"

    def derive_list(self) -> tuple[str, ...]:
        """Derives for every struct and enum, with ``Default`` when enabled."""
        derives = list(self.derives)
        if self.derive_default and "Default" not in derives:
            derives.insert(min(2, len(derives)), "Default")
        return tuple(derives)


class SourcesConfig(BaseModel):
    """[sources] section."""

    model_config = {"frozen": True}

    urls: list[str] = Field(default_factory=lambda: list(DEFAULT_SOURCE_URLS))
    cache_dir: str = ".cdpgen/cache"
    timeout: float = 30.0
    offline: bool = False


class OutputConfig(BaseModel):
    """[output] section."""

    model_config = {"frozen": True}

    path: str | None = None

