"""Site configuration for Postshelf.

Settings come from ``.postshelf.toml`` at the site root, overridden by
``POSTSHELF_SECTION__KEY`` environment variables.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from postshelf.exceptions import ConfigError

CONFIG_FILENAME = ".postshelf.toml"


def _deep_merge(destination: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Merge source into destination, with source values overwriting."""
    for key, value in source.items():
        if isinstance(value, Mapping) and key in destination and isinstance(destination[key], Mapping):
            destination[key] = _deep_merge(dict(destination[key]), dict(value))
        else:
            destination[key] = value
    return destination


class PathsSettings(BaseModel):
    """Path configuration.

    Relative paths are resolved against ``site_root``.
    """

    site_root: Path = Field(default_factory=Path.cwd, description="Root directory of the content repository")
    posts_dir: Path = Field(default=Path("content/posts"), description="Posts directory")

    @property
    def abs_posts_dir(self) -> Path:
        return self._resolve(self.posts_dir)

    def _resolve(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.site_root / path


class ContentSettings(BaseModel):
    """How post files are found, read and written."""

    extensions: list[str] = Field(default_factory=lambda: [".mdx", ".md"], description="Post file suffixes")
    encoding: str = Field(default="utf-8", description="Encoding used to read and write posts")
    default_extension: str = Field(default=".mdx", description="Suffix for newly created posts")

    @field_validator("extensions")
    @classmethod
    def _dotted(cls, value: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in value]

    @field_validator("default_extension")
    @classmethod
    def _dotted_default(cls, value: str) -> str:
        return value if value.startswith(".") else f".{value}"


class ValidationSettings(BaseModel):
    """Knobs for ``postshelf check``."""

    slug_max_length: int = Field(default=60, ge=1, description="Warn about slugs longer than this")
    require_slug_matches_filename: bool = Field(
        default=False, description="Report posts whose file name differs from their slug"
    )
    fail_on_warnings: bool = Field(default=False, description="Treat warnings as failures")


class PostshelfConfig(BaseSettings):
    """Root configuration.

    Supports environment variable overrides with the pattern
    POSTSHELF_SECTION__KEY (e.g., POSTSHELF_PATHS__POSTS_DIR).
    """

    paths: PathsSettings = Field(default_factory=PathsSettings)
    content: ContentSettings = Field(default_factory=ContentSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="POSTSHELF_",
        env_nested_delimiter="__",
    )

    @classmethod
    def load(cls, site_root: Path | None = None) -> PostshelfConfig:
        """Load configuration from .postshelf.toml and environment variables.

        Priority (highest to lowest):
        1. Environment variables (POSTSHELF_SECTION__KEY)
        2. Config file (.postshelf.toml in site_root)
        3. Defaults

        Raises:
            ConfigError: If the config file cannot be read or holds invalid values.

        """
        root_path = site_root if site_root is not None else Path.cwd()
        config_file = root_path / CONFIG_FILENAME

        file_settings: dict[str, Any] = {}
        if config_file.is_file():
            try:
                with config_file.open("rb") as f:
                    file_settings = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                raise ConfigError(str(config_file), str(exc)) from exc

        try:
            env_settings = cls().model_dump(exclude_unset=True)
            merged_config = _deep_merge(file_settings, env_settings)
            merged_config.setdefault("paths", {})["site_root"] = root_path
            return cls.model_validate(merged_config)
        except ValidationError as exc:
            raise ConfigError(str(config_file), str(exc)) from exc
