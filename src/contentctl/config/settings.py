"""ContentSettings: one frozen object built from flags, environment, and TOML.

Sources, strongest first:

1. keyword arguments (the global CLI flags)
2. ``CONTENTCTL_*`` environment variables; nested sections use ``__``,
   e.g. ``CONTENTCTL_CODEC__FOLD_THRESHOLD=80``
3. ``contentctl.toml``
4. the defaults in :mod:`contentctl.config.models`

Content directories are relative to ``content_root``, which is the
directory holding the config file unless ``--root`` names another.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from contentctl.config.discovery import find_config
from contentctl.config.models import ArticlesConfig, CodecConfig, ContentConfig, CoursesConfig


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the sections of one ``contentctl.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data = _read_toml(toml_path) if toml_path and toml_path.is_file() else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# The TOML path for the settings object under construction. pydantic-settings
# builds sources in a classmethod, so it cannot be passed as an argument.
_building = threading.local()


class ContentSettings(BaseSettings):
    """Everything a command or service reads from configuration.

    Attributes:
        content_root: Base directory of the content directories.
        config_path: The ``contentctl.toml`` in effect, or None.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_prefix="CONTENTCTL_",
        env_nested_delimiter="__",
    )

    content_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    content: ContentConfig = Field(default_factory=ContentConfig)
    codec: CodecConfig = Field(default_factory=CodecConfig)
    courses: CoursesConfig = Field(default_factory=CoursesConfig)
    articles: ArticlesConfig = Field(default_factory=ArticlesConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, getattr(_building, "toml_path", None)),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        content_root: Path | None = None,
        **cli_flags: Any,
    ) -> ContentSettings:
        """Build settings for one CLI invocation.

        An explicit *config_path* must exist. Otherwise the config is
        searched for upwards from *content_root* (or the cwd).

        Raises:
            click.ClickException: If the config file is missing or not valid TOML.
        """
        if config_path:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(content_root)

        if content_root is None:
            content_root = toml_path.parent if toml_path else Path.cwd()

        _building.toml_path = toml_path
        try:
            return cls(content_root=content_root, config_path=toml_path, **cli_flags)
        finally:
            _building.toml_path = None

    @property
    def articles_path(self) -> Path:
        return self.content_root / self.content.articles_dir

    @property
    def courses_path(self) -> Path:
        return self.content_root / self.content.courses_dir

    @property
    def projects_path(self) -> Path:
        return self.content_root / self.content.projects_dir
