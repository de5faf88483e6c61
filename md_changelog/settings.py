from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from md_changelog.config import ChangelogConfig, load_config
from md_changelog.files import load_changelog
from md_changelog.models import Changelog

ENV_PREFIX = "KC_"


class ChangelogSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)

    DEFAULT_MAX_ERROR_COUNT: ClassVar[int] = 5

    changelog: Path | None = Field(
        default=None,
        description="Changelog file, searched for in `work_dir` and up when unset.",
    )
    config: Path | None = Field(
        default=None,
        description="Config file, the closest .kcrc is used when unset.",
    )
    max_error_count: int = Field(
        default=DEFAULT_MAX_ERROR_COUNT,
        description="Parse errors shown before the rest are summarized.",
    )
    log_level: str = "WARNING"
    work_dir: Path = Field(default_factory=Path)

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        value = value.upper()
        assert value in logging.getLevelNamesMapping(), f"unknown log level: {value}"
        return value

    def load_config(self) -> ChangelogConfig:
        return load_config(self.config, start_dir=self.work_dir)

    def load_changelog(self, config: ChangelogConfig) -> Changelog:
        return load_changelog(self.changelog, config, start_dir=self.work_dir)
