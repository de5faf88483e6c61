from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar, Iterable

from model_lib.errors import PayloadError
from model_lib.model_base import Entity
from model_lib.serialize import dump
from model_lib.serialize.parse import parse_model
from pydantic import Field, ValidationError
from zero_3rdparty.enum_utils import StrEnum

from md_changelog.errors import ChangelogIOError, InvalidConfigError, LabelMatchError
from md_changelog.versions import match_prefix

logger = logging.getLogger(__name__)
CONFIG_FILENAME = ".kcrc"


class LinkKey(StrEnum):
    UNRELEASED = "unreleased"
    RELEASE = "release"
    INITIAL_RELEASE = "initial-release"
    MENTION = "mention"


def default_labels() -> list[str]:
    return ["Added", "Removed", "Changed", "Security", "Fixed", "Deprecated"]


class ChangesConfig(Entity):
    labels: list[str] | None = None


class ChangelogConfig(Entity):
    BUILTIN_PATH: ClassVar[str] = "<builtin>"

    links: dict[str, str] = Field(
        default_factory=dict,
        description=f"Link templates, one of {list(LinkKey)}",
    )
    changes: ChangesConfig = Field(default_factory=ChangesConfig)
    path: str = Field(default="", exclude=True)
    write_release_links: bool = Field(
        default=True,
        exclude=True,
        description="Append [version]: link references after the releases",
    )

    @property
    def labels(self) -> list[str]:
        return self.changes.labels or []

    def link_template(self, key: LinkKey) -> str:
        return self.links.get(str(key), "")

    def merge(self, other: ChangelogConfig) -> None:
        self.links = self.links | other.links
        if other.changes.labels is not None:
            self.changes.labels = list(other.changes.labels)
        if other.path:
            self.path = other.path

    def dump_toml(self) -> str:
        raw: dict = {}
        if self.links:
            raw["links"] = dict(self.links)
        if self.changes.labels is not None:
            raw["changes"] = {"labels": list(self.changes.labels)}
        return dump(raw, "toml")


def default_config() -> ChangelogConfig:
    return ChangelogConfig(
        path=ChangelogConfig.BUILTIN_PATH,
        changes=ChangesConfig(labels=default_labels()),
    )


def resolve_label(
    labels: Iterable[str], value: str, kind: str = "change label"
) -> str:
    """Case-insensitive exact match, otherwise a unique prefix match.

    >>> resolve_label(["Added", "Removed"], "ad")
    'Added'
    """
    labels = list(labels)
    if exact := [label for label in labels if label.lower() == value.lower()]:
        return exact[0]
    matches = match_prefix(labels, value) if value else []
    if len(matches) != 1:
        raise LabelMatchError(value, labels, kind, matches)
    return matches[0]


def parse_config(path: Path) -> ChangelogConfig:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ChangelogIOError(path, e.strerror or str(e)) from e
    try:
        config = parse_model(text, t=ChangelogConfig, format="toml")
    except PayloadError as e:
        raise InvalidConfigError(path, e.message) from e
    except ValidationError as e:
        raise InvalidConfigError(path, str(e)) from e
    config.path = str(path)
    return config


def find_config(start_dir: Path) -> Path | None:
    for directory in [start_dir, *start_dir.resolve().parents]:
        if (candidate := directory / CONFIG_FILENAME).exists():
            return candidate
    return None


def load_config(
    path: Path | None = None, start_dir: Path | None = None
) -> ChangelogConfig:
    """Builtin config merged with an explicit `path` or the closest .kcrc file."""
    config = default_config()
    if path is None:
        path = find_config(start_dir or Path.cwd())
        if path is None:
            logger.debug("no config file found, using builtin config")
            return config
    config.merge(parse_config(path))
    logger.info(f"config loaded from {path}")
    return config
