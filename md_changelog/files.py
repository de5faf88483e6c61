from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from zero_3rdparty.file_utils import ensure_parents_write_text

from md_changelog.config import ChangelogConfig
from md_changelog.errors import (
    ChangelogIOError,
    ChangelogNotFoundError,
    MultipleChangelogsError,
)
from md_changelog.models import Changelog
from md_changelog.parser import parse_changelog, parse_changelog_file
from md_changelog.renderer import render_changelog

logger = logging.getLogger(__name__)
DEFAULT_CHANGELOG_NAME = "CHANGELOG.md"
CHANGELOG_NAMES = [
    "CHANGELOG",
    "NEWS",
    "RELEASE",
    "RELEASES",
    "RELEASE-NOTES",
    "RELEASE_NOTES",
    "RELEASENOTES",
]
_changelog_name_regex = re.compile(
    rf"^(?:{'|'.join(CHANGELOG_NAMES)})\.md$", re.IGNORECASE
)
_SEARCH_SUBDIRS = ("doc", "docs")


def is_changelog_name(filename: str) -> bool:
    return bool(_changelog_name_regex.match(filename))


def _ancestors(start_dir: Path) -> Iterable[Path]:
    """Keeps relative paths relative: '.', '..', '../..' up to the root."""
    directory = start_dir
    yield directory
    for _ in start_dir.resolve().parents:
        directory = directory / ".."
        yield directory


def _changelogs_in(directory: Path) -> list[Path]:
    matches = []
    for search_dir in [directory, *(directory / sub for sub in _SEARCH_SUBDIRS)]:
        if not search_dir.is_dir():
            continue
        matches.extend(
            path
            for path in sorted(search_dir.iterdir())
            if path.is_file() and is_changelog_name(path.name)
        )
    return matches


def find_changelog(start_dir: Path) -> Path:
    for directory in _ancestors(start_dir):
        matches = _changelogs_in(directory)
        if len(matches) == 1:
            logger.debug(f"found changelog {matches[0]}")
            return matches[0]
        if matches:
            raise MultipleChangelogsError(matches)
    raise ChangelogNotFoundError(start_dir)


def load_changelog(
    path: Path | None,
    config: ChangelogConfig,
    start_dir: Path | None = None,
) -> Changelog:
    if path is None:
        path = find_changelog(start_dir or Path("."))
    changelog = parse_changelog_file(path, config)
    changelog.path = str(path)
    return changelog


def validate_changelog(changelog: Changelog, config: ChangelogConfig) -> None:
    """Renders and re-parses, errors are positioned against the rendered text."""
    text = render_changelog(changelog, config)
    parse_changelog(text, config, name=changelog.path)


def save_changelog(changelog: Changelog, config: ChangelogConfig) -> Path:
    assert changelog.path, "changelog has no path to save to"
    path = Path(changelog.path)
    text = render_changelog(changelog, config)
    try:
        ensure_parents_write_text(path, text)
    except OSError as e:
        raise ChangelogIOError(path, e.strerror or str(e)) from e
    logger.info(f"saved {path}")
    return path
