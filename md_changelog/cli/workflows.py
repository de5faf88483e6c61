"""Changelog workflows behind the kc commands.

Nothing here prompts or prints, commands handle confirmation and output and
the workflows raise `NothingToDoError` when there is nothing to act on.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path

from md_changelog.config import CONFIG_FILENAME, ChangelogConfig, resolve_label
from md_changelog.errors import ChangelogError, LabelMatchError, NothingToDoError
from md_changelog.files import (
    DEFAULT_CHANGELOG_NAME,
    save_changelog,
    validate_changelog,
)
from md_changelog.models import UNLABELED, Changelog, Release
from md_changelog.parser import parse_changelog
from md_changelog.renderer import render_changelog
from md_changelog.settings import ChangelogSettings
from md_changelog.templates import (
    DEFAULT_TEMPLATE,
    TEMPLATES,
    FileKind,
    render_template,
)
from md_changelog.versions import (
    UNRELEASED,
    BumpType,
    ReleaseVersion,
    is_version,
)

logger = logging.getLogger(__name__)
NO_CHANGES = "No changes."
NO_MATCHES = "No matches."


@dataclass
class KcContext:
    """Loads the config and changelog once per command."""

    settings: ChangelogSettings

    @cached_property
    def config(self) -> ChangelogConfig:
        return self.settings.load_config()

    @cached_property
    def changelog(self) -> Changelog:
        return self.settings.load_changelog(self.config)

    def save(self) -> Path:
        validate_changelog(self.changelog, self.config)
        return save_changelog(self.changelog, self.config)


def without_links(config: ChangelogConfig) -> ChangelogConfig:
    return config.model_copy(update={"write_release_links": False})


def init_file_text(
    kind_value: str,
    template_value: str = "",
    *,
    title: str,
    repository: str,
) -> tuple[FileKind, str]:
    kind = FileKind(resolve_label(list(FileKind), kind_value, kind="file type"))
    names = sorted(TEMPLATES[kind])
    template_value = template_value or DEFAULT_TEMPLATE
    try:
        name = resolve_label(names, template_value, kind=f"{kind} template")
    except LabelMatchError:
        if template_value == DEFAULT_TEMPLATE:
            raise ChangelogError(
                f"{kind}: no default value. Try one of: {' | '.join(names)}"
            ) from None
        raise
    return kind, render_template(kind, name, title=title, repository=repository)


def init_destination(settings: ChangelogSettings, kind: FileKind) -> Path:
    if kind == FileKind.CONFIG:
        path = settings.config or settings.work_dir / CONFIG_FILENAME
    else:
        path = settings.changelog or settings.work_dir / DEFAULT_CHANGELOG_NAME
    if path.exists():
        raise ChangelogError(f"{path}: file already exists")
    return path


def list_versions(changelog: Changelog, pattern: str = "*") -> list[str]:
    return [
        release.version
        for release in changelog.match(pattern or "*")
        if not release.unreleased
    ]


def list_details(changelog: Changelog, pattern: str = "*") -> list[str]:
    return [release.details() for release in changelog.match(pattern or "*")]


def select_releases(changelog: Changelog, pattern: str, action: str) -> list[Release]:
    """Head release without a pattern, else the matches excluding Unreleased."""
    if changelog.empty:
        raise NothingToDoError(f"Nothing to {action}.")
    if not pattern:
        head = changelog.head()
        assert head
        return [head]
    if selected := [
        release for release in changelog.match(pattern) if not release.unreleased
    ]:
        return selected
    raise NothingToDoError(NO_MATCHES)


def show_text(changelog: Changelog, config: ChangelogConfig, pattern: str = "") -> str:
    shown = Changelog(
        path=changelog.path, releases=select_releases(changelog, pattern, "show")
    )
    return render_changelog(shown, without_links(config))


def delete_releases(changelog: Changelog, releases: list[Release]) -> None:
    head = changelog.head()
    if len(releases) == 1 and releases[0] is head:
        changelog.pop()
        logger.info(f"deleted release {head}")
        return
    changelog.delete(*(release.version for release in releases))


def sort_changelog(changelog: Changelog) -> None:
    if len(changelog.releases) < 2:
        raise NothingToDoError("No or too few releases to sort.")
    changelog.sort()


def _unreleased_with_changes(changelog: Changelog) -> Release:
    unreleased = changelog.unreleased()
    if unreleased is None or unreleased.is_empty:
        raise NothingToDoError("No unreleased changes.")
    return unreleased


def is_release_merge(changelog: Changelog, target: str) -> bool:
    return is_version(target) and changelog.has(target)


def release_changelog(
    changelog: Changelog,
    target: str = BumpType.PATCH,
    *,
    today: datetime.date | None = None,
    reset_date: bool = False,
) -> Release:
    """Releases the Unreleased section.

    `target` is a bump type (prefix matched), a new version or an existing
    version that the unreleased changes are merged into.
    """
    unreleased = _unreleased_with_changes(changelog)
    today = today or datetime.date.today()
    changelog.sort()
    if is_release_merge(changelog, target):
        return merge_unreleased(changelog, unreleased, target, today, reset_date)
    if is_version(target):
        version = target
    else:
        bump_type = resolve_label(list(BumpType), target, kind="version number")
        head = changelog.head()
        previous = changelog.at(1) if head is unreleased else head
        version = str(ReleaseVersion.from_previous(previous).bump(BumpType(bump_type)))
    released = changelog.release(version, today)
    assert released
    logger.info(f"released {released}")
    return released


def merge_unreleased(
    changelog: Changelog,
    unreleased: Release,
    version: str,
    today: datetime.date,
    reset_date: bool,
) -> Release:
    existing = changelog.get(version)
    assert existing, f"no release {version} to merge into"
    changelog.releases = [r for r in changelog.releases if r is not unreleased]
    existing.merge(unreleased)
    if reset_date:
        existing.date = today
    logger.info(f"merged {unreleased.details()} into {existing}")
    return existing


def unrelease_changelog(changelog: Changelog) -> Release:
    head = changelog.head()
    if head is None or (len(changelog.releases) == 1 and head.unreleased):
        raise NothingToDoError("Nothing to unrelease.")
    if head.unreleased:
        previous = changelog.at(1)
        assert previous
        previous.merge(head)
        changelog.releases = [r for r in changelog.releases if r is not previous]
        changelog.releases[0] = previous
        head = previous
    head.version = UNRELEASED
    head.date = None
    head.link = ""
    return head


def release_edit_text(release: Release, config: ChangelogConfig) -> str:
    return render_changelog(Changelog(releases=[release]), without_links(config))


def apply_release_edit(
    changelog: Changelog,
    release: Release,
    config: ChangelogConfig,
    edited: str | None,
) -> None:
    """Replaces `release` with the edited text, an empty edit deletes it."""
    if edited is None:
        raise NothingToDoError(NO_CHANGES)
    edited_log = parse_changelog(edited, config)
    validate_changelog(edited_log, config)
    for edited_release in edited_log.releases:
        edited_release.link = release.link
    if edited_log.releases == [release]:
        raise NothingToDoError(NO_CHANGES)
    match edited_log.releases:
        case []:
            changelog.releases = [r for r in changelog.releases if r is not release]
            logger.info(f"deleted release {release}")
        case [modified]:
            if not modified.is_version(release.version) and changelog.has(
                modified.version
            ):
                raise ChangelogError(f"{modified.version} is already released")
            modified.link = release.link.replace(release.version, modified.version)
            index = next(i for i, r in enumerate(changelog.releases) if r is release)
            changelog.releases[index] = modified
        case releases:
            versions = ", ".join(str(r) for r in releases)
            raise ChangelogError(
                f"Release split off into {len(releases)} releases: {versions}"
            )


def change_label(config: ChangelogConfig, label: str) -> str:
    if not config.labels:
        return UNLABELED
    return resolve_label(config.labels, label)


def split_change_args(config: ChangelogConfig, args: list[str]) -> tuple[str, str]:
    """`[LABEL] TEXT...` when labels are configured, otherwise only `TEXT...`."""
    if not args:
        return "", ""
    if config.labels:
        return args[0], " ".join(args[1:]).strip()
    return "", " ".join(args).strip()


def add_change(
    changelog: Changelog, config: ChangelogConfig, label: str, text: str | None
) -> Release:
    label = change_label(config, label)
    text = (text or "").strip()
    if not text:
        raise NothingToDoError(NO_CHANGES)
    return changelog.push_change(label, text)
