from __future__ import annotations

import datetime
import logging
from typing import Iterable

from model_lib.model_base import Entity
from pydantic import Field

from md_changelog.errors import IncompatibleChangesError, pluralize
from md_changelog.versions import (
    UNRELEASED,
    is_unreleased,
    match_releases,
    sort_releases,
)

logger = logging.getLogger(__name__)
UNLABELED = ""


class Release(Entity):
    version: str
    date: datetime.date | None = None
    link: str = ""
    note: str = ""
    changes: dict[str, list[str]] = Field(
        default_factory=dict,
        description="label -> entries, the empty label holds unlabeled changes",
    )

    @classmethod
    def new_unreleased(cls) -> Release:
        return cls(version=UNRELEASED)

    @property
    def unreleased(self) -> bool:
        return is_unreleased(self.version)

    def is_version(self, version: str) -> bool:
        return self.version.lower() == version.lower()

    @property
    def has_unlabeled(self) -> bool:
        return bool(self.changes.get(UNLABELED))

    @property
    def has_labeled(self) -> bool:
        return any(
            label != UNLABELED and entries for label, entries in self.changes.items()
        )

    @property
    def change_count(self) -> int:
        return sum(len(entries) for entries in self.changes.values())

    @property
    def is_empty(self) -> bool:
        return self.change_count == 0 and not self.note

    def change_labels(self, label_order: Iterable[str] = ()) -> list[str]:
        """Unlabeled first, then `label_order`, then the rest in insertion order."""
        present = [label for label, entries in self.changes.items() if entries]
        ordered = [UNLABELED] if UNLABELED in present else []
        ordered.extend(label for label in label_order if label in present)
        ordered.extend(label for label in present if label not in ordered)
        return ordered

    def check_compatible(self, label: str) -> None:
        if label == UNLABELED and self.has_labeled:
            raise IncompatibleChangesError(self.version, label)
        if label != UNLABELED and self.has_unlabeled:
            raise IncompatibleChangesError(self.version, label)

    def push_change(self, label: str, text: str) -> None:
        """Adds a new entry, leading whitespace is dropped and empty entries ignored."""
        self.check_compatible(label)
        if text := text.lstrip():
            self.changes.setdefault(label, []).append(text)

    def merge_change(self, label: str, text: str) -> None:
        """Appends `text` as a continuation line of the last entry under `label`."""
        entries = self.changes.setdefault(label, [])
        if entries:
            entries[-1] += f"\n{text}"
        else:
            entries.append(text)

    def append_note(self, note: str) -> None:
        if not note:
            return
        self.note = f"{self.note}\n\n{note}" if self.note else note

    def merge(self, other: Release) -> None:
        """Adds the note and changes of `other` after those of this release.

        Label exclusivity is not checked, validate the changelog afterwards.
        """
        self.append_note(other.note)
        for label, entries in other.changes.items():
            if entries:
                self.changes.setdefault(label, []).extend(entries)

    def details(self) -> str:
        count = self.change_count
        return f"{self} ({count} {pluralize('change', count)})"

    def __str__(self) -> str:
        if self.unreleased:
            return f'"{self.version}"'
        return self.version


class Changelog(Entity):
    title: str = ""
    header: str = ""
    releases: list[Release] = Field(default_factory=list)
    path: str = Field(default="", exclude=True)

    @property
    def empty(self) -> bool:
        return not self.releases

    def unreleased(self) -> Release | None:
        return self.get(UNRELEASED)

    def get(self, version: str) -> Release | None:
        return next(
            (release for release in self.releases if release.is_version(version)),
            None,
        )

    def has(self, version: str) -> bool:
        return self.get(version) is not None

    def at(self, index: int) -> Release | None:
        if 0 <= index < len(self.releases):
            return self.releases[index]
        return None

    def head(self) -> Release | None:
        return self.at(0)

    def prepend(self, release: Release) -> None:
        self.releases.insert(0, release)

    def append(self, release: Release) -> None:
        self.releases.append(release)

    def pop(self) -> Release | None:
        if self.empty:
            return None
        return self.releases.pop(0)

    def delete(self, *versions: str) -> None:
        for version in versions:
            if release := self.get(version):
                self.releases = [r for r in self.releases if r is not release]
                logger.info(f"deleted release {release}")

    def match(self, pattern: str) -> list[Release]:
        return match_releases(self.releases, pattern)

    def sort(self) -> None:
        self.releases = sort_releases(self.releases)

    def push_change(self, label: str, text: str) -> Release:
        unreleased = self.unreleased()
        if unreleased is None:
            unreleased = Release.new_unreleased()
            self.prepend(unreleased)
        unreleased.push_change(label, text)
        return unreleased

    def release(
        self, version: str, release_date: datetime.date | None
    ) -> Release | None:
        """Turns the Unreleased section into `version`."""
        if unreleased := self.unreleased():
            unreleased.version = version
            unreleased.date = release_date
        return unreleased

    @property
    def change_count(self) -> int:
        return sum(release.change_count for release in self.releases)
