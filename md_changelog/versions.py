from __future__ import annotations

import re
from dataclasses import dataclass
from fnmatch import fnmatchcase
from functools import cmp_to_key
from typing import TYPE_CHECKING, Callable, Iterable, Sequence

from zero_3rdparty.enum_utils import StrEnum

if TYPE_CHECKING:
    from md_changelog.models import Release

UNRELEASED = "Unreleased"
GLOB_CHARS = "*?["
_version_regex = re.compile(r"(\d+)\.(\d+)\.(\d+)")


def is_unreleased(version: str) -> bool:
    return version.lower() == UNRELEASED.lower()


def version_numbers(version: str) -> tuple[int, int, int] | None:
    if match := _version_regex.search(version):
        major, minor, patch = match.groups()
        return int(major), int(minor), int(patch)
    return None


def compare_versions(a: str, b: str) -> int:
    """Negative when `a` should be listed before `b` (newest first).

    >>> compare_versions("1.10.0", "1.9.0")
    -1
    >>> compare_versions("Unreleased", "2.0.0")
    -1
    >>> compare_versions("1.0.0", "1.0.0-rc1")
    0
    """
    numbers_a, numbers_b = version_numbers(a), version_numbers(b)
    if numbers_a is None or numbers_b is None:
        # not semver (e.g. Unreleased): lexicographic, descending
        return (a < b) - (a > b)
    return (numbers_a < numbers_b) - (numbers_a > numbers_b)


def sort_releases(releases: Sequence[Release]) -> list[Release]:
    releases = list(releases)
    start = 1 if releases and releases[0].unreleased else 0
    tail = sorted(
        releases[start:],
        key=cmp_to_key(lambda a, b: compare_versions(a.version, b.version)),
    )
    return releases[:start] + tail


def is_glob(pattern: str) -> bool:
    return any(char in pattern for char in GLOB_CHARS)


def match_version(pattern: str, version: str) -> bool:
    if is_glob(pattern):
        return fnmatchcase(version.lower(), pattern.lower())
    return version.lower().startswith(pattern.lower())


def match_releases(releases: Iterable[Release], pattern: str) -> list[Release]:
    return [release for release in releases if match_version(pattern, release.version)]


def match_prefix(values: Iterable[str], prefix: str) -> list[str]:
    return [value for value in values if value.lower().startswith(prefix.lower())]


def match_pattern(values: Iterable[str], pattern: str) -> list[str]:
    return [value for value in values if match_version(pattern, value)]


class BumpType(StrEnum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


@dataclass
class ReleaseVersion:
    major: int
    minor: int
    patch: int
    extra: str = ""

    @classmethod
    def default(cls) -> ReleaseVersion:
        return cls(0, 0, 0)

    @classmethod
    def parse(cls, raw: str) -> ReleaseVersion:
        match = _version_regex.search(raw)
        assert match, f"Invalid version string: {raw}"
        major, minor, patch = match.groups()
        return cls(int(major), int(minor), int(patch), raw[match.end() :])

    @classmethod
    def from_previous(cls, previous: Release | None) -> ReleaseVersion:
        if previous is None or version_numbers(previous.version) is None:
            return cls.default()
        return cls.parse(previous.version)

    def bump_major(self) -> ReleaseVersion:
        return ReleaseVersion(self.major + 1, 0, 0)

    def bump_minor(self) -> ReleaseVersion:
        return ReleaseVersion(self.major, self.minor + 1, 0)

    def bump_patch(self) -> ReleaseVersion:
        return ReleaseVersion(self.major, self.minor, self.patch + 1)

    def bump(self, bump_type: BumpType) -> ReleaseVersion:
        return _bumps[bump_type](self)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}{self.extra}"


_bumps: dict[BumpType, Callable[[ReleaseVersion], ReleaseVersion]] = {
    BumpType.MAJOR: ReleaseVersion.bump_major,
    BumpType.MINOR: ReleaseVersion.bump_minor,
    BumpType.PATCH: ReleaseVersion.bump_patch,
}
_missing_bumps = [bump for bump in list(BumpType) if bump not in _bumps]
assert not _missing_bumps, f"missing bump for ReleaseVersion: {_missing_bumps}"


def is_version(raw: str) -> bool:
    return version_numbers(raw) is not None
