"""Line prefixes and patterns of the changelog Markdown dialect.

A `ChangelogGrammar` is built once and shared by reference between parsers and
renderers, nothing here is mutated after construction.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime

from zero_3rdparty.enum_utils import StrEnum

ISO_DATE_FORMAT = "%Y-%m-%d"
_DATE_SEPARATORS = str.maketrans({"/": "-", ".": "-"})


class Prefix(StrEnum):
    PASS_THROUGH = "####"
    LABEL = "###"
    RELEASE = "##"
    TITLE = "#"
    CHANGE = "-"
    CHANGE_ALT = "+"
    CHANGE_STAR = "*"
    LINK = "["


class Placeholder(StrEnum):
    CURRENT = "{CURRENT}"
    PREVIOUS = "{PREVIOUS}"
    MENTION = "{MENTION}"
    TITLE = "{TITLE}"
    REPOSITORY = "{REPOSITORY}"

    def interpolate(self, template: str, value: str) -> str:
        return template.replace(self.value, value)


@dataclass(frozen=True)
class ChangelogGrammar:
    unreleased: re.Pattern = field(
        default=re.compile(r"^\s*\[?unreleased\]?$", re.IGNORECASE)
    )
    release: re.Pattern = field(
        default=re.compile(
            r"^\s*\[?(?P<version>\d+\.\d+\.\d+\S*?)\]?"
            r"(?:\s+-\s+(?P<date>\d{4}[-./]\d{2}[-./]\d{2}))?$"
        )
    )
    release_link: re.Pattern = field(
        default=re.compile(r"^\[(?P<version>[^\]\s]+)\]:\s*(?P<link>\S+)")
    )
    mention: re.Pattern = field(
        default=re.compile(
            r"(?P<linked>\[[^\]]*\]\([^)]*\)|<[^>\s]+>)|(?<![\w@/])(?P<bare>@\w+)"
        )
    )

    def is_release_link(self, line: str) -> bool:
        return line.startswith(Prefix.LINK) and bool(self.release_link.match(line))


DEFAULT_GRAMMAR = ChangelogGrammar()


def parse_release_date(raw: str) -> date:
    """Accepts `-`, `.` and `/` as separators, raises ValueError for invalid dates.

    >>> parse_release_date("1970/01/02")
    datetime.date(1970, 1, 2)
    """
    return datetime.strptime(raw.translate(_DATE_SEPARATORS), ISO_DATE_FORMAT).date()


def format_release_date(value: date) -> str:
    return value.isoformat()
