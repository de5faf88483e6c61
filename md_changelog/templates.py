"""Starter files written by `kc init`."""

from __future__ import annotations

from zero_3rdparty.enum_utils import StrEnum

from md_changelog.grammar import Placeholder

DEFAULT_TEMPLATE = "default"
DEFAULT_TITLE = "Changelog"
DEFAULT_REPOSITORY = "user/repository"


class FileKind(StrEnum):
    CHANGELOG = "changelog"
    CONFIG = "config"


CHANGELOG_TEMPLATES: dict[str, str] = {
    "default": """\
# {TITLE}

## Unreleased
""",
    "kacl": """\
# {TITLE}

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0).

## Unreleased
""",
    "semver": """\
# {TITLE}

This project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0).

## Unreleased
""",
}

CONFIG_TEMPLATES: dict[str, str] = {
    "github": """\
[links]
unreleased = "https://github.com/{REPOSITORY}/compare/{PREVIOUS}...HEAD"
initial-release = "https://github.com/{REPOSITORY}/releases/tag/{CURRENT}"
release = "https://github.com/{REPOSITORY}/compare/{PREVIOUS}...{CURRENT}"
mention = "https://github.com/{MENTION}"
""",
    "gitlab": """\
[links]
unreleased = "https://gitlab.com/{REPOSITORY}/compare/{PREVIOUS}...master"
initial-release = "https://gitlab.com/{REPOSITORY}/-/tags/{CURRENT}"
release = "https://gitlab.com/{REPOSITORY}/compare/{PREVIOUS}...{CURRENT}"
mention = "https://gitlab.com/{MENTION}"
""",
}

TEMPLATES: dict[FileKind, dict[str, str]] = {
    FileKind.CHANGELOG: CHANGELOG_TEMPLATES,
    FileKind.CONFIG: CONFIG_TEMPLATES,
}


def render_template(
    kind: FileKind,
    name: str,
    *,
    title: str = DEFAULT_TITLE,
    repository: str = DEFAULT_REPOSITORY,
) -> str:
    """Only {TITLE} and {REPOSITORY} are filled, link placeholders are kept."""
    text = TEMPLATES[kind][name]
    text = Placeholder.TITLE.interpolate(text, title)
    text = Placeholder.REPOSITORY.interpolate(text, repository)
    return f"{text.rstrip()}\n"


def dump_template(name: str, text: str) -> str:
    border = "-" * (len(name) + 4)
    return f"{border}\n| {name} |\n{border}\n{text}"
