"""Line-oriented parser for the changelog Markdown dialect.

The parser walks a `LineCursor` over the materialized lines and dispatches each
top-level line to the first rule whose prefix matches. Rules may consume more
lines (header, release notes, change blocks) and hand a line back with
`unscan` when it belongs to the next block. Errors are collected, never raised
early, so one pass reports every defect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from md_changelog.config import ChangelogConfig, resolve_label
from md_changelog.errors import (
    ChangelogError,
    ChangelogIOError,
    ChangelogParseErrors,
    LabelMatchError,
    ParseError,
)
from md_changelog.grammar import (
    DEFAULT_GRAMMAR,
    ChangelogGrammar,
    Prefix,
    parse_release_date,
)
from md_changelog.models import UNLABELED, Changelog, Release

logger = logging.getLogger(__name__)
INCOMPATIBLE_CHANGES = "unlabeled and labeled changes cannot coexist"


@dataclass
class LineCursor:
    lines: list[str]
    index: int = -1

    @property
    def line_no(self) -> int:
        return self.index + 1

    @property
    def line(self) -> str:
        return self.lines[self.index]

    def scan(self) -> bool:
        if self.index + 1 >= len(self.lines):
            return False
        self.index += 1
        return True

    def unscan(self) -> None:
        assert self.index >= 0, "unscan before the first scan"
        self.index -= 1


class ChangelogParser:
    def __init__(
        self,
        name: str,
        config: ChangelogConfig,
        grammar: ChangelogGrammar = DEFAULT_GRAMMAR,
    ) -> None:
        self.name = name
        self.labels = list(config.labels)
        self.grammar = grammar
        self.rules: tuple[tuple[str, Callable[[str], None]], ...] = (
            (Prefix.PASS_THROUGH, self.ignore),
            (Prefix.LABEL, self.parse_labeled_changes),
            (Prefix.RELEASE, self.parse_release),
            (Prefix.TITLE, self.parse_header),
            (Prefix.CHANGE, self.parse_unlabeled_changes),
            (Prefix.CHANGE_ALT, self.parse_unlabeled_changes),
            (Prefix.LINK, self.parse_top_level_link),
        )
        self._reset([])

    def _reset(self, lines: list[str]) -> None:
        self.cursor = LineCursor(lines)
        self.changelog = Changelog(path=self.name)
        self.mru: Release | None = None
        self.errors: list[ParseError] = []

    def parse(self, lines: Iterable[str]) -> Changelog:
        self._reset(list(lines))
        while self.cursor.scan():
            try:
                self.parse_line(self.cursor.line)
            except ParseError as e:
                self.errors.append(e)
            except ChangelogError as e:
                self.errors.append(self.error(str(e)))
        if self.errors:
            logger.debug(f"{len(self.errors)} parse errors in {self.name or '<text>'}")
            raise ChangelogParseErrors(self.errors)
        return self.changelog

    def parse_line(self, line: str) -> None:
        stripped = line.lstrip()
        for prefix, rule in self.rules:
            if stripped.startswith(prefix):
                rule(stripped)
                return
        if stripped and not self.changelog.title and self.mru is None:
            raise self.error("missing changelog title")

    def error(self, message: str) -> ParseError:
        return ParseError(self.cursor.line_no, message, self.name)

    def ignore(self, line: str) -> None:
        pass

    def parse_header(self, line: str) -> None:
        title = line[len(Prefix.TITLE) :].strip()
        if not title:
            raise self.error("missing changelog title")
        self.changelog.title = title
        header: list[str] = []
        while self.cursor.scan():
            line = self.cursor.line
            if line.startswith(Prefix.LABEL):
                header.append(line)
            elif self.grammar.is_release_link(line):
                self.record_release_link(line)
            elif line.startswith(Prefix.TITLE):
                self.cursor.unscan()
                break
            else:
                header.append(line)
        self.changelog.header = "\n".join(header).strip()

    def parse_release(self, line: str) -> None:
        heading = line[len(Prefix.RELEASE) :].strip()
        if not heading:
            raise self.error("empty release heading")
        if self.grammar.unreleased.match(heading):
            release = self.changelog.unreleased()
            if release is None:
                release = Release.new_unreleased()
                self.changelog.prepend(release)
        elif match := self.grammar.release.match(heading):
            version, raw_date = match["version"], match["date"]
            release = self.changelog.get(version)
            if release is None:
                try:
                    release_date = parse_release_date(raw_date) if raw_date else None
                except ValueError:
                    raise self.error(f'invalid release date: "{raw_date}"') from None
                release = Release(version=version, date=release_date)
                self.changelog.append(release)
        else:
            raise self.error(f'invalid version string: "{heading}"')
        self.mru = release
        self.parse_release_note(release)

    def parse_release_note(self, release: Release) -> None:
        note: list[str] = []
        while self.cursor.scan():
            line = self.cursor.line
            if line.startswith(Prefix.PASS_THROUGH):
                note.append(line)
            elif self.grammar.is_release_link(line):
                self.record_release_link(line)
            elif line.startswith((Prefix.TITLE, Prefix.CHANGE, Prefix.CHANGE_ALT)):
                self.cursor.unscan()
                break
            else:
                note.append(line)
        release.append_note("\n".join(note).strip())

    def parse_labeled_changes(self, line: str) -> None:
        value = line[len(Prefix.LABEL) :].strip()
        if not value:
            raise self.error("empty change label")
        release = self.mru
        if release is None:
            error = self.error("change label is missing a version heading")
            self.skip_block()
            raise error
        if release.has_unlabeled:
            error = self.error(INCOMPATIBLE_CHANGES)
            self.skip_block()
            raise error
        try:
            label = resolve_label(self.labels, value)
        except LabelMatchError as e:
            # positioned at the label line, not where skipping stops
            error = self.error(str(e))
            self.skip_block()
            raise error
        self.parse_changes(release, label)

    def parse_unlabeled_changes(self, line: str) -> None:
        text = line[1:].strip()
        if not text:
            return
        release = self.mru
        if release is None:
            raise self.error("change is missing a version heading")
        if release.has_labeled:
            raise self.error(INCOMPATIBLE_CHANGES)
        release.push_change(UNLABELED, text)
        self.parse_changes(release, UNLABELED)

    def parse_changes(self, release: Release, label: str) -> None:
        while self.cursor.scan():
            line = self.cursor.line.strip()
            if not line:
                continue
            if self.grammar.is_release_link(line):
                self.record_release_link(line)
            elif line.startswith(Prefix.TITLE):
                self.cursor.unscan()
                return
            elif line.startswith((Prefix.CHANGE_STAR, Prefix.CHANGE)):
                release.push_change(label, line[1:])
            else:
                release.merge_change(label, line)

    def parse_top_level_link(self, line: str) -> None:
        if self.grammar.is_release_link(line):
            self.parse_release_link(line)
        elif not self.changelog.title and self.mru is None:
            raise self.error("missing changelog title")

    def parse_release_link(self, line: str) -> None:
        match = self.grammar.release_link.match(line)
        assert match, f"not a release link: {line}"
        version, link = match["version"], match["link"]
        release = self.changelog.get(version)
        if release is None:
            raise self.error(
                f"release link ({version}) is missing a corresponding version heading"
            )
        release.link = link

    def record_release_link(self, line: str) -> None:
        """Link errors inside a block are recorded and the block continues."""
        try:
            self.parse_release_link(line)
        except ParseError as e:
            self.errors.append(e)

    def skip_block(self) -> None:
        while self.cursor.scan():
            line = self.cursor.line.lstrip()
            if line.startswith(Prefix.TITLE) or self.grammar.is_release_link(line):
                self.cursor.unscan()
                return


def parse_changelog(
    text: str | Iterable[str], config: ChangelogConfig, name: str = ""
) -> Changelog:
    """Raises ChangelogParseErrors with every error found in `text`."""
    lines = text.splitlines() if isinstance(text, str) else list(text)
    return ChangelogParser(name, config).parse(lines)


def parse_changelog_file(path: Path, config: ChangelogConfig) -> Changelog:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ChangelogIOError(path, e.strerror or str(e)) from e
    changelog = parse_changelog(text, config, name=str(path))
    logger.debug(f"parsed {len(changelog.releases)} releases from {path}")
    return changelog

