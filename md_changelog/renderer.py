"""Renders a `Changelog` back to canonical Markdown.

Rendering runs a fixed sequence of passes (header, releases, release links)
against one text sink. A pass returns a `RenderError` instead of raising, the
first one returned stops the sequence and is raised by `render_to`.
"""

from __future__ import annotations

import io
import logging
import re
from functools import wraps
from typing import Callable, TextIO

from md_changelog.config import ChangelogConfig, LinkKey
from md_changelog.errors import RenderError
from md_changelog.grammar import (
    DEFAULT_GRAMMAR,
    ChangelogGrammar,
    Placeholder,
    Prefix,
    format_release_date,
)
from md_changelog.models import UNLABELED, Changelog, Release

logger = logging.getLogger(__name__)
RenderPass = Callable[["ChangelogRenderer"], "RenderError | None"]


def render_pass(func: Callable[[ChangelogRenderer], None]) -> RenderPass:
    @wraps(func)
    def wrapper(self: ChangelogRenderer) -> RenderError | None:
        try:
            func(self)
        except OSError as e:
            return RenderError(self.name, self.line_count, e.strerror or str(e))
        return None

    return wrapper


class ChangelogRenderer:
    def __init__(
        self,
        changelog: Changelog,
        config: ChangelogConfig,
        grammar: ChangelogGrammar = DEFAULT_GRAMMAR,
    ) -> None:
        self.changelog = changelog
        self.config = config
        self.grammar = grammar
        self.name = changelog.path
        self.sink: TextIO = io.StringIO()
        self.line_count = 0
        self.last_blank = False
        self.release_links: list[tuple[str, str]] = []

    def render_to(self, sink: TextIO) -> None:
        self.sink = sink
        self.line_count = 0
        self.last_blank = False
        self.release_links = []
        passes: tuple[RenderPass, ...] = (
            ChangelogRenderer.render_header,
            ChangelogRenderer.render_releases,
            ChangelogRenderer.render_release_links,
        )
        for run_pass in passes:
            if error := run_pass(self):
                logger.warning(f"render failed: {error}")
                raise error

    def render(self) -> str:
        buffer = io.StringIO()
        self.render_to(buffer)
        return buffer.getvalue()

    @render_pass
    def render_header(self) -> None:
        changelog = self.changelog
        if changelog.title:
            self.write_line(f"{Prefix.TITLE} {changelog.title}")
        if changelog.header:
            self.write_separator()
            self.write_line(self.interpolate_mentions(changelog.header))

    @render_pass
    def render_releases(self) -> None:
        label_order = self.config.labels
        for index, release in enumerate(self.changelog.releases):
            heading = release.version
            link = self.release_link(index, release)
            if self.config.write_release_links and link:
                heading = f"[{heading}]"
                self.release_links.append((release.version, link))
            if release.date:
                heading += f" - {format_release_date(release.date)}"
            self.write_separator()
            self.write_line(f"{Prefix.RELEASE} {heading}")
            if release.note:
                self.write_separator()
                self.write_line(self.interpolate_mentions(release.note))
            for label in release.change_labels(label_order):
                self.render_changes(label, release.changes[label])

    @render_pass
    def render_release_links(self) -> None:
        if not self.release_links:
            return
        self.write_separator()
        for version, link in self.release_links:
            self.write_line(f"[{version}]: {link}")

    def render_changes(self, label: str, changes: list[str]) -> None:
        self.write_separator()
        if label != UNLABELED:
            self.write_line(f"{Prefix.LABEL} {label}")
            self.write_line("")
        for change in changes:
            self.render_change(change)

    def render_change(self, change: str) -> None:
        first, *rest = change.split("\n")
        self.write_line(f"{Prefix.CHANGE} {self.interpolate_mentions(first)}")
        for line in rest:
            if not line:
                continue
            line = self.interpolate_mentions(line)
            if not line[0].isspace():
                line = f"  {line}"
            self.write_line(line)

    def release_link(self, index: int, release: Release) -> str:
        """Generated from a link template when one applies, else the stored link."""
        previous = self.changelog.at(index + 1)
        if release.unreleased:
            template = self.config.link_template(LinkKey.UNRELEASED)
            if template and previous is not None:
                return Placeholder.PREVIOUS.interpolate(template, previous.version)
        elif previous is None:
            if template := self.config.link_template(LinkKey.INITIAL_RELEASE):
                return Placeholder.CURRENT.interpolate(template, release.version)
        elif template := self.config.link_template(LinkKey.RELEASE):
            link = Placeholder.PREVIOUS.interpolate(template, previous.version)
            return Placeholder.CURRENT.interpolate(link, release.version)
        return release.link

    def interpolate_mentions(self, text: str) -> str:
        template = self.config.link_template(LinkKey.MENTION)
        if not template:
            return text

        def replace(match: re.Match) -> str:
            if match["linked"]:
                return match.group(0)
            mention = match["bare"]
            link = Placeholder.MENTION.interpolate(template, mention[1:])
            return f"[{mention}]({link})"

        return self.grammar.mention.sub(replace, text)

    def write_separator(self) -> None:
        if self.line_count and not self.last_blank:
            self.write_line("")

    def write_line(self, text: str) -> None:
        self.sink.write(f"{text}\n")
        self.line_count += text.count("\n") + 1
        self.last_blank = text == ""


def render_changelog(changelog: Changelog, config: ChangelogConfig) -> str:
    return ChangelogRenderer(changelog, config).render()
