from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence


class ChangelogError(Exception):
    """Base class for all md-changelog errors"""

    pass


class ParseError(ChangelogError):
    def __init__(self, line_no: int, message: str, name: str = "") -> None:
        self.line_no = line_no
        self.message = message
        self.name = name
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.name:
            return f"{self.name}:{self.line_no}: {self.message}"
        return f"Line {self.line_no}: {self.message}"


class ChangelogParseErrors(ChangelogError):
    """All errors found during a single parse pass."""

    def __init__(self, errors: Sequence[ParseError]) -> None:
        assert errors, "at least one parse error expected"
        self.errors = list(errors)
        super().__init__("\n".join(str(error) for error in self.errors))

    def limited(self, max_count: int) -> list[str]:
        lines = [str(error) for error in self.errors[:max_count]]
        rest = len(self.errors) - max_count
        if rest > 0:
            lines.append(f"... and {rest} more {pluralize('error', rest)}")
        return lines


class IncompatibleChangesError(ChangelogError):
    def __init__(self, version: str, label: str) -> None:
        self.version = version
        self.label = label
        super().__init__("unlabeled and labeled changes cannot coexist")


class LabelMatchError(ChangelogError):
    def __init__(
        self, value: str, choices: Iterable[str], kind: str, matches: Iterable[str] = ()
    ) -> None:
        self.value = value
        self.choices = list(choices)
        self.kind = kind
        self.matches = list(matches)
        if self.matches:
            choices_str = ", ".join(self.matches)
            message = f'ambiguous {kind}: "{value}" matches {choices_str}'
        else:
            message = f'unknown {kind}: "{value}"'
        super().__init__(message)


class ChangelogIOError(ChangelogError):
    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class InvalidConfigError(ChangelogError):
    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: invalid config: {reason}")


class RenderError(ChangelogError):
    def __init__(self, name: str, line_no: int, reason: str) -> None:
        self.name = name
        self.line_no = line_no
        self.reason = reason
        super().__init__(f"{name or '<changelog>'}:{line_no}: {reason}")


class ChangelogNotFoundError(ChangelogError):
    def __init__(self, start_dir: Path) -> None:
        self.start_dir = start_dir
        super().__init__("No changelog found.")


class MultipleChangelogsError(ChangelogError):
    def __init__(self, paths: Sequence[Path]) -> None:
        self.paths = list(paths)
        super().__init__(
            f"Multiple changelogs found: {', '.join(str(p) for p in paths)}"
        )


class NothingToDoError(ChangelogError):
    """Not a failure of the tool, the command had nothing to act on."""

    pass


def pluralize(word: str, count: int) -> str:
    return word if count == 1 else f"{word}s"
