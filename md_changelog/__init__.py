"""isort:skip_file."""

from md_changelog.errors import (
    ChangelogError,
    ChangelogParseErrors,
    ChangelogIOError,
    InvalidConfigError,
    IncompatibleChangesError,
    LabelMatchError,
    ParseError,
    RenderError,
)
from md_changelog.models import Changelog, Release, UNLABELED
from md_changelog.config import (
    ChangelogConfig,
    default_config,
    load_config,
    resolve_label,
)
from md_changelog.parser import parse_changelog, parse_changelog_file
from md_changelog.renderer import render_changelog
from md_changelog.files import (
    find_changelog,
    load_changelog,
    save_changelog,
    validate_changelog,
)
from md_changelog.versions import compare_versions, sort_releases, match_releases

VERSION = "0.1.0"
