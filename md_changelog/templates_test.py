import pytest

from md_changelog.config import default_config
from md_changelog.parser import parse_changelog
from md_changelog.renderer import render_changelog
from md_changelog.templates import (
    CHANGELOG_TEMPLATES,
    FileKind,
    dump_template,
    render_template,
)


@pytest.mark.parametrize("name", sorted(CHANGELOG_TEMPLATES))
def test_changelog_templates_are_canonical(name):
    config = default_config()
    text = render_template(FileKind.CHANGELOG, name, title="My Project")
    changelog = parse_changelog(text, config)
    assert changelog.title == "My Project"
    assert changelog.unreleased() is not None
    assert render_changelog(changelog, config) == text


def test_config_template_fills_repository_only():
    text = render_template(FileKind.CONFIG, "github", repository="me/repo")
    assert "https://github.com/me/repo/compare/{PREVIOUS}...HEAD" in text
    assert 'mention = "https://github.com/{MENTION}"' in text


def test_dump_template():
    assert dump_template("kacl", "text\n") == "--------\n| kacl |\n--------\ntext\n"
