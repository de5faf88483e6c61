import logging

import pytest
import click
from click.testing import Result
from typer.testing import CliRunner

from md_changelog.cli import app
from md_changelog.conftest import WriteChangelog

logger = logging.getLogger(__name__)
runner = CliRunner()

_CHANGELOG = """\
# Changelog

## Unreleased

### Added

- new

## 1.1.0 - 2024-02-01

### Fixed

- fix

## 1.0.0 - 2024-01-01

### Added

- first
"""


def run(command: str, exit_code: int = 0, input: str | None = None) -> Result:
    result = runner.invoke(app, command.split(), input=input)
    logger.info(f"cli command output={result.output}")
    if exit_code == 0 and (e := result.exception):
        logger.exception(e)
        raise e
    assert result.exit_code == exit_code, "exit code is not as expected"
    return result


@pytest.fixture()
def changelog_path(write_changelog: WriteChangelog):
    return write_changelog(_CHANGELOG)


def test_normal_help_command_is_ok():
    run("--help")


def test_no_command_prints_help():
    assert "Maintain a Markdown changelog" in run("").output


def test_init_changelog(work_dir):
    result = run("init changelog kacl --title Project")
    assert "created CHANGELOG.md" in result.output
    text = (work_dir / "CHANGELOG.md").read_text()
    assert text.startswith("# Project\n\nAll notable changes")
    assert "already exists" in run("init", exit_code=1).output


def test_init_config_to_stdout(work_dir):
    result = run("init config github --repository me/repo --stdout")
    assert "https://github.com/me/repo/compare/{PREVIOUS}...HEAD" in result.stdout
    assert not (work_dir / ".kcrc").exists()


def test_init_config_without_template(work_dir):
    result = run("init config", exit_code=1)
    assert "Error: config: no default value. Try one of: github | gitlab" in (
        result.output
    )


def test_list(changelog_path):
    assert run("list").stdout == "1.1.0\n1.0.0\n"
    assert run("list 1.0").stdout == "1.0.0\n"


def test_list_all(changelog_path):
    assert run("list-all").stdout.splitlines() == [
        '"Unreleased" (1 change)',
        "1.1.0 (1 change)",
        "1.0.0 (1 change)",
    ]


def test_list_without_changelog(work_dir):
    assert "No changelog found." in run("list", exit_code=1).output


def test_show(changelog_path):
    assert run("show").stdout == "## Unreleased\n\n### Added\n\n- new\n"
    assert run("show 1.1").stdout == "## 1.1.0 - 2024-02-01\n\n### Fixed\n\n- fix\n"
    assert "No matches." in run("show 3.", exit_code=1).output


def test_explicit_changelog_path(tmp_path, work_dir):
    path = tmp_path / "elsewhere" / "HISTORY.md"
    path.parent.mkdir()
    path.write_text("## 2.0.0\n")
    assert run(f"-c {path} list").stdout == "2.0.0\n"


def test_add_labeled_change(changelog_path):
    run("add fix a bug in the parser")
    assert "### Fixed\n\n- a bug in the parser\n\n## 1.1.0" in changelog_path.read_text()


def test_add_change_with_editor(changelog_path, monkeypatch):
    monkeypatch.setattr(click, "edit", lambda *args, **kwargs: "from the editor\n")
    run("add added")
    assert "- new\n- from the editor\n" in changelog_path.read_text()


def test_add_unknown_label(changelog_path):
    result = run("add nope text", exit_code=1)
    assert 'Error: unknown change label: "nope"' in result.output


def test_release(changelog_path):
    assert run("release minor").stdout == "1.2.0\n"
    text = changelog_path.read_text()
    assert "## Unreleased" not in text
    assert "## 1.2.0 - " in text


def test_release_merge_declined(changelog_path):
    result = run("release 1.1.0", exit_code=1, input="n\n")
    assert "No changes." in result.output
    assert changelog_path.read_text() == _CHANGELOG


def test_release_merge_confirmed(changelog_path):
    run("release 1.1.0 --yes")
    assert changelog_path.read_text().startswith(
        "# Changelog\n\n## 1.1.0 - 2024-02-01\n\n### Added\n\n- new\n\n### Fixed"
    )


def test_unrelease(changelog_path):
    run("unrelease")
    text = changelog_path.read_text()
    assert text.startswith("# Changelog\n\n## Unreleased\n\n### Added\n\n- new\n")
    assert "1.1.0" not in text


def test_sort(write_changelog):
    path = write_changelog("# Changelog\n## 1.0.0\n## 2.0.0\n")
    run("sort")
    assert path.read_text() == "# Changelog\n\n## 2.0.0\n\n## 1.0.0\n"


def test_delete_confirmed(changelog_path):
    run("delete 1.0", input="y\n")
    assert "1.0.0" not in changelog_path.read_text()


def test_delete_declined(changelog_path):
    run("delete", exit_code=1, input="n\n")
    assert changelog_path.read_text() == _CHANGELOG


def test_edit(changelog_path, monkeypatch):
    def fake_edit(text: str, **kwargs) -> str:
        return text.replace("- fix", "- a better fix")

    monkeypatch.setattr(click, "edit", fake_edit)
    run("edit 1.1.0")
    assert "- a better fix" in changelog_path.read_text()


def test_edit_without_changes(changelog_path, monkeypatch):
    monkeypatch.setattr(click, "edit", lambda *args, **kwargs: None)
    assert "No changes." in run("edit", exit_code=1).output


def test_print_property(changelog_path):
    assert run("print changelog releases").stdout == "3\n"
    assert run("print changelog").stdout == _CHANGELOG
    assert "config.labels\n" in run("print *").stdout


def test_parse_errors_are_limited(write_changelog, monkeypatch):
    write_changelog("# Changelog\n## 1\n## 2\n## 3\n")
    monkeypatch.setenv("KC_MAX_ERROR_COUNT", "1")
    result = run("list", exit_code=1)
    assert 'CHANGELOG.md:2: invalid version string: "1"' in result.output
    assert "... and 2 more errors" in result.output


def test_first_release_is_a_patch(write_changelog):
    path = write_changelog("# Changelog\n## Unreleased\n- a\n- b\n")
    assert run("release").stdout == "0.0.1\n"
    assert "## 0.0.1 - " in path.read_text()


def test_add_prepends_unreleased(write_changelog):
    path = write_changelog("# Changelog\n## 0.1.0\n- a\n")
    run("add a test change")
    assert path.read_text() == (
        "# Changelog\n\n## Unreleased\n\n### Added\n\n- test change\n\n"
        "## 0.1.0\n\n- a\n"
    )


def test_unrelease_mixing_labels_fails_validation(write_changelog):
    text = "# Changelog\n## Unreleased\n### Added\n- new\n## 0.1.0\n- a\n"
    path = write_changelog(text)
    result = run("unrelease", exit_code=1)
    assert (
        "CHANGELOG.md:7: unlabeled and labeled changes cannot coexist" in result.output
    )
    assert path.read_text() == text
