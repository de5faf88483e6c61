import pytest

from md_changelog.cli.printers import flatten, print_property, printer_tree
from md_changelog.cli.workflows import KcContext
from md_changelog.errors import LabelMatchError
from md_changelog.settings import ChangelogSettings


@pytest.fixture()
def kc(write_changelog, work_dir) -> KcContext:
    write_changelog("# Changelog\n## Unreleased\n### Added\n- x\n- y\n## 1.0.0\n")
    return KcContext(ChangelogSettings(work_dir=work_dir))


def test_flatten():
    assert flatten(printer_tree()) == [
        "changelog.changes",
        "changelog.file",
        "changelog.path",
        "changelog.releases",
        "changelog.templates.default",
        "changelog.templates.kacl",
        "changelog.templates.semver",
        "config.file",
        "config.labels",
        "config.path",
        "config.templates.github",
        "config.templates.gitlab",
    ]


def test_print_root_lists_children(kc):
    assert print_property(printer_tree(), "", kc) == "changelog\nconfig\n"


def test_print_star_below_node(kc):
    assert print_property(printer_tree(), "config.templates.*", kc) == (
        "github\ngitlab\n"
    )


def test_print_prefix_keys(kc):
    tree = printer_tree()
    assert print_property(tree, "ch.ch", kc) == "2\n"
    assert print_property(tree, "changelog.rel", kc) == "2\n"
    assert print_property(tree, "conf.lab", kc).splitlines()[0] == "Added"


def test_print_node_file(kc):
    assert print_property(printer_tree(), "changelog", kc) == (
        "# Changelog\n\n## Unreleased\n\n### Added\n\n- x\n- y\n\n## 1.0.0\n"
    )


def test_print_template(kc):
    text = print_property(printer_tree(), "changelog.templates.default", kc)
    assert text.startswith("-----------\n| default |\n-----------\n# {TITLE}\n")


def test_print_unknown_key(kc):
    with pytest.raises(LabelMatchError, match='unknown key: "nope"'):
        print_property(printer_tree(), "nope", kc)


def test_print_ambiguous_key(kc):
    with pytest.raises(LabelMatchError, match='ambiguous key: "c"'):
        print_property(printer_tree(), "c", kc)
