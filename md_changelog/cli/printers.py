"""Property tree behind `kc print`.

Keys are dotted paths such as `changelog.path`, each segment is prefix matched.
An empty key prints the `file` of a node (or lists its children when it has
none) and `*` lists every leaf below the node.
"""

from __future__ import annotations

from typing import Callable, Union

from md_changelog.cli.workflows import KcContext
from md_changelog.config import resolve_label
from md_changelog.renderer import render_changelog
from md_changelog.templates import TEMPLATES, FileKind, dump_template

Printer = Callable[[KcContext], str]
PrinterTree = dict[str, Union["PrinterTree", Printer]]
FILE_KEY = "file"


def _lines(values: list[str]) -> str:
    return "".join(f"{value}\n" for value in values)


def _template_printers(kind: FileKind) -> PrinterTree:
    def printer(name: str, text: str) -> Printer:
        return lambda _: dump_template(name, text)

    return {name: printer(name, text) for name, text in TEMPLATES[kind].items()}


def printer_tree() -> PrinterTree:
    return {
        "changelog": {
            FILE_KEY: lambda ctx: render_changelog(ctx.changelog, ctx.config),
            "path": lambda ctx: _lines([ctx.changelog.path]),
            "changes": lambda ctx: _lines([str(ctx.changelog.change_count)]),
            "releases": lambda ctx: _lines([str(len(ctx.changelog.releases))]),
            "templates": _template_printers(FileKind.CHANGELOG),
        },
        "config": {
            FILE_KEY: lambda ctx: ctx.config.dump_toml(),
            "path": lambda ctx: _lines([ctx.config.path]),
            "labels": lambda ctx: _lines(ctx.config.labels),
            "templates": _template_printers(FileKind.CONFIG),
        },
    }


def flatten(tree: PrinterTree, prefix: str = "") -> list[str]:
    leaves = []
    for key in sorted(tree):
        path = f"{prefix}.{key}" if prefix else key
        node = tree[key]
        if isinstance(node, dict):
            leaves.extend(flatten(node, path))
        else:
            leaves.append(path)
    return leaves


def print_property(tree: PrinterTree, key: str, ctx: KcContext) -> str:
    key = key.strip(".")
    name, _, rest = key.partition(".")
    match name:
        case "" if FILE_KEY in tree:
            return tree[FILE_KEY](ctx)  # type: ignore
        case "":
            return _lines(sorted(tree))
        case "*":
            return _lines(flatten(tree))
    node = tree[resolve_label(sorted(tree), name, kind="key")]
    if isinstance(node, dict):
        return print_property(node, rest, ctx)
    return node(ctx)
