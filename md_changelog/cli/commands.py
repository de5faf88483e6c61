"""CLI commands for kc."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import click
import typer
from typer import Typer
from zero_3rdparty.file_utils import ensure_parents_write_text

from md_changelog.cli.options import (
    argument_pattern,
    option_changelog,
    option_config,
    option_repository,
    option_reset_date,
    option_stdout,
    option_title,
    option_yes,
)
from md_changelog.cli.printers import print_property, printer_tree
from md_changelog.cli.workflows import (
    NO_CHANGES,
    KcContext,
    add_change,
    apply_release_edit,
    change_label,
    delete_releases,
    init_destination,
    init_file_text,
    is_release_merge,
    list_details,
    list_versions,
    release_changelog,
    release_edit_text,
    select_releases,
    show_text,
    sort_changelog,
    split_change_args,
    unrelease_changelog,
)
from md_changelog.errors import (
    ChangelogError,
    ChangelogIOError,
    ChangelogNotFoundError,
    ChangelogParseErrors,
    MultipleChangelogsError,
    NothingToDoError,
)
from md_changelog.settings import ChangelogSettings

logger = logging.getLogger(__name__)
app = Typer(name="kc", help="Maintain a Markdown changelog.")


@contextmanager
def report_errors(ctx: KcContext) -> Iterator[KcContext]:
    try:
        yield ctx
    except ChangelogParseErrors as e:
        for line in e.limited(ctx.settings.max_error_count):
            typer.echo(line, err=True)
        raise typer.Exit(1)
    except ChangelogIOError as e:
        typer.echo(f"I/O Error: {e}", err=True)
        raise typer.Exit(1)
    except (NothingToDoError, ChangelogNotFoundError, MultipleChangelogsError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)
    except ChangelogError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    changelog: Path | None = option_changelog,
    config: Path | None = option_config,
):
    """kc: keep a Markdown changelog in its canonical form."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()
    overrides = {"changelog": changelog, "config": config}
    settings = ChangelogSettings(
        **{name: value for name, value in overrides.items() if value is not None}
    )
    logger.debug(f"settings: {settings!r}")
    ctx.obj = KcContext(settings)


@app.command()
def init(
    ctx: typer.Context,
    kind: str = typer.Argument("changelog", help='One of "changelog" or "config"'),
    template: str = typer.Argument(
        "", help="A template name, see `kc print changelog.templates`"
    ),
    title: str = option_title,
    repository: str = option_repository,
    stdout: bool = option_stdout,
):
    """Initialize a changelog or config file from a template."""
    with report_errors(ctx.obj) as kc:
        file_kind, text = init_file_text(
            kind, template, title=title, repository=repository
        )
        if stdout:
            typer.echo(text, nl=False)
            return
        path = init_destination(kc.settings, file_kind)
        ensure_parents_write_text(path, text)
        typer.echo(f"created {path}", err=True)


@app.command(name="print")
def print_(
    ctx: typer.Context,
    props: list[str] | None = typer.Argument(
        None, help="A property name, use * for a complete list"
    ),
):
    """Print or debug a property."""
    with report_errors(ctx.obj) as kc:
        text = print_property(printer_tree(), ".".join(props or []), kc)
        typer.echo(text, nl=False)


@app.command(name="list")
def list_(ctx: typer.Context, pattern: str = argument_pattern):
    """List all releases or those that match PATTERN."""
    with report_errors(ctx.obj) as kc:
        for version in list_versions(kc.changelog, pattern):
            typer.echo(version)


@app.command(name="list-all")
def list_all(ctx: typer.Context, pattern: str = argument_pattern):
    """Like list, but include the "Unreleased" section and change counts."""
    with report_errors(ctx.obj) as kc:
        for details in list_details(kc.changelog, pattern):
            typer.echo(details)


@app.command()
def show(ctx: typer.Context, pattern: str = argument_pattern):
    """Show the latest section or the releases that match PATTERN."""
    with report_errors(ctx.obj) as kc:
        typer.echo(show_text(kc.changelog, kc.config, pattern), nl=False)


@app.command()
def delete(ctx: typer.Context, pattern: str = argument_pattern, yes: bool = option_yes):
    """Delete the latest section or the releases that match PATTERN."""
    with report_errors(ctx.obj) as kc:
        releases = select_releases(kc.changelog, pattern, "delete")
        match releases:
            case [release] if not pattern:
                subject = release.details()
            case [release]:
                subject = str(release)
            case _:
                subject = f"{len(releases)} releases"
        if not yes and not typer.confirm(
            f"Are you sure you want to delete {subject}?", default=False
        ):
            raise NothingToDoError(NO_CHANGES)
        delete_releases(kc.changelog, releases)
        kc.save()


@app.command()
def edit(ctx: typer.Context, pattern: str = argument_pattern):
    """Edit the latest section or the releases that match PATTERN in $EDITOR."""
    with report_errors(ctx.obj) as kc:
        changes = 0
        for release in select_releases(kc.changelog, pattern, "edit"):
            text = release_edit_text(release, kc.config)
            edited = click.edit(text, extension=".md", require_save=True)
            try:
                apply_release_edit(kc.changelog, release, kc.config, edited)
            except NothingToDoError:
                logger.info(f"no changes to {release}")
                continue
            changes += 1
        if not changes:
            raise NothingToDoError(NO_CHANGES)
        kc.save()


@app.command()
def release(
    ctx: typer.Context,
    version: str = typer.Argument(
        "patch", help='A new or existing version, or one of "patch", "minor", "major"'
    ),
    reset_date: bool = option_reset_date,
    yes: bool = option_yes,
):
    """Release the "Unreleased" section."""
    with report_errors(ctx.obj) as kc:
        if (
            is_release_merge(kc.changelog, version)
            and not yes
            and not typer.confirm(
                f"{version} is already released. Merge unreleased changes into it?",
                default=False,
            )
        ):
            raise NothingToDoError(NO_CHANGES)
        released = release_changelog(kc.changelog, version, reset_date=reset_date)
        kc.save()
        typer.echo(released.version)


@app.command()
def unrelease(ctx: typer.Context):
    """Turn the latest release back into the "Unreleased" section."""
    with report_errors(ctx.obj) as kc:
        unrelease_changelog(kc.changelog)
        kc.save()


@app.command()
def sort(ctx: typer.Context):
    """Sort releases according to semver."""
    with report_errors(ctx.obj) as kc:
        sort_changelog(kc.changelog)
        kc.save()


@app.command()
def add(
    ctx: typer.Context,
    args: list[str] | None = typer.Argument(
        None, help="[LABEL] [TEXT]..., the label is required when labels are configured"
    ),
):
    """Add a change to the "Unreleased" section, opens $EDITOR without TEXT."""
    with report_errors(ctx.obj) as kc:
        label, text = split_change_args(kc.config, args or [])
        label = change_label(kc.config, label)
        if not text:
            text = click.edit("", extension=".md")
        add_change(kc.changelog, kc.config, label, text)
        kc.save()
