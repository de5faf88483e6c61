"""CLI options and arguments for kc commands."""

import typer

from md_changelog.templates import DEFAULT_REPOSITORY, DEFAULT_TITLE

# Argument definitions
argument_pattern = typer.Argument(
    "",
    help="An exact version, a version prefix or a glob pattern",
    show_default=False,
)

# Option definitions
option_changelog = typer.Option(
    None,
    "-c",
    "--changelog",
    help="Load the changelog at this path instead of auto-detecting it.",
)

option_config = typer.Option(
    None,
    "-C",
    "--config",
    help="Load the config at this path instead of auto-detecting it.",
)

option_yes = typer.Option(
    False,
    "-y",
    "--yes",
    help="Skip the confirmation prompt",
)

option_reset_date = typer.Option(
    False,
    "--reset-date/--keep-date",
    help="When merging into an existing release, set its date to today",
)

option_title = typer.Option(DEFAULT_TITLE, "--title", help="Changelog title")

option_repository = typer.Option(
    DEFAULT_REPOSITORY,
    "--repository",
    help="user/repository used in the config link templates",
)

option_stdout = typer.Option(
    False,
    "--stdout",
    help="Print the file instead of writing it",
)
