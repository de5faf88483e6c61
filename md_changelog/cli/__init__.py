# CLI interface domain

import logging

from rich.console import Console
from rich.logging import RichHandler

from md_changelog.cli.commands import app
from md_changelog.settings import ChangelogSettings


def configure_logging(settings: ChangelogSettings) -> logging.Handler:
    handler = RichHandler(
        rich_tracebacks=False,
        level=settings.log_level,
        console=Console(stderr=True),
    )
    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
    )
    return handler


def main():
    configure_logging(ChangelogSettings())
    app()


__all__ = ["main", "app", "configure_logging"]
