"""Main CLI application."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

__all__ = ['app', 'app_state', 'main']

app = typer.Typer(
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="skein - package manager command line interface.",
)


@dataclass
class AppState:
    """Global options shared by the commands."""
    cwd: Path = field(default_factory=Path.cwd)
    config_path: Path | None = None
    verbose: bool = False


app_state = AppState()


def setup_logging(verbose: bool) -> None:
    """Route library logs through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def setup(
        cwd: Path | None = typer.Option(
            None, "--cwd", file_okay=False, dir_okay=True,
            help="Run as if started in this directory"
        ),
        config: Path | None = typer.Option(
            None, "--config", "-c", dir_okay=False,
            help="Configuration file (defaults to ~/.skein/config.toml)",
            envvar="SKEIN_CONFIG"
        ),
        verbose: bool = typer.Option(
            False, "--verbose", "-v",
            help="Show debug logs"
        ),
):
    """
    skein - package manager command line interface.
    """
    app_state.cwd = (cwd or Path.cwd()).resolve()
    app_state.config_path = config
    app_state.verbose = verbose
    setup_logging(verbose)


def main():
    from . import commands  # noqa: F401
    app()
