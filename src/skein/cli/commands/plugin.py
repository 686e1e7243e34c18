"""Plugin-related commands."""
import asyncio
import json

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ..app import app, app_state
from ..utils.error_handler import PluginErrorHandler
from ...api.client import RegistryClient
from ...api.config import ConfigManager, Settings
from ...api.models import RegistryIndex
from ...core.plugin.importer import PluginImporter
from ...core.plugin.integrity import IntegrityStatus, check_plugins
from ...core.plugin.registry import available_plugins
from ...core.project import Project, ProjectNotFoundError
from ...version import cli_version

__all__ = []

console = Console()
plugin_app = typer.Typer(help="Plugin-related commands.")
app.add_typer(plugin_app, name="plugin")

STATUS_STYLES = {
    IntegrityStatus.OK: "[green]ok[/green]",
    IntegrityStatus.MODIFIED: "[red]modified[/red]",
    IntegrityStatus.MISSING: "[red]missing[/red]",
    IntegrityStatus.UNCHECKED: "[dim]unchecked[/dim]",
    IntegrityStatus.INVALID_CHECKSUM: "[yellow]invalid checksum[/yellow]",
}


def load_settings() -> Settings:
    """Load the configuration, exiting with a message if it's invalid."""
    try:
        return ConfigManager.load_config(app_state.config_path)
    except ValueError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def create_client(settings: Settings) -> RegistryClient:
    """Create the HTTP client used for the index and downloads."""
    return RegistryClient(
        index_url=settings.registry.index_url,
        timeout=settings.registry.timeout,
        user_agent=settings.registry.user_agent,
    )


async def _fetch_index(client: RegistryClient, version: str | None) -> RegistryIndex:
    async with client:
        return await client.fetch_index(version)


# noinspection PyShadowingBuiltins
@plugin_app.command("import")
def import_(
        name: str = typer.Argument(
            ...,
            help="Plugin name, public URL, or local path"
        ),
        checksum: bool = typer.Option(
            True, "--checksum/--no-checksum",
            help="Whether to care if this plugin is modified"
        ),
):
    """
    Download a plugin and activate it in the current project.

    Three types of plugin references are accepted:

    - Plugins stored within the official repository can be referenced by name
      ([cyan]exec[/cyan], [cyan]plugin-exec[/cyan] or [cyan]@yarnpkg/plugin-exec[/cyan]),
      optionally pinned to a release ([cyan]exec@4.0.0[/cyan]).
    - Third-party plugins can be referenced directly through their public urls.
    - Local plugins can be referenced by their path on the disk.

    If the [cyan]--no-checksum[/cyan] option is set, modifications of the plugin file won't be detected.
    """
    settings = load_settings()

    with PluginErrorHandler(console):
        project = Project.find(app_state.cwd)

        with Progress(
                SpinnerColumn(finished_text="[green]✓"),
                TextColumn("[progress.description]{task.description}"),
                console=console
        ) as progress:
            task = progress.add_task("Importing plugin...", total=1)

            importer = PluginImporter(
                create_client(settings),
                project,
                cwd=app_state.cwd,
                cli_version=cli_version(),
                scope=settings.registry.scope,
                channel=settings.registry.channel,
                cli_package=settings.registry.cli_package,
                sandbox_limits=settings.sandbox,
                report=lambda message: progress.console.print(escape(message), highlight=False),
            )
            meta = importer.import_plugin_sync(name, checksum=checksum)

            progress.update(task, completed=1)

    console.print(f"[green]✓[/green] Plugin [cyan]{escape(meta.spec)}[/cyan] "
                  f"saved in [magenta]{escape(meta.path)}[/magenta]")


# noinspection PyShadowingBuiltins
@plugin_app.command("list")
def list_(
        json_output: bool = typer.Option(
            False, "--json",
            help="Print one JSON object per plugin"
        ),
):
    """
    List the plugins available on the remote registry.

    Only plugins compatible with the running CLI version are shown. Plugins already
    active in the current project are marked as installed.
    """
    settings = load_settings()

    with PluginErrorHandler(console):
        index = asyncio.run(_fetch_index(create_client(settings), cli_version()))

        try:
            installed = Project.find(app_state.cwd).configuration.installed_plugin_names()
        except ProjectNotFoundError:
            installed = set()

    entries = available_plugins(index)

    if json_output:
        for entry in entries:
            typer.echo(json.dumps({"name": entry.ident, "url": entry.url, "installed": entry.ident in installed}))
        return

    table = Table(title="Available plugins")
    table.add_column("Name", style="cyan")
    table.add_column("Installed")
    table.add_column("URL", style="dim")
    for entry in entries:
        table.add_row(entry.ident, "[green]yes[/green]" if entry.ident in installed else "", entry.url)
    console.print(table)


@plugin_app.command("check")
def check():
    """
    Verify installed plugin files against their recorded checksums.

    Exits with status 1 if a plugin file is missing or was modified.
    """
    with PluginErrorHandler(console):
        project = Project.find(app_state.cwd)
        results = check_plugins(project)

    if not results:
        console.print("[dim]No plugins installed[/dim]")
        return

    table = Table(title="Installed plugins")
    table.add_column("Path", style="magenta")
    table.add_column("Spec", style="cyan")
    table.add_column("Status")
    for result in results:
        table.add_row(escape(result.meta.path), escape(result.meta.spec), STATUS_STYLES[result.status])
    console.print(table)

    if any(result.status in (IntegrityStatus.MODIFIED, IntegrityStatus.MISSING) for result in results):
        raise typer.Exit(1)
