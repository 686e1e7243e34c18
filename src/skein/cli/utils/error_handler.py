"""Centralized error handling for plugin commands."""

from rich.console import Console
from rich.markup import escape
from typer import Exit

from ...api.exceptions import APIError, NetworkError, ServerError, NotFoundError, IndexFormatError
from ...core.plugin.errors import PluginError, PluginNameNotFound, PluginEntryInvalid, SourceUnreadable
from ...core.project import ConfigurationError, ProjectNotFoundError


class PluginErrorHandler:
    """Context manager that reports import failures once and exits with status 1."""

    def __init__(self, console: Console | None = None):
        if not console:
            console = Console()
        self.console = console

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            return False

        if issubclass(exc_type, PluginError):
            self._handle_plugin_error(exc_value)
        elif issubclass(exc_type, APIError):
            self._handle_api_error(exc_value)
        elif issubclass(exc_type, ProjectNotFoundError):
            self.console.print(f"[red]📁  Project not found:[/red] {escape(str(exc_value))}")
            self.console.print("[yellow]💡  Run the command from a project directory, or pass [cyan]--cwd[/cyan][/yellow]")
        elif issubclass(exc_type, ConfigurationError):
            self.console.print(f"[red]📋  Invalid project configuration:[/red] {escape(str(exc_value))}")
        elif issubclass(exc_type, OSError):
            self.console.print(f"[red]💾  File system error:[/red] {escape(str(exc_value))}")
        else:
            return False  # Let other exceptions propagate

        raise Exit(1)

    def _handle_plugin_error(self, e: PluginError):
        """Handle errors raised by the import pipeline."""
        if isinstance(e, PluginNameNotFound):
            first, _, rest = e.message.partition("\n")
            self.console.print(f"[red]🔍  {escape(first)}[/red]")
            if rest:
                self.console.print(rest, markup=False, highlight=False)
        elif isinstance(e, PluginEntryInvalid):
            self.console.print(f"[red]🧩  Invalid plugin:[/red] {escape(e.message)}")
            self.console.print("[dim]Plugins must set [cyan]exports.name[/cyan] to a non-empty string[/dim]")
        elif isinstance(e, SourceUnreadable):
            self.console.print(f"[red]📥  Couldn't get the plugin:[/red] {escape(e.message)}")
        else:
            self.console.print(f"[red]⚠️  {e.code}:[/red] {escape(e.message)}")

    def _handle_api_error(self, e: APIError):
        """Handle registry errors."""
        if isinstance(e, NetworkError):
            self.console.print(f"[red]🌐  Network error:[/red] {escape(str(e))}")
            self.console.print("[yellow]💡  Check your internet connection[/yellow]")
        elif isinstance(e, NotFoundError):
            self.console.print(f"[red]🔍  Plugin index not found:[/red] {escape(str(e))}")
            self.console.print("[yellow]💡  Check [cyan]index_url[/cyan] in your configuration[/yellow]")
        elif isinstance(e, IndexFormatError):
            self.console.print(f"[red]📋  Invalid plugin index:[/red] {escape(str(e))}")
        elif isinstance(e, ServerError):
            self.console.print(f"[red]🔧  Server error:[/red] {escape(str(e))}")
            self.console.print("[yellow]😅  Please try again in a few moments[/yellow]")
        else:
            self.console.print(f"[red]🌐  Registry error:[/red] {escape(str(e))}")
