"""
Errors raised while importing a plugin.
"""


class PluginError(Exception):
    """Base exception for plugin import failures."""

    code = "UNNAMED"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidPluginReference(PluginError):
    """A URL-looking specifier isn't a valid URL, or a name can't be parsed."""
    code = "INVALID_PLUGIN_REFERENCE"


class OfficialPluginVersionRequired(PluginError):
    """A registry specifier carries a reference that isn't a strict version."""
    code = "OFFICIAL_PLUGIN_VERSION_REQUIRED"


class PluginNameNotFound(PluginError):
    """The plugin isn't listed in the remote index."""
    code = "PLUGIN_NAME_NOT_FOUND"

    def __init__(self, message: str, ident: str, already_installed: bool = False):
        super().__init__(message)
        self.ident = ident
        self.already_installed = already_installed


class SourceUnreadable(PluginError):
    """The local file or the remote URL couldn't be read."""
    code = "SOURCE_UNREADABLE"

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class PluginEntryInvalid(PluginError):
    """The payload didn't evaluate to a module exporting a usable name."""
    code = "PLUGIN_ENTRY_INVALID"
