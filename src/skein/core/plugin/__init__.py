"""Plugin import pipeline

Resolves a plugin specifier to a payload, reads the plugin's declared name in an
isolated interpreter and registers the plugin in the project configuration.
"""

from .errors import (
    PluginError,
    InvalidPluginReference,
    OfficialPluginVersionRequired,
    PluginNameNotFound,
    SourceUnreadable,
    PluginEntryInvalid,
)
from .importer import PluginImporter
from .installer import PluginMeta, install_plugin, plugin_relative_path
from .sandbox import SandboxLimits, evaluate_plugin, validate_identity
from .specifier import LocalPath, RemoteUrl, RegistryLookupRequest, classify

__all__ = [
    'PluginError', 'InvalidPluginReference', 'OfficialPluginVersionRequired', 'PluginNameNotFound',
    'SourceUnreadable', 'PluginEntryInvalid', 'PluginImporter', 'PluginMeta', 'install_plugin',
    'plugin_relative_path', 'SandboxLimits', 'evaluate_plugin', 'validate_identity',
    'LocalPath', 'RemoteUrl', 'RegistryLookupRequest', 'classify',
]
