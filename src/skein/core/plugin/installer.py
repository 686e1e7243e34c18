"""
Writing an imported plugin into a project.
"""

import logging

from ..project import Configuration, PluginMeta, Project
from ...utils.file_utils import write_file
from ...utils.hash_utils import make_hash
from .sandbox import validate_identity

__all__ = ['PLUGINS_DIR', 'PLUGIN_EXTENSION', 'PluginMeta', 'plugin_relative_path', 'install_plugin']

logger = logging.getLogger(__name__)

PLUGINS_DIR = ".yarn/plugins"
PLUGIN_EXTENSION = ".cjs"


def plugin_relative_path(identity: str) -> str:
    """Project-relative location of a plugin, derived from its declared name."""
    return f"{PLUGINS_DIR}/{validate_identity(identity)}{PLUGIN_EXTENSION}"


def install_plugin(identity: str, payload: bytes, spec: str, *, checksum: bool, project: Project) -> PluginMeta:
    """
    Save a plugin and register it in the project configuration.

    The file is written first, then the configuration record is upserted. If the
    process stops in between, the file exists without a record; importing again
    overwrites it and adds the record.

    :param identity: The name declared by the plugin itself
    :param payload: The plugin source, written verbatim
    :param spec: The specifier recorded for this plugin
    :param checksum: Whether to store the payload digest
    :param project: The project to install into
    :return: The record that was persisted
    :raises PluginEntryInvalid: If the identity can't be used as a file name
    :raises OSError: If the file or the configuration cannot be written
    """
    relative_path = plugin_relative_path(identity)
    absolute_path = project.cwd / relative_path

    logger.debug("Writing %s", absolute_path)
    write_file(absolute_path, payload)

    meta = PluginMeta(
        path=relative_path,
        spec=spec,
        checksum=make_hash(payload) if checksum else None,
    )

    Configuration.add_plugin(project.cwd, [meta])
    project.configuration = Configuration.load(project.cwd)
    return meta
