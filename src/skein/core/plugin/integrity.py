"""
Verification of installed plugin files against their recorded checksums.
"""

from dataclasses import dataclass
from enum import Enum

from ..project import PluginMeta, Project
from ...utils.hash_utils import calculate_file_hash, is_valid_hash

__all__ = ['IntegrityStatus', 'PluginIntegrity', 'check_plugin', 'check_plugins']


class IntegrityStatus(Enum):
    OK = "ok"
    MODIFIED = "modified"
    MISSING = "missing"
    UNCHECKED = "unchecked"
    INVALID_CHECKSUM = "invalid-checksum"


@dataclass(frozen=True)
class PluginIntegrity:
    meta: PluginMeta
    status: IntegrityStatus


def check_plugin(project: Project, meta: PluginMeta) -> IntegrityStatus:
    """
    Compare an installed plugin with its record.

    :param project: The project the plugin belongs to
    :param meta: The plugin record
    :return: The status of the file
    """
    plugin_path = project.cwd / meta.path
    if not plugin_path.is_file():
        return IntegrityStatus.MISSING
    if meta.checksum is None:
        return IntegrityStatus.UNCHECKED
    if not is_valid_hash(meta.checksum):
        return IntegrityStatus.INVALID_CHECKSUM
    if calculate_file_hash(plugin_path) != meta.checksum.lower():
        return IntegrityStatus.MODIFIED
    return IntegrityStatus.OK


def check_plugins(project: Project) -> list[PluginIntegrity]:
    """Check every plugin registered in the project configuration."""
    return [PluginIntegrity(meta=meta, status=check_plugin(project, meta))
            for meta in project.configuration.plugins]
