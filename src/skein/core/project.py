"""
Project discovery and the project configuration file (``.yarnrc.yml``).

Installed plugins are listed under the ``plugins`` key, one record per plugin::

    plugins:
      - checksum: 8f3c...
        path: .yarn/plugins/@yarnpkg/plugin-exec.cjs
        spec: "@yarnpkg/plugin-exec"
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import yaml

from ..utils.file_utils import atomic_write_text

__all__ = ['RC_FILENAME', 'PluginMeta', 'Configuration', 'Project', 'ProjectNotFoundError',
           'ConfigurationError']

logger = logging.getLogger(__name__)

RC_FILENAME = ".yarnrc.yml"
MANIFEST_FILENAME = "package.json"
PLUGIN_PATH_RE = re.compile(r'^\.yarn/plugins/(?P<name>.+)\.cjs$')


class ProjectNotFoundError(Exception):
    """No project root was found above the working directory."""
    pass


class ConfigurationError(ValueError):
    """The project configuration file can't be parsed."""
    pass


@dataclass(frozen=True)
class PluginMeta:
    """Persisted record of an installed plugin."""
    path: str
    spec: str
    checksum: str | None = None

    def to_dict(self) -> dict[str, str]:
        """Record as stored in the configuration file; ``checksum`` is omitted when unset."""
        data = {"path": self.path, "spec": self.spec}
        if self.checksum is not None:
            data["checksum"] = self.checksum
        return data

    @classmethod
    def from_entry(cls, entry: Any) -> "PluginMeta":
        """Parse a ``plugins`` entry; bare strings are paths that double as spec."""
        if isinstance(entry, str):
            return cls(path=entry, spec=entry)
        if isinstance(entry, dict) and isinstance(entry.get("path"), str):
            checksum = entry.get("checksum")
            if checksum is not None and not isinstance(checksum, str):
                raise ConfigurationError(
                    f"Invalid checksum for plugin {entry['path']} in {RC_FILENAME}: {checksum!r}")
            return cls(path=entry["path"], spec=str(entry.get("spec", entry["path"])),
                       checksum=checksum)
        raise ConfigurationError(f"Invalid plugin entry in {RC_FILENAME}: {entry!r}")

    @property
    def name(self) -> str | None:
        """The plugin name encoded in the installation path, if it follows the convention."""
        match = PLUGIN_PATH_RE.match(self.path)
        return match.group("name") if match else None


@dataclass
class Configuration:
    """Content of a project's configuration file."""
    root: Path
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> Path:
        return self.root / RC_FILENAME

    @classmethod
    def load(cls, root: Path) -> "Configuration":
        """
        Read the configuration file of a project.

        :param root: Project root directory
        :return: The configuration, empty when the file doesn't exist
        :raises ConfigurationError: If the file isn't a YAML mapping
        """
        rc_path = root / RC_FILENAME
        if not rc_path.exists():
            return cls(root=root)

        try:
            data = yaml.safe_load(rc_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {rc_path}: {e}")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid configuration file {rc_path}: expected a mapping")
        return cls(root=root, data=data)

    def plugin_entries(self) -> list[Any]:
        """Raw ``plugins`` entries, as found in the file."""
        entries = self.data.get("plugins") or []
        if not isinstance(entries, list):
            raise ConfigurationError(f"Invalid configuration file {self.path}: plugins must be a list")
        return list(entries)

    @property
    def plugins(self) -> list[PluginMeta]:
        return [PluginMeta.from_entry(entry) for entry in self.plugin_entries()]

    def installed_plugin_names(self) -> set[str]:
        """Names of the plugins registered in this configuration."""
        return {meta.name for meta in self.plugins if meta.name is not None}

    @classmethod
    def add_plugin(cls, root: Path, plugin_metas: Iterable[PluginMeta]) -> None:
        """
        Upsert plugin records into the configuration file.

        A record whose path matches an existing entry replaces it in place; other
        records are appended. The file is replaced atomically, so it holds either
        the previous list or the full new one.

        :param root: Project root directory
        :param plugin_metas: Records to write
        :raises ConfigurationError: If the existing file can't be parsed
        :raises OSError: If the file cannot be written
        """
        pending = list(plugin_metas)
        if not pending:
            return

        configuration = cls.load(root)
        current = configuration.plugin_entries()

        updated = []
        for entry in current:
            entry_path = entry if isinstance(entry, str) else entry.get("path") if isinstance(entry, dict) else None
            replacement = next((meta for meta in pending if meta.path == entry_path), None)
            if replacement is not None:
                updated.append(replacement.to_dict())
                pending.remove(replacement)
            else:
                updated.append(entry)
        updated.extend(meta.to_dict() for meta in pending)

        data = dict(configuration.data)
        data["plugins"] = updated

        atomic_write_text(configuration.path, yaml.safe_dump(data, sort_keys=False, default_flow_style=False))
        logger.debug("Updated %s with %d plugin records", configuration.path, len(updated))


@dataclass
class Project:
    """A project located on disk."""
    cwd: Path
    configuration: Configuration

    @classmethod
    def find(cls, start: Path) -> "Project":
        """
        Locate the project containing a directory.

        The root is the nearest directory, starting at ``start``, that holds a
        configuration file or a ``package.json``.

        :param start: Directory to search from
        :return: The project
        :raises ProjectNotFoundError: If no ancestor qualifies
        """
        start = start.resolve()
        for candidate in (start, *start.parents):
            if (candidate / RC_FILENAME).is_file() or (candidate / MANIFEST_FILENAME).is_file():
                return cls(cwd=candidate, configuration=Configuration.load(candidate))

        raise ProjectNotFoundError(
            f"No project found in {start} or its parents (looked for {RC_FILENAME} or {MANIFEST_FILENAME})")
