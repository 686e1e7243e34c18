"""Plugin import service for programmatic use.

The CLI should use this service rather than chaining the pipeline steps itself.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

from ...api.client import RegistryClient
from ..project import PluginMeta, Project
from .fetcher import fetch_payload
from .installer import install_plugin, plugin_relative_path
from .registry import resolve_registry_request
from .sandbox import SandboxLimits, evaluate_plugin
from .specifier import LocalPath, RegistryLookupRequest, RemoteUrl, classify, specifier_string

__all__ = ['PluginImporter']

logger = logging.getLogger(__name__)


class PluginImporter:
    """Downloads plugins and registers them in a project.

    Every import runs the same sequence: classify the specifier, look registry
    names up in the remote index, fetch the payload, read its declared name in the
    sandbox, then write the file and the configuration record. A failure at any
    step aborts the import before the configuration is touched.
    """

    def __init__(
        self,
        client: RegistryClient,
        project: Project,
        *,
        cwd: Optional[Path] = None,
        cli_version: str | None = None,
        scope: str = "@yarnpkg",
        channel: str = "master",
        cli_package: str = "@yarnpkg/cli",
        sandbox_limits: Optional[SandboxLimits] = None,
        report: Optional[Callable[[str], None]] = None,
    ):
        """Initialize the importer.

        Args:
            client: HTTP client for the index and for downloads
            project: Project receiving the plugins
            cwd: Directory relative plugin paths are resolved against (defaults to the project root)
            cli_version: Version of the running CLI, None for unreleased builds
            scope: Scope of plugins referenced by name
            channel: Release channel segment of index URLs
            cli_package: Ident of the CLI package
            sandbox_limits: Limits of the evaluation sandbox
            report: Callback receiving progress messages
        """
        self.client = client
        self.project = project
        self.cwd = cwd or project.cwd
        self.cli_version = cli_version
        self.scope = scope
        self.channel = channel
        self.cli_package = cli_package
        self.sandbox_limits = sandbox_limits or SandboxLimits()
        self._report = report

    def report(self, message: str) -> None:
        logger.info(message)
        if self._report is not None:
            self._report(message)

    async def import_plugin(self, raw: str, *, checksum: bool = True) -> PluginMeta:
        """Import a plugin into the project.

        Args:
            raw: Plugin name, URL or local path
            checksum: Whether to record the payload digest

        Returns:
            The plugin record added to the configuration

        Raises:
            InvalidPluginReference: If the specifier can't be parsed
            OfficialPluginVersionRequired: If a registry name has a non-strict version
            PluginNameNotFound: If the name isn't in the remote index
            SourceUnreadable: If the payload can't be read or downloaded
            PluginEntryInvalid: If the payload doesn't declare a usable name
            APIError: If the remote index can't be fetched
            OSError: If the plugin or the configuration can't be written
        """
        target = classify(raw, self.cwd, scope=self.scope)
        spec = specifier_string(raw, target)

        if isinstance(target, RegistryLookupRequest):
            index = await self.client.fetch_index(self.cli_version)
            source = resolve_registry_request(
                target, index,
                cli_version=self.cli_version,
                installed=self.project.configuration.installed_plugin_names(),
                channel=self.channel,
                cli_package=self.cli_package,
            )
        else:
            source = target

        match source:
            case LocalPath(path=path):
                self.report(f"Reading {path}")
            case RemoteUrl(url=url):
                self.report(f"Downloading {url}")

        payload = await fetch_payload(source, self.client)
        identity = await evaluate_plugin(payload, self.sandbox_limits)

        self.report(f"Saving the new plugin in {plugin_relative_path(identity)}")
        return install_plugin(identity, payload, spec, checksum=checksum, project=self.project)

    def import_plugin_sync(self, raw: str, *, checksum: bool = True) -> PluginMeta:
        """Synchronous wrapper for import_plugin.

        The HTTP client is closed before returning.
        """
        async def _run() -> PluginMeta:
            try:
                return await self.import_plugin(raw, checksum=checksum)
            finally:
                await self.client.close()

        return asyncio.run(_run())
