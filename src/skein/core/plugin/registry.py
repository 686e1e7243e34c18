"""
Resolution of registry plugin names to download URLs.
"""

import logging
from collections.abc import Collection

from ...api.models import RegistryIndex, RegistryIndexEntry
from .errors import PluginNameNotFound
from .specifier import RegistryLookupRequest, RemoteUrl

__all__ = ['PLUGIN_LIST_URL', 'EXAMPLE_PLUGIN_URL', 'rewrite_channel_url',
           'resolve_registry_request', 'available_plugins']

logger = logging.getLogger(__name__)

PLUGIN_LIST_URL = "https://github.com/yarnpkg/berry/blob/master/plugins.yml"
EXAMPLE_PLUGIN_URL = ("https://github.com/yarnpkg/berry/raw/master/packages/plugin-typescript/"
                      "bin/%40yarnpkg/plugin-typescript.js")


def rewrite_channel_url(url: str, channel: str, replacement: str) -> str:
    """
    Replace the first ``/<channel>/`` segment of a URL.

    :param url: The base URL from the index
    :param channel: Name of the release channel segment (e.g. ``master``)
    :param replacement: Path that takes its place, without surrounding slashes
    :return: The rewritten URL, or the original one if it has no channel segment
    """
    return url.replace(f"/{channel}/", f"/{replacement}/", 1)


def resolve_registry_request(
        request: RegistryLookupRequest,
        index: RegistryIndex,
        *,
        cli_version: str | None,
        installed: Collection[str] = (),
        channel: str = "master",
        cli_package: str = "@yarnpkg/cli",
) -> RemoteUrl:
    """
    Find the download URL of a registry plugin.

    With an explicit version the URL points at that plugin release; otherwise it
    points at the build matching the running CLI, or at the default channel when
    the CLI version is unknown.

    :param request: The lookup produced by the classifier
    :param index: The remote plugin index
    :param cli_version: Version of the running CLI, None for unreleased builds
    :param installed: Names of the plugins already active in the project
    :param channel: Release channel segment present in index URLs
    :param cli_package: Ident of the CLI package, used to pin to the CLI build
    :return: The URL to download
    :raises PluginNameNotFound: If the plugin isn't in the index
    """
    entry = index.get(request.ident)
    if entry is None:
        raise _not_found(request.ident, installed)

    url = entry.url
    if request.version is not None:
        url = rewrite_channel_url(url, channel, f"{request.ident}/{request.version}")
    elif cli_version is not None:
        url = rewrite_channel_url(url, channel, f"{cli_package}/{cli_version}")

    logger.debug("Resolved %s to %s", request.ident, url)
    return RemoteUrl(url)


def _not_found(ident: str, installed: Collection[str]) -> PluginNameNotFound:
    message = f"Couldn't find a plugin named {ident} on the remote registry.\n"
    already_installed = ident in installed
    if already_installed:
        message += (f"A plugin named {ident} is already installed; "
                    f"possibly attempting to import a built-in plugin.")
    else:
        message += (f"Note that only the plugins referenced on our website ({PLUGIN_LIST_URL}) can be "
                    f"referenced by their name; any other plugin will have to be referenced through "
                    f"its public url (for example {EXAMPLE_PLUGIN_URL}).")
    return PluginNameNotFound(message, ident=ident, already_installed=already_installed)


def available_plugins(index: RegistryIndex) -> list[RegistryIndexEntry]:
    """List index entries sorted by ident."""
    return [index[ident] for ident in sorted(index)]
