"""
Reading plugin payloads from disk or from the network.
"""

import logging

from ...api.client import RegistryClient
from ...api.exceptions import APIError
from .errors import SourceUnreadable
from .specifier import LocalPath, RemoteUrl, ResolvedSource

logger = logging.getLogger(__name__)


async def fetch_payload(source: ResolvedSource, client: RegistryClient) -> bytes:
    """
    Get the raw bytes of a plugin.

    :param source: Where the plugin lives
    :param client: HTTP client used for remote sources
    :return: The plugin payload
    :raises SourceUnreadable: If the file can't be read or the download fails
    """
    match source:
        case LocalPath(path=path):
            logger.debug("Reading plugin from %s", path)
            try:
                return path.read_bytes()
            except OSError as e:
                raise SourceUnreadable(f"Couldn't read plugin file {path}: {e}", cause=e) from e

        case RemoteUrl(url=url):
            logger.debug("Downloading plugin from %s", url)
            try:
                return await client.get(url)
            except APIError as e:
                raise SourceUnreadable(f"Couldn't download plugin from {url}: {e}", cause=e) from e

        case _:
            raise TypeError(f"Unsupported plugin source: {source!r}")
