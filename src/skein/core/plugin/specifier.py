"""
Classification of user-supplied plugin specifiers.

A specifier is one of:

- a local path (``./plugin.py``, ``../plugin.py``, ``/abs/plugin.py``)
- a public URL (``https://example.org/plugin.py``)
- a registry name (``exec``, ``plugin-exec``, ``@yarnpkg/plugin-exec``), optionally
  pinned to a strict version (``exec@4.0.0``)
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path

import httpx
import semver

from .errors import InvalidPluginReference, OfficialPluginVersionRequired

__all__ = ['LocalPath', 'RemoteUrl', 'ResolvedSource', 'RegistryLookupRequest',
           'classify', 'specifier_string']

LOCAL_PATH_RE = re.compile(r'^\.{0,2}[\\/]')
URL_SCHEME_RE = re.compile(r'^https?:')
IDENT_RE = re.compile(r'^@(?P<scope>[^/@]+)/(?P<name>[^@/]+)(?:@(?P<reference>.+))?$')


@dataclass(frozen=True)
class LocalPath:
    """A plugin file on the local filesystem."""
    path: Path


@dataclass(frozen=True)
class RemoteUrl:
    """A plugin file reachable over HTTP(S)."""
    url: str


ResolvedSource = LocalPath | RemoteUrl


@dataclass(frozen=True)
class RegistryLookupRequest:
    """A plugin to look up in the remote index."""
    ident: str
    version: str | None = None


def is_local_path(raw: str) -> bool:
    return bool(LOCAL_PATH_RE.match(raw)) or os.path.isabs(raw)


def classify(raw: str, cwd: Path, *, scope: str = "@yarnpkg") -> LocalPath | RemoteUrl | RegistryLookupRequest:
    """
    Decide what a plugin specifier refers to. No I/O is performed.

    :param raw: The specifier as typed by the user
    :param cwd: Directory relative paths are resolved against
    :param scope: The scope of plugins that can be referenced by name
    :return: The local path, the URL, or the registry lookup to perform
    :raises InvalidPluginReference: If the specifier can't be parsed
    :raises OfficialPluginVersionRequired: If a registry name carries a non-strict version
    """
    if not raw or raw != raw.strip():
        raise InvalidPluginReference(f"Plugin specifier \"{raw}\" is empty or has surrounding whitespace")

    if is_local_path(raw):
        return LocalPath(Path(os.path.normpath(cwd / raw)))

    if URL_SCHEME_RE.match(raw):
        try:
            url = httpx.URL(raw)
        except httpx.InvalidURL:
            url = None
        if url is None or not url.is_absolute_url or not url.host:
            raise InvalidPluginReference(f"Plugin specifier \"{raw}\" is neither a plugin name nor a valid url")
        return RemoteUrl(raw)

    return _parse_registry_name(raw, scope)


def _parse_registry_name(raw: str, scope: str) -> RegistryLookupRequest:
    prefix = f"{scope}/plugin-"
    if raw.startswith(prefix):
        short = raw[len(prefix):]
    elif raw.startswith("plugin-"):
        short = raw[len("plugin-"):]
    elif raw.startswith("@"):
        raise InvalidPluginReference(
            f"Only {scope} plugins can be referenced by name; use an explicit url for \"{raw}\"")
    else:
        short = raw

    match = IDENT_RE.match(prefix + short)
    if match is None or match.group("name") == "plugin-":
        raise InvalidPluginReference(f"Plugin specifier \"{raw}\" is neither a plugin name nor a valid url")

    ident = f"@{match.group('scope')}/{match.group('name')}"
    reference = match.group("reference")
    if reference is not None and not semver.Version.is_valid(reference):
        raise OfficialPluginVersionRequired(
            "Official plugins only accept strict version references. "
            "Use an explicit URL if you wish to download them from another location.")

    return RegistryLookupRequest(ident=ident, version=reference)


def specifier_string(raw: str, target: LocalPath | RemoteUrl | RegistryLookupRequest) -> str:
    """
    The spec string persisted in the plugin record.

    Local paths and URLs are kept as typed; registry names are stored as their
    canonical ident, without version.
    """
    match target:
        case RegistryLookupRequest(ident=ident):
            return ident
        case LocalPath() | RemoteUrl():
            return raw
