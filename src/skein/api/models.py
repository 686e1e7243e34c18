"""
Data models for the remote plugin index.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

import semver

from .exceptions import IndexFormatError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryIndexEntry:
    """A plugin known to the remote index."""
    ident: str
    url: str
    range: str | None = None

    def supports(self, version: str) -> bool:
        """
        Check whether the entry's ``range`` accepts a CLI version.

        Comparators separated by whitespace must all match; ``||`` separates
        alternatives. ``^`` and ``~`` comparators follow npm semantics. Prerelease
        versions are compared like any other version. Entries without a range
        accept every version. An alternative that can't be parsed is skipped.

        :param version: The running CLI version
        :return: True if the plugin is usable with that version
        """
        if not self.range:
            return True

        try:
            parsed = semver.Version.parse(version)
        except ValueError:
            logger.warning("Cannot compare invalid CLI version %r against %s", version, self.ident)
            return True

        for alternative in self.range.split("||"):
            comparators = alternative.split()
            if not comparators:
                return True
            try:
                expanded = [bound for c in comparators for bound in _expand_comparator(c)]
                if all(parsed.match(bound) for bound in expanded):
                    return True
            except ValueError:
                logger.warning("Unsupported range %r for %s", alternative.strip(), self.ident)

        return False


def _expand_comparator(comparator: str) -> list[str]:
    """Turn one range comparator into the ``Version.match`` expressions it stands for."""
    if comparator.startswith("^"):
        lower = semver.Version.parse(comparator[1:])
        if lower.major:
            upper = lower.bump_major()
        elif lower.minor:
            upper = lower.bump_minor()
        else:
            upper = lower.bump_patch()
        return [f">={lower}", f"<{upper}"]
    if comparator.startswith("~"):
        lower = semver.Version.parse(comparator[1:])
        return [f">={lower}", f"<{lower.bump_minor()}"]
    if comparator[:1].isdigit():
        return ["==" + comparator]
    if comparator.startswith("=") and not comparator.startswith("=="):
        return ["=" + comparator]
    return [comparator]


class RegistryIndex(Mapping[str, RegistryIndexEntry]):
    """Read-only mapping from canonical plugin ident to its index entry."""

    def __init__(self, entries: Mapping[str, RegistryIndexEntry] | None = None):
        self._entries = dict(entries or {})

    def __getitem__(self, ident: str) -> RegistryIndexEntry:
        return self._entries[ident]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_document(cls, data: Any) -> "RegistryIndex":
        """
        Build an index from a parsed index document.

        Each value is either the download URL itself or a mapping with a ``url``
        key and an optional ``range`` key.

        :param data: The parsed document
        :return: The index
        :raises IndexFormatError: If the document doesn't have the expected shape
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise IndexFormatError("Plugin index must be a mapping of plugin names to entries")

        entries = {}
        for ident, value in data.items():
            if not isinstance(ident, str) or not ident:
                raise IndexFormatError(f"Invalid plugin name in index: {ident!r}")

            if isinstance(value, str):
                url, version_range = value, None
            elif isinstance(value, dict) and isinstance(value.get("url"), str):
                url = value["url"]
                version_range = value.get("range")
                if version_range is not None and not isinstance(version_range, str):
                    raise IndexFormatError(f"Invalid range for plugin {ident}: {version_range!r}")
            else:
                raise IndexFormatError(f"Invalid index entry for plugin {ident}")

            entries[ident] = RegistryIndexEntry(ident=ident, url=url, range=version_range)

        return cls(entries)

    def for_version(self, version: str | None) -> "RegistryIndex":
        """
        Keep only the entries usable with the given CLI version.

        :param version: The running CLI version, None keeps everything
        :return: The filtered index
        """
        if version is None:
            return self
        return RegistryIndex({ident: entry for ident, entry in self._entries.items()
                              if entry.supports(version)})
