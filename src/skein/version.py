"""Version tag of the running CLI build."""

from . import __version__


def cli_version() -> str | None:
    """
    Return the release tag of the running CLI.

    Development builds (``.dev`` versions or local ``+`` builds) carry no released
    tag, so plugins fetched for them come from the default channel.

    :return: The version string, or None for unreleased builds
    """
    if ".dev" in __version__ or "+" in __version__:
        return None
    return __version__
