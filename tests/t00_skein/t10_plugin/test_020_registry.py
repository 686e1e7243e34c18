import asyncio

import pytest

from skein.api.exceptions import IndexFormatError, NotFoundError, ServerError
from skein.api.models import RegistryIndex, RegistryIndexEntry
from skein.core.plugin.errors import PluginNameNotFound
from skein.core.plugin.registry import available_plugins, resolve_registry_request, rewrite_channel_url
from skein.core.plugin.specifier import RegistryLookupRequest, RemoteUrl

INDEX_URL = "https://registry.example/plugins.yml"
EXEC_URL = "https://example.org/berry/master/packages/plugin-exec/bin/%40yarnpkg/plugin-exec.js"


@pytest.fixture
def index() -> RegistryIndex:
    return RegistryIndex.from_document({"@yarnpkg/plugin-exec": EXEC_URL})


def test_unversioned_request_follows_cli_version(index):
    request = RegistryLookupRequest(ident="@yarnpkg/plugin-exec")

    source = resolve_registry_request(request, index, cli_version="4.0.0")

    assert source == RemoteUrl(
        "https://example.org/berry/@yarnpkg/cli/4.0.0/packages/plugin-exec/bin/%40yarnpkg/plugin-exec.js")


def test_versioned_request_pins_plugin_release(index):
    request = RegistryLookupRequest(ident="@yarnpkg/plugin-exec", version="3.2.1")

    source = resolve_registry_request(request, index, cli_version="4.0.0")

    assert source.url == (
        "https://example.org/berry/@yarnpkg/plugin-exec/3.2.1/packages/plugin-exec/bin/%40yarnpkg/plugin-exec.js")


def test_unknown_cli_version_keeps_default_channel(index):
    request = RegistryLookupRequest(ident="@yarnpkg/plugin-exec")

    assert resolve_registry_request(request, index, cli_version=None).url == EXEC_URL


def test_only_first_channel_segment_is_rewritten():
    url = "https://host/master/a/master/b.js"
    assert rewrite_channel_url(url, "master", "@yarnpkg/cli/4.0.0") == "https://host/@yarnpkg/cli/4.0.0/a/master/b.js"
    assert rewrite_channel_url("https://host/main/b.js", "master", "x") == "https://host/main/b.js"


def test_unknown_plugin(index):
    request = RegistryLookupRequest(ident="@yarnpkg/plugin-nope")

    with pytest.raises(PluginNameNotFound) as exc_info:
        resolve_registry_request(request, index, cli_version="4.0.0")

    assert not exc_info.value.already_installed
    assert "only the plugins referenced on our website" in str(exc_info.value)


def test_unknown_but_installed_plugin(index):
    request = RegistryLookupRequest(ident="@yarnpkg/plugin-nope")

    with pytest.raises(PluginNameNotFound) as exc_info:
        resolve_registry_request(request, index, cli_version=None, installed={"@yarnpkg/plugin-nope"})

    assert exc_info.value.already_installed
    assert "already installed" in str(exc_info.value)


def test_index_document_formats():
    index = RegistryIndex.from_document({
        "@yarnpkg/plugin-exec": EXEC_URL,
        "@yarnpkg/plugin-old": {"url": "https://example.org/master/old.js", "range": "<4.0.0-rc.1"},
    })

    assert index["@yarnpkg/plugin-exec"] == RegistryIndexEntry("@yarnpkg/plugin-exec", EXEC_URL)
    assert index["@yarnpkg/plugin-old"].range == "<4.0.0-rc.1"
    assert [entry.ident for entry in available_plugins(index)] == ["@yarnpkg/plugin-exec", "@yarnpkg/plugin-old"]


@pytest.mark.parametrize("document", [
    ["@yarnpkg/plugin-exec"],
    {"@yarnpkg/plugin-exec": 42},
    {"@yarnpkg/plugin-exec": {"range": ">=4.0.0"}},
    {"@yarnpkg/plugin-exec": {"url": EXEC_URL, "range": 4}},
])
def test_invalid_index_documents(document):
    with pytest.raises(IndexFormatError):
        RegistryIndex.from_document(document)


@pytest.mark.parametrize("version_range, version, expected", [
    (None, "4.0.0", True),
    ("<4.0.0-rc.1", "3.6.0", True),
    ("<4.0.0-rc.1", "4.0.0", False),
    (">=4.0.0-rc.1", "4.0.0-rc.2", True),
    (">=2.0.0 <4.0.0", "3.1.0", True),
    (">=2.0.0 <4.0.0", "4.1.0", False),
    ("<2.0.0 || >=4.0.0", "4.1.0", True),
    ("<2.0.0 || >=4.0.0", "3.0.0", False),
    ("4.0.0", "4.0.0", True),
    ("^3.0.0 || >=4.0.0", "4.0.0", True),
    ("^3.0.0 || >=4.0.0", "2.9.0", False),
    ("^4.0.0", "4.3.1", True),
    ("^4.0.0", "5.0.0", False),
    ("^0.2.1", "0.2.5", True),
    ("^0.2.1", "0.3.0", False),
    ("^0.0.3", "0.0.4", False),
    ("~4.1.0", "4.1.9", True),
    ("~4.1.0", "4.2.0", False),
    ("^4 || >=4.0.0", "4.0.0", True),
    ("latest || >=5.0.0", "4.0.0", False),
])
def test_entry_version_ranges(version_range, version, expected):
    entry = RegistryIndexEntry("@yarnpkg/plugin-exec", EXEC_URL, version_range)
    assert entry.supports(version) is expected


def test_fetch_index_filters_by_cli_version(client, routes, requests_seen):
    routes[INDEX_URL] = (
        b'"@yarnpkg/plugin-exec":\n'
        b'  url: https://example.org/master/exec.js\n'
        b'"@yarnpkg/plugin-legacy":\n'
        b'  url: https://example.org/master/legacy.js\n'
        b'  range: <4.0.0-rc.1\n'
    )

    async def run():
        async with client:
            return await client.fetch_index("4.0.0"), await client.fetch_index(None)

    current, unfiltered = asyncio.run(run())

    assert list(current) == ["@yarnpkg/plugin-exec"]
    assert sorted(unfiltered) == ["@yarnpkg/plugin-exec", "@yarnpkg/plugin-legacy"]
    assert requests_seen == [INDEX_URL, INDEX_URL]


def test_fetch_index_accepts_json(client, routes):
    routes[INDEX_URL] = b'{"@yarnpkg/plugin-exec": "https://example.org/master/exec.js"}'

    index = asyncio.run(client.fetch_index("4.0.0"))

    assert index["@yarnpkg/plugin-exec"].url == "https://example.org/master/exec.js"


@pytest.mark.parametrize("response, error", [
    (404, NotFoundError),
    (503, ServerError),
    (b"- [unbalanced", IndexFormatError),
])
def test_fetch_index_failures(client, routes, response, error):
    routes[INDEX_URL] = response

    with pytest.raises(error):
        asyncio.run(client.fetch_index("4.0.0"))
