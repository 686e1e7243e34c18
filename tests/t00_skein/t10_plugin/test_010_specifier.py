from pathlib import Path

import pytest

from skein.core.plugin.errors import InvalidPluginReference, OfficialPluginVersionRequired
from skein.core.plugin.specifier import (
    LocalPath, RemoteUrl, RegistryLookupRequest, classify, specifier_string,
)

CWD = Path("/work/project/sub")


@pytest.mark.parametrize("raw, expected", [
    ("./plugin.cjs", "/work/project/sub/plugin.cjs"),
    ("../plugin.cjs", "/work/project/plugin.cjs"),
    ("./dist/../plugin.cjs", "/work/project/sub/plugin.cjs"),
    ("/opt/plugins/plugin.cjs", "/opt/plugins/plugin.cjs"),
    (".\\plugin.cjs", None),
])
def test_local_paths(raw, expected):
    result = classify(raw, CWD)

    assert isinstance(result, LocalPath)
    if expected is not None:
        assert result.path == Path(expected)


@pytest.mark.parametrize("raw", [
    "https://example.org/path/to/plugin.js",
    "http://localhost:8080/plugin.js",
    "https://github.com/yarnpkg/berry/raw/master/packages/plugin-typescript/bin/%40yarnpkg/plugin-typescript.js",
])
def test_urls_are_kept_verbatim(raw):
    assert classify(raw, CWD) == RemoteUrl(raw)


@pytest.mark.parametrize("raw", [
    "https://",
    "http:///plugin.js",
    "https:plugin.js",
])
def test_malformed_urls(raw):
    with pytest.raises(InvalidPluginReference):
        classify(raw, CWD)


@pytest.mark.parametrize("raw", [
    "exec",
    "plugin-exec",
    "@yarnpkg/plugin-exec",
])
def test_short_names_are_normalized(raw):
    assert classify(raw, CWD) == RegistryLookupRequest(ident="@yarnpkg/plugin-exec", version=None)


def test_version_suffix():
    assert classify("exec@4.0.0", CWD) == RegistryLookupRequest(ident="@yarnpkg/plugin-exec", version="4.0.0")
    assert classify("@yarnpkg/plugin-exec@4.1.0-rc.2", CWD) == RegistryLookupRequest(
        ident="@yarnpkg/plugin-exec", version="4.1.0-rc.2")


@pytest.mark.parametrize("raw", ["exec@latest", "exec@^4.0.0", "exec@4", "plugin-exec@4.0"])
def test_non_strict_versions_are_rejected(raw):
    with pytest.raises(OfficialPluginVersionRequired):
        classify(raw, CWD)


@pytest.mark.parametrize("raw", ["", " exec", "plugin-", "@other/plugin-foo", "@yarnpkg/exec", "exec/extra"])
def test_unparseable_names(raw):
    with pytest.raises(InvalidPluginReference):
        classify(raw, CWD)


def test_custom_scope():
    assert classify("lint", CWD, scope="@acme") == RegistryLookupRequest(ident="@acme/plugin-lint")
    assert classify("@acme/plugin-lint", CWD, scope="@acme") == RegistryLookupRequest(ident="@acme/plugin-lint")


def test_specifier_string():
    assert specifier_string("exec@4.0.0", classify("exec@4.0.0", CWD)) == "@yarnpkg/plugin-exec"
    assert specifier_string("./plugin.cjs", classify("./plugin.cjs", CWD)) == "./plugin.cjs"
    url = "https://example.org/plugin.js"
    assert specifier_string(url, classify(url, CWD)) == url
