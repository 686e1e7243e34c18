import asyncio

import pytest

from skein.core.plugin.errors import PluginEntryInvalid
from skein.core.plugin.sandbox import SandboxLimits, evaluate_plugin, validate_identity


def evaluate(source: str, limits: SandboxLimits | None = None) -> str:
    return asyncio.run(evaluate_plugin(source.encode("utf-8"), limits))


def test_exports_name():
    assert evaluate('exports.name = "foo"\n') == "foo"


def test_scoped_name():
    assert evaluate('exports.name = "@yarnpkg/plugin-exec"\n') == "@yarnpkg/plugin-exec"


def test_replaced_module_exports():
    source = (
        'factory = lambda: {"hooks": {}}\n'
        'module.exports = {"name": "@acme/plugin-lint", "factory": factory}\n'
    )
    assert evaluate(source) == "@acme/plugin-lint"


def test_name_is_computed_by_the_plugin():
    source = (
        'parts = ["plugin", "typescript"]\n'
        'exports.name = "@yarnpkg/" + "-".join(parts)\n'
    )
    assert evaluate(source) == "@yarnpkg/plugin-typescript"


@pytest.mark.parametrize("source", [
    'exports.name = open("/etc/hostname").read()\n',
    'import os\nexports.name = os.getcwd()\n',
    'exports.name = __import__("os").environ["HOME"]\n',
    'exports.name = print("hello") or "x"\n',
])
def test_host_globals_are_not_visible(source):
    with pytest.raises(PluginEntryInvalid, match="Plugin evaluation failed"):
        evaluate(source)


def test_runtime_events_are_denied_after_escape():
    source = (
        'wrap = [c for c in ().__class__.__base__.__subclasses__() if c.__name__ == "_wrap_close"][0]\n'
        'wrap.__init__.__globals__["system"]("touch escaped")\n'
        'exports.name = "escaped"\n'
    )
    with pytest.raises(PluginEntryInvalid, match="not permitted"):
        evaluate(source)


@pytest.mark.parametrize("source, message", [
    ('pass\n', "doesn't export a name"),
    ('exports.name = ""\n', "doesn't export a name"),
    ('exports.name = None\n', "doesn't export a name"),
    ('exports.name = 42\n', "must be a string, got int"),
    ('module.exports = {"version": "1.0.0"}\n', "doesn't export a name"),
    ('module.exports = ["name"]\n', "doesn't export a name"),
])
def test_missing_or_invalid_names(source, message):
    with pytest.raises(PluginEntryInvalid, match=message):
        evaluate(source)


def test_syntax_error():
    with pytest.raises(PluginEntryInvalid, match="SyntaxError"):
        evaluate('module.exports = {"name": \n')


def test_raising_plugin():
    with pytest.raises(PluginEntryInvalid, match="ZeroDivisionError"):
        evaluate('exports.name = "x"\n1 / 0\n')


def test_timeout():
    with pytest.raises(PluginEntryInvalid, match="timed out"):
        evaluate('while True:\n    pass\n', SandboxLimits(timeout=1.0))


def test_non_utf8_payload():
    with pytest.raises(PluginEntryInvalid):
        asyncio.run(evaluate_plugin(b'exports.name = "\xff"\n'))


@pytest.mark.parametrize("name", ["../../etc/passwd", "..", "/abs", "a/b", "@scope/../x", "a\\b", "@/x", "-x"])
def test_unsafe_identities(name):
    with pytest.raises(PluginEntryInvalid, match="invalid name"):
        validate_identity(name)


def test_unsafe_identity_declared_by_plugin():
    with pytest.raises(PluginEntryInvalid, match="invalid name"):
        evaluate('exports.name = "../../outside"\n')


@pytest.mark.parametrize("name", ["exec", "@yarnpkg/plugin-exec", "plugin.v2", "my_plugin~1"])
def test_safe_identities(name):
    assert validate_identity(name) == name


def test_output_is_bounded():
    with pytest.raises(PluginEntryInvalid, match="too much output"):
        evaluate('exports.name = "a" * 200000\n', SandboxLimits(max_output_bytes=1024))


def test_output_within_bound():
    assert evaluate('exports.name = "a" * 500\n', SandboxLimits(max_output_bytes=1024)) == "a" * 500
