"""
Plugin evaluation entry point, run in a separate isolated interpreter.

Reads the plugin source from stdin and evaluates it with only ``exports`` and
``module`` bound. Once the source is compiled an audit hook rejects every runtime
event except code execution, so the plugin can't open files or sockets, spawn
processes or import modules. The outcome is written to stdout as one JSON object.

This file is passed to ``python -c`` and is not imported by the package.
"""

import json
import os
import sys
import types

ALLOWED_EVENTS = frozenset({"exec", "cpython._PySys_ClearAuditHooks"})


class SandboxViolation(Exception):
    pass


def deny_events(event, args):
    if event not in ALLOWED_EVENTS:
        raise SandboxViolation(f"{event} is not permitted while evaluating a plugin")


def declared_name(module):
    exported = module.exports
    if isinstance(exported, dict):
        return exported.get("name")
    return getattr(exported, "name", None)


def evaluate(source):
    code = compile(source, "<plugin>", "exec")

    exports = types.SimpleNamespace()
    module = types.SimpleNamespace(exports=exports)
    sandbox_globals = {"__builtins__": {}, "exports": exports, "module": module}

    sys.addaudithook(deny_events)
    exec(code, sandbox_globals)

    name = declared_name(module)
    if type(name) is str:
        return {"ok": True, "name": name}
    return {"ok": True, "name": None, "name_type": type(name).__name__}


def main():
    try:
        source = sys.stdin.buffer.read().decode("utf-8-sig")
        result = evaluate(source)
    except BaseException as e:
        result = {"ok": False, "error": f"{type(e).__name__}: {e}"}

    sys.stdout.buffer.write(json.dumps(result).encode("utf-8"))
    sys.stdout.buffer.flush()
    os._exit(0)


if __name__ == "__main__":
    main()
