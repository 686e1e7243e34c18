"""
Isolated evaluation of downloaded plugin code.

The payload is executed in a separate interpreter (``python -I -S -B``) with an
empty environment, a throwaway working directory, POSIX resource limits and a
wall-clock timeout. Inside that interpreter the code only sees ``exports`` and
``module``, and an audit hook refuses file, network, process and import events.
The only thing that leaves the child is the declared plugin name.
"""

import asyncio
import json
import logging
import os
import re
import sys
import tempfile
from dataclasses import dataclass, asdict
from importlib import resources
from typing import Any, Dict

from .errors import PluginEntryInvalid

__all__ = ['SandboxLimits', 'evaluate_plugin', 'validate_identity']

logger = logging.getLogger(__name__)

IDENTITY_RE = re.compile(r'^(?:@[A-Za-z0-9][A-Za-z0-9._~-]*/)?[A-Za-z0-9][A-Za-z0-9._~-]*$')


@dataclass
class SandboxLimits:
    """Resource limits applied to the evaluation process."""

    timeout: float = 10.0
    max_memory_mb: int = 512
    cpu_time_s: int = 5
    max_open_files: int = 64
    max_output_bytes: int = 65536

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SandboxLimits":
        """Create limits from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        limits = cls(**known)
        if float(limits.timeout) <= 0:
            raise ValueError(f"Sandbox timeout must be positive, got {limits.timeout}")
        return limits

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_identity(name: str) -> str:
    """
    Check that a declared plugin name can safely become a file name.

    Accepted names are ``name`` or ``@scope/name`` where every segment starts with
    an alphanumeric character, so ``..``, absolute paths and backslashes never
    reach the installer.

    :param name: The declared name
    :return: The same name
    :raises PluginEntryInvalid: If the name isn't acceptable
    """
    if not IDENTITY_RE.match(name):
        raise PluginEntryInvalid(f"Plugin declares an invalid name: {name!r}")
    return name


def _bootstrap_source() -> str:
    return resources.files(__package__).joinpath("sandbox_bootstrap.py").read_text(encoding="utf-8")


def _sandbox_env() -> dict[str, str]:
    if os.name == "nt":
        # The interpreter can't start on Windows without it
        return {"SYSTEMROOT": os.environ.get("SYSTEMROOT", "")}
    return {}


def _spawn_options(limits: SandboxLimits) -> dict[str, Any]:
    if os.name == "nt":
        return {}

    def _posix_preexec() -> None:  # Runs in the child just before exec
        import resource

        def _limit(name: str, value: int) -> None:
            if not hasattr(resource, name) or value < 0:
                return
            try:
                resource.setrlimit(getattr(resource, name), (value, value))
            except (ValueError, OSError):
                # Platform refuses this limit (e.g. RLIMIT_AS on macOS)
                pass

        _limit("RLIMIT_AS", int(limits.max_memory_mb) * 1024 * 1024)
        _limit("RLIMIT_CPU", int(limits.cpu_time_s))
        _limit("RLIMIT_NOFILE", int(limits.max_open_files))
        _limit("RLIMIT_FSIZE", 0)
        _limit("RLIMIT_CORE", 0)

    return {"start_new_session": True, "preexec_fn": _posix_preexec}


async def _read_bounded(stream: asyncio.StreamReader, limit: int) -> bytes:
    """Read until EOF, stopping once more than ``limit`` bytes were received."""
    data = bytearray()
    while len(data) <= limit:
        chunk = await stream.read(limit + 1 - len(data))
        if not chunk:
            break
        data += chunk
    return bytes(data)


async def _collect(proc: asyncio.subprocess.Process, payload: bytes, limit: int) -> tuple[bytes, bytes]:
    """Feed the payload and read both output streams, never buffering more than ``limit`` bytes each."""
    async def feed() -> None:
        try:
            proc.stdin.write(payload)
            await proc.stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # The child exited before reading everything; its status tells why
            pass
        finally:
            proc.stdin.close()

    async def drain(stream: asyncio.StreamReader) -> bytes:
        data = await _read_bounded(stream, limit)
        if len(data) > limit:
            _kill(proc)
        return data

    _, stdout, stderr = await asyncio.gather(feed(), drain(proc.stdout), drain(proc.stderr))
    if len(stdout) > limit or len(stderr) > limit:
        await proc.wait()
        raise PluginEntryInvalid("Plugin evaluation produced too much output")

    await proc.wait()
    return stdout, stderr


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass


async def evaluate_plugin(payload: bytes, limits: SandboxLimits | None = None) -> str:
    """
    Evaluate plugin code in isolation and return the name it declares.

    :param payload: The plugin source
    :param limits: Resource limits, defaults apply when omitted
    :return: The declared plugin name, already validated
    :raises PluginEntryInvalid: If evaluation fails, times out or no usable name is exported
    """
    limits = limits or SandboxLimits()

    with tempfile.TemporaryDirectory(prefix="skein-sandbox-") as workdir:
        proc = await asyncio.create_subprocess_exec(
            sys.executable, "-I", "-S", "-B", "-c", _bootstrap_source(),
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=workdir,
            env=_sandbox_env(),
            **_spawn_options(limits),
        )
        logger.debug("Evaluating plugin in sandbox process %s", proc.pid)

        try:
            stdout, stderr = await asyncio.wait_for(
                _collect(proc, payload, limits.max_output_bytes), timeout=limits.timeout)
        except asyncio.TimeoutError:
            _kill(proc)
            await proc.wait()
            raise PluginEntryInvalid(f"Plugin evaluation timed out after {limits.timeout:g}s")

    if proc.returncode != 0:
        details = stderr.decode("utf-8", errors="replace").strip().splitlines()[-1:] or ["no output"]
        raise PluginEntryInvalid(
            f"Plugin evaluation exited abnormally (status {proc.returncode}): {details[0]}")

    try:
        result = json.loads(stdout)
    except ValueError:
        raise PluginEntryInvalid("Plugin evaluation produced malformed output")
    if not isinstance(result, dict):
        raise PluginEntryInvalid("Plugin evaluation produced malformed output")

    if not result.get("ok"):
        raise PluginEntryInvalid(f"Plugin evaluation failed: {result.get('error', 'unknown error')}")

    name = result.get("name")
    if name is None and result.get("name_type", "NoneType") != "NoneType":
        raise PluginEntryInvalid(f"Plugin name must be a string, got {result['name_type']}")
    if not isinstance(name, str) or not name:
        raise PluginEntryInvalid("Plugin doesn't export a name")

    return validate_identity(name)
