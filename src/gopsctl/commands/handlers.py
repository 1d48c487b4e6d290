"""
Diagnostic command handlers.

Each factory returns a closure with the signature handler(target, params).
A handler prints whatever the agent replies to stdout and raises a
GopsctlError when the command cannot be completed.
"""

import os
import re
import subprocess
import sys
import tempfile
from typing import Callable, List, Optional, Sequence

from ..agent.client import AgentClient
from ..agent.signals import Signal, encode_varint
from ..agent.target import CommandTarget
from ..utils.errors import HandlerFailure
from ..utils.logging import get_logger

logger = get_logger(__name__)

Handler = Callable[[CommandTarget, Sequence[str]], None]
Runner = Callable[..., "subprocess.CompletedProcess"]


def _write(data: bytes) -> None:
    sys.stdout.write(data.decode("utf-8", "replace"))
    sys.stdout.flush()


def _save_temp(data: bytes, prefix: str) -> str:
    """Write data to a new temporary file and return its path."""
    with tempfile.NamedTemporaryFile(prefix=prefix, delete=False) as f:
        f.write(data)
        return f.name


def _run_go_tool(runner: Runner, go_binary: str, args: List[str]) -> None:
    """Run `go tool ...` attached to the terminal."""
    argv = [go_binary, "tool"] + args
    logger.debug("running_go_tool", argv=argv)
    try:
        result = runner(argv)
    except OSError as e:
        raise HandlerFailure(f"cannot run {go_binary}: {e}", cause=e) from e
    if result.returncode != 0:
        raise HandlerFailure(f"go tool {args[0]} exited with status {result.returncode}")


def make_print_handler(client: AgentClient, signal: Signal) -> Handler:
    """Handler that sends signal and prints the reply."""
    def handler(target: CommandTarget, params: Sequence[str]) -> None:
        _write(client.request(target, signal))
    return handler


def make_setgc_handler(client: AgentClient) -> Handler:
    """Handler for setgc <percentage>."""
    def handler(target: CommandTarget, params: Sequence[str]) -> None:
        if len(params) != 1:
            raise HandlerFailure("missing gc percentage")
        if not re.fullmatch(r"[+-]?[0-9]+", params[0]):
            raise HandlerFailure(f"invalid gc percentage {params[0]!r}")
        try:
            percentage = int(params[0])
            payload = encode_varint(percentage)
        except ValueError as e:
            raise HandlerFailure(f"invalid gc percentage {params[0]!r}", cause=e) from e
        _write(client.request(target, Signal.SET_GC_PERCENT, payload))
    return handler


def make_trace_handler(
    client: AgentClient,
    go_binary: str = "go",
    trace_seconds: int = 5,
    runner: Optional[Runner] = None
) -> Handler:
    """Handler that collects a runtime trace and opens it in `go tool trace`."""
    run = runner or subprocess.run

    def handler(target: CommandTarget, params: Sequence[str]) -> None:
        print(f"Tracing now, will take {trace_seconds} secs...", flush=True)
        out = client.request(target, Signal.TRACE)
        if not out:
            raise HandlerFailure("nothing has traced")
        path = _save_temp(out, "trace")
        print(f"Trace dump saved to: {path}", flush=True)
        _run_go_tool(run, go_binary, ["trace", path])
    return handler


def make_pprof_handler(
    client: AgentClient,
    signal: Signal,
    go_binary: str = "go",
    runner: Optional[Runner] = None
) -> Handler:
    """Handler that fetches a profile plus the target binary and opens `go tool pprof`."""
    run = runner or subprocess.run

    def handler(target: CommandTarget, params: Sequence[str]) -> None:
        profile = client.request(target, signal)
        if not profile:
            raise HandlerFailure("failed to read the profile")
        binary = client.request(target, Signal.BINARY_DUMP)
        if not binary:
            raise HandlerFailure("failed to read the binary")

        profile_path = _save_temp(profile, "profile")
        binary_path = _save_temp(binary, "binary")
        try:
            _run_go_tool(run, go_binary, ["pprof", binary_path, profile_path])
        finally:
            for path in (profile_path, binary_path):
                try:
                    os.remove(path)
                except OSError as e:
                    logger.warning("temp_file_not_removed", path=path, error=str(e))
    return handler
