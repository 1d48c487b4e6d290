"""
Command registry for diagnostic commands.

The registry is an immutable name -> Command mapping built once at startup.
dispatch() looks a name up and runs its handler against a resolved target.
"""

import subprocess
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence

from ..agent.client import AgentClient
from ..agent.signals import Signal
from ..agent.target import CommandTarget
from ..utils.config import GopsctlConfig
from ..utils.errors import GopsctlError, HandlerFailure, UnknownCommand, error_context
from ..utils.logging import get_logger
from .handlers import (
    Handler,
    Runner,
    make_pprof_handler,
    make_print_handler,
    make_setgc_handler,
    make_trace_handler,
)

logger = get_logger(__name__)


class CommandSection(Enum):
    """Grouping used in the usage text."""
    RUNTIME = "Commands"
    PROFILING = "Profiling commands"


@dataclass(frozen=True)
class Command:
    """A named diagnostic command."""
    name: str
    description: str
    handler: Handler
    section: CommandSection = CommandSection.RUNTIME


CommandRegistry = Mapping[str, Command]


def make_registry(commands: Iterable[Command]) -> CommandRegistry:
    """Freeze commands into a registry, rejecting duplicate names."""
    table = {}
    for command in commands:
        if command.name in table:
            raise ValueError(f"duplicate command {command.name!r}")
        table[command.name] = command
    return MappingProxyType(table)


def build_registry(
    client: AgentClient,
    config: Optional[GopsctlConfig] = None,
    runner: Optional[Runner] = None
) -> CommandRegistry:
    """
    Build the standard command registry.

    Args:
        client: Agent client shared by all handlers
        config: Configuration (defaults used if None)
        runner: subprocess.run replacement for launching `go tool`
    """
    config = config or GopsctlConfig()
    run = runner or subprocess.run
    go = config.tools.go_binary

    return make_registry([
        Command("stack", "Prints the stack trace.",
                make_print_handler(client, Signal.STACK_TRACE)),
        Command("gc", "Runs the garbage collector and blocks until successful.",
                make_print_handler(client, Signal.GC)),
        Command("setgc", "Sets the garbage collection target percentage.",
                make_setgc_handler(client)),
        Command("memstats", "Prints the allocation and garbage collection stats.",
                make_print_handler(client, Signal.MEM_STATS)),
        Command("version", "Prints the Go version used to build the program.",
                make_print_handler(client, Signal.VERSION)),
        Command("stats", "Prints the vital runtime stats.",
                make_print_handler(client, Signal.STATS)),
        Command(
            "trace",
            f'Runs the runtime tracer for {config.tools.trace_seconds} secs and launches "go tool trace".',
            make_trace_handler(client, go, config.tools.trace_seconds, run),
            CommandSection.PROFILING,
        ),
        Command(
            "pprof-heap",
            'Reads the heap profile and launches "go tool pprof".',
            make_pprof_handler(client, Signal.HEAP_PROFILE, go, run),
            CommandSection.PROFILING,
        ),
        Command(
            "pprof-cpu",
            'Reads the CPU profile and launches "go tool pprof".',
            make_pprof_handler(client, Signal.CPU_PROFILE, go, run),
            CommandSection.PROFILING,
        ),
    ])


def commands_in(registry: CommandRegistry, section: CommandSection) -> List[Command]:
    """Commands of one section in registration order."""
    return [c for c in registry.values() if c.section is section]


def dispatch(
    registry: CommandRegistry,
    name: str,
    target: CommandTarget,
    params: Sequence[str] = ()
) -> None:
    """
    Run the command called name against target.

    Raises:
        UnknownCommand: if name is not registered; no handler runs
        HandlerFailure: if the handler fails, carrying its message verbatim
    """
    command = registry.get(name)
    if command is None:
        raise UnknownCommand(name)

    logger.debug("dispatching_command", command=name, target=str(target), params=list(params))
    try:
        with error_context("commands", name, target=str(target)):
            command.handler(target, list(params))
    except HandlerFailure:
        raise
    except GopsctlError as e:
        raise HandlerFailure(e.message, context=e.context, cause=e) from e
