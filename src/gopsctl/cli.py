"""
gopsctl command line interface.

    gopsctl                         list Go processes
    gopsctl <pid>                   show process metadata
    gopsctl tree                    show the process tree
    gopsctl <cmd> <pid|addr> ...    run a diagnostic command
"""

import sys
from functools import partial
from typing import List, Optional, Sequence

from .agent.client import AgentClient
from .agent.portfile import read_port
from .agent.target import resolve_target
from .commands.registry import (
    CommandRegistry,
    CommandSection,
    build_registry,
    commands_in,
    dispatch,
)
from .process.discovery import find_all
from .process.info import collect_process_details, format_process_details
from .process.listing import AGENT_GLYPH, format_process_table
from .process.tree import build_process_tree, render_tree
from .utils.config import GopsctlConfig, load_config
from .utils.errors import (
    ConfigurationError,
    GopsctlError,
    InvalidAddress,
    UnresolvableTarget,
)
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

PROG = "gopsctl"


def format_usage(registry: CommandRegistry) -> str:
    """Usage text listing every registered command."""
    def rows(commands) -> List[str]:
        return [f"    {c.name:<12}\t{c.description}" for c in commands]

    lines = [
        f"{PROG} is a tool to list and diagnose Go processes.",
        "",
        f"\t{PROG} <cmd> <pid|addr> ...",
        f"\t{PROG} <pid> # displays process info",
        f"\t{PROG} tree  # displays process tree",
        "",
        f"{CommandSection.RUNTIME.value}:",
    ]
    lines += rows(commands_in(registry, CommandSection.RUNTIME))
    lines.append(f"    {'help':<12}\tPrints this help text.")
    lines += ["", f"{CommandSection.PROFILING.value}:"]
    lines += rows(commands_in(registry, CommandSection.PROFILING))
    lines += [
        "",
        "All commands require the agent running on the Go process.",
        f'Symbol "{AGENT_GLYPH}" indicates the process runs the agent.',
    ]
    return "\n".join(lines)


def _error(message: str) -> None:
    print(f"{PROG}: {message}", file=sys.stderr)


def _usage(registry: CommandRegistry, message: str = "") -> int:
    if message:
        _error(message)
    print(format_usage(registry), file=sys.stderr)
    return 1


def list_processes(config: GopsctlConfig) -> int:
    """Print the aligned process table."""
    for line in format_process_table(find_all(config)):
        print(line)
    return 0


def show_tree(config: GopsctlConfig) -> int:
    """Print the process tree."""
    print(render_tree(build_process_tree(find_all(config))))
    return 0


def show_process_info(pid: int) -> int:
    """Print metadata for one process."""
    for line in format_process_details(collect_process_details(pid)):
        print(line)
    return 0


def run_command(
    registry: CommandRegistry,
    config: GopsctlConfig,
    name: str,
    token: str,
    params: Sequence[str]
) -> int:
    """Resolve token and dispatch name to it."""
    port_lookup = partial(read_port, config.agent.resolved_config_dir())
    try:
        target = resolve_target(token, port_lookup, host=config.agent.host)
    except (UnresolvableTarget, InvalidAddress) as e:
        _error(f"couldn't resolve addr or pid {token} to TCP address: {e.message}")
        return 1

    dispatch(registry, name, target, params)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run gopsctl.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:])

    Returns:
        Process exit status
    """
    args = list(sys.argv[1:] if argv is None else argv)

    try:
        config = load_config()
    except ConfigurationError as e:
        _error(e.message)
        return 1
    setup_logging(log_level=config.logging.level, log_format=config.logging.format)
    logger.debug("cli_invoked", args=args)

    try:
        if not args:
            return list_processes(config)

        cmd = args[0]
        if cmd.isascii() and cmd.isdigit():
            return show_process_info(int(cmd))
        if cmd == "tree":
            return show_tree(config)

        registry = build_registry(AgentClient(timeout=config.agent.timeout), config)
        if cmd == "help":
            return _usage(registry)
        if cmd not in registry:
            return _usage(registry, "unknown subcommand")
        if len(args) < 2:
            return _usage(registry, "missing target")

        return run_command(registry, config, cmd, args[1], args[2:])

    except GopsctlError as e:
        _error(e.message)
        return 1


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    run()
