"""
Agent port files.

A Go process running the diagnostic agent writes the TCP port it listens on
to a file named after its pid inside the gops config directory.
"""

from pathlib import Path
from typing import Optional

import psutil

from ..utils.errors import UnresolvableTarget
from ..utils.logging import get_logger

logger = get_logger(__name__)


def port_file_path(config_dir: Path, pid: int) -> Path:
    """Location of the port file for pid."""
    return Path(config_dir) / str(pid)


def has_agent(config_dir: Path, pid: int) -> bool:
    """True if pid has advertised an agent port."""
    return port_file_path(config_dir, pid).is_file()


def read_port(config_dir: Path, pid: int) -> int:
    """
    Read the agent port advertised by pid.

    Raises:
        UnresolvableTarget: if the process does not exist, has no port file,
            or the file does not hold a valid port
    """
    try:
        exists = psutil.pid_exists(pid)
    except (OverflowError, ValueError):
        exists = False
    if not exists:
        raise UnresolvableTarget(f"process {pid} not found", pid=pid)

    path = port_file_path(config_dir, pid)
    try:
        content = path.read_text().strip()
    except FileNotFoundError:
        raise UnresolvableTarget(
            f"process {pid} is not running the agent (no port file at {path})",
            pid=pid,
        )
    except OSError as e:
        raise UnresolvableTarget(f"cannot read port file {path}: {e}", pid=pid, cause=e)

    port: Optional[int] = int(content) if content.isascii() and content.isdigit() else None
    if port is None or port > 65535:
        raise UnresolvableTarget(f"port file {path} holds an invalid port {content!r}", pid=pid)

    logger.debug("agent_port_read", pid=pid, port=port, path=str(path))
    return port
