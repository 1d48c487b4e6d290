"""
Single process inspection.

Each metadata field is fetched on its own; a field the OS refuses or fails
to report is left as None and omitted from the output.
"""

import time
from dataclasses import dataclass
from typing import Callable, List, Optional, TypeVar

import psutil

from ..utils.errors import UnresolvableTarget
from ..utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ConnectionInfo:
    """One socket held by the process."""
    local_ip: str
    local_port: int
    remote_ip: str
    remote_port: int
    status: str

    def __str__(self) -> str:
        return (
            f"{self.local_ip}:{self.local_port} <-> "
            f"{self.remote_ip}:{self.remote_port} ({self.status})"
        )


@dataclass
class ProcessDetails:
    """Metadata gathered for one process; None means unavailable."""
    pid: int
    ppid: Optional[int] = None
    num_threads: Optional[int] = None
    memory_percent: Optional[float] = None
    cpu_percent: Optional[float] = None
    username: Optional[str] = None
    cmdline: Optional[str] = None
    connections: Optional[List[ConnectionInfo]] = None


def _fetch(pid: int, field: str, getter: Callable[[], T]) -> Optional[T]:
    try:
        return getter()
    except psutil.Error as e:
        logger.debug("process_field_unavailable", pid=pid, field=field, error=str(e))
        return None


def _lifetime_cpu_percent(proc: psutil.Process) -> float:
    """CPU time used over wall time since the process started, in percent."""
    times = proc.cpu_times()
    elapsed = time.time() - proc.create_time()
    if elapsed <= 0:
        return 0.0
    return 100.0 * (times.user + times.system) / elapsed


def _connections(proc: psutil.Process) -> List[ConnectionInfo]:
    result = []
    for conn in proc.net_connections(kind="inet"):
        laddr = conn.laddr or ("", 0)
        raddr = conn.raddr or ("", 0)
        result.append(ConnectionInfo(
            local_ip=laddr[0],
            local_port=laddr[1],
            remote_ip=raddr[0],
            remote_port=raddr[1],
            status=conn.status,
        ))
    return result


def collect_process_details(pid: int) -> ProcessDetails:
    """
    Gather metadata for pid.

    Raises:
        UnresolvableTarget: if the process does not exist
    """
    try:
        proc = psutil.Process(pid)
    except psutil.Error as e:
        raise UnresolvableTarget(f"cannot read process info: {e}", pid=pid, cause=e) from e

    return ProcessDetails(
        pid=pid,
        ppid=_fetch(pid, "ppid", proc.ppid),
        num_threads=_fetch(pid, "num_threads", proc.num_threads),
        memory_percent=_fetch(pid, "memory_percent", proc.memory_percent),
        cpu_percent=_fetch(pid, "cpu_percent", lambda: _lifetime_cpu_percent(proc)),
        username=_fetch(pid, "username", proc.username),
        cmdline=_fetch(pid, "cmdline", lambda: " ".join(proc.cmdline())),
        connections=_fetch(pid, "connections", lambda: _connections(proc)),
    )


def format_process_details(details: ProcessDetails) -> List[str]:
    """Render available fields as label<TAB>value lines in a fixed order."""
    lines = []
    if details.ppid is not None:
        lines.append(f"parent PID:\t{details.ppid}")
    if details.num_threads is not None:
        lines.append(f"threads:\t{details.num_threads}")
    if details.memory_percent is not None:
        lines.append(f"memory usage:\t{details.memory_percent:.3f}%")
    if details.cpu_percent is not None:
        lines.append(f"cpu usage:\t{details.cpu_percent:.3f}%")
    if details.username is not None:
        lines.append(f"username:\t{details.username}")
    if details.cmdline is not None:
        lines.append(f"cmd+args:\t{details.cmdline}")
    for conn in details.connections or []:
        lines.append(f"local/remote:\t{conn}")
    return lines
