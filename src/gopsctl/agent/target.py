"""
Command target resolution.

A target is given either as a pid, looked up through the agent's port file,
or directly as host:port.
"""

from dataclasses import dataclass
from typing import Callable, Tuple

from ..utils.errors import InvalidAddress
from ..utils.logging import get_logger

logger = get_logger(__name__)

LOCAL_HOST = "127.0.0.1"

PortLookup = Callable[[int], int]


@dataclass(frozen=True)
class CommandTarget:
    """Network endpoint of a diagnostic agent."""
    host: str
    port: int

    @property
    def address(self) -> Tuple[str, int]:
        """(host, port) tuple accepted by socket functions."""
        return (self.host, self.port)

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def _is_pid(token: str) -> bool:
    return token.isascii() and token.isdigit()


def parse_address(token: str) -> CommandTarget:
    """
    Parse host:port, with IPv6 hosts in brackets ([::1]:6060).

    Raises:
        InvalidAddress: if host or port is missing or the port is not a
            decimal number in 0-65535
    """
    if token.startswith("["):
        end = token.find("]")
        if end == -1:
            raise InvalidAddress(token, "missing ']' in address")
        host = token[1:end]
        rest = token[end + 1:]
        if not rest.startswith(":"):
            raise InvalidAddress(token, "missing port in address")
        port_str = rest[1:]
    else:
        host, sep, port_str = token.rpartition(":")
        if not sep:
            raise InvalidAddress(token, "missing port in address")
        if ":" in host:
            raise InvalidAddress(token, "too many colons in address")

    if not host:
        raise InvalidAddress(token, "missing host in address")
    if not _is_pid(port_str):
        raise InvalidAddress(token, "port must be a decimal number")
    port = int(port_str)
    if port > 65535:
        raise InvalidAddress(token, "port out of range")

    return CommandTarget(host=host, port=port)


def resolve_target(token: str, port_lookup: PortLookup, host: str = LOCAL_HOST) -> CommandTarget:
    """
    Resolve a pid or host:port token to a target.

    Args:
        token: Raw command line token
        port_lookup: Returns the agent port for a pid; raises
            UnresolvableTarget when the process has none
        host: Host used for pid targets

    Raises:
        UnresolvableTarget: for a pid without a reachable agent
        InvalidAddress: for a malformed address
    """
    if _is_pid(token):
        pid = int(token)
        target = CommandTarget(host=host, port=port_lookup(pid))
        logger.debug("target_resolved", pid=pid, target=str(target))
        return target
    return parse_address(token)
