"""
Diagnostic agent client.

One request per connection: connect, write the signal byte and payload,
then read the reply until the agent closes the connection.
"""

import socket
from typing import Optional

from ..utils.errors import AgentConnectionError
from ..utils.logging import get_logger
from .signals import Signal
from .target import CommandTarget

logger = get_logger(__name__)

RECV_SIZE = 64 * 1024


class AgentClient:
    """Sends signals to diagnostic agents."""

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize agent client.

        Args:
            timeout: Connect and read timeout in seconds, None to block
        """
        self.timeout = timeout

    def request(self, target: CommandTarget, signal: Signal, payload: bytes = b"") -> bytes:
        """
        Send signal to the agent at target and return its full reply.

        Raises:
            AgentConnectionError: if connecting, sending or receiving fails
        """
        logger.debug(
            "agent_request",
            target=str(target),
            signal=signal.name,
            payload_size=len(payload),
        )
        try:
            with socket.create_connection(target.address, timeout=self.timeout) as conn:
                conn.sendall(bytes([signal]) + payload)
                chunks = []
                while True:
                    chunk = conn.recv(RECV_SIZE)
                    if not chunk:
                        break
                    chunks.append(chunk)
        except OSError as e:
            raise AgentConnectionError(
                f"couldn't talk to agent at {target}: {e}", cause=e
            ) from e

        reply = b"".join(chunks)
        logger.debug("agent_reply", target=str(target), signal=signal.name, size=len(reply))
        return reply
