"""
Fake diagnostic agent for client and handler tests.
"""

import socket
import socketserver
import threading
from typing import Dict, List, Tuple

from gopsctl.agent.signals import MAX_VARINT_LEN64, Signal
from gopsctl.agent.target import CommandTarget


class FakeAgent:
    """
    Local TCP server speaking the agent protocol.

    Replies are configured per signal; every request is recorded as
    (signal, payload).
    """

    def __init__(self, replies: Dict[Signal, bytes] = None):
        self.replies: Dict[Signal, bytes] = dict(replies or {})
        self.requests: List[Tuple[Signal, bytes]] = []
        self._lock = threading.Lock()
        agent = self

        class _Handler(socketserver.BaseRequestHandler):
            def handle(self):
                signal = Signal(_recv_exact(self.request, 1)[0])
                payload = b""
                if signal is Signal.SET_GC_PERCENT:
                    payload = _recv_exact(self.request, MAX_VARINT_LEN64)
                with agent._lock:
                    agent.requests.append((signal, payload))
                self.request.sendall(agent.replies.get(signal, b""))

        self._server = socketserver.ThreadingTCPServer(("127.0.0.1", 0), _Handler)
        self._server.daemon_threads = True
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def target(self) -> CommandTarget:
        host, port = self._server.server_address[:2]
        return CommandTarget(host=host, port=port)

    def start(self) -> "FakeAgent":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()

    def __enter__(self) -> "FakeAgent":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()


def _recv_exact(conn: socket.socket, size: int) -> bytes:
    data = b""
    while len(data) < size:
        chunk = conn.recv(size - len(data))
        if not chunk:
            raise ConnectionError("client closed early")
        data += chunk
    return data


def unused_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
